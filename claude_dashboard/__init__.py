"""Claude usage dashboard rendered as a boxed overlay inside a host terminal."""

from loguru import logger

__version__ = "1.0.1"

# Silent until claude_dashboard.logging.setup_logging installs a file sink.
logger.disable("claude_dashboard")
