"""Claude OAuth access token lookup: macOS Keychain first, then the credentials file."""

from __future__ import annotations

import asyncio
import json
import subprocess
import sys
from pathlib import Path

from loguru import logger

from claude_dashboard.settings import config_dir

KEYCHAIN_SERVICE = "Claude Code-credentials"
SECURITY_BIN = "/usr/bin/security"
CREDENTIALS_FILE = ".credentials.json"

log = logger.bind(component="credentials")


def keychain_available() -> bool:
    return sys.platform == "darwin" and Path(SECURITY_BIN).exists()


def read_keychain_secret() -> str | None:
    try:
        result = subprocess.run(
            [SECURITY_BIN, "find-generic-password", "-s", KEYCHAIN_SERVICE, "-w"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        log.debug(f"Keychain lookup failed: {exc}")
        return None
    if result.returncode != 0:
        log.debug(f"No Keychain item for {KEYCHAIN_SERVICE!r} (exit {result.returncode})")
        return None
    return result.stdout.strip() or None


def read_credentials_file(path: Path | None = None) -> str | None:
    path = path or config_dir() / CREDENTIALS_FILE
    try:
        return path.read_text(encoding="utf-8").strip() or None
    except OSError as exc:
        log.debug(f"Could not read {path}: {exc}")
        return None


def token_from_secret(secret: str) -> str | None:
    try:
        data = json.loads(secret)
    except json.JSONDecodeError:
        return None

    oauth = data.get("claudeAiOauth") if isinstance(data, dict) else None
    if not isinstance(oauth, dict):
        return None

    token = oauth.get("accessToken") or oauth.get("access_token")
    if not token or not isinstance(token, str):
        return None
    return token


def lookup_token() -> str | None:
    if keychain_available():
        secret = read_keychain_secret()
        token = token_from_secret(secret) if secret else None
        if token:
            log.debug("Using access token from Keychain")
            return token

    secret = read_credentials_file()
    token = token_from_secret(secret) if secret else None
    if token:
        log.debug("Using access token from credentials file")
    else:
        log.info("No Claude credentials found")
    return token


async def get_credential() -> str | None:
    """Access token, or ``None`` when neither source has one."""
    try:
        return await asyncio.to_thread(lookup_token)
    except Exception as exc:  # noqa: BLE001
        log.warning(f"Credential lookup failed: {exc}")
        return None
