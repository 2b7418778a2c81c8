"""Local secret encoding helpers.

API keys are kept on the local machine only. Values are written with a
`PLAINTEXT:` base64 envelope so they are not greppable in the storage file;
this is obfuscation, not encryption, and a warning is logged once per process.

This module intentionally does not depend on other app modules.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional

logger = logging.getLogger("agent-generator.secrets")

PLAINTEXT_PREFIX = "PLAINTEXT:"

_PLAINTEXT_WARNED = False


def encrypt_secret(secret: str) -> str:
    global _PLAINTEXT_WARNED
    secret = (secret or "").strip()
    if not secret:
        return ""
    if not _PLAINTEXT_WARNED:
        _PLAINTEXT_WARNED = True
        logger.warning(
            "Secrets stored with PLAINTEXT encoding. Keys are kept locally (base64) without encryption."
        )
    return PLAINTEXT_PREFIX + base64.b64encode(secret.encode("utf-8")).decode("ascii")


def decrypt_secret(value: str) -> str:
    value = (value or "").strip()
    if not value:
        return ""

    if value.startswith(PLAINTEXT_PREFIX):
        try:
            raw = base64.b64decode(value.split(":", 1)[1].encode("ascii"), validate=True)
        except (binascii.Error, ValueError):
            logger.warning("Stored secret has a malformed PLAINTEXT envelope; ignoring it")
            return ""
        return raw.decode("utf-8", errors="replace")

    # Values saved by the browser build are raw strings.
    return value


def mask_key(value: str) -> Optional[str]:
    key = (value or "").strip()
    if not key:
        return None
    if len(key) <= 8:
        return ("*" * max(0, len(key) - 2)) + key[-2:]
    return f"{key[:3]}...{key[-4:]}"


def last4(value: str) -> Optional[str]:
    key = (value or "").strip()
    return key[-4:] if key else None
