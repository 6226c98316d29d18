"""
auth/two_factor.py -- Placeholder two-factor codes and backup codes.

This is NOT TOTP (RFC 6238). A code is the first 6 hex characters of
SHA-256(secret + str(bucket)), where bucket = floor(unix_time / step). Only the
current bucket is accepted; there is no drift window, so a code typed at the
very end of a bucket can fail. Swap in a real TOTP library before relying on
this for anything but development.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import time
from typing import Optional

from core.config import get_settings

CODE_LENGTH = 6
BACKUP_CODE_BYTES = 4  # 8 hex characters


def _bucket(now: Optional[float] = None) -> int:
    step = get_settings().two_factor_step_seconds
    return int((time.time() if now is None else now) // step)


def current_code(secret: str, now: Optional[float] = None) -> str:
    """Return the code expected for secret in the current (or given) time bucket."""
    digest = hashlib.sha256(f"{secret}{_bucket(now)}".encode("utf-8")).hexdigest()
    return digest[:CODE_LENGTH]


def verify_code(secret: str, token: str, now: Optional[float] = None) -> bool:
    """Compare token with the expected code in constant time. Case-insensitive."""
    expected = current_code(secret, now)
    return hmac.compare_digest(expected.encode("utf-8"), token.strip().lower().encode("utf-8"))


def generate_backup_codes(count: Optional[int] = None) -> list[str]:
    """Return count one-time backup codes, each 8 uppercase hex characters."""
    if count is None:
        count = get_settings().backup_code_count
    return [secrets.token_hex(BACKUP_CODE_BYTES).upper() for _ in range(count)]
