"""
auth/tokens.py -- JWT and password hashing utilities, plus login.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       user_id, email and expiry. Verification returns None on any failure --
       the route layer turns that into a 401.

  Passwords: bcrypt directly. Its cost factor makes brute-force expensive,
       and the stored hash encodes algorithm, cost and salt together. The
       _DUMMY_HASH constant enables timing equalization in authenticate_user()
       so response time does not reveal whether an email is registered.

  Two-factor: checked after the password, via auth/two_factor.py. Any
       inconsistency (flag on, no secret) is an authentication failure.

Layer rule: no imports from api/. Imports from core/ and vault/ are allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Optional

import bcrypt
from jose import JWTError, jwt

from auth.two_factor import verify_code
from core.config import get_settings
from core.errors import PasswordTooLong

if TYPE_CHECKING:
    from vault.models import User
    from vault.store import VaultStore

logger = logging.getLogger("vaultkeep.auth")

_settings = get_settings()

_ALGORITHM = "HS256"

# bcrypt rejects (5.x) or truncates (4.x) anything longer.
MAX_PASSWORD_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Raises PasswordTooLong if the UTF-8 encoding exceeds MAX_PASSWORD_BYTES.
    """
    if password_too_long(plain):
        raise PasswordTooLong()
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def password_too_long(plain: str) -> bool:
    return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash, or a password over MAX_PASSWORD_BYTES.
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("vaultkeep_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: int, email: str, expire_seconds: int = 0) -> str:
    """Encode a signed JWT with user identity and expiry.

    expire_seconds of 0 (default) uses Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    expire = datetime.now(timezone.utc) + timedelta(seconds=duration)
    payload = {
        "sub": email,
        "user_id": user_id,
        "exp": expire,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure."""
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if "user_id" not in payload:
        return None
    return payload


# ---------------------------------------------------------------------------
# User authentication (constant-time password check)
# ---------------------------------------------------------------------------


def authenticate_user(
    store: VaultStore,
    email: str,
    password: str,
    two_factor_token: Optional[str] = None,
) -> User | None:
    """Authenticate an email/password login, plus the two-factor code when enabled.

    Always runs bcrypt whether or not the email exists, so unknown emails and
    wrong passwords cost the same.

    Returns the User on success, None on any failure:
      - unknown email or wrong password
      - two-factor enabled and no token, or a wrong token
      - two-factor enabled with no stored secret (inconsistent record)
    """
    user = store.get_user_by_email(email)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    if user.two_factor_enabled:
        if not user.two_factor_secret:
            logger.warning("User %s has two-factor enabled but no secret; refusing login", user.id)
            return None
        if not two_factor_token or not verify_code(user.two_factor_secret, two_factor_token):
            return None
    return user


# ---------------------------------------------------------------------------
# Cookie helper
# ---------------------------------------------------------------------------


def set_auth_cookie(response, token: str, expire_seconds: int = 0) -> None:
    """Write the JWT access token as an httpOnly cookie on the response.

    httponly=True: JS cannot read the cookie.
    samesite="lax": not sent on cross-site POSTs.
    secure: only sent over HTTPS when SECURE_COOKIES=true.
    max_age: matches the JWT expiry so both expire together.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    response.set_cookie(
        "access_token",
        value=token,
        httponly=True,
        samesite="lax",
        secure=_settings.secure_cookies,
        max_age=duration,
    )
