"""
Password hashing and token signing.

Two kinds of JWT are issued, both HS256 with ``JWT_SECRET``:

- verification tokens carry the user's ``email`` and expire after
  ``VERIFY_TOKEN_DAYS``; they are redeemed by the verify-email link.
- access tokens carry the ``user_id`` and expire after
  ``ACCESS_TOKEN_DAYS``; they are sent back as ``Authorization: Bearer``.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from . import config
from .errors import AuthError, ValidationError

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    raw = password.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash or over-long candidate
        return False


def _sign(claims: dict, lifetime: timedelta) -> str:
    payload = dict(claims)
    payload["exp"] = datetime.now(timezone.utc) + lifetime
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def _decode(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])


def make_verification_token(email: str) -> str:
    return _sign({"email": email}, timedelta(days=config.VERIFY_TOKEN_DAYS))


def read_verification_token(token: str) -> str:
    """Return the email a verification token was issued for.

    Raises AuthError (400) when the token is malformed, tampered or expired.
    """
    try:
        payload = _decode(token)
    except jwt.PyJWTError as e:
        raise AuthError("Invalid or expired token", status_code=400) from e
    email = payload.get("email")
    if not email:
        raise AuthError("Invalid or expired token", status_code=400)
    return email


def make_access_token(user_id: int, lifetime: Optional[timedelta] = None) -> str:
    return _sign({"user_id": user_id}, lifetime or timedelta(days=config.ACCESS_TOKEN_DAYS))


def read_access_token(token: str) -> int:
    try:
        payload = _decode(token)
    except jwt.PyJWTError as e:
        raise AuthError("Invalid token", status_code=403) from e
    user_id = payload.get("user_id")
    if not isinstance(user_id, int):
        raise AuthError("Invalid token", status_code=403)
    return user_id
