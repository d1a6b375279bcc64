"""
YDA Portal - Security Module
============================
Password hashing (bcrypt) and JWT session tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

import bcrypt
from jose import JWTError, jwt

from yda_portal.core.config import get_settings

settings = get_settings()

# ── Password Hashing ──

def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(pwd_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed one."""
    pwd_bytes = plain_password.encode("utf-8")
    hash_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(pwd_bytes, hash_bytes)


# ── JWT Tokens ──

ALGORITHM = "HS256"
ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def create_token(
    *,
    subject: str,
    token_type: str,
    session_id: str | None = None,
    expires_delta: Optional[timedelta] = None,
    extra: dict | None = None,
) -> tuple[str, datetime]:
    """Create a signed token. Returns the token and its expiry."""
    if expires_delta is None:
        expires_delta = (
            timedelta(minutes=settings.access_token_expire_minutes)
            if token_type == ACCESS_TOKEN
            else timedelta(days=settings.refresh_token_expire_days)
        )
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = dict(extra or {})
    to_encode.update(
        {
            "sub": subject,
            "typ": token_type,
            "sid": session_id or uuid4().hex,
            "jti": uuid4().hex,
            "exp": expire,
        }
    )
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM), expire


def decode_token(token: str, expected_type: str | None = None) -> Optional[dict]:
    """Decode and verify a token; None when invalid, expired or of the wrong type."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if expected_type and payload.get("typ") != expected_type:
        return None
    return payload
