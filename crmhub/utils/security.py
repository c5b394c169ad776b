# crmhub/utils/security.py
# Password hashing and signed session tokens
from datetime import timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from crmhub.config.settings import Settings
from crmhub.utils.datetime_utils import utcnow


def hash_password(password: str, rounds: int = 12) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time bcrypt comparison; malformed hashes never verify"""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_session_token(user, settings: Settings) -> str:
    """Sign the session claims (id, email, name) for the cookie"""
    expire = utcnow() + timedelta(seconds=settings.session_ttl_seconds)
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "exp": expire,
    }
    return jwt.encode(claims, settings.session_secret, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str, settings: Settings) -> Optional[dict]:
    """Verify the token and return its claims, or None if invalid/expired"""
    try:
        return jwt.decode(token, settings.session_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
