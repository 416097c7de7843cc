from datetime import datetime, timedelta, timezone

import jwt

from appointment_api.core import config

def create_access_token(subject: str, expires_minutes: int | None = None) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=expire_minutes)
    payload = {"sub": subject, "exp": expire, "iat": datetime.now(timezone.utc)}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def create_change_token(user_id: int, purpose: str, value: str, stamp: str) -> str:
    """Token proving a user asked to change ``purpose`` (email, phone) to ``value``."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=config.CHANGE_TOKEN_EXPIRES_MINUTES)
    payload = {
        "sub": str(user_id),
        "purpose": purpose,
        "value": value,
        "stamp": stamp,
        "exp": expire,
    }
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_change_token(token: str, purpose: str) -> dict:
    payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    if payload.get("purpose") != purpose:
        raise jwt.InvalidTokenError("Token purpose mismatch")
    return payload
