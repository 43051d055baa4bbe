from datetime import datetime, timedelta, UTC
from typing import Optional

from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext

import taskboard.config as _cfg
from taskboard.errors import AuthError, ValidationError

ACCESS = "access"
REFRESH = "refresh"
RESET = "reset"


def _pwd_context() -> CryptContext:
    # read rounds at call-time so tests can lower the bcrypt cost
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=_cfg.BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt at the configured cost factor.

    Raises ValidationError if the backend rejects the input (for example a
    password the bcrypt backend refuses to truncate).
    """
    try:
        return _pwd_context().hash(password)
    except ValueError as e:
        raise ValidationError(str(e))


def verify_password(plain, hashed) -> bool:
    """Verify a plaintext password against a hash.

    Malformed hashes or inputs the backend rejects count as a mismatch, so
    callers can answer with an authentication failure instead of an error.
    """
    if not plain or not hashed:
        return False
    try:
        return _pwd_context().verify(plain, hashed)
    except ValueError:
        return False


def sign_token(payload: dict, secret: str, ttl: timedelta, purpose: str) -> str:
    data = payload.copy()
    expire = datetime.now(UTC) + ttl
    data.update({"type": purpose, "exp": int(expire.timestamp())})  # exp as a Unix timestamp
    return jwt.encode(data, secret, algorithm=_cfg.ALGORITHM)


def verify_token(token: Optional[str], secret: str, purpose: Optional[str] = None) -> dict:
    """Decode ``token`` and return its claims, raising AuthError on any failure."""
    if not token:
        raise AuthError("Token is required")
    try:
        # jwt.decode validates exp automatically
        payload = jwt.decode(token, secret, algorithms=[_cfg.ALGORITHM])
    except ExpiredSignatureError:
        raise AuthError("Token has expired")
    except JWTError:
        raise AuthError("Invalid token")
    if purpose is not None and payload.get("type") != purpose:
        raise AuthError("Invalid token")
    if not payload.get("userId"):
        raise AuthError("Invalid token: missing user")
    return payload


def reset_secret(password_hash: str) -> str:
    # binding the secret to the current hash invalidates the token on any password change
    return _cfg.SECRET_KEY + password_hash


def create_access_token(user_id: str) -> str:
    return sign_token({"userId": user_id}, _cfg.SECRET_KEY,
                      timedelta(minutes=_cfg.ACCESS_TOKEN_EXPIRE_MINUTES), ACCESS)


def create_refresh_token(user_id: str) -> str:
    return sign_token({"userId": user_id}, _cfg.REFRESH_SECRET_KEY,
                      timedelta(days=_cfg.REFRESH_TOKEN_EXPIRE_DAYS), REFRESH)


def create_reset_token(user_id: str, email: str, password_hash: str) -> str:
    return sign_token({"userId": user_id, "email": email}, reset_secret(password_hash),
                      timedelta(minutes=_cfg.RESET_TOKEN_EXPIRE_MINUTES), RESET)
