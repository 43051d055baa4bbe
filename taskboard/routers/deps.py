from dataclasses import dataclass
from typing import Optional

from fastapi import Header

import taskboard.config as _cfg
from taskboard.errors import AuthError
from taskboard.utils.auth import ACCESS, verify_token
from taskboard.utils.email import EmailSender


@dataclass
class CurrentUser:
    user_id: str
    # role claim carried by the token, if any; only comment deletion reads it
    role: Optional[str] = None


def _extract_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer ...`` header."""
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    return None


def get_current_user(authorization: Optional[str] = Header(None)) -> CurrentUser:
    if not authorization:
        raise AuthError("No token provided.")
    tok = _extract_token(authorization)
    if not tok:
        raise AuthError("Malformed token.")
    payload = verify_token(tok, _cfg.SECRET_KEY, ACCESS)
    return CurrentUser(user_id=payload["userId"], role=payload.get("role"))


def get_email_sender() -> EmailSender:
    return EmailSender()
