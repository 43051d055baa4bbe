import re

from taskboard.errors import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


def normalize_email(email):
    """Trim and lowercase ``email`` so every lookup and insert agrees on one form."""
    if not isinstance(email, str):
        return email
    return email.strip().lower()


def validate_email(email) -> bool:
    if not isinstance(email, str):
        return False
    return bool(EMAIL_RE.match(email.lower()))


def check_password_policy(password) -> None:
    """Raise ValidationError naming the first policy rule ``password`` breaks."""
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError("Password must be at least 8 characters long.")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationError("Password must be at most 128 characters long.")
    if not re.search(r"[A-Z]", password):
        raise ValidationError("Password must contain at least one uppercase letter.")
    if not re.search(r"[a-z]", password):
        raise ValidationError("Password must contain at least one lowercase letter.")
    if not re.search(r"[0-9]", password):
        raise ValidationError("Password must contain at least one digit.")


def require_text(value, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value.strip()


def optional_text(value):
    """Trim ``value``; blank or missing becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None
