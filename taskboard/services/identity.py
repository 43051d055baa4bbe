"""Registration, login, token refresh and the password lifecycle."""

import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import taskboard.config as _cfg
from taskboard.database import utcnow
from taskboard.errors import AuthError, ConflictError, NotFoundError, ValidationError
from taskboard.models.user import User
from taskboard.utils import auth
from taskboard.utils.email import deliver
from taskboard.utils.validation import check_password_policy, normalize_email, validate_email

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."
RESET_REQUESTED = "If an account with that email exists, a password reset link has been sent."


def user_projection(user: User) -> dict:
    return {"id": user.id, "email": user.email, "name": user.name}


def register(db: Session, email, password, name=None, email_sender=None, background=None) -> dict:
    email = normalize_email(email)
    if not validate_email(email):
        raise ValidationError("Invalid email format.")
    check_password_policy(password)

    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already in use.")

    user = User(email=email, password=auth.hash_password(password), name=name or None)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent registration of the same email
        db.rollback()
        raise ConflictError("Email already in use.")
    db.refresh(user)
    logger.info("Registered user %s", user.id)

    if email_sender is not None:
        deliver(background, email_sender.send_welcome, user.email, user.name)
    return user_projection(user)


def login(db: Session, email, password) -> dict:
    email = normalize_email(email)
    if not email or not password:
        raise ValidationError("Email and password are required.")

    user = db.query(User).filter(User.email == email).first()
    # same message for unknown email and wrong password
    if not user or not auth.verify_password(password, user.password):
        logger.warning("Failed login attempt")
        raise AuthError(INVALID_CREDENTIALS)

    return {
        "access_token": auth.create_access_token(user.id),
        "refresh_token": auth.create_refresh_token(user.id),
        "user": user_projection(user),
    }


def refresh_access_token(db: Session, refresh_token) -> dict:
    """Exchange a refresh token for a new access token. The refresh token is
    not rotated."""
    if not refresh_token:
        raise AuthError("Refresh token is required.")
    try:
        payload = auth.verify_token(refresh_token, _cfg.REFRESH_SECRET_KEY, auth.REFRESH)
    except AuthError:
        raise AuthError("Invalid refresh token.")

    user = db.get(User, payload["userId"])
    if not user:
        raise AuthError("Invalid refresh token.")
    return {"access_token": auth.create_access_token(user.id)}


def get_user(db: Session, user_id: str) -> dict:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found.")
    return user_projection(user)


def change_password(db: Session, user_id: str, current_password, new_password) -> dict:
    if not current_password or not new_password:
        raise ValidationError("Current password and new password are required.")
    check_password_policy(new_password)

    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found.")
    if not auth.verify_password(current_password, user.password):
        raise AuthError("Current password is incorrect.")
    if auth.verify_password(new_password, user.password):
        raise ValidationError("New password must be different from current password.")

    user.password = auth.hash_password(new_password)
    db.commit()
    logger.info("Password changed for user %s", user.id)
    return {"message": "Password changed successfully"}


def request_password_reset(db: Session, email, email_sender=None, background=None) -> dict:
    """Issue a reset token for ``email`` if such a user exists.

    The response is identical whether or not the account exists. The token is
    signed with ``SECRET_KEY + current password hash`` so it stops verifying
    the moment the password changes.
    """
    if not email:
        raise ValidationError("Email is required.")

    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user:
        return {"message": RESET_REQUESTED}

    token = auth.create_reset_token(user.id, user.email, user.password)
    user.reset_token = token
    user.reset_token_expiry = utcnow() + timedelta(minutes=_cfg.RESET_TOKEN_EXPIRE_MINUTES)
    db.commit()
    logger.info("Password reset requested for user %s", user.id)

    if email_sender is not None:
        deliver(background, email_sender.send_password_reset, user.email, token)
    return {"message": RESET_REQUESTED}


def reset_password(db: Session, token, new_password) -> dict:
    if not token or not new_password:
        raise ValidationError("Reset token and new password are required.")
    check_password_policy(new_password)

    user = db.query(User).filter(User.reset_token == token).first()
    if not user:
        raise AuthError("Invalid or expired reset token.")

    if not user.reset_token_expiry or user.reset_token_expiry < utcnow():
        user.reset_token = None
        user.reset_token_expiry = None
        db.commit()
        raise AuthError("Reset token has expired. Please request a new one.")

    try:
        auth.verify_token(token, auth.reset_secret(user.password), auth.RESET)
    except AuthError:
        raise AuthError("Invalid reset token.")

    if auth.verify_password(new_password, user.password):
        raise ValidationError("New password must be different from your current password.")

    user.password = auth.hash_password(new_password)
    user.reset_token = None
    user.reset_token_expiry = None
    db.commit()
    logger.info("Password reset completed for user %s", user.id)
    return {"message": "Password has been reset successfully. You can now log in with your new password."}
