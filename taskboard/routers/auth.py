from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from taskboard.database import get_db
from taskboard.routers.deps import CurrentUser, get_current_user, get_email_sender
from taskboard.schemas.auth import (
    AccessToken, ChangePasswordRequest, ForgotPasswordRequest, LoginRequest, MessageOut,
    RefreshRequest, RegisterRequest, ResetPasswordRequest, TokenPair, UserOut,
)
from taskboard.services import identity
from taskboard.utils.email import EmailSender

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, background: BackgroundTasks, db: Session = Depends(get_db),
             sender: EmailSender = Depends(get_email_sender)):
    return identity.register(db, body.email, body.password, body.name,
                             email_sender=sender, background=background)


@router.post("/login", response_model=TokenPair)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    return identity.login(db, body.email, body.password)


@router.post("/refresh", response_model=AccessToken)
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    return identity.refresh_access_token(db, body.refresh_token)


@router.get("/me", response_model=UserOut)
def me(current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return identity.get_user(db, current.user_id)


@router.post("/change-password", response_model=MessageOut)
def change_password(body: ChangePasswordRequest, current: CurrentUser = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    return identity.change_password(db, current.user_id, body.current_password, body.new_password)


@router.post("/forgot-password", response_model=MessageOut)
def forgot_password(body: ForgotPasswordRequest, background: BackgroundTasks, db: Session = Depends(get_db),
                    sender: EmailSender = Depends(get_email_sender)):
    return identity.request_password_reset(db, body.email, email_sender=sender, background=background)


@router.post("/reset-password", response_model=MessageOut)
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    return identity.reset_password(db, body.token, body.new_password)
