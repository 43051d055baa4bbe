import logging
from html import escape

import requests

import taskboard.config as _cfg

logger = logging.getLogger(__name__)


class EmailSender:
    """Transactional email over the Resend HTTP API.

    With no API key configured the sender only logs what it would have sent.
    ``send`` raises on delivery failure; callers that must not fail go through
    :func:`deliver`.
    """

    def __init__(self, api_key=None, from_address=None, app_url=None, api_url=None):
        self.api_key = api_key if api_key is not None else _cfg.RESEND_API_KEY
        self.from_address = from_address or _cfg.EMAIL_FROM
        self.app_url = app_url or _cfg.APP_URL
        self.api_url = api_url or _cfg.RESEND_API_URL

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def send(self, to: str, subject: str, html: str) -> bool:
        if not self.enabled:
            logger.warning("Email sending is disabled; set RESEND_API_KEY to enable")
            logger.info("Would have sent email to=%s subject=%r", to, subject)
            return False

        r = requests.post(
            self.api_url,
            json={"from": self.from_address, "to": [to], "subject": subject, "html": html},
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=10,
        )
        r.raise_for_status()
        logger.info("Email sent to=%s subject=%r", to, subject)
        return True

    def send_welcome(self, email: str, name=None) -> bool:
        greeting = f"Hi {escape(name)}," if name else "Hi,"
        html = (
            f"<h2>Welcome to Taskboard!</h2><p>{greeting}</p>"
            "<p>Thank you for signing up. Create a workspace, organize work into "
            "projects and invite your team.</p>"
            f'<p><a href="{self.app_url}">Get started</a></p>'
        )
        return self.send(email, "Welcome to Taskboard!", html)

    def send_password_reset(self, email: str, reset_token: str) -> bool:
        reset_url = f"{self.app_url}/reset-password?token={reset_token}"
        html = (
            "<h2>Reset your password</h2>"
            "<p>We received a request to reset your password.</p>"
            f'<p><a href="{reset_url}">Reset password</a></p>'
            "<p><strong>This link will expire in 1 hour.</strong> If you didn't "
            "request a password reset, you can safely ignore this email.</p>"
        )
        return self.send(email, "Reset Your Password - Taskboard", html)

    def send_workspace_invitation(self, email: str, workspace_name: str, inviter_name: str) -> bool:
        html = (
            "<h2>You've been invited!</h2>"
            f"<p>{escape(inviter_name)} added you to the workspace "
            f"<strong>{escape(workspace_name)}</strong>.</p>"
            f'<p><a href="{self.app_url}">Open Taskboard</a></p>'
        )
        return self.send(email, f"You've been invited to {workspace_name} - Taskboard", html)


def _send_quietly(fn, *args):
    try:
        fn(*args)
    except Exception:
        logger.exception("Failed to send email via %s", getattr(fn, "__name__", fn))


def deliver(background, fn, *args) -> None:
    """Best-effort email: schedule on ``background`` (FastAPI BackgroundTasks)
    when given, run inline otherwise. Failures are logged, never raised."""
    if fn is None:
        return
    if background is not None:
        background.add_task(_send_quietly, fn, *args)
    else:
        _send_quietly(fn, *args)
