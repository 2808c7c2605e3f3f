"""SMTP mailer and the email templates sent on account and application events."""

from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Callable, NamedTuple

from fastapi import BackgroundTasks

from .config import settings

logger = logging.getLogger(__name__)


class EmailMessage(NamedTuple):
    subject: str
    html: str


# An email queued by the service layer: (recipient, message).
Dispatch = Callable[[str, EmailMessage], None]


class Mailer:
    """Sends HTML email over SMTP. Disabled (every send returns False) without EMAIL_USER."""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        user: str | None = None,
        password: str | None = None,
        from_email: str | None = None,
    ):
        self.host = host or settings.EMAIL_HOST
        self.port = port or settings.EMAIL_PORT
        self.user = user if user is not None else settings.EMAIL_USER
        self.password = password if password is not None else settings.EMAIL_PASSWORD
        self.from_email = from_email or settings.EMAIL_FROM

    @property
    def enabled(self) -> bool:
        return bool(self.user)

    def send(self, to: str, subject: str, html: str) -> bool:
        if not self.enabled:
            logger.debug("Mail disabled, dropping %r to %s", subject, to)
            return False

        msg = MIMEMultipart("alternative")
        msg["From"] = self.from_email
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html"))

        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            server.starttls()
            server.login(self.user, self.password or "")
            server.send_message(msg)
        logger.info("Email sent to %s: %s", to, subject)
        return True

    def send_safe(self, to: str, subject: str, html: str) -> bool:
        """Like ``send`` but never raises; failures are logged."""
        try:
            return self.send(to, subject, html)
        except Exception:
            logger.exception("Error sending email to %s (%s)", to, subject)
            return False


_mailer = Mailer()


def get_mailer() -> Mailer:
    return _mailer


def background_dispatch(background: BackgroundTasks, mailer: Mailer) -> Dispatch:
    """Queue emails to run after the response has been sent."""

    def dispatch(to: str, message: EmailMessage) -> None:
        background.add_task(mailer.send_safe, to, message.subject, message.html)

    return dispatch


# ---------- Templates ----------

def welcome(name: str) -> EmailMessage:
    return EmailMessage(
        "Welcome to JobMatch!",
        f"<h1>Welcome to JobMatch, {name}!</h1>"
        "<p>Thank you for registering. We're excited to have you on board.</p>"
        "<p>Start exploring job opportunities or post your first job today!</p>",
    )


def application_received(job_title: str, company_name: str) -> EmailMessage:
    return EmailMessage(
        "Application Received",
        "<h1>Application Received</h1>"
        f"<p>Your application for <strong>{job_title}</strong> at <strong>{company_name}</strong> has been received.</p>"
        "<p>We'll notify you once the employer reviews your application.</p>",
    )


def application_status_update(job_title: str, status: str) -> EmailMessage:
    return EmailMessage(
        "Application Status Update",
        "<h1>Application Status Updated</h1>"
        f"<p>Your application for <strong>{job_title}</strong> has been updated to: <strong>{status}</strong></p>",
    )


def new_applicant(job_title: str, applicant_name: str) -> EmailMessage:
    return EmailMessage(
        "New Application Received",
        "<h1>New Application</h1>"
        f"<p><strong>{applicant_name}</strong> has applied for your job posting: <strong>{job_title}</strong></p>"
        "<p>Login to review the application.</p>",
    )
