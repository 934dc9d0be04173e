"""Outbound mail.

Delivery is an external collaborator; the default transport writes the
message to the log so local runs expose the links. Swap `transport` for a
real sender in deployments that have one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from clubhub.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class MailMessage:
    to: str
    subject: str
    text: str
    sender: str = settings.MAIL_FROM


def log_transport(message: MailMessage) -> None:
    logger.info("mail to=%s subject=%r\n%s", message.to, message.subject, message.text)


transport: Callable[[MailMessage], None] = log_transport


def send(message: MailMessage) -> None:
    transport(message)


def send_verification_email(to: str, full_name: str, token: str) -> None:
    link = f"{settings.FRONTEND_BASE_URL.rstrip('/')}/verify-email?token={token}"
    send(MailMessage(
        to=to,
        subject="Verify your email",
        text=(
            f"Hi {full_name},\n\n"
            f"Confirm your email address by opening the link below:\n{link}\n\n"
            f"The link expires in {settings.EMAIL_VERIFICATION_TTL_HOURS} hours."
        ),
    ))


def send_password_reset_email(to: str, full_name: str, token: str) -> None:
    link = f"{settings.FRONTEND_BASE_URL.rstrip('/')}/reset-password?token={token}"
    send(MailMessage(
        to=to,
        subject="Reset your password",
        text=(
            f"Hi {full_name},\n\n"
            f"Someone asked to reset your password. If it was you, open:\n{link}\n\n"
            f"The link expires in {settings.PASSWORD_RESET_TTL_MINUTES} minutes. "
            "If you did not ask for this, ignore this email."
        ),
    ))
