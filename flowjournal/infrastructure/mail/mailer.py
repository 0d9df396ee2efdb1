"""Verification email delivery."""

import asyncio
import smtplib
import ssl
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import structlog
from jinja2 import Template

from ...shared.exceptions.base import ExternalServiceError
from ..config.settings import MailConfig

logger = structlog.get_logger()

VERIFICATION_SUBJECT = "Verify your FlowJournal email"

VERIFICATION_TEMPLATE = Template("""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{{ subject }}</title>
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 30px;">
        <h2>Hello {{ first_name }}!</h2>
        <p>Thanks for signing up for FlowJournal. Confirm your email address to start journaling your trades.</p>
        <p>
            <a href="{{ link }}" style="display: inline-block; padding: 12px 24px; background: #4f46e5; color: white; text-decoration: none; border-radius: 5px;">
                Verify email
            </a>
        </p>
        <p>Or paste this link into your browser:<br>{{ link }}</p>
        <p style="font-size: 12px; color: #666;">This link expires in {{ ttl_hours }} hours. If you did not create an account, ignore this email.</p>
    </div>
</body>
</html>
""")


class VerificationMailer(ABC):
    """Sends the email carrying a verification deep link."""

    @abstractmethod
    async def send_verification_email(
        self, email: str, first_name: str, link: str, ttl_hours: int = 24
    ) -> None:
        """Deliver the link or raise ExternalServiceError."""


class SmtpVerificationMailer(VerificationMailer):
    """SMTP transport. Built once at startup and shared by every request."""

    def __init__(self, config: MailConfig):
        self.config = config

    async def send_verification_email(
        self, email: str, first_name: str, link: str, ttl_hours: int = 24
    ) -> None:
        html_content = VERIFICATION_TEMPLATE.render(
            subject=VERIFICATION_SUBJECT,
            first_name=first_name,
            link=link,
            ttl_hours=ttl_hours,
        )
        # smtplib blocks, keep it off the event loop
        await asyncio.to_thread(self._send, email, VERIFICATION_SUBJECT, html_content)

    def _send(self, to_email: str, subject: str, html_content: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.config.sender
        msg["To"] = to_email
        msg.attach(MIMEText(html_content, "html"))

        try:
            with smtplib.SMTP(
                self.config.host, self.config.port, timeout=self.config.timeout_seconds
            ) as server:
                if self.config.use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self.config.username and self.config.password:
                    server.login(self.config.username, self.config.password.get_secret_value())
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email", to=to_email, subject=subject, error=str(e))
            raise ExternalServiceError("smtp", "Failed to send email") from e

        logger.info("Email sent", to=to_email, subject=subject)


class LoggingMailer(VerificationMailer):
    """Development transport that only logs the link."""

    async def send_verification_email(
        self, email: str, first_name: str, link: str, ttl_hours: int = 24
    ) -> None:
        logger.info("Verification email not sent, no SMTP host configured", to=email, link=link)


def build_mailer(config: MailConfig) -> VerificationMailer:
    if config.enabled:
        return SmtpVerificationMailer(config)
    return LoggingMailer()
