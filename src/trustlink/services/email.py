"""Email service for sending verification result emails."""

import logging
from abc import ABC, abstractmethod
from email.message import EmailMessage
from html import escape
from typing import TYPE_CHECKING

import aiosmtplib
import httpx

from trustlink.config import settings

if TYPE_CHECKING:
    from trustlink.services.notifications import ResultsSummary

logger = logging.getLogger(__name__)


class EmailBackend(ABC):
    """Abstract base class for email backends."""

    @abstractmethod
    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        """Send an email.

        Args:
            to: Recipient email address
            subject: Email subject
            html: HTML content
            text: Plain text alternative (optional)

        Returns:
            True if sent successfully
        """


class ConsoleEmailBackend(EmailBackend):
    """Email backend that logs to console (for development)."""

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        logger.info(
            f"\n{'=' * 60}\n"
            f"EMAIL (console backend - not sent)\n"
            f"To: {to}\n"
            f"Subject: {subject}\n"
            f"{'-' * 60}\n"
            f"{text or html}\n"
            f"{'=' * 60}"
        )
        return True


class SMTPEmailBackend(EmailBackend):
    """Email backend using SMTP."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        from_address: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        message = EmailMessage()
        message["From"] = self.from_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text or "This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=self.use_tls,
            )
        except Exception as e:
            logger.error(f"SMTP delivery to {to} failed: {e}")
            return False
        logger.info(f"Email sent via SMTP to {to}")
        return True


class ResendEmailBackend(EmailBackend):
    """Email backend using the Resend HTTP API."""

    api_url = "https://api.resend.com/emails"

    def __init__(self, api_key: str, from_address: str):
        self.api_key = api_key
        self.from_address = from_address

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        payload = {"from": self.from_address, "to": [to], "subject": subject, "html": html}
        if text:
            payload["text"] = text

        async with httpx.AsyncClient(timeout=30.0) as client:
            try:
                response = await client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(f"Resend rejected email to {to}: {e.response.status_code} {e.response.text}")
                return False
            except Exception as e:
                logger.error(f"Resend delivery to {to} failed: {e}")
                return False
        logger.info(f"Email sent via Resend to {to}")
        return True


def get_email_backend() -> EmailBackend:
    """Get the configured email backend."""
    if settings.email_backend == "console":
        return ConsoleEmailBackend()
    if settings.email_backend == "smtp":
        return SMTPEmailBackend(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            from_address=settings.email_from,
        )
    if settings.email_backend == "resend":
        return ResendEmailBackend(api_key=settings.resend_api_key, from_address=settings.email_from)
    raise ValueError(f"Unknown email backend: {settings.email_backend}")


class EmailService:
    """High-level email service for verification emails."""

    def __init__(self, backend: EmailBackend | None = None):
        self._backend = backend

    @property
    def backend(self) -> EmailBackend:
        """Lazy-load the backend."""
        if self._backend is None:
            self._backend = get_email_backend()
        return self._backend

    async def send_results_summary(self, to: str, summary: "ResultsSummary") -> bool:
        """Email a buyer the outcome of a completed verification."""
        subject = "TrustLink verification results"
        link = escape(summary.results_link, quote=True)
        verdict_color = "#16a34a" if summary.fully_verified else "#d97706"

        rows = "\n".join(
            f'<tr><td style="padding: 6px 12px;">{escape(line.label)}</td>'
            f'<td style="padding: 6px 12px;">{"&#10003;" if line.passed else "&#10007;"} '
            f"{escape(line.detail)}</td></tr>"
            for line in summary.lines
        )

        html = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #1a1a1a; text-align: center;">TrustLink</h1>

    <div style="background: #f9fafb; border-radius: 8px; padding: 30px; margin-bottom: 30px;">
        <h2 style="margin-top: 0; color: {verdict_color};">{escape(summary.headline)}</h2>
        <p>The seller has completed verification.</p>
        <table style="border-collapse: collapse; width: 100%;">
{rows}
        </table>

        <div style="text-align: center; margin: 30px 0;">
            <a href="{link}"
               style="background: #2563eb; color: white; padding: 12px 30px; border-radius: 6px; text-decoration: none; font-weight: 500; display: inline-block;">
                View full results
            </a>
        </div>

        <p style="color: #666; font-size: 14px;">
            Do not send deposits or payments until you are confident in the seller's identity and ownership claims.
        </p>
    </div>
</body>
</html>
"""

        return await self.backend.send(to=to, subject=subject, html=html, text=summary.as_text())


# Global email service instance
email_service = EmailService()
