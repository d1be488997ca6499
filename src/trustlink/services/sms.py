"""SMS backends used as the fallback notification channel."""

import asyncio
import logging
from abc import ABC, abstractmethod

from twilio.rest import Client as TwilioClient

from trustlink.config import settings

logger = logging.getLogger(__name__)


class SmsBackend(ABC):
    """Abstract base class for SMS backends."""

    @abstractmethod
    async def send(self, to: str, body: str) -> bool:
        """Send a text message. Returns True if accepted for delivery."""


class ConsoleSmsBackend(SmsBackend):
    """SMS backend that logs to console (for development)."""

    async def send(self, to: str, body: str) -> bool:
        logger.info(f"SMS (console backend - not sent) to {to}: {body}")
        return True


class TwilioSmsBackend(SmsBackend):
    """SMS backend using the Twilio REST client."""

    def __init__(self, account_sid: str, auth_token: str, from_number: str):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self._client: TwilioClient | None = None

    @property
    def client(self) -> TwilioClient:
        if self._client is None:
            self._client = TwilioClient(self.account_sid, self.auth_token)
        return self._client

    async def send(self, to: str, body: str) -> bool:
        # The Twilio client is blocking
        try:
            message = await asyncio.to_thread(
                self.client.messages.create, body=body, from_=self.from_number, to=to
            )
        except Exception as e:
            logger.error(f"Twilio delivery to {to} failed: {e}")
            return False
        logger.info(f"SMS sent via Twilio to {to} sid={message.sid}")
        return True


def get_sms_backend() -> SmsBackend:
    """Get the configured SMS backend."""
    if settings.sms_backend == "console":
        return ConsoleSmsBackend()
    if settings.sms_backend == "twilio":
        return TwilioSmsBackend(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            from_number=settings.twilio_from_number,
        )
    raise ValueError(f"Unknown SMS backend: {settings.sms_backend}")
