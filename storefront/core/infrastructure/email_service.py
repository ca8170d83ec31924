# storefront/core/infrastructure/email_service.py

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType
from fastapi_mail.connection import Connection
from fastapi_mail.schemas import MultipartSubtypeEnum
from pydantic import ValidationError

from ..config import Settings

logger = logging.getLogger(__name__)


@dataclass
class OutgoingEmail:
    """A rendered message ready for the transport."""
    to: List[str]
    subject: str
    html: str
    text: Optional[str] = None
    reply_to: List[str] = field(default_factory=list)


def build_connection_config(settings: Settings) -> ConnectionConfig:
    """
    SMTP settings for fastapi-mail. SMTP_SECURE selects implicit TLS (usually
    port 465); otherwise the session is upgraded with STARTTLS.
    """
    return ConnectionConfig(
        MAIL_USERNAME=settings.EMAIL_USER,
        MAIL_PASSWORD=settings.EMAIL_PASS,
        MAIL_FROM=settings.sender_address,
        MAIL_FROM_NAME=settings.sender_name,
        MAIL_PORT=settings.SMTP_PORT,
        MAIL_SERVER=settings.SMTP_HOST,
        MAIL_SSL_TLS=settings.SMTP_SECURE,
        MAIL_STARTTLS=not settings.SMTP_SECURE,
        USE_CREDENTIALS=True,
        VALIDATE_CERTS=settings.SMTP_VALIDATE_CERTS,
        TIMEOUT=max(1, int(settings.SMTP_TIMEOUT_SECONDS)),
        SUPPRESS_SEND=0 if settings.EMAIL_ENABLED else 1,
    )


class MailTransport:
    """
    Long-lived SMTP transport shared by all requests.

    Exposes the two capabilities the handlers need, `verify()` and
    `send(email)`. Every call opens its own SMTP session and is bounded by
    `timeout` seconds.
    """

    def __init__(self, config: ConnectionConfig, timeout: float = 15.0):
        self.config = config
        self.timeout = timeout
        self.fastmail = FastMail(config)

    async def _handshake(self):
        async with Connection(self.config):
            pass

    async def verify(self) -> None:
        """Connects and logs in to the SMTP server, then closes the session."""
        await asyncio.wait_for(self._handshake(), timeout=self.timeout)

    async def send(self, email: OutgoingEmail) -> str:
        """Sends one message and returns the reference stamped on it."""
        reference = f"<{uuid.uuid4().hex}@{self.config.MAIL_SERVER}>"
        message = MessageSchema(
            subject=email.subject,
            recipients=email.to,
            body=email.html,
            subtype=MessageType.html,
            alternative_body=email.text,
            multipart_subtype=MultipartSubtypeEnum.alternative if email.text else MultipartSubtypeEnum.mixed,
            reply_to=email.reply_to,
            headers={"X-Storefront-Ref": reference},
        )

        if self.config.SUPPRESS_SEND:
            logger.info(
                "EMAIL_ENABLED is false; skipping real email send. '%s' for %s",
                email.subject,
                ", ".join(email.to),
            )

        await asyncio.wait_for(self.fastmail.send_message(message), timeout=self.timeout)
        return reference


def build_mail_transport(settings: Settings) -> Optional[MailTransport]:
    """Returns None when credentials are missing or unusable."""
    if not settings.email_configured:
        logger.warning("EMAIL_USER/EMAIL_PASS are not set; contact and receipt emails are disabled")
        return None

    try:
        config = build_connection_config(settings)
    except ValidationError as e:
        logger.error(f"Invalid SMTP configuration (set MAIL_FROM when EMAIL_USER is not an address), emails are disabled: {e}")
        return None

    if not settings.SMTP_VALIDATE_CERTS:
        logger.warning("SMTP certificate validation is disabled (SMTP_VALIDATE_CERTS=false)")

    logger.info(
        "SMTP Config: host=%s port=%s secure=%s user=%s",
        settings.SMTP_HOST,
        settings.SMTP_PORT,
        settings.SMTP_SECURE,
        settings.masked_email_user(),
    )
    return MailTransport(config, timeout=settings.SMTP_TIMEOUT_SECONDS)
