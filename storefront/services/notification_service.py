"""
Contact-form and order-receipt mail flows.

Each flow validates its payload before touching SMTP, then sends its two
messages one after the other; if the first send fails the second is never
attempted.
"""

import asyncio
import logging
import re
from datetime import datetime
from decimal import Decimal
from typing import Optional

import aiosmtplib
from pydantic import EmailStr, TypeAdapter, ValidationError

from ..core.config import Settings
from ..core.exceptions import (
    ErrorCode,
    MailServiceError,
    ValidationFailedError,
    EMAIL_UNAVAILABLE_MESSAGE,
    EMAIL_AUTH_FAILED_MESSAGE,
    EMAIL_CONNECTION_FAILED_MESSAGE,
    raise_missing_fields,
    raise_invalid_email,
    raise_email_not_configured,
)
from ..core.infrastructure.email_service import MailTransport, OutgoingEmail
from ..schemas.contact import ContactFormRequest, ContactMessage
from ..schemas.receipt import ReceiptRequest
from .email_templates import (
    StoreProfile,
    render_contact_admin,
    render_contact_acknowledgement,
    render_receipt_admin,
    render_receipt_customer,
    render_test_email,
    receipt_subtotal,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Same validator fastapi-mail applies to recipients and reply-to
_EMAIL_ADAPTER = TypeAdapter(EmailStr)

CONTACT_SUCCESS_MESSAGE = "Message sent successfully! You should receive a confirmation email shortly."
CONTACT_FAILED_MESSAGE = "Failed to send message. Please try again later."
RECEIPT_SUCCESS_MESSAGE = "Receipts sent successfully"
RECEIPT_FAILED_MESSAGE = "Failed to send receipts. Please try again later."
TOTAL_MISMATCH_MESSAGE = "Order total does not match the items in the order"

# Totals are compared to the cent
TOTAL_TOLERANCE = Decimal("0.01")

_AUTH_MARKERS = ("Invalid login", "BadCredentials", "EAUTH", "535")
_CONNECTION_MARKERS = ("ECONNREFUSED", "Connection refused")


def is_valid_email(value: Optional[str]) -> bool:
    """
    Shape check, then full address validation. Anything accepted here can be
    used as a message recipient.
    """
    if not value or EMAIL_PATTERN.match(value) is None:
        return False
    try:
        _EMAIL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


def validate_contact(form: ContactFormRequest) -> ContactMessage:
    values = {
        "name": form.name,
        "email": form.email,
        "subject": form.subject,
        "message": form.message,
    }
    if any(value is None or not value.strip() for value in values.values()):
        raise_missing_fields()
    if not is_valid_email(form.email.strip()):
        raise_invalid_email()
    values["email"] = form.email.strip()
    return ContactMessage(**values)


def validate_receipt(receipt: ReceiptRequest) -> None:
    """
    Checks the caller-supplied total against the items. With an explicit
    shipping amount the total must match exactly; without one it can only
    exceed the item subtotal.
    """
    if not is_valid_email(receipt.customer_email.strip()):
        raise_invalid_email("customerEmail")

    subtotal = receipt_subtotal(receipt)
    if receipt.shipping is not None:
        expected = subtotal + receipt.shipping
        mismatch = abs(receipt.total - expected) >= TOTAL_TOLERANCE
    else:
        expected = subtotal
        mismatch = subtotal - receipt.total >= TOTAL_TOLERANCE

    if mismatch:
        raise ValidationFailedError(
            ErrorCode.TOTAL_MISMATCH,
            TOTAL_MISMATCH_MESSAGE,
            context={
                "order_id": receipt.order_id,
                "total": str(receipt.total),
                "expected": str(expected),
            },
        )


def _error_chain(exc: BaseException):
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        yield exc
        exc = exc.__cause__ or exc.__context__


def classify_send_error(exc: Exception, default_message: str) -> MailServiceError:
    """Map SMTP failures onto a small set of public messages."""
    chain = list(_error_chain(exc))
    text = " ".join(str(e) for e in chain)

    if any(isinstance(e, aiosmtplib.SMTPAuthenticationError) for e in chain) or any(
        marker in text for marker in _AUTH_MARKERS
    ):
        code, message = ErrorCode.EMAIL_AUTH_FAILED, EMAIL_AUTH_FAILED_MESSAGE
    elif any(
        isinstance(e, (aiosmtplib.SMTPConnectError, ConnectionRefusedError, asyncio.TimeoutError))
        for e in chain
    ) or any(marker in text for marker in _CONNECTION_MARKERS):
        code, message = ErrorCode.EMAIL_CONNECTION_FAILED, EMAIL_CONNECTION_FAILED_MESSAGE
    else:
        code, message = ErrorCode.EMAIL_SEND_FAILED, default_message

    return MailServiceError(code, message, technical_details=f"{type(exc).__name__}: {exc}")


async def verify_transport(transport: MailTransport) -> None:
    try:
        await transport.verify()
    except Exception as e:
        logger.error(f"SMTP connection failed: {e}")
        raise MailServiceError(
            ErrorCode.EMAIL_SERVICE_UNAVAILABLE,
            EMAIL_UNAVAILABLE_MESSAGE,
            technical_details=f"{type(e).__name__}: {e}",
        ) from e
    logger.info("SMTP connection verified successfully")


async def send_contact_messages(
    transport: Optional[MailTransport],
    form: ContactFormRequest,
    settings: Settings,
    received_at: Optional[datetime] = None,
) -> ContactMessage:
    """
    Owner notification first, then the acknowledgement to the sender.
    """
    message = validate_contact(form)

    if transport is None:
        logger.error("Email configuration missing")
        raise_email_not_configured()

    await verify_transport(transport)

    store = StoreProfile.from_settings(settings)
    admin_email = render_contact_admin(message, store, received_at)
    user_email = render_contact_acknowledgement(message, store)

    try:
        await transport.send(OutgoingEmail(
            to=[settings.admin_address],
            subject=admin_email.subject,
            html=admin_email.html,
            text=admin_email.text,
            reply_to=[message.email],
        ))
        logger.info(f"Admin email sent to: {settings.admin_address}")

        await transport.send(OutgoingEmail(
            to=[message.email],
            subject=user_email.subject,
            html=user_email.html,
            text=user_email.text,
        ))
        logger.info(f"Confirmation email sent to: {message.email}")
    except Exception as e:
        logger.exception("Contact form error")
        raise classify_send_error(e, CONTACT_FAILED_MESSAGE) from e

    return message


async def send_order_receipts(
    transport: Optional[MailTransport],
    receipt: ReceiptRequest,
    settings: Settings,
    ordered_at: Optional[datetime] = None,
) -> None:
    """
    Customer confirmation first, then the owner's order notification.
    """
    validate_receipt(receipt)

    if transport is None:
        logger.error("Email configuration missing")
        raise_email_not_configured()

    store = StoreProfile.from_settings(settings)
    ordered_at = ordered_at or datetime.now()
    customer_email = render_receipt_customer(receipt, store, ordered_at)
    admin_email = render_receipt_admin(receipt, store, ordered_at)

    try:
        await transport.send(OutgoingEmail(
            to=[receipt.customer_email.strip()],
            subject=customer_email.subject,
            html=customer_email.html,
            text=customer_email.text,
        ))
        logger.info(f"[Order: {receipt.order_id}] Order confirmation sent to customer: {receipt.customer_email}")

        await transport.send(OutgoingEmail(
            to=[settings.admin_address],
            subject=admin_email.subject,
            html=admin_email.html,
            text=admin_email.text,
            reply_to=[receipt.customer_email.strip()],
        ))
        logger.info(f"[Order: {receipt.order_id}] Order notification sent to admin: {settings.admin_address}")
    except Exception as e:
        logger.exception(f"[Order: {receipt.order_id}] Email sending error")
        raise classify_send_error(e, RECEIPT_FAILED_MESSAGE) from e


async def send_test_email(transport: Optional[MailTransport], settings: Settings) -> str:
    """Diagnostic round trip: verify, then mail the configured user. Returns the message reference."""
    if transport is None:
        raise_email_not_configured()

    await verify_transport(transport)

    rendered = render_test_email(StoreProfile.from_settings(settings))
    try:
        return await transport.send(OutgoingEmail(
            to=[settings.sender_address],
            subject=rendered.subject,
            html=rendered.html,
            text=rendered.text,
        ))
    except Exception as e:
        logger.exception("Test email error")
        raise classify_send_error(e, "Failed to send test email") from e
