# storefront/core/exceptions.py

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    # Request validation errors
    INVALID_REQUEST = "INVALID_REQUEST"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_EMAIL = "INVALID_EMAIL"
    MISSING_SESSION_ID = "MISSING_SESSION_ID"
    TOTAL_MISMATCH = "TOTAL_MISMATCH"

    # Mail errors
    EMAIL_NOT_CONFIGURED = "EMAIL_NOT_CONFIGURED"
    EMAIL_SERVICE_UNAVAILABLE = "EMAIL_SERVICE_UNAVAILABLE"
    EMAIL_AUTH_FAILED = "EMAIL_AUTH_FAILED"
    EMAIL_CONNECTION_FAILED = "EMAIL_CONNECTION_FAILED"
    EMAIL_SEND_FAILED = "EMAIL_SEND_FAILED"

    # Payment gateway errors
    PAYMENT_SERVICE_UNAVAILABLE = "PAYMENT_SERVICE_UNAVAILABLE"
    PAYMENT_REQUEST_REJECTED = "PAYMENT_REQUEST_REJECTED"
    PAYMENT_FAILED = "PAYMENT_FAILED"

    # System errors
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class StorefrontError(Exception):
    """Base exception for all application errors.

    `user_message` is what the caller sees; `technical_details` only goes to
    the logs.
    """

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        technical_details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.user_message = user_message
        self.technical_details = technical_details
        self.context = context or {}
        super().__init__(self.user_message)

    def to_response(self) -> Dict[str, Any]:
        """Convert to API response format."""
        return {
            "success": False,
            "error": self.user_message,
            "code": self.code.value,
        }


class ValidationFailedError(StorefrontError):
    """Rejected input; raised before any external call is made."""

    def __init__(self, code: ErrorCode, user_message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(code, user_message, context=context)


class MailServiceError(StorefrontError):
    """SMTP configuration, connectivity or delivery failure."""


class PaymentGatewayError(StorefrontError):
    """Failure talking to the payment provider."""


# Public messages, one per error code a caller can receive
EMAIL_NOT_CONFIGURED_MESSAGE = "Email service is not configured"
EMAIL_UNAVAILABLE_MESSAGE = "Email service temporarily unavailable. Please try again later."
EMAIL_AUTH_FAILED_MESSAGE = "Email authentication failed. Please contact administrator."
EMAIL_CONNECTION_FAILED_MESSAGE = "Unable to connect to email server. Please try again later."
PAYMENT_UNAVAILABLE_MESSAGE = "Payment service is temporarily unavailable. Please try again later."
PAYMENT_REJECTED_MESSAGE = "The payment provider rejected this request. Please check your details and try again."
PAYMENT_FAILED_MESSAGE = "Payment processing failed. Please try again later."


def raise_missing_fields():
    """Raise the contact-form 'missing field' error."""
    raise ValidationFailedError(ErrorCode.MISSING_REQUIRED_FIELD, "All fields are required")


def raise_invalid_email(field_name: str = "email"):
    """Raise an invalid email address error."""
    raise ValidationFailedError(
        ErrorCode.INVALID_EMAIL,
        "Invalid email address",
        context={"field": field_name},
    )


def raise_missing_session_id():
    """Raise the verify-payment 'no session id' error."""
    raise ValidationFailedError(ErrorCode.MISSING_SESSION_ID, "Session ID is required")


def raise_email_not_configured():
    raise MailServiceError(ErrorCode.EMAIL_NOT_CONFIGURED, EMAIL_NOT_CONFIGURED_MESSAGE)
