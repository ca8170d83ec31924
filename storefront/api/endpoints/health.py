from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...core.config import Settings
from ...core.dependencies import get_app_settings, get_mail_transport
from ...core.error_handlers import STATUS_CODE_MAP
from ...core.exceptions import MailServiceError
from ...core.infrastructure.email_service import MailTransport
from ...services.notification_service import send_test_email

router = APIRouter()


def _smtp_summary(settings: Settings) -> dict:
    return {
        "host": settings.SMTP_HOST,
        "port": settings.SMTP_PORT,
        "user": settings.masked_email_user(),
    }


@router.get("/health")
async def health_check(transport: Optional[MailTransport] = Depends(get_mail_transport)):
    """Liveness probe; also reports whether a usable mail transport was built."""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "emailConfigured": transport is not None,
    }


@router.get("/test-email")
async def test_email(
    settings: Settings = Depends(get_app_settings),
    transport: Optional[MailTransport] = Depends(get_mail_transport),
):
    """Diagnostic: verify SMTP and send a test message to the mail account itself."""
    try:
        message_id = await send_test_email(transport, settings)
    except MailServiceError as e:
        return JSONResponse(
            status_code=STATUS_CODE_MAP.get(e.code, 500),
            content={
                "success": False,
                "error": e.user_message,
                "smtpConfig": _smtp_summary(settings),
            },
        )

    return {
        "success": True,
        "message": "Test email sent successfully",
        "messageId": message_id,
        "smtpConfig": _smtp_summary(settings),
    }
