import logging
from typing import Optional

from fastapi import APIRouter, Depends

from ...core.config import Settings
from ...core.dependencies import get_app_settings, get_mail_transport
from ...core.infrastructure.email_service import MailTransport
from ...schemas.contact import ContactFormRequest
from ...services.notification_service import send_contact_messages, CONTACT_SUCCESS_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/contact")
async def submit_contact_form(
    form: ContactFormRequest,
    settings: Settings = Depends(get_app_settings),
    transport: Optional[MailTransport] = Depends(get_mail_transport),
):
    """
    Deliver a contact-form submission: a notification to the site owner
    (reply-to set to the sender) and an acknowledgement to the sender.
    """
    message = await send_contact_messages(transport, form, settings)
    logger.info(f"Contact form handled for {message.email}")
    return {"success": True, "message": CONTACT_SUCCESS_MESSAGE}
