from typing import Optional

from fastapi import APIRouter, Depends

from ...core.config import Settings
from ...core.dependencies import get_app_settings, get_mail_transport
from ...core.infrastructure.email_service import MailTransport
from ...schemas.receipt import ReceiptRequest
from ...services.notification_service import send_order_receipts, RECEIPT_SUCCESS_MESSAGE

router = APIRouter()


@router.post("/send-receipt")
async def send_receipt(
    receipt: ReceiptRequest,
    settings: Settings = Depends(get_app_settings),
    transport: Optional[MailTransport] = Depends(get_mail_transport),
):
    """Email the order confirmation to the customer, then notify the owner."""
    await send_order_receipts(transport, receipt, settings)
    return {
        "success": True,
        "message": RECEIPT_SUCCESS_MESSAGE,
        "orderId": receipt.order_id,
    }
