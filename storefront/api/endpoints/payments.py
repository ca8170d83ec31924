
from fastapi import APIRouter, Depends, Request

from ...core.dependencies import get_payment_gateway
from ...core.exceptions import raise_missing_session_id
from ...schemas.checkout import CheckoutRequest, CheckoutSessionResponse, PaymentVerification
from ...services.stripe_service import PaymentGateway


router = APIRouter()


@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    checkout_data: CheckoutRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """Create a Stripe checkout session and return its id and redirect URL."""
    return await gateway.create_checkout_session(checkout_data)


@router.get("/verify-payment", response_model=PaymentVerification)
async def verify_payment(
    request: Request,
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Get the payment status for a checkout session. `session_id` must be given
    exactly once.
    """
    session_ids = request.query_params.getlist("session_id")
    if len(session_ids) != 1:
        raise_missing_session_id()
    return await gateway.verify_payment(session_ids[0])
