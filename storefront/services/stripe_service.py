import asyncio
import logging
from typing import Dict, Any, List, Optional, Mapping

import stripe
from starlette.concurrency import run_in_threadpool

from ..core.exceptions import (
    ErrorCode,
    PaymentGatewayError,
    PAYMENT_UNAVAILABLE_MESSAGE,
    PAYMENT_REJECTED_MESSAGE,
    PAYMENT_FAILED_MESSAGE,
    raise_missing_session_id,
)
from ..schemas.checkout import CheckoutRequest, CheckoutSessionResponse, PaymentVerification
from .currency import CurrencyPolicy, resolve_currency_policy, to_minor_units

logger = logging.getLogger(__name__)

SHIPPING_LINE_NAME = "Shipping"
SHIPPING_LINE_DESCRIPTION = "Standard shipping fee"


def build_line_items(data: CheckoutRequest, policy: CurrencyPolicy) -> List[Dict[str, Any]]:
    """
    One Stripe line item per cart item, in cart order, followed by a single
    shipping line. The result always has len(data.items) + 1 entries.
    """
    line_items: List[Dict[str, Any]] = []
    for item in data.items:
        line_items.append({
            "price_data": {
                "currency": policy.currency,
                "product_data": {
                    "name": item.title,
                },
                "unit_amount": to_minor_units(item.price, data.currency_multiplier),
            },
            "quantity": item.quantity,
        })

    line_items.append({
        "price_data": {
            "currency": policy.currency,
            "product_data": {
                "name": SHIPPING_LINE_NAME,
                "description": SHIPPING_LINE_DESCRIPTION,
            },
            "unit_amount": to_minor_units(policy.shipping_amount, data.currency_multiplier),
        },
        "quantity": 1,
    })
    return line_items


def _plain_dict(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(value)


def _classify_stripe_error(exc: Exception) -> PaymentGatewayError:
    """Map SDK failures onto the fixed set of public payment messages."""
    if isinstance(exc, (asyncio.TimeoutError, stripe.APIConnectionError, stripe.RateLimitError)):
        code, message = ErrorCode.PAYMENT_SERVICE_UNAVAILABLE, PAYMENT_UNAVAILABLE_MESSAGE
    elif isinstance(exc, (stripe.InvalidRequestError, stripe.CardError)):
        code, message = ErrorCode.PAYMENT_REQUEST_REJECTED, PAYMENT_REJECTED_MESSAGE
    else:
        code, message = ErrorCode.PAYMENT_FAILED, PAYMENT_FAILED_MESSAGE
    return PaymentGatewayError(
        code,
        message,
        technical_details=f"{type(exc).__name__}: {exc}",
    )


class PaymentGateway:
    """
    Thin adapter over Stripe Checkout.

    The API key is passed on every call instead of being set on the stripe
    module, so several gateways (e.g. in tests) never share state. SDK calls
    are blocking and run in the threadpool, each bounded by `timeout`.
    """

    def __init__(
        self,
        api_key: str,
        timeout: float = 20.0,
        shipping_rates: Optional[Mapping[str, float]] = None,
    ):
        self._api_key = api_key
        self.timeout = timeout
        self.shipping_rates = shipping_rates

    async def _call(self, func, *args, **kwargs):
        return await asyncio.wait_for(
            run_in_threadpool(func, *args, api_key=self._api_key, **kwargs),
            timeout=self.timeout,
        )

    async def create_checkout_session(self, data: CheckoutRequest) -> CheckoutSessionResponse:
        """
        Create a Stripe checkout session for the cart.

        Unsupported currencies are charged in USD; the currency the storefront
        originally asked for is kept in the session metadata.
        """
        policy = resolve_currency_policy(data.currency, self.shipping_rates)
        if policy.currency_fallback:
            logger.warning(f"Unsupported checkout currency {data.currency!r}; charging in {policy.currency}")
        if policy.shipping_fallback:
            logger.info(f"No shipping rate for {policy.currency}; using the {policy.shipping_amount} default")

        line_items = build_line_items(data, policy)
        params: Dict[str, Any] = {
            "payment_method_types": ["card"],
            "line_items": line_items,
            "mode": "payment",
            "success_url": data.success_url,
            "cancel_url": data.cancel_url,
            "locale": "auto",
            "metadata": {
                "customer_email": data.customer_email or "",
                "items_count": str(len(data.items)),
                "original_currency": data.currency or "",
            },
        }
        if data.customer_email:
            params["customer_email"] = data.customer_email

        logger.info(f"Creating checkout session: {len(line_items)} line item(s) in {policy.currency}")
        try:
            session = await self._call(stripe.checkout.Session.create, **params)
        except Exception as e:
            raise _classify_stripe_error(e) from e

        logger.info(f"Checkout session created successfully: {session.id}")
        return CheckoutSessionResponse(id=session.id, url=session.url)

    async def verify_payment(self, session_id: Any) -> PaymentVerification:
        """
        Read the current state of a checkout session. Nothing is written to
        Stripe, so repeated calls see the same status until the customer acts.
        """
        if not isinstance(session_id, str) or not session_id.strip():
            raise_missing_session_id()

        try:
            session = await self._call(
                stripe.checkout.Session.retrieve,
                session_id,
                expand=["payment_intent"],
            )
        except Exception as e:
            raise _classify_stripe_error(e) from e

        customer_email = getattr(session, "customer_email", None)
        if not customer_email:
            details = getattr(session, "customer_details", None)
            customer_email = getattr(details, "email", None) if details else None

        logger.info(f"Verified session {session.id}: payment_status={session.payment_status}")
        return PaymentVerification(
            id=session.id,
            payment_status=session.payment_status,
            amount_total=session.amount_total,
            customer_email=customer_email,
            metadata=_plain_dict(getattr(session, "metadata", None)),
        )
