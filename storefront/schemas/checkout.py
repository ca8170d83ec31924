from decimal import Decimal
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class CartItem(BaseModel):
    """A single artwork in the shopping cart"""
    title: str = Field(..., description="Display name of the item")
    price: Decimal = Field(..., ge=0, description="Unit price in major currency units (e.g. dollars)")
    quantity: int = Field(..., ge=1, description="Number of units, at least 1")


class CheckoutRequest(BaseModel):
    """Request model for creating a checkout session"""
    model_config = ConfigDict(populate_by_name=True)

    items: List[CartItem] = Field(..., description="Cart contents, in display order")
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    success_url: str = Field(..., alias="successUrl")
    cancel_url: str = Field(..., alias="cancelUrl")
    currency: Optional[str] = Field("USD", description="ISO currency code requested by the storefront")
    currency_multiplier: int = Field(100, gt=0, alias="currencyMultiplier",
                                     description="Scale from major units to the gateway's minor units")


class CheckoutSessionResponse(BaseModel):
    """Response model for checkout session creation"""
    id: str = Field(..., description="Stripe session ID")
    url: Optional[str] = Field(None, description="Stripe checkout redirect URL")


class PaymentVerification(BaseModel):
    """Read-only projection of a Stripe checkout session"""
    id: str
    payment_status: Optional[str] = Field(None, description="paid, unpaid or no_payment_required")
    amount_total: Optional[int] = None
    customer_email: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
