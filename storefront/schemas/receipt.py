from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .checkout import CartItem


class ReceiptRequest(BaseModel):
    """Request model for sending order receipts to the customer and the owner"""
    model_config = ConfigDict(populate_by_name=True)

    customer_email: str = Field(..., alias="customerEmail")
    order_id: str = Field(..., min_length=1, alias="orderId")
    items: List[CartItem]
    total: Decimal = Field(..., ge=0, description="Amount charged, shipping included")
    customer_name: str = Field(..., alias="customerName")
    shipping_address: str = Field("", alias="shippingAddress", description="Comma delimited address lines")
    currency: str = Field("USD", description="Currency used to display amounts")
    shipping: Optional[Decimal] = Field(None, ge=0, description="Shipping charged, when known")
