"""
Email bodies for the contact form and order receipts.

Rendering is pure: each function takes the payload, the store profile and a
timestamp, and returns the subject with HTML and plain-text bodies. The HTML
templates autoescape, so text typed by customers is never interpreted as
markup.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from ..schemas.contact import ContactMessage
from ..schemas.receipt import ReceiptRequest
from .currency import format_money

_env = Environment(
    loader=PackageLoader("storefront", "templates/email"),
    autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=False),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class StoreProfile:
    name: str
    email: str
    phone: str
    website: str
    tagline: str
    quote: str

    @classmethod
    def from_settings(cls, settings) -> "StoreProfile":
        return cls(
            name=settings.STORE_NAME,
            email=settings.STORE_EMAIL,
            phone=settings.STORE_PHONE,
            website=settings.STORE_WEBSITE,
            tagline=settings.STORE_TAGLINE,
            quote=settings.STORE_QUOTE,
        )


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class ReceiptLine:
    title: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class ReceiptTotals:
    subtotal: Decimal
    shipping: Decimal
    total: Decimal


def _render(name: str, **context) -> str:
    return _env.get_template(name).render(**context)


def _timestamp(moment: datetime) -> str:
    return moment.strftime("%d/%m/%Y, %H:%M:%S")


def _long_date(moment: datetime) -> str:
    # e.g. "Monday, 19 October 2026"
    return f"{moment.strftime('%A')}, {moment.day} {moment.strftime('%B %Y')}"


def address_lines(shipping_address: str) -> List[str]:
    return [part.strip() for part in (shipping_address or "").split(",") if part.strip()]


def receipt_subtotal(receipt: ReceiptRequest) -> Decimal:
    return sum((item.price * item.quantity for item in receipt.items), Decimal("0"))


def receipt_totals(receipt: ReceiptRequest) -> ReceiptTotals:
    """Subtotal from the items; shipping is whatever the total adds on top."""
    subtotal = receipt_subtotal(receipt)
    if receipt.shipping is not None:
        shipping = receipt.shipping
    else:
        shipping = max(receipt.total - subtotal, Decimal("0"))
    return ReceiptTotals(subtotal=subtotal, shipping=shipping, total=receipt.total)


def _receipt_lines(receipt: ReceiptRequest) -> List[ReceiptLine]:
    return [
        ReceiptLine(
            title=item.title,
            quantity=item.quantity,
            unit_price=format_money(item.price, receipt.currency),
            line_total=format_money(item.price * item.quantity, receipt.currency),
        )
        for item in receipt.items
    ]


def _receipt_context(receipt: ReceiptRequest, store: StoreProfile, ordered_at: datetime) -> dict:
    totals = receipt_totals(receipt)
    return {
        "receipt": receipt,
        "store": store,
        "lines": _receipt_lines(receipt),
        "subtotal": format_money(totals.subtotal, receipt.currency),
        "shipping": format_money(totals.shipping, receipt.currency),
        "total": format_money(totals.total, receipt.currency),
        "address_lines": address_lines(receipt.shipping_address),
        "order_date": _long_date(ordered_at),
        "ordered_at": _timestamp(ordered_at),
    }


def render_contact_admin(
    message: ContactMessage,
    store: StoreProfile,
    received_at: Optional[datetime] = None,
) -> RenderedEmail:
    """Notification to the site owner; replies go to the submitter."""
    received_at = received_at or datetime.now()
    context = {
        "message": message,
        "store": store,
        "received_at": _timestamp(received_at),
    }
    return RenderedEmail(
        subject=f"New Contact Form: {message.subject}",
        html=_render("contact_admin.html", **context),
        text=_render("contact_admin.txt", **context),
    )


def render_contact_acknowledgement(message: ContactMessage, store: StoreProfile) -> RenderedEmail:
    context = {"message": message, "store": store}
    return RenderedEmail(
        subject=f"Thank You for Contacting {store.name}!",
        html=_render("contact_ack.html", **context),
        text=_render("contact_ack.txt", **context),
    )


def render_receipt_customer(
    receipt: ReceiptRequest,
    store: StoreProfile,
    ordered_at: Optional[datetime] = None,
) -> RenderedEmail:
    context = _receipt_context(receipt, store, ordered_at or datetime.now())
    return RenderedEmail(
        subject=f"Order Confirmation - {receipt.order_id}",
        html=_render("receipt_customer.html", **context),
        text=_render("receipt_customer.txt", **context),
    )


def render_receipt_admin(
    receipt: ReceiptRequest,
    store: StoreProfile,
    ordered_at: Optional[datetime] = None,
) -> RenderedEmail:
    context = _receipt_context(receipt, store, ordered_at or datetime.now())
    return RenderedEmail(
        subject=f"🛍️ New Order Received - {receipt.order_id}",
        html=_render("receipt_admin.html", **context),
        text=_render("receipt_admin.txt", **context),
    )


def render_test_email(store: StoreProfile) -> RenderedEmail:
    return RenderedEmail(
        subject="Backend Email Test",
        html=_render("test_email.html", store=store),
        text="This is a test email from your backend server.",
    )
