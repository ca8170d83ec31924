from datetime import datetime
from decimal import Decimal

from storefront.schemas.checkout import CartItem
from storefront.schemas.contact import ContactMessage
from storefront.schemas.receipt import ReceiptRequest
from storefront.services.email_templates import (
    StoreProfile,
    address_lines,
    receipt_totals,
    render_contact_acknowledgement,
    render_contact_admin,
    render_receipt_admin,
    render_receipt_customer,
)

from .conftest import make_settings

MOMENT = datetime(2026, 10, 19, 14, 5, 9)
STORE = StoreProfile.from_settings(make_settings(STORE_NAME="Gallery & Co"))


def _message(**overrides):
    values = {
        "name": "Ada Obi",
        "email": "ada@example.com",
        "subject": "Hello",
        "message": "Line one\nLine two",
    }
    values.update(overrides)
    return ContactMessage(**values)


def _receipt(**overrides):
    values = {
        "customer_email": "buyer@example.com",
        "order_id": "ORD-7",
        "items": [CartItem(title="Harmattan", price=Decimal("250"), quantity=2)],
        "total": Decimal("515.99"),
        "customer_name": "Tola Ade",
        "shipping_address": "1 Marina Road, , Lagos ,Nigeria",
        "currency": "NGN",
    }
    values.update(overrides)
    return ReceiptRequest(**values)


def test_contact_admin_rendering_is_deterministic():
    first = render_contact_admin(_message(), STORE, MOMENT)
    second = render_contact_admin(_message(), STORE, MOMENT)

    assert first == second
    assert "19/10/2026, 14:05:09" in first.text
    assert "Line one\nLine two" in first.text


def test_store_branding_is_escaped_in_html_only():
    rendered = render_contact_acknowledgement(_message(), STORE)

    assert rendered.subject == "Thank You for Contacting Gallery & Co!"
    assert "Gallery &amp; Co" in rendered.html
    assert "Gallery & Co" in rendered.text


def test_user_text_cannot_inject_markup():
    rendered = render_contact_admin(
        _message(subject='<img src=x onerror="steal()">', message="</div><script>x</script>"),
        STORE,
        MOMENT,
    )

    assert "<img" not in rendered.html
    assert "<script>" not in rendered.html
    assert "&lt;script&gt;" in rendered.html


def test_address_lines_drop_empty_parts():
    assert address_lines("1 Marina Road, , Lagos ,Nigeria") == ["1 Marina Road", "Lagos", "Nigeria"]
    assert address_lines("") == []


def test_receipt_shipping_is_the_difference_from_subtotal():
    totals = receipt_totals(_receipt())

    assert totals.subtotal == Decimal("500")
    assert totals.shipping == Decimal("15.99")


def test_receipt_explicit_shipping_is_used():
    totals = receipt_totals(_receipt(shipping=Decimal("15.99")))

    assert totals.shipping == Decimal("15.99")


def test_receipt_customer_rendering():
    rendered = render_receipt_customer(_receipt(), STORE, MOMENT)

    assert rendered.subject == "Order Confirmation - ORD-7"
    assert "Order Date: Monday, 19 October 2026" in rendered.text
    assert "Harmattan x 2 @ ₦250.00 = ₦500.00" in rendered.text
    assert "Total: ₦515.99" in rendered.text
    assert "Lagos<br>" in rendered.html


def test_receipt_admin_rendering():
    rendered = render_receipt_admin(_receipt(customer_name="<b>Tola</b>"), STORE, MOMENT)

    assert rendered.subject == "🛍️ New Order Received - ORD-7"
    assert "&lt;b&gt;Tola&lt;/b&gt;" in rendered.html
    assert "ORDER ITEMS (1):" in rendered.text
    assert "19/10/2026, 14:05:09" in rendered.html
