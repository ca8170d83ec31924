from types import SimpleNamespace

import stripe

from storefront.core.exceptions import (
    PAYMENT_FAILED_MESSAGE,
    PAYMENT_REJECTED_MESSAGE,
    PAYMENT_UNAVAILABLE_MESSAGE,
)

CHECKOUT_PAYLOAD = {
    "items": [
        {"title": "Lagos Sunset", "price": 120.5, "quantity": 1},
        {"title": "Market Day print", "price": 35, "quantity": 2},
    ],
    "customerEmail": "buyer@example.com",
    "successUrl": "https://shop.example.com/success?session_id={CHECKOUT_SESSION_ID}",
    "cancelUrl": "https://shop.example.com/cart",
    "currency": "GBP",
}


def _session(**fields):
    values = {
        "id": "cs_test_1",
        "url": "https://checkout.stripe.com/c/pay/cs_test_1",
        "payment_status": "paid",
        "amount_total": 18840,
        "customer_email": "buyer@example.com",
        "customer_details": None,
        "metadata": {"items_count": "2"},
    }
    values.update(fields)
    return SimpleNamespace(**values)


def test_create_checkout_session_returns_id_and_url(client, mocker):
    create = mocker.patch("stripe.checkout.Session.create", return_value=_session())

    response = client.post("/create-checkout-session", json=CHECKOUT_PAYLOAD)

    assert response.status_code == 200
    assert response.json() == {"id": "cs_test_1", "url": "https://checkout.stripe.com/c/pay/cs_test_1"}

    kwargs = create.call_args.kwargs
    assert kwargs["api_key"] == "sk_test_123"
    assert kwargs["mode"] == "payment"
    assert kwargs["customer_email"] == "buyer@example.com"
    assert [line["price_data"]["unit_amount"] for line in kwargs["line_items"]] == [12050, 3500, 790]
    assert kwargs["line_items"][-1]["price_data"]["product_data"]["name"] == "Shipping"
    assert kwargs["metadata"] == {
        "customer_email": "buyer@example.com",
        "items_count": "2",
        "original_currency": "GBP",
    }


def test_create_checkout_session_unsupported_currency_charges_usd(client, mocker):
    create = mocker.patch("stripe.checkout.Session.create", return_value=_session())

    response = client.post("/create-checkout-session", json={**CHECKOUT_PAYLOAD, "currency": "JPY"})

    assert response.status_code == 200
    kwargs = create.call_args.kwargs
    assert {line["price_data"]["currency"] for line in kwargs["line_items"]} == {"USD"}
    assert kwargs["line_items"][-1]["price_data"]["unit_amount"] == 1000
    assert kwargs["metadata"]["original_currency"] == "JPY"


def test_create_checkout_session_invalid_payload(client, mocker):
    create = mocker.patch("stripe.checkout.Session.create")

    response = client.post("/create-checkout-session", json={"items": "nope"})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["code"] == "INVALID_REQUEST"
    create.assert_not_called()


def test_create_checkout_session_connection_error(client, mocker):
    mocker.patch(
        "stripe.checkout.Session.create",
        side_effect=stripe.APIConnectionError("Network error"),
    )

    response = client.post("/create-checkout-session", json=CHECKOUT_PAYLOAD)

    assert response.status_code == 500
    assert response.json()["error"] == PAYMENT_UNAVAILABLE_MESSAGE
    assert "Network error" not in response.text


def test_create_checkout_session_rejected_request(client, mocker):
    mocker.patch(
        "stripe.checkout.Session.create",
        side_effect=stripe.InvalidRequestError("Invalid currency: xyz", "currency"),
    )

    response = client.post("/create-checkout-session", json=CHECKOUT_PAYLOAD)

    assert response.status_code == 500
    assert response.json()["error"] == PAYMENT_REJECTED_MESSAGE


def test_verify_payment_returns_session_projection(client, mocker):
    retrieve = mocker.patch(
        "stripe.checkout.Session.retrieve",
        return_value=_session(customer_email=None, customer_details=SimpleNamespace(email="buyer@example.com")),
    )

    response = client.get("/verify-payment", params={"session_id": "cs_test_1"})

    assert response.status_code == 200
    assert response.json() == {
        "id": "cs_test_1",
        "payment_status": "paid",
        "amount_total": 18840,
        "customer_email": "buyer@example.com",
        "metadata": {"items_count": "2"},
    }
    retrieve.assert_called_once_with("cs_test_1", api_key="sk_test_123", expand=["payment_intent"])


def test_verify_payment_requires_session_id(client, mocker):
    retrieve = mocker.patch("stripe.checkout.Session.retrieve")

    response = client.get("/verify-payment")

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Session ID is required",
        "code": "MISSING_SESSION_ID",
    }
    retrieve.assert_not_called()


def test_verify_payment_rejects_repeated_session_id(client, mocker):
    retrieve = mocker.patch("stripe.checkout.Session.retrieve")

    response = client.get("/verify-payment?session_id=cs_a&session_id=cs_b")

    assert response.status_code == 400
    retrieve.assert_not_called()


def test_verify_payment_blank_session_id(client, mocker):
    retrieve = mocker.patch("stripe.checkout.Session.retrieve")

    response = client.get("/verify-payment", params={"session_id": "  "})

    assert response.status_code == 400
    retrieve.assert_not_called()


def test_verify_payment_unexpected_error(client, mocker):
    mocker.patch("stripe.checkout.Session.retrieve", side_effect=RuntimeError("boom"))

    response = client.get("/verify-payment", params={"session_id": "cs_test_1"})

    assert response.status_code == 500
    assert response.json()["error"] == PAYMENT_FAILED_MESSAGE
    assert "boom" not in response.text


def test_verify_payment_is_repeatable(client, mocker):
    retrieve = mocker.patch("stripe.checkout.Session.retrieve", return_value=_session(payment_status="unpaid"))

    first = client.get("/verify-payment", params={"session_id": "cs_test_1"})
    second = client.get("/verify-payment", params={"session_id": "cs_test_1"})

    assert first.json()["payment_status"] == second.json()["payment_status"] == "unpaid"
    assert retrieve.call_count == 2


def test_naira_checkout_with_unit_multiplier(client, mocker):
    create = mocker.patch("stripe.checkout.Session.create", return_value=_session())
    payload = {
        "items": [{"title": "Painting A", "price": 100, "quantity": 1}],
        "successUrl": "https://shop.example.com/success",
        "cancelUrl": "https://shop.example.com/cart",
        "currency": "NGN",
        "currencyMultiplier": 1,
    }

    response = client.post("/create-checkout-session", json=payload)

    assert response.status_code == 200
    line_items = create.call_args.kwargs["line_items"]
    assert line_items[0]["price_data"]["unit_amount"] == 100
    assert line_items[1]["price_data"]["unit_amount"] == 15000
