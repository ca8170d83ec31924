"""
Currency and shipping policy for checkout.

The storefront may ask for any currency code; only a fixed set is charged as
requested and everything else is charged in USD. Shipping is a flat
per-currency amount taken from a lookup table, with the USD figure used for
currencies that have no entry.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping, Optional, Union

from ..core.config import DEFAULT_SHIPPING_RATES

SUPPORTED_CURRENCIES = ("USD", "GBP", "EUR", "CAD", "AUD", "NGN")
FALLBACK_CURRENCY = "USD"

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class CurrencyPolicy:
    requested_currency: Optional[str]
    currency: str
    shipping_amount: Decimal
    currency_fallback: bool
    shipping_fallback: bool


def _as_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 7.9 as 7.9 instead of its binary expansion
    return Decimal(str(value))


def resolve_currency_policy(
    requested_currency: Optional[str],
    shipping_rates: Optional[Mapping[str, Number]] = None,
) -> CurrencyPolicy:
    """
    Decide which currency a checkout is charged in and what shipping costs.

    Matching is exact: "usd" is not a supported code and falls back like any
    other unknown value.
    """
    rates = DEFAULT_SHIPPING_RATES if shipping_rates is None else shipping_rates

    currency_fallback = requested_currency not in SUPPORTED_CURRENCIES
    currency = FALLBACK_CURRENCY if currency_fallback else requested_currency

    shipping_fallback = currency not in rates
    if shipping_fallback:
        shipping = rates.get(FALLBACK_CURRENCY, DEFAULT_SHIPPING_RATES[FALLBACK_CURRENCY])
    else:
        shipping = rates[currency]

    return CurrencyPolicy(
        requested_currency=requested_currency,
        currency=currency,
        shipping_amount=_as_decimal(shipping),
        currency_fallback=currency_fallback,
        shipping_fallback=shipping_fallback,
    )


def to_minor_units(amount: Number, multiplier: int) -> int:
    """amount * multiplier, rounded half away from zero."""
    scaled = _as_decimal(amount) * multiplier
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


CURRENCY_SYMBOLS = {
    "USD": "$",
    "GBP": "£",
    "EUR": "€",
    "CAD": "CA$",
    "AUD": "A$",
    "NGN": "₦",
}


def format_money(amount: Number, currency: str = "USD") -> str:
    """Two-decimal display amount with the currency's symbol, e.g. $12.50."""
    value = _as_decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    symbol = CURRENCY_SYMBOLS.get((currency or "").upper())
    if symbol is None:
        return f"{value:.2f} {currency}"
    return f"{symbol}{value:.2f}"
