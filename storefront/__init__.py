"""Storefront bridge: Stripe checkout and transactional email for a static storefront."""

__version__ = "1.0.0"
