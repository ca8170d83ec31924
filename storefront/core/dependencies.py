# storefront/core/dependencies.py

from typing import Optional

from fastapi import Request

from .config import Settings
from .infrastructure.email_service import MailTransport
from ..services.stripe_service import PaymentGateway


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mail_transport(request: Request) -> Optional[MailTransport]:
    """None when SMTP credentials are not configured."""
    return request.app.state.mail_transport


def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway
