# storefront/core/config.py

from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SHIPPING_RATES: Dict[str, float] = {
    "USD": 10,
    "GBP": 7.9,
    "NGN": 15000,
}


class Settings(BaseSettings):
    """Process configuration, read once from the environment (and `.env`)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- API Info ---
    API_TITLE: str = "Storefront Bridge API"
    API_DESCRIPTION: str = "Checkout, payment verification and transactional email for the gallery storefront."
    API_VERSION: str = "1.0.0"

    # --- Server Configuration ---
    HOST: str = "0.0.0.0"
    PORT: int = 4242
    ENVIRONMENT: str = "development"
    STATIC_DIR: str = "dist"
    LOG_LEVEL: str = "INFO"

    # --- CORS ---
    FRONTEND_URL: Optional[str] = None
    ALLOWED_ORIGINS: str = ""

    # --- Stripe ---
    STRIPE_SECRET_KEY: str = Field(..., min_length=1)
    PAYMENT_TIMEOUT_SECONDS: float = Field(20.0, gt=0)
    SHIPPING_RATES: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_SHIPPING_RATES))

    # --- SMTP ---
    SMTP_HOST: str = "adisaolashile.com"
    SMTP_PORT: int = 465
    SMTP_SECURE: bool = True
    SMTP_VALIDATE_CERTS: bool = True
    SMTP_TIMEOUT_SECONDS: float = Field(15.0, gt=0)
    EMAIL_USER: Optional[str] = None
    EMAIL_PASS: Optional[str] = None
    MAIL_FROM: Optional[str] = None
    MAIL_FROM_NAME: Optional[str] = None
    ADMIN_EMAIL: Optional[str] = None
    # Toggle real email sending. With EMAIL_ENABLED=false messages are built
    # but never handed to the SMTP server.
    EMAIL_ENABLED: bool = True

    # --- Store branding used in emails ---
    STORE_NAME: str = "Adisa Olashile"
    STORE_EMAIL: str = "info@adisaolashile.com"
    STORE_PHONE: str = "+44 7887 851220"
    STORE_WEBSITE: str = "adisaolashile.com"
    STORE_TAGLINE: str = "Contemporary African Artist"
    STORE_QUOTE: str = '"Great art picks up where nature ends." - Marc Chagall'

    @field_validator("EMAIL_USER", "EMAIL_PASS", "MAIL_FROM", "ADMIN_EMAIL", "FRONTEND_URL", mode="before")
    @classmethod
    def _blank_as_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def email_configured(self) -> bool:
        return bool(self.EMAIL_USER and self.EMAIL_PASS)

    @property
    def admin_address(self) -> Optional[str]:
        return self.ADMIN_EMAIL or self.EMAIL_USER

    @property
    def sender_address(self) -> Optional[str]:
        return self.MAIL_FROM or self.EMAIL_USER

    @property
    def sender_name(self) -> str:
        return self.MAIL_FROM_NAME or self.STORE_NAME

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cors_origins(self) -> List[str]:
        origins = ["http://localhost:5173"]
        # ALLOWED_ORIGINS is a comma separated list
        extra = [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]
        for origin in [self.FRONTEND_URL, *extra]:
            if origin and origin not in origins:
                origins.append(origin)
        return origins

    def masked_email_user(self) -> Optional[str]:
        if not self.EMAIL_USER:
            return None
        return self.EMAIL_USER[:3] + "..."


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Loads settings once; raises if the Stripe key is missing."""
    return Settings()
