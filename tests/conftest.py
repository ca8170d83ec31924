import pytest
from fastapi.testclient import TestClient

from storefront.core.config import Settings
from storefront.core.dependencies import get_mail_transport
from storefront.main import create_app


class FakeMailTransport:
    """
    Stands in for MailTransport. Records every message handed to `send`;
    `send_errors` maps an attempt index to the exception that attempt raises.
    """

    def __init__(self, verify_error=None, send_errors=None):
        self.verify_error = verify_error
        self.send_errors = send_errors or {}
        self.verify_calls = 0
        self.attempts = []
        self.sent = []

    async def verify(self):
        self.verify_calls += 1
        if self.verify_error is not None:
            raise self.verify_error

    async def send(self, email):
        index = len(self.attempts)
        self.attempts.append(email)
        if index in self.send_errors:
            raise self.send_errors[index]
        self.sent.append(email)
        return f"<ref-{index}@mail.example.com>"


def make_settings(**overrides) -> Settings:
    values = {
        "STRIPE_SECRET_KEY": "sk_test_123",
        "EMAIL_USER": "owner@example.com",
        "EMAIL_PASS": "app-password",
        "ADMIN_EMAIL": "admin@example.com",
        "SMTP_HOST": "smtp.example.com",
        "ENVIRONMENT": "development",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="function")
def settings():
    return make_settings()


@pytest.fixture(scope="function")
def mail_transport():
    return FakeMailTransport()


@pytest.fixture(scope="function")
def app(settings, mail_transport):
    """
    Builds the app for each test with the SMTP transport replaced by a fake.
    """
    application = create_app(settings)
    application.dependency_overrides[get_mail_transport] = lambda: mail_transport
    yield application
    application.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app):
    with TestClient(app) as test_client:
        yield test_client
