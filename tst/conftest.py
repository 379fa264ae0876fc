"""Shared fixtures: fake relay, fake clock and a TestClient wired to them."""

import pytest
from fastapi.testclient import TestClient

from src.app import app
from src.shared.contact import routes as contact_routes
from src.shared.contact.rate_limit import FixedWindowRateLimiter
from src.shared.mail import routes as mail_routes
from src.shared.mail.config import MailConfig
from tst.fakes import FakeClock, FakeRelay


@pytest.fixture
def mail_config():
    return MailConfig(
        host="smtp.example.com",
        port=465,
        secure=True,
        user="noreply@geonix.example",
        password="secret",
        to="owner@geonix.example",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def relay():
    return FakeRelay()


@pytest.fixture
def limiter(clock):
    return FixedWindowRateLimiter(clock=clock)


@pytest.fixture
def client(mail_config, relay, limiter):
    app.dependency_overrides[contact_routes.get_rate_limiter] = lambda: limiter
    app.dependency_overrides[contact_routes.get_mail_config] = lambda: mail_config
    app.dependency_overrides[contact_routes.get_relay_factory] = lambda: (lambda config: relay)
    app.dependency_overrides[mail_routes.get_mail_config] = lambda: mail_config
    app.dependency_overrides[mail_routes.get_relay_factory] = lambda: (lambda config: relay)
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def valid_form():
    return {
        "name": "Kim Minsu",
        "email": "minsu@example.com",
        "message": "We would like a quote for a survey project.",
        "company": "Hanbit Survey",
        "website": "",
        "phone": "010-1234-5678",
        "hp": "",
    }
