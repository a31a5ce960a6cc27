"""
Shared fixtures.

The whole suite runs against an in-memory SQLite database; DATABASE_URL has
to be set before anything from cart_api is imported.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from cart_api.data.database import Base, SessionLocal, engine, init_db
from cart_api.main import create_app
from cart_api.services.money import MoneyFormatter


class FakePaymentClient:
    """Records checkout requests and hands out a new session id per call."""

    def __init__(self):
        self.calls = []
        self.error = None

    def create_checkout_session(self, line_items, success_url, cancel_url, metadata):
        if self.error is not None:
            raise self.error
        self.calls.append(
            {
                "line_items": line_items,
                "success_url": success_url,
                "cancel_url": cancel_url,
                "metadata": metadata,
            }
        )
        n = len(self.calls)
        return {"id": f"cs_test_{n}", "url": f"https://checkout.stripe.test/pay/cs_test_{n}"}


@pytest.fixture(autouse=True)
def database():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(database):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def money():
    return MoneyFormatter("EUR", "en_US")


@pytest.fixture
def payment_client():
    return FakePaymentClient()


@pytest.fixture
def client(database, payment_client, money):
    app = create_app(payment_client=payment_client, money=money)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def mug():
    return {"id": "p1", "name": "Mug", "price": 500, "quantity": 2}
