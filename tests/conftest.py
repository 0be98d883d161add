"""
Shared fixtures for the checkout test suite.

Builds an OrderManager over the built-in catalog, a fresh in-memory store and
a simulated gateway, plus a Flask test client wired to that manager.
"""

import pytest

from backend.payment_server import create_app
from checkout.catalog import Catalog
from checkout.order_manager import OrderManager
from order_store import MemoryOrderStore
from razorpay_client import SimulatedRazorpayClient

TEST_SECRET = "test_secret_key"

TEST_PRODUCTS = [
    {
        "id": "p1",
        "name": "Product One",
        "price": 79,
        "download_link": "https://example.com/p1.zip",
        "image": "https://example.com/p1.png",
        "description": "First product",
        "read_more_link": "https://example.com/p1",
    },
    {
        "id": "p2",
        "name": "Product Two",
        "price": 1,
        "download_link": "https://example.com/p2.zip",
    },
]


@pytest.fixture
def catalog():
    return Catalog.from_dicts(TEST_PRODUCTS)


@pytest.fixture
def store():
    return MemoryOrderStore()


@pytest.fixture
def gateway():
    return SimulatedRazorpayClient()


@pytest.fixture
def manager(catalog, store, gateway):
    return OrderManager(
        catalog=catalog,
        store=store,
        gateway=gateway,
        key_secret=TEST_SECRET,
        currency="INR",
    )


@pytest.fixture
def app(manager):
    app = create_app(manager)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
