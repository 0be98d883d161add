"""
HTTP-level tests for the Flask payment server, using the Flask test client.
"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from backend import payment_server
from backend.payment_server import build_gateway, build_order_manager, create_app
from checkout.config import Config
from checkout.order_manager import OrderManager, sign_payment
from order_store import STATUS_CREATED, STATUS_PAID
from razorpay_client import RazorpayClient, RazorpayError, SimulatedRazorpayClient

from conftest import TEST_SECRET


def _create(client, product_id="p1"):
    return client.post(
        "/api/create-order",
        json={"selectedNote": product_id, "name": "A", "email": "a@x.com", "contact": "999"},
    )


def _verify(client, order_id, payment_id, signature):
    return client.post(
        "/api/verify-payment",
        json={
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature,
        },
    )


class TestCatalogRoutes:

    @pytest.mark.parametrize("path", ["/api/list-products", "/api/get-notes"])
    def test_list_products(self, client, path):
        res = client.get(path)
        assert res.status_code == 200
        data = res.get_json()
        assert [p["id"] for p in data] == ["p1", "p2"]
        assert set(data[0]) == {"id", "name", "price", "image", "description", "readMoreLink"}

    def test_product_detail(self, client):
        res = client.get("/api/product-detail/p1")
        assert res.status_code == 200
        data = res.get_json()
        assert data["downloadLink"] == "https://example.com/p1.zip"
        assert data["price"] == 79

    def test_product_detail_unknown(self, client):
        res = client.get("/api/product-detail/unknown")
        assert res.status_code == 404
        assert "error" in res.get_json()


class TestCreateOrderRoute:

    def test_returns_gateway_order(self, client, store):
        res = _create(client)
        assert res.status_code == 200
        data = res.get_json()
        assert data["id"].startswith("order_")
        assert data["amount"] == 7900
        assert data["currency"] == "INR"
        assert store.get(data["id"]).status == STATUS_CREATED

    def test_invalid_product(self, client, store):
        res = _create(client, "unknown")
        assert res.status_code == 400
        assert res.get_json() == {"error": "Invalid course selected"}
        assert len(store) == 0

    def test_missing_body(self, client, store):
        res = client.post("/api/create-order", data="not json", content_type="text/plain")
        assert res.status_code == 400
        assert len(store) == 0

    def test_gateway_failure(self, catalog, store):
        gateway = Mock()
        gateway.create_order.side_effect = RazorpayError("Razorpay create_order timed out after 15s")
        app = create_app(OrderManager(catalog, store, gateway, key_secret=TEST_SECRET))

        res = _create(app.test_client())

        assert res.status_code == 500
        body = res.get_data(as_text=True)
        assert "timed out" not in body
        assert TEST_SECRET not in body
        assert len(store) == 0


class TestVerifyPaymentRoute:

    def test_full_flow(self, client, store):
        order_id = _create(client).get_json()["id"]
        sig = sign_payment(order_id, "pay_1", TEST_SECRET)

        res = _verify(client, order_id, "pay_1", sig)

        assert res.status_code == 200
        assert res.get_json() == {
            "status": "ok",
            "order_id": order_id,
            "payment_id": "pay_1",
            "download_link": "https://example.com/p1.zip",
            "product_name": "Product One",
        }
        assert store.get(order_id).status == STATUS_PAID

    def test_repeat_is_idempotent(self, client):
        order_id = _create(client).get_json()["id"]
        sig = sign_payment(order_id, "pay_1", TEST_SECRET)

        first = _verify(client, order_id, "pay_1", sig)
        second = _verify(client, order_id, "pay_1", sig)

        assert second.status_code == 200
        assert second.get_json() == first.get_json()

    def test_bad_signature(self, client, store):
        order_id = _create(client).get_json()["id"]
        res = _verify(client, order_id, "pay_1", "deadbeef")
        assert res.status_code == 400
        assert res.get_json() == {"status": "verification_failed"}
        assert store.get(order_id).status == STATUS_CREATED

    def test_missing_fields(self, client):
        res = client.post("/api/verify-payment", json={})
        assert res.status_code == 400

    def test_unknown_order(self, client):
        sig = sign_payment("order_ghost", "pay_1", TEST_SECRET)
        res = _verify(client, "order_ghost", "pay_1", sig)
        assert res.status_code == 404
        assert res.get_json() == {"status": "error", "message": "Order not found"}


class TestHttpBehaviour:

    def test_cors_headers_on_every_response(self, client):
        for res in (client.get("/api/list-products"), _create(client, "unknown"), client.get("/nope")):
            assert res.headers["Access-Control-Allow-Origin"] == "*"
            assert res.headers["Access-Control-Allow-Methods"] == "GET,POST,OPTIONS"
            assert res.headers["Access-Control-Allow-Headers"] == "Content-Type"

    def test_preflight(self, client):
        res = client.open("/api/create-order", method="OPTIONS")
        assert res.status_code == 204
        assert res.headers["Access-Control-Allow-Origin"] == "*"

    def test_unknown_route(self, client):
        res = client.get("/api/nothing-here")
        assert res.status_code == 404
        assert res.get_json() == {"message": "Invalid endpoint"}

    def test_wrong_method_is_invalid_endpoint(self, client):
        res = client.get("/api/create-order")
        assert res.status_code == 404
        assert res.get_json() == {"message": "Invalid endpoint"}
        assert res.headers["Access-Control-Allow-Origin"] == "*"

    def test_unexpected_error_is_500_without_details(self, manager):
        manager.verify_payment = Mock(side_effect=RuntimeError("secret details"))
        client = create_app(manager).test_client()

        res = _verify(client, "order_1", "pay_1", "sig")

        assert res.status_code == 500
        assert res.get_json() == {"error": "Internal Server Error"}

    def test_health(self, client):
        _create(client)
        res = client.get("/health")
        assert res.status_code == 200
        data = res.get_json()
        assert data["ok"] is True
        assert data["orders"] == {"total": 1, "paid": 0, "created": 1}


class TestWiring:

    def test_build_gateway_simulated(self):
        assert isinstance(build_gateway("simulated"), SimulatedRazorpayClient)

    def test_build_gateway_razorpay(self, monkeypatch):
        monkeypatch.setattr(Config, "RAZORPAY_KEY_ID", "rzp_test_key")
        monkeypatch.setattr(Config, "RAZORPAY_KEY_SECRET", "secret")
        monkeypatch.setattr(Config, "GATEWAY_TIMEOUT_SECONDS", 7.0)
        gateway = build_gateway("razorpay")
        assert isinstance(gateway, RazorpayClient)
        assert gateway.has_credentials()
        assert gateway.timeout == 7.0

    def test_simulated_mode_without_secret_uses_dev_secret(self, monkeypatch):
        monkeypatch.setattr(Config, "RAZORPAY_KEY_SECRET", "")
        monkeypatch.setattr(Config, "CATALOG_FILE", "")
        manager = build_order_manager("simulated")
        assert manager.key_secret == payment_server.DEV_SECRET

    def test_config_validate_reports_missing_keys(self, monkeypatch):
        monkeypatch.setattr(Config, "PAYMENT_MODE", "razorpay")
        monkeypatch.setattr(Config, "RAZORPAY_KEY_ID", "")
        monkeypatch.setattr(Config, "RAZORPAY_KEY_SECRET", "")
        assert Config.validate() == ["RAZORPAY_KEY_ID", "RAZORPAY_KEY_SECRET"]

    def test_serverless_entry_exposes_app(self, monkeypatch):
        monkeypatch.setattr(Config, "PAYMENT_MODE", "simulated")
        monkeypatch.setattr(Config, "CATALOG_FILE", "")
        import importlib
        import api.index

        module = importlib.reload(api.index)
        res = module.app.test_client().get("/api/list-products")
        assert res.status_code == 200


class TestPackaging:

    def test_direct_imports_are_declared(self):
        pyproject = (Path(__file__).resolve().parents[1] / "pyproject.toml").read_text(encoding="utf-8")
        for dist in ("flask", "werkzeug", "requests", "python-dotenv"):
            assert f'"{dist}>=' in pyproject
