# -*- coding: utf-8 -*-
"""
backend/payment_server.py

Purpose:
- Flask API for the checkout flow: list products, create a Razorpay order,
  verify the payment callback and hand back the download link.
- Without gateway keys (PAYMENT_MODE=simulated) orders are minted locally so
  the flow can be exercised end to end.

API:
- GET     /health
- OPTIONS /api/*  (preflight)
- GET     /api/list-products   (alias /api/get-notes)
- GET     /api/product-detail/<product_id>
- POST    /api/create-order
- POST    /api/verify-payment

Notes:
- The order store is created with the app and handed to the OrderManager;
  there is no module-level state.
- Error bodies never carry stack traces or secrets.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from checkout.catalog import load_catalog
from checkout.config import Config
from checkout.order_manager import OrderManager, VerificationStatus
from checkout.utils import GatewayFailure, InvalidProduct, PaymentError, ProductNotFound, get_logger
from order_store import MemoryOrderStore
from razorpay_client import RazorpayClient, SimulatedRazorpayClient

logger = get_logger(__name__)

# Signing secret for simulated mode when none is configured
DEV_SECRET = "DEV_ONLY_CHANGE_ME"


# -----------------------------
# Wiring
# -----------------------------


def build_gateway(mode: Optional[str] = None):
    """Gateway client for the configured payment mode."""
    mode = (mode or Config.PAYMENT_MODE or "razorpay").lower()
    if mode == "simulated":
        return SimulatedRazorpayClient()
    return RazorpayClient(
        key_id=Config.RAZORPAY_KEY_ID,
        key_secret=Config.RAZORPAY_KEY_SECRET,
        base_url=Config.RAZORPAY_BASE_URL,
        timeout=Config.GATEWAY_TIMEOUT_SECONDS,
    )


def build_order_manager(mode: Optional[str] = None) -> OrderManager:
    Config.validate()
    mode = (mode or Config.PAYMENT_MODE or "razorpay").lower()
    key_secret = Config.RAZORPAY_KEY_SECRET
    if not key_secret and mode == "simulated":
        key_secret = DEV_SECRET
        logger.warning("RAZORPAY_KEY_SECRET missing; simulated mode signs with a development secret.")
    return OrderManager(
        catalog=load_catalog(Config.CATALOG_FILE or None),
        store=MemoryOrderStore(),
        gateway=build_gateway(mode),
        key_secret=key_secret,
        currency=Config.PAYMENT_CURRENCY,
    )


# -----------------------------
# Helpers: CORS / JSON body
# -----------------------------


def _cors(resp: Response) -> Response:
    """Attach CORS headers."""
    resp.headers["Access-Control-Allow-Origin"] = "*"
    resp.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
    resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return resp


def _json_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _field(body: Dict[str, Any], key: str) -> str:
    value = body.get(key)
    return "" if value is None else str(value)


# -----------------------------
# App factory
# -----------------------------


def create_app(manager: Optional[OrderManager] = None) -> Flask:
    app = Flask(__name__)
    app.config["ORDER_MANAGER"] = manager or build_order_manager()

    def _manager() -> OrderManager:
        return app.config["ORDER_MANAGER"]

    @app.before_request
    def _handle_options():
        """Answer OPTIONS preflight before routing."""
        if request.method == "OPTIONS":
            return Response(status=204)

    @app.after_request
    def _add_cors(resp: Response) -> Response:
        return _cors(resp)

    @app.errorhandler(404)
    def _not_found(_e):
        return jsonify({"message": "Invalid endpoint"}), 404

    @app.errorhandler(405)
    def _method_not_allowed(_e):
        # Unrouted method on a known path is answered like an unknown path
        return jsonify({"message": "Invalid endpoint"}), 404

    @app.errorhandler(Exception)
    def _internal_error(e):
        if isinstance(e, HTTPException):
            return jsonify({"message": e.description}), e.code
        logger.exception(f"API Error: {e}")
        return jsonify({"error": "Internal Server Error"}), 500

    @app.get("/health")
    def health():
        """Health check"""
        return jsonify(
            {
                "ok": True,
                "service": "payment_server",
                "mode": Config.PAYMENT_MODE,
                "orders": _manager().orders_summary(),
            }
        )

    @app.get("/api/list-products")
    @app.get("/api/get-notes")
    def list_products():
        return jsonify([p.summary() for p in _manager().catalog.list_products()])

    @app.get("/api/product-detail/<product_id>")
    def product_detail(product_id: str):
        try:
            product = _manager().catalog.get_product(product_id)
        except ProductNotFound:
            return jsonify({"error": "Product not found"}), 404
        return jsonify(product.detail())

    @app.post("/api/create-order")
    def create_order():
        body = _json_body()
        try:
            order = _manager().create_order(
                _field(body, "selectedNote"),
                customer_name=_field(body, "name"),
                customer_email=_field(body, "email"),
                customer_contact=_field(body, "contact"),
            )
        except InvalidProduct:
            return jsonify({"error": "Invalid course selected"}), 400
        except GatewayFailure:
            return jsonify({"error": "Payment gateway unavailable"}), 500
        except PaymentError:
            return jsonify({"error": "Internal Server Error"}), 500
        return jsonify(order.gateway_order)

    @app.post("/api/verify-payment")
    def verify_payment():
        body = _json_body()
        result = _manager().verify_payment(
            _field(body, "razorpay_order_id"),
            _field(body, "razorpay_payment_id"),
            _field(body, "razorpay_signature"),
        )

        if result.status is VerificationStatus.SIGNATURE_INVALID:
            return jsonify({"status": "verification_failed"}), 400
        if result.status is VerificationStatus.ORDER_NOT_FOUND:
            return jsonify({"status": "error", "message": "Order not found"}), 404

        return jsonify(
            {
                "status": "ok",
                "order_id": result.order_id,
                "payment_id": result.payment_id,
                "download_link": result.download_link,
                "product_name": result.product_name,
            }
        )

    return app


# -----------------------------
# Entrypoint
# -----------------------------


def main() -> None:
    """Run the server (HOST/PORT from the environment, default 127.0.0.1:5000)."""
    app = create_app()
    app.run(host=Config.HOST, port=Config.PORT, debug=False)


if __name__ == "__main__":
    main()
