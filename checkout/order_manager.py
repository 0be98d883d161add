# -*- coding: utf-8 -*-
"""
order_manager.py

Order lifecycle:
- create_order: resolve the product, ask the gateway for an order id, store a
  "created" order with a snapshot of the product name and download link.
- verify_payment: check the callback's HMAC-SHA256 signature over
  "<order_id>|<payment_id>", then move the order to "paid" exactly once.

A second verified callback for an already paid order returns the same result
without touching the stored timestamps.
"""

from __future__ import annotations

import hashlib
import hmac
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from order_store import STATUS_CREATED, MemoryOrderStore, Order, utc_now_iso
from razorpay_client import RazorpayError

from .catalog import Catalog
from .utils import GatewayFailure, InvalidProduct, ProductNotFound, get_logger, handle_errors

logger = get_logger(__name__)

# Razorpay caps receipts at 40 characters
MAX_RECEIPT_LENGTH = 40


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    SIGNATURE_INVALID = "signature_invalid"
    ORDER_NOT_FOUND = "order_not_found"


@dataclass(frozen=True)
class VerificationResult:
    status: VerificationStatus
    order_id: str
    payment_id: str = ""
    download_link: str = ""
    product_name: str = ""

    @property
    def ok(self) -> bool:
        return self.status is VerificationStatus.VERIFIED


def sign_payment(order_id: str, payment_id: str, secret: str) -> str:
    """Hex HMAC-SHA256 of "<order_id>|<payment_id>", as the gateway signs callbacks."""
    body = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    expected = sign_payment(order_id, payment_id, secret)
    # compare_digest on bytes: str arguments must be ASCII-only
    return hmac.compare_digest(expected.encode("utf-8"), str(signature or "").encode("utf-8"))


def make_receipt(product_id: str) -> str:
    """Receipt token: product id, epoch millis and a random suffix."""
    millis = int(time.time() * 1000)
    suffix = uuid.uuid4().hex[:8]
    prefix = product_id[: MAX_RECEIPT_LENGTH - len(str(millis)) - len(suffix) - 2]
    return f"{prefix}_{millis}_{suffix}"


class OrderManager:
    """Creates orders against the catalog and applies verified payments."""

    def __init__(
        self,
        catalog: Catalog,
        store: MemoryOrderStore,
        gateway,
        key_secret: str,
        currency: str = "INR",
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.catalog = catalog
        self.store = store
        self.gateway = gateway
        self.key_secret = key_secret
        self.currency = currency
        self.clock = clock

    @handle_errors(stage="Create Order")
    def create_order(
        self,
        product_id: str,
        customer_name: str = "",
        customer_email: str = "",
        customer_contact: str = "",
    ) -> Order:
        try:
            product = self.catalog.get_product(product_id)
        except ProductNotFound as e:
            raise InvalidProduct(
                "Invalid course selected",
                stage="Create Order",
                product_id=product_id,
                original_exception=e,
            ) from e

        amount = product.amount_minor
        receipt = make_receipt(product.id)
        notes = {
            "product": product.id,
            "product_name": product.name,
            "download_link": product.download_link,
            "customer_name": customer_name,
            "customer_email": customer_email,
            "customer_contact": customer_contact,
        }

        try:
            gateway_order = self.gateway.create_order(
                amount=amount, currency=self.currency, receipt=receipt, notes=notes
            )
        except RazorpayError as e:
            raise GatewayFailure(
                "Payment gateway failed to create the order",
                stage="Create Order",
                product_id=product.id,
                original_exception=e,
            ) from e

        order = Order(
            order_id=str(gateway_order["id"]),
            product_id=product.id,
            product_name=product.name,
            download_link=product.download_link,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_contact=customer_contact,
            amount=amount,
            currency=self.currency,
            receipt=receipt,
            status=STATUS_CREATED,
            created_at=self.clock(),
            gateway_order=dict(gateway_order),
        )
        stored = self.store.add(order)
        logger.info(f"Order created: {stored.order_id} product={product.id} amount={amount} {self.currency}")
        return stored

    def verify_payment(self, order_id: str, payment_id: str, signature: str) -> VerificationResult:
        order_id = order_id or ""
        payment_id = payment_id or ""

        if not self.key_secret:
            logger.error("No signing secret configured; rejecting payment verification")
            return VerificationResult(VerificationStatus.SIGNATURE_INVALID, order_id, payment_id)

        if not verify_signature(order_id, payment_id, signature, self.key_secret):
            logger.warning(f"Signature verification failed for order {order_id!r} payment {payment_id!r}")
            return VerificationResult(VerificationStatus.SIGNATURE_INVALID, order_id, payment_id)

        result = self.store.mark_paid(order_id, payment_id, paid_at=self.clock())
        if result is None:
            logger.warning(
                f"Suspicious callback: valid signature for unknown order {order_id!r} (payment {payment_id!r})"
            )
            return VerificationResult(VerificationStatus.ORDER_NOT_FOUND, order_id, payment_id)

        order, transitioned = result
        if transitioned:
            logger.info(f"Order paid: {order_id} payment={payment_id}")
        elif order.payment_id != payment_id:
            logger.warning(
                f"Order {order_id} already paid by {order.payment_id}; ignoring payment {payment_id}"
            )
        else:
            logger.info(f"Repeated verification for paid order {order_id}")

        return VerificationResult(
            VerificationStatus.VERIFIED,
            order_id=order.order_id,
            payment_id=order.payment_id or payment_id,
            download_link=order.download_link,
            product_name=order.product_name,
        )

    def get_order(self, order_id: str) -> Optional[Order]:
        return self.store.get(order_id)

    def orders_summary(self) -> Dict[str, Any]:
        orders = self.store.list_orders()
        paid = sum(1 for o in orders if o.is_paid)
        return {"total": len(orders), "paid": paid, "created": len(orders) - paid}
