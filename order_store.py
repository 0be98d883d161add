# -*- coding: utf-8 -*-
"""
order_store.py

Purpose:
- Single interface for storing and looking up orders.
- Orders live in process memory only; durability is somebody else's job.
- One lock guards both the insert and the Created -> Paid transition, so two
  callbacks for the same order cannot both apply the payment.

Notes:
- Callers receive copies; the only way to change a stored order is through
  the store's own methods.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from checkout.utils import DuplicateOrder, get_logger

logger = get_logger(__name__)

STATUS_CREATED = "created"
STATUS_PAID = "paid"


@dataclass
class Order:
    """Order record (JSON-serialisable types only)."""

    order_id: str  # gateway-assigned id
    product_id: str
    product_name: str  # snapshot at creation
    download_link: str  # snapshot at creation
    customer_name: str
    customer_email: str
    customer_contact: str
    amount: int  # minor units
    currency: str
    receipt: str
    status: str  # created/paid
    created_at: str
    payment_id: Optional[str] = None
    paid_at: Optional[str] = None
    gateway_order: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.status == STATUS_PAID


def utc_now_iso() -> str:
    """UTC ISO string."""
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _copy(order: Order) -> Order:
    return replace(order, gateway_order=dict(order.gateway_order))


class MemoryOrderStore:
    """In-memory order store guarded by a single lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._orders: Dict[str, Order] = {}

    def add(self, order: Order) -> Order:
        with self._lock:
            if order.order_id in self._orders:
                raise DuplicateOrder(
                    f"Order {order.order_id} already exists",
                    stage="Order Store",
                    order_id=order.order_id,
                    product_id=order.product_id,
                )
            self._orders[order.order_id] = _copy(order)
        return _copy(order)

    def get(self, order_id: str) -> Optional[Order]:
        with self._lock:
            o = self._orders.get(order_id)
            return _copy(o) if o else None

    def list_orders(self) -> List[Order]:
        with self._lock:
            return [_copy(o) for o in self._orders.values()]

    def mark_paid(
        self, order_id: str, payment_id: str, paid_at: Optional[str] = None
    ) -> Optional[Tuple[Order, bool]]:
        """
        Move an order to paid.
        Returns:
          None if the order does not exist, otherwise (order, transitioned).
          transitioned is False when the order was already paid; in that case
          nothing is changed.
        """
        with self._lock:
            o = self._orders.get(order_id)
            if o is None:
                return None
            if o.status == STATUS_PAID:
                return _copy(o), False
            # Build the new record first so a failure leaves the old one in place
            updated = replace(
                o,
                status=STATUS_PAID,
                payment_id=payment_id,
                paid_at=paid_at or utc_now_iso(),
            )
            self._orders[order_id] = updated
            return _copy(updated), True

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)
