# -*- coding: utf-8 -*-
"""
razorpay_client.py

Purpose:
- Thin wrapper around the Razorpay Orders API (create an order).
- Without API keys, SimulatedRazorpayClient mints orders locally so the whole
  checkout flow can run offline.

Reference:
- Razorpay uses HTTP basic auth (key_id:key_secret).
- Every call has a timeout; a timeout is reported like any other failure.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Dict, Optional

import requests

RAZORPAY_BASE_URL = "https://api.razorpay.com/v1"


class RazorpayError(RuntimeError):
    pass


class RazorpayClient:
    """Razorpay REST client."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = RAZORPAY_BASE_URL,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = (base_url or RAZORPAY_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def has_credentials(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create a gateway order; amount is in minor units."""
        if not self.has_credentials():
            raise RazorpayError("Missing RAZORPAY_KEY_ID / RAZORPAY_KEY_SECRET")

        payload: Dict[str, Any] = {
            "amount": int(amount),
            "currency": currency,
            "receipt": receipt,
        }
        if notes:
            payload["notes"] = notes

        try:
            r = self.session.post(
                f"{self.base_url}/orders",
                auth=(self.key_id, self.key_secret),
                json=payload,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise RazorpayError(f"Razorpay create_order timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise RazorpayError(f"Razorpay create_order request failed: {e}") from e

        if r.status_code >= 400:
            raise RazorpayError(
                f"Razorpay create_order failed: {r.status_code} {r.text}"
            )
        try:
            data = r.json()
        except ValueError as e:
            raise RazorpayError("Razorpay create_order returned invalid JSON") from e
        if not data.get("id"):
            raise RazorpayError("Razorpay create_order response has no order id")
        return data


class SimulatedRazorpayClient:
    """Offline stand-in that answers like the Orders API."""

    def has_credentials(self) -> bool:
        return True

    def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        return {
            "id": f"order_{uuid.uuid4().hex[:14]}",
            "entity": "order",
            "amount": int(amount),
            "amount_paid": 0,
            "amount_due": int(amount),
            "currency": currency,
            "receipt": receipt,
            "status": "created",
            "attempts": 0,
            "notes": dict(notes or {}),
            "created_at": int(time.time()),
        }
