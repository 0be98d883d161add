# -*- coding: utf-8 -*-
"""
catalog.py

Read-only product catalog.
- Products are frozen dataclasses, validated once when the catalog is built.
- The built-in catalog can be replaced by a JSON file (CATALOG_FILE).
- Lookups never mutate anything.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .utils import CatalogError, ProductNotFound, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Product:
    """A purchasable digital product. price is in major currency units."""

    id: str
    name: str
    price: int
    download_link: str
    image: str = ""
    description: str = ""
    read_more_link: str = ""

    @property
    def amount_minor(self) -> int:
        """Price in minor units (paise/cents), as charged by the gateway."""
        return self.price * 100

    def summary(self) -> Dict[str, Any]:
        """Public listing shape (no download link)."""
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "image": self.image,
            "description": self.description,
            "readMoreLink": self.read_more_link,
        }

    def detail(self) -> Dict[str, Any]:
        data = self.summary()
        data["downloadLink"] = self.download_link
        return data


# Built-in catalog (insertion order is the listing order)
DEFAULT_PRODUCTS: List[Dict[str, Any]] = [
    {
        "id": "full_vault",
        "name": "Full Vault Access",
        "price": 1,
        "download_link": "https://example.com/downloads/full-vault.zip",
        "image": "https://example.com/images/full-vault.png",
        "description": "Every note in the vault: finance, investing and business playbooks in one bundle.",
        "read_more_link": "https://example.com/full-vault",
    },
    {
        "id": "wealth_notes",
        "name": "Wealth Building Notes",
        "price": 79,
        "download_link": "https://example.com/downloads/wealth-notes.zip",
        "image": "https://example.com/images/wealth-notes.png",
        "description": "Practical notes on saving, compounding and building long-term wealth.",
        "read_more_link": "https://example.com/wealth-notes",
    },
    {
        "id": "digital_business",
        "name": "Digital Business Notes",
        "price": 79,
        "download_link": "https://example.com/downloads/digital-business.zip",
        "image": "https://example.com/images/digital-business.png",
        "description": "Notes on starting and scaling an online business.",
        "read_more_link": "https://example.com/digital-business",
    },
    {
        "id": "agency_growth",
        "name": "Agency Growth Notes",
        "price": 79,
        "download_link": "https://example.com/downloads/agency-growth.zip",
        "image": "https://example.com/images/agency-growth.png",
        "description": "Client acquisition and marketing frameworks for small agencies.",
        "read_more_link": "https://example.com/agency-growth",
    },
]

# JSON files may use the frontend's camelCase keys
_KEY_ALIASES = {
    "downloadLink": "download_link",
    "readMoreLink": "read_more_link",
}


def _product_from_dict(raw: Dict[str, Any]) -> Product:
    if not isinstance(raw, dict):
        raise CatalogError(f"Catalog entry must be an object, got {type(raw).__name__}", stage="Catalog Load")
    data = {_KEY_ALIASES.get(k, k): v for k, v in raw.items()}
    product_id = str(data.get("id") or "").strip()
    if not product_id:
        raise CatalogError("Catalog entry is missing an id", stage="Catalog Load")

    price = data.get("price")
    # bool is an int subclass; reject it explicitly
    if isinstance(price, bool) or not isinstance(price, int) or price <= 0:
        raise CatalogError(
            f"Price must be a positive integer, got {price!r}",
            stage="Catalog Load",
            product_id=product_id,
        )
    for field_name in ("name", "download_link"):
        if not str(data.get(field_name) or "").strip():
            raise CatalogError(
                f"Missing required field '{field_name}'",
                stage="Catalog Load",
                product_id=product_id,
            )

    return Product(
        id=product_id,
        name=str(data["name"]),
        price=price,
        download_link=str(data["download_link"]),
        image=str(data.get("image") or ""),
        description=str(data.get("description") or ""),
        read_more_link=str(data.get("read_more_link") or ""),
    )


class Catalog:
    """Immutable mapping of product id to Product."""

    def __init__(self, products: Iterable[Product]):
        by_id: Dict[str, Product] = {}
        for p in products:
            if p.id in by_id:
                raise CatalogError(f"Duplicate product id: {p.id}", stage="Catalog Load", product_id=p.id)
            by_id[p.id] = p
        self._products = by_id

    @classmethod
    def from_dicts(cls, items: Iterable[Dict[str, Any]]) -> "Catalog":
        return cls(_product_from_dict(item) for item in items)

    @classmethod
    def from_file(cls, path: Path) -> "Catalog":
        """Load a catalog from a JSON list (or {"products": [...]})."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CatalogError(f"Cannot read catalog file {path}: {e}", stage="Catalog Load", original_exception=e) from e
        if isinstance(data, dict) and "products" in data:
            data = data["products"]
        if not isinstance(data, list):
            raise CatalogError("Catalog file must contain a list of products", stage="Catalog Load")
        return cls.from_dicts(data)

    def list_products(self) -> List[Product]:
        return list(self._products.values())

    def get_product(self, product_id: str) -> Product:
        try:
            return self._products[product_id]
        except (KeyError, TypeError):
            raise ProductNotFound(f"Unknown product id: {product_id}", stage="Catalog", product_id=product_id)

    def __len__(self) -> int:
        return len(self._products)


def load_catalog(path: Optional[str] = None) -> Catalog:
    """Catalog from a JSON file if given, otherwise the built-in one."""
    if path:
        catalog = Catalog.from_file(Path(path))
        logger.info(f"Loaded {len(catalog)} products from {path}")
        return catalog
    return Catalog.from_dicts(DEFAULT_PRODUCTS)
