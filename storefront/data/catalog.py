"""Product catalogue backed by the mock JSON data file."""
import json
import os
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from storefront.data.schemas import Product, ProductCategory, ProductCreate, ProductUpdate
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

CATALOG_FILE_NAME = "products.json"


def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def load_products(file_path: str) -> List[Dict[str, Any]]:
    """Load raw product records from a ``{"data": [...]}`` (or bare list) JSON file."""
    with open(file_path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    if isinstance(payload, dict):
        payload = payload.get("data") or []
    return list(payload)


class ProductCatalog:
    """
    In-memory product collection with optional write-back to a JSON file.

    Lookups accept either the product id or its slug.
    """

    def __init__(self, products: Optional[List[Product]] = None, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._products: List[Product] = list(products or [])
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, path: str, write_path: Optional[str] = None) -> "ProductCatalog":
        raw = load_products(path)
        products = []
        for record in raw:
            try:
                products.append(Product.model_validate(record))
            except ValueError as e:
                logger.warning("Skipping invalid product record %r: %s", record.get("id"), e)
        logger.info("Loaded %d products from %s", len(products), path)
        return cls(products, path=write_path or path)

    @classmethod
    def from_storage(cls, source_path: str, storage_dir: str) -> "ProductCatalog":
        """
        Load the catalogue with admin writes going to ``storage_dir``.

        The first load reads ``source_path`` (the packaged mock data); once a
        working copy exists under ``storage_dir`` it is read instead, and
        ``source_path`` is never written.
        """
        working_path = Path(storage_dir) / CATALOG_FILE_NAME
        if working_path.exists():
            return cls.from_file(str(working_path))
        return cls.from_file(source_path, write_path=str(working_path))

    def all(self) -> List[Product]:
        return list(self._products)

    def get(self, id_or_slug: str) -> Optional[Product]:
        for product in self._products:
            if product.id == id_or_slug or product.slug == id_or_slug:
                return product
        return None

    def get_by_sku(self, sku: str) -> Optional[Product]:
        for product in self._products:
            if product.sku == sku:
                return product
        return None

    def categories(self) -> List[ProductCategory]:
        """Distinct categories with their product counts, in first-seen order."""
        counts: Dict[str, int] = {}
        seen: Dict[str, ProductCategory] = {}
        for product in self._products:
            if product.category is None:
                continue
            key = product.category.id or product.category.slug
            counts[key] = counts.get(key, 0) + 1
            seen.setdefault(key, product.category)
        return [
            category.model_copy(update={"product_count": counts[key]})
            for key, category in seen.items()
        ]

    def create(self, payload: ProductCreate) -> Product:
        """Add a product; the caller checks SKU uniqueness."""
        now = datetime.now(timezone.utc)
        record = payload.model_dump()
        record["id"] = f"prod-{uuid4().hex[:8]}"
        record["slug"] = record.get("slug") or slugify(payload.title)
        record["created_at"] = now
        record["updated_at"] = now
        product = Product.model_validate(record)
        with self._lock:
            self._products.append(product)
            self._write()
        return product

    def update(self, product_id: str, changes: ProductUpdate) -> Optional[Product]:
        """Apply only the provided fields; returns None for an unknown id."""
        update_data = changes.model_dump(exclude_unset=True)
        with self._lock:
            for index, product in enumerate(self._products):
                if product.id != product_id:
                    continue
                record = product.model_dump()
                record.update(update_data)
                record["updated_at"] = datetime.now(timezone.utc)
                updated = Product.model_validate(record)
                self._products[index] = updated
                self._write()
                return updated
        return None

    def delete(self, product_id: str) -> bool:
        with self._lock:
            remaining = [p for p in self._products if p.id != product_id]
            if len(remaining) == len(self._products):
                return False
            self._products = remaining
            self._write()
            return True

    def _write(self):
        if self.path is None:
            return
        payload = {"data": [p.model_dump(mode="json") for p in self._products]}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        os.replace(tmp_path, self.path)
