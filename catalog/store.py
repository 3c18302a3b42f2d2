# catalog/store.py
"""
File-backed product store.

Every public operation reloads the whole collection from the backing file,
works on it in memory and, when it mutates, rewrites the whole file. The file
is the only durable state; a ProductManager is cheap and meant to be created
per call or per request.
"""
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import DuplicateCodeError, NotFoundError, PersistenceError
from .models import ProductField, build_product, validate_field

logger = logging.getLogger(__name__)

# ---------------------------
# Per-file locks, one set per event loop
# ---------------------------
_LOCKS: Dict[asyncio.AbstractEventLoop, Dict[str, asyncio.Lock]] = {}


def _get_lock(path: Path) -> asyncio.Lock:
    # an asyncio.Lock belongs to the loop it first waits on
    for closed in [loop for loop in _LOCKS if loop.is_closed()]:
        del _LOCKS[closed]
    locks = _LOCKS.setdefault(asyncio.get_running_loop(), {})
    key = str(path.resolve())
    if key not in locks:
        locks[key] = asyncio.Lock()
    return locks[key]


def _valid_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ProductManager:
    def __init__(self, path: Union[str, Path], products: Optional[List[Dict[str, Any]]] = None):
        self.path = Path(path)
        self.products: List[Dict[str, Any]] = list(products) if products else []

    # ---------------------------
    # File I/O
    # ---------------------------
    def _read(self) -> List[Dict[str, Any]]:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, list) or not all(isinstance(p, dict) for p in data):
            raise ValueError("expected a JSON array of product objects")
        for p in data:
            if not _valid_id(p.get("id")):
                raise ValueError(f"product {p.get('code')!r} has no integer id (got {p.get('id')!r})")
        return data

    def _write(self, payload: str) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    async def _load(self) -> List[Dict[str, Any]]:
        try:
            self.products = await asyncio.to_thread(self._read)
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Error loading products from {self.path}: {exc}") from exc
        logger.debug("Loaded %d products from %s", len(self.products), self.path)
        return self.products

    async def _save(self) -> None:
        try:
            payload = json.dumps(self.products, indent=2, ensure_ascii=False)
            await asyncio.to_thread(self._write, payload)
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Error saving products to {self.path}: {exc}") from exc

    def _next_id(self) -> int:
        return max((p["id"] for p in self.products), default=0) + 1

    # ---------------------------
    # Public operations
    # ---------------------------
    async def add_product(self, code, title, description, price, thumbnail, stock) -> Dict[str, Any]:
        product = build_product(
            code=code,
            title=title,
            description=description,
            price=price,
            thumbnail=thumbnail,
            stock=stock,
        )

        async with _get_lock(self.path):
            await self._load()
            if any(p.get("code") == product.code for p in self.products):
                raise DuplicateCodeError(product.code)

            record = product.with_id(self._next_id())
            self.products.append(record)
            await self._save()

        logger.info("Added product id=%s code=%r to %s", record["id"], product.code, self.path)
        return record

    async def get_products(self) -> List[Dict[str, Any]]:
        async with _get_lock(self.path):
            return await self._load()

    async def get_product_by_id(self, product_id: int) -> Optional[Dict[str, Any]]:
        async with _get_lock(self.path):
            await self._load()
        return next((p for p in self.products if p.get("id") == product_id), None)

    async def update_product(self, product_id: int, field: Union[str, ProductField], value: Any) -> Dict[str, Any]:
        async with _get_lock(self.path):
            await self._load()

            matches = [i for i, p in enumerate(self.products) if p.get("id") == product_id]
            if not matches:
                raise NotFoundError(product_id)

            target = ProductField.parse(field)
            value = validate_field(target, value)
            if target is ProductField.CODE and any(
                p.get("code") == value and p.get("id") != product_id for p in self.products
            ):
                raise DuplicateCodeError(value)

            for i in matches:
                updated = dict(self.products[i])
                updated[target.value] = value
                self.products[i] = updated
            await self._save()

        logger.info("Updated product id=%s field=%s in %s", product_id, target.value, self.path)
        return self.products[matches[0]]

    async def delete_product(self, product_id: int) -> Dict[str, Any]:
        async with _get_lock(self.path):
            await self._load()

            survivors: List[Dict[str, Any]] = []
            removed: List[Dict[str, Any]] = []
            for p in self.products:
                (removed if p.get("id") == product_id else survivors).append(p)

            if not removed:
                raise NotFoundError(product_id)

            self.products = survivors
            await self._save()

        logger.info("Deleted product id=%s from %s", product_id, self.path)
        return removed[0]
