"""File Gateways — ProductGateway / CartGateway over JSON collection files.

Invariants:
    - Every mutation is read-whole-collection, modify in memory, rewrite-whole-collection
    - Storage order is insertion order; pagination ties keep that order
    - Records handed out are freshly parsed copies; callers cannot alias stored state

Design Decisions:
    - Filtering, sorting and slicing reuse the pure catalog_query functions
    - Cart item operations mirror the database gateway's single-document
      operators so both backends behave identically for the Cart Service
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from airsoft_shop.core.catalog_query import (
    PageRequest,
    ProductFilters,
    filter_products,
    paginate_records,
)
from airsoft_shop.infrastructure.file_store import JsonCollectionFile

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _index_of(records: list[dict], record_id: str) -> int:
    for index, record in enumerate(records):
        if record.get("id") == str(record_id):
            return index
    return -1


class _FileCollectionGateway:
    """CRUD shared by the product and cart file gateways."""

    entity_type = "record"

    def __init__(self, path: str | Path):
        self.store = JsonCollectionFile(path, self.entity_type)

    async def create(self, record: dict) -> dict:
        def change(records: list[dict]):
            records.append(record)
            return record, True

        created = await self.store.mutate(change, record.get("id"))
        logger.info(
            f"Created {self.entity_type} {created['id']}",
            extra={"entity_id": created["id"], "operation": "create"},
        )
        return created

    async def get_by_id(self, record_id: str) -> dict | None:
        records = await self.store.read_all(str(record_id))
        index = _index_of(records, record_id)
        return records[index] if index >= 0 else None

    async def update(self, record_id: str, partial: dict) -> dict | None:
        def change(records: list[dict]):
            index = _index_of(records, record_id)
            if index < 0:
                return None, False
            records[index] = {**records[index], **partial}
            return records[index], True

        return await self.store.mutate(change, str(record_id))

    async def delete(self, record_id: str) -> dict | None:
        def change(records: list[dict]):
            index = _index_of(records, record_id)
            if index < 0:
                return None, False
            return records.pop(index), True

        deleted = await self.store.mutate(change, str(record_id))
        if deleted:
            logger.info(
                f"Deleted {self.entity_type} {record_id}",
                extra={"entity_id": str(record_id), "operation": "delete"},
            )
        return deleted

    async def bulk_load(self, records: list[dict]) -> int:
        async with self.store.lock:
            await self.store.write_all(list(records))
        return len(records)


class FileProductGateway(_FileCollectionGateway):
    entity_type = "product"

    async def get_all(self, filters: ProductFilters | None = None) -> list[dict]:
        return filter_products(await self.store.read_all(), filters)

    async def find_by_code(self, code: str) -> dict | None:
        for product in await self.store.read_all():
            if product.get("code") == code:
                return product
        return None

    async def paginate(
        self, request: PageRequest, filters: ProductFilters | None = None,
    ) -> dict:
        return paginate_records(await self.store.read_all(), request, filters)


class FileCartGateway(_FileCollectionGateway):
    entity_type = "cart"

    async def get_all(self) -> list[dict]:
        return await self.store.read_all()

    async def _change_items(self, cart_id: str, apply) -> dict | None:
        def change(records: list[dict]):
            index = _index_of(records, cart_id)
            if index < 0:
                return None, False
            cart = records[index]
            cart["items"] = apply(dict(cart.get("items") or {}))
            cart["updated_at"] = _now()
            return cart, True

        return await self.store.mutate(change, str(cart_id))

    async def set_item(self, cart_id: str, product_id: str, quantity: int) -> dict | None:
        def apply(items: dict) -> dict:
            items[product_id] = quantity
            return items

        return await self._change_items(cart_id, apply)

    async def remove_item(self, cart_id: str, product_id: str) -> dict | None:
        def apply(items: dict) -> dict:
            items.pop(product_id, None)
            return items

        return await self._change_items(cart_id, apply)

    async def replace_items(self, cart_id: str, items: dict[str, int]) -> dict | None:
        return await self._change_items(cart_id, lambda _: dict(items))
