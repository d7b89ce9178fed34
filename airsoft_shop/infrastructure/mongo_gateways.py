"""MongoDB Gateways — ProductGateway / CartGateway over MongoDB collections.

Invariants:
    - Filtering, sorting and paging run in the database (find + count_documents)
    - Sort ties are broken by _id ascending (insertion order), matching the file backend
    - Cart item mutations are single-document atomic operators ($set / $unset on
      items.<product_id>); no whole-collection rewrites
    - _id never leaves the gateway; records are keyed by their own "id" field

Design Decisions:
    - Query builders are module-level pure functions so they can be tested
      without a server
    - Case-insensitive collation on paginate so text sort order matches the
      file backend's lower-cased comparison
"""

import logging
import re
from datetime import datetime, timezone

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collation import Collation, CollationStrength

from airsoft_shop.core.catalog_query import PageRequest, ProductFilters, build_page
from airsoft_shop.core.domain_types import SortOrder
from airsoft_shop.core.errors import ValidationError
from airsoft_shop.infrastructure.mongo_database import MongoManager, translate_errors

logger = logging.getLogger(__name__)

NO_MONGO_ID = {"_id": 0}
CASE_INSENSITIVE = Collation(locale="en", strength=CollationStrength.SECONDARY)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ─── Query builders ──────────────────────────────────────────────

def build_product_filter(filters: ProductFilters | None) -> dict:
    """Translate ProductFilters into a MongoDB query document."""
    query: dict = {}
    if filters is None:
        return query
    if filters.category is not None:
        query["category"] = filters.category
    if filters.status is not None:
        query["status"] = filters.status
    price: dict = {}
    if filters.min_price is not None:
        price["$gte"] = filters.min_price
    if filters.max_price is not None:
        price["$lte"] = filters.max_price
    if price:
        query["price"] = price
    if filters.query:
        pattern = {"$regex": re.escape(filters.query), "$options": "i"}
        query["$or"] = [{"title": pattern}, {"description": pattern}]
    return query


def build_sort(request: PageRequest) -> list[tuple[str, int]]:
    direction = DESCENDING if request.order == SortOrder.DESC.value else ASCENDING
    return [(request.sort, direction), ("_id", ASCENDING)]


def item_path(product_id: str) -> str:
    """Dotted path for one cart item; rejects ids MongoDB cannot use as keys."""
    if not product_id or "." in product_id or product_id.startswith("$"):
        raise ValidationError(f"product id '{product_id}' cannot be stored as a cart item")
    return f"items.{product_id}"


# ─── Gateways ────────────────────────────────────────────────────

class _MongoCollectionGateway:
    entity_type = "record"

    def __init__(self, manager: MongoManager, collection):
        self.manager = manager
        self.collection = collection

    async def create(self, record: dict) -> dict:
        async with translate_errors("create", self.entity_type, record.get("id")):
            # insert_one adds _id to the document it is given
            await self.collection.insert_one(dict(record))
        logger.info(
            f"Created {self.entity_type} {record['id']}",
            extra={"entity_id": record["id"], "operation": "create"},
        )
        return record

    async def get_by_id(self, record_id: str) -> dict | None:
        async with translate_errors("get", self.entity_type, record_id):
            return await self.collection.find_one({"id": str(record_id)}, NO_MONGO_ID)

    async def update(self, record_id: str, partial: dict) -> dict | None:
        async with translate_errors("update", self.entity_type, record_id):
            return await self.collection.find_one_and_update(
                {"id": str(record_id)},
                {"$set": partial},
                projection=NO_MONGO_ID,
                return_document=ReturnDocument.AFTER,
            )

    async def delete(self, record_id: str) -> dict | None:
        async with translate_errors("delete", self.entity_type, record_id):
            deleted = await self.collection.find_one_and_delete(
                {"id": str(record_id)}, projection=NO_MONGO_ID,
            )
        if deleted:
            logger.info(
                f"Deleted {self.entity_type} {record_id}",
                extra={"entity_id": str(record_id), "operation": "delete"},
            )
        return deleted

    async def bulk_load(self, records: list[dict]) -> int:
        async with translate_errors("bulk_load", self.entity_type):
            await self.collection.delete_many({})
            if records:
                await self.collection.insert_many([dict(r) for r in records])
        return len(records)

    async def _find(self, query: dict, **options) -> list[dict]:
        async with translate_errors("find", self.entity_type):
            cursor = self.collection.find(query, NO_MONGO_ID, **options)
            return await cursor.to_list(length=None)


class MongoProductGateway(_MongoCollectionGateway):
    entity_type = "product"

    def __init__(self, manager: MongoManager):
        super().__init__(manager, manager.products)

    async def get_all(self, filters: ProductFilters | None = None) -> list[dict]:
        return await self._find(
            build_product_filter(filters), sort=[("_id", ASCENDING)],
        )

    async def find_by_code(self, code: str) -> dict | None:
        async with translate_errors("find_by_code", self.entity_type):
            return await self.collection.find_one({"code": code}, NO_MONGO_ID)

    async def paginate(
        self, request: PageRequest, filters: ProductFilters | None = None,
    ) -> dict:
        query = build_product_filter(filters)
        items = await self._find(
            query,
            sort=build_sort(request),
            skip=(request.page - 1) * request.limit,
            limit=request.limit,
            collation=CASE_INSENSITIVE,
        )
        async with translate_errors("count", self.entity_type):
            total = await self.collection.count_documents(query)
        return build_page(items, request, total)


class MongoCartGateway(_MongoCollectionGateway):
    entity_type = "cart"

    def __init__(self, manager: MongoManager):
        super().__init__(manager, manager.carts)

    async def get_all(self) -> list[dict]:
        return await self._find({}, sort=[("_id", ASCENDING)])

    async def _apply(self, cart_id: str, update: dict, operation: str) -> dict | None:
        update.setdefault("$set", {})["updated_at"] = _now()
        async with translate_errors(operation, self.entity_type, cart_id):
            return await self.collection.find_one_and_update(
                {"id": str(cart_id)},
                update,
                projection=NO_MONGO_ID,
                return_document=ReturnDocument.AFTER,
            )

    async def set_item(self, cart_id: str, product_id: str, quantity: int) -> dict | None:
        return await self._apply(
            cart_id, {"$set": {item_path(product_id): quantity}}, "set_item",
        )

    async def remove_item(self, cart_id: str, product_id: str) -> dict | None:
        return await self._apply(
            cart_id, {"$unset": {item_path(product_id): ""}}, "remove_item",
        )

    async def replace_items(self, cart_id: str, items: dict[str, int]) -> dict | None:
        for product_id in items:
            item_path(product_id)
        return await self._apply(
            cart_id, {"$set": {"items": dict(items)}}, "replace_items",
        )
