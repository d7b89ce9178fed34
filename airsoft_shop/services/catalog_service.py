"""Product Catalog Service — validated, uniqueness-checked catalog CRUD and listing.

Invariants:
    - Validation runs before any gateway write; a failing check writes nothing
    - No two live products share a code (pre-check here, unique index on the database)
    - id, created_at and updated_at are service managed; callers cannot set them
    - create/update/delete run one at a time per service instance
    - product-catalog-changed is emitted after every successful mutation

Design Decisions:
    - The gateway is injected; the service never learns which backend it talks to
    - Update persists only the supplied fields, merged onto the stored record
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone

from airsoft_shop.core.catalog_query import (
    ListingPolicy,
    normalize_filters,
    normalize_pagination,
)
from airsoft_shop.core.domain_types import SERVICE_MANAGED_FIELDS, ChangeEvent, WriteMode
from airsoft_shop.core.errors import ConflictError, ErrorContext, NotFoundError, ValidationError
from airsoft_shop.core.repository_protocols import ChangeNotifier, ProductGateway
from airsoft_shop.core.validate_product import validate_product
from airsoft_shop.services.notify import notify

logger = logging.getLogger(__name__)

PRODUCT_DEFAULTS = {"status": True, "thumbnails": []}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProductCatalogService:
    """Catalog use cases over an injected ProductGateway."""

    def __init__(
        self,
        products: ProductGateway,
        notifier: ChangeNotifier | None = None,
        policy: ListingPolicy | None = None,
    ):
        self.products = products
        self.notifier = notifier
        self.policy = policy or ListingPolicy()
        self._write_lock = asyncio.Lock()

    async def _assert_unique_code(self, code: str, exclude_id: str | None = None) -> None:
        clash = await self.products.find_by_code(code)
        if clash and clash.get("id") != exclude_id:
            raise ConflictError(
                f"code '{code}' already exists", "code",
                ErrorContext(entity_type="Product", entity_id=clash.get("id")),
            )

    async def get_by_id(self, product_id: str) -> dict:
        product = await self.products.get_by_id(str(product_id))
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def get_many(self, product_ids: list[str]) -> dict[str, dict | None]:
        """Current record for each id; absent ids map to None."""
        found = await asyncio.gather(
            *(self.products.get_by_id(pid) for pid in product_ids),
        )
        return dict(zip(product_ids, found))

    async def create(self, data: dict) -> dict:
        """Apply defaults, validate, enforce code uniqueness, persist."""
        if not isinstance(data, dict):
            raise ValidationError("product data must be an object")
        payload = {**PRODUCT_DEFAULTS, **data}
        clean = validate_product(
            payload, WriteMode.CREATE, categories=self.policy.categories,
        )

        async with self._write_lock:
            await self._assert_unique_code(clean["code"])
            now = _now()
            product = {
                "id": str(uuid.uuid4()),
                **clean,
                "created_at": now,
                "updated_at": now,
            }
            created = await self.products.create(product)

        logger.info(
            f"Product {created['id']} created (code={created['code']})",
            extra={"entity_id": created["id"], "operation": "create"},
        )
        await notify(
            self.notifier, ChangeEvent.PRODUCT_CATALOG_CHANGED,
            {"action": "created", "id": created["id"]},
        )
        return created

    async def update(self, product_id: str, data: dict) -> dict:
        """Partial update of the supplied fields only."""
        product_id = str(product_id)
        if not isinstance(data, dict):
            raise ValidationError("update data must be an object")

        async with self._write_lock:
            existing = await self.get_by_id(product_id)
            delta = {k: v for k, v in data.items() if k not in SERVICE_MANAGED_FIELDS}
            if not delta:
                raise ValidationError("no data to update")

            clean = validate_product(
                delta, WriteMode.UPDATE, current=existing,
                categories=self.policy.categories,
            )
            if not clean:
                raise ValidationError("no updatable product fields supplied")
            if "code" in clean and clean["code"] != existing.get("code"):
                await self._assert_unique_code(clean["code"], exclude_id=product_id)

            clean["updated_at"] = _now()
            updated = await self.products.update(product_id, clean)
            if updated is None:
                raise NotFoundError("Product", product_id)

        logger.info(
            f"Product {product_id} updated: {', '.join(sorted(clean))}",
            extra={"entity_id": product_id, "operation": "update"},
        )
        await notify(
            self.notifier, ChangeEvent.PRODUCT_CATALOG_CHANGED,
            {"action": "updated", "id": product_id},
        )
        return updated

    async def delete(self, product_id: str) -> dict:
        product_id = str(product_id)
        async with self._write_lock:
            deleted = await self.products.delete(product_id)
        if deleted is None:
            raise NotFoundError("Product", product_id)

        await notify(
            self.notifier, ChangeEvent.PRODUCT_CATALOG_CHANGED,
            {"action": "deleted", "id": product_id},
        )
        return deleted

    async def list(
        self, filters: dict | None = None, pagination: dict | None = None,
    ) -> dict:
        """Filtered, sorted, paginated listing. Invalid inputs fall back to defaults."""
        return await self.products.paginate(
            normalize_pagination(pagination, self.policy),
            normalize_filters(filters, self.policy),
        )
