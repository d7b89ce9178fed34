"""MongoDB Connection Manager — async client lifecycle, indexes and error mapping.

Invariants:
    - One AsyncMongoClient per process, created at startup and closed on shutdown
    - products.code and products.id / carts.id carry unique indexes
    - Every driver exception is mapped: DuplicateKeyError -> ConflictError,
      any other PyMongoError -> InternalError (core/errors.py)

Design Decisions:
    - pymongo's native asyncio client: no thread offloading for database IO
    - translate_errors as an async context manager, so gateways wrap each
      round-trip the same way the session manager wraps SQL sessions
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from airsoft_shop.core.errors import ConflictError, ErrorContext, InternalError

logger = logging.getLogger(__name__)

PRODUCTS_COLLECTION = "products"
CARTS_COLLECTION = "carts"


@asynccontextmanager
async def translate_errors(
    operation: str, entity_type: str, entity_id: str | None = None,
) -> AsyncGenerator[None, None]:
    """Map driver failures onto the shop error taxonomy."""
    try:
        yield
    except DuplicateKeyError as e:
        key_value = (e.details or {}).get("keyValue") or {"code": None}
        key = ", ".join(key_value)
        logger.warning(
            f"Duplicate key on {entity_type} {operation}: {key}",
            extra={"operation": operation, "entity_id": entity_id},
        )
        raise ConflictError(
            f"{entity_type} with the same {key} already exists", key,
            ErrorContext(entity_type=entity_type, entity_id=entity_id),
        ) from e
    except PyMongoError as e:
        logger.error(
            f"MongoDB {operation} failed on {entity_type}: {e}",
            extra={"operation": operation, "entity_id": entity_id},
        )
        raise InternalError(
            str(e), f"{operation} {entity_type}", entity_id,
        ) from e


class MongoManager:
    """Owns the client and database handle used by the Mongo gateways."""

    def __init__(self, uri: str, database: str, timeout_ms: int = 5000):
        self.client = AsyncMongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        self.db = self.client[database]

    @property
    def products(self):
        return self.db[PRODUCTS_COLLECTION]

    @property
    def carts(self):
        return self.db[CARTS_COLLECTION]

    async def ensure_indexes(self) -> None:
        async with translate_errors("create_indexes", "collection"):
            await self.products.create_index([("id", ASCENDING)], unique=True)
            await self.products.create_index([("code", ASCENDING)], unique=True)
            await self.products.create_index([("price", ASCENDING)])
            await self.products.create_index([("category", ASCENDING)])
            await self.products.create_index([("status", ASCENDING)])
            await self.carts.create_index([("id", ASCENDING)], unique=True)
        logger.info("MongoDB indexes ensured")

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error(f"MongoDB health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.close()
