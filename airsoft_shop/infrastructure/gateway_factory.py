"""Gateway Factory — picks the persistence backend once, from configuration.

Invariants:
    - settings.backend is read here and nowhere else
    - Callers receive a Gateways bundle typed by the Protocols only
    - open() must run before first use; close() releases backend resources

Design Decisions:
    - Explicit factory instead of module-level singletons: every service is
      handed its gateways through its constructor
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from airsoft_shop.config import Settings
from airsoft_shop.core.repository_protocols import CartGateway, ProductGateway
from airsoft_shop.infrastructure.file_gateways import FileCartGateway, FileProductGateway
from airsoft_shop.infrastructure.mongo_database import MongoManager
from airsoft_shop.infrastructure.mongo_gateways import MongoCartGateway, MongoProductGateway

logger = logging.getLogger(__name__)


@dataclass
class Gateways:
    products: ProductGateway
    carts: CartGateway
    backend: str
    data_dir: Path | None = None
    mongo: MongoManager | None = field(default=None, repr=False)

    async def open(self) -> None:
        if self.mongo is not None:
            await self.mongo.ensure_indexes()
        elif self.data_dir is not None:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Persistence backend ready: {self.backend}", extra={"backend": self.backend})

    async def health_check(self) -> bool:
        if self.mongo is not None:
            return await self.mongo.health_check()
        return self.data_dir is not None and self.data_dir.is_dir()

    async def close(self) -> None:
        if self.mongo is not None:
            await self.mongo.close()


def build_file_gateways(data_dir: str | Path) -> Gateways:
    data_dir = Path(data_dir)
    return Gateways(
        products=FileProductGateway(data_dir / "products.json"),
        carts=FileCartGateway(data_dir / "carts.json"),
        backend="file",
        data_dir=data_dir,
    )


def build_database_gateways(uri: str, database: str, timeout_ms: int = 5000) -> Gateways:
    manager = MongoManager(uri, database, timeout_ms)
    return Gateways(
        products=MongoProductGateway(manager),
        carts=MongoCartGateway(manager),
        backend="database",
        mongo=manager,
    )


def build_gateways(settings: Settings) -> Gateways:
    """Build the gateway pair for the configured backend."""
    if settings.backend == "database":
        return build_database_gateways(
            settings.mongo_uri, settings.mongo_database, settings.mongo_timeout_ms,
        )
    return build_file_gateways(settings.data_dir)
