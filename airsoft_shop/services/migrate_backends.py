"""Backend Migration — copy the catalog and carts from one backend to another.

Invariants:
    - Source products are re-validated and code-deduplicated BEFORE any target write
    - Any invalid product aborts the whole migration; the target is left untouched
    - The target collections are replaced wholesale (bulk_load), never merged

Design Decisions:
    - Works on any pair of Gateways bundles, so file -> database and
      database -> file both use the same path
    - Cart items pointing at products absent from the source are kept and only
      logged: carts are not re-validated on read either
"""

import asyncio
import logging
from dataclasses import dataclass

from airsoft_shop.config import get_settings
from airsoft_shop.core.domain_types import WriteMode
from airsoft_shop.core.errors import ConflictError, ValidationError
from airsoft_shop.core.validate_product import collect_violations, is_integer
from airsoft_shop.infrastructure.gateway_factory import (
    Gateways,
    build_database_gateways,
    build_file_gateways,
)
from airsoft_shop.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationReport:
    products: int
    carts: int
    dangling_items: int


def _check_products(products: list[dict]) -> None:
    violations: list[str] = []
    seen_codes: dict[str, str] = {}
    for position, product in enumerate(products):
        label = product.get("id") or f"#{position}"
        if not product.get("id"):
            violations.append(f"product {label}: id is missing")
        violations.extend(
            f"product {label}: {v}"
            for v in collect_violations(product, WriteMode.CREATE)
        )
        code = product.get("code")
        if code in seen_codes:
            raise ConflictError(
                f"code '{code}' is shared by products {seen_codes[code]} and {label}",
                "code",
            )
        if isinstance(code, str):
            seen_codes[code] = label
    if violations:
        raise ValidationError(violations)


def _clean_carts(carts: list[dict], product_ids: set[str]) -> tuple[list[dict], int]:
    cleaned, dangling = [], 0
    for cart in carts:
        items = {
            pid: int(qty) for pid, qty in (cart.get("items") or {}).items()
            if is_integer(qty) and qty > 0
        }
        dangling += sum(1 for pid in items if pid not in product_ids)
        cleaned.append({**cart, "items": items})
    return cleaned, dangling


async def migrate_collections(source: Gateways, target: Gateways) -> MigrationReport:
    """Copy products and carts from source to target."""
    products = await source.products.get_all()
    carts = await source.carts.get_all()

    _check_products(products)
    carts, dangling = _clean_carts(carts, {p["id"] for p in products})
    if dangling:
        logger.warning(f"{dangling} cart item(s) reference unknown products")

    await target.products.bulk_load(products)
    await target.carts.bulk_load(carts)

    report = MigrationReport(len(products), len(carts), dangling)
    logger.info(
        f"Migrated {report.products} products and {report.carts} carts "
        f"from {source.backend} to {target.backend}",
    )
    return report


async def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    source = build_file_gateways(settings.data_dir)
    target = build_database_gateways(
        settings.mongo_uri, settings.mongo_database, settings.mongo_timeout_ms,
    )
    await target.open()
    try:
        await migrate_collections(source, target)
    finally:
        await target.close()


if __name__ == "__main__":
    asyncio.run(main())
