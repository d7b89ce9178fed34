"""Catalog Query Rules — filter, sort and page products deterministically.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - Invalid filter values are ignored; invalid pagination values fall back to defaults
    - limit is always within [1, policy.max_page_size]; page is always >= 1
    - Sorting is stable: records with equal sort keys keep their storage order,
      in both ascending and descending order
    - Records missing the sort field come first ascending and last descending,
      the same placement the database backend uses

Design Decisions:
    - ProductFilters / PageRequest as frozen dataclasses: gateways receive
      already-sanitized values and never re-parse raw query input
    - The file backend uses filter_products + paginate_records directly; the
      database backend translates the same dataclasses into native queries
"""

import math
from dataclasses import dataclass
from typing import Any

from airsoft_shop.core.domain_types import ALL_CATEGORIES, SortOrder


@dataclass(frozen=True)
class ListingPolicy:
    """Configured limits for catalog listing."""
    default_page_size: int = 10
    max_page_size: int = 100
    sort_fields: tuple[str, ...] = ("title", "price", "category", "created_at")
    sort_orders: tuple[str, ...] = (SortOrder.ASC.value, SortOrder.DESC.value)
    default_sort: str = "created_at"
    default_order: str = SortOrder.DESC.value
    categories: tuple[str, ...] = ALL_CATEGORIES


@dataclass(frozen=True)
class ProductFilters:
    category: str | None = None
    status: bool | None = None
    min_price: float | None = None
    max_price: float | None = None
    query: str | None = None


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 10
    sort: str = "created_at"
    order: str = SortOrder.DESC.value


# ─── Input sanitizing ────────────────────────────────────────────

def _parse_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return None


def _parse_price(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return price


def _parse_positive_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def normalize_filters(raw: dict | None, policy: ListingPolicy) -> ProductFilters:
    """Build ProductFilters from raw input, dropping anything invalid."""
    raw = raw or {}
    category = raw.get("category")
    query = raw.get("query")
    if isinstance(query, str):
        query = query.strip() or None
    else:
        query = None
    return ProductFilters(
        category=category if category in policy.categories else None,
        status=_parse_bool(raw.get("status")),
        min_price=_parse_price(raw.get("min_price")),
        max_price=_parse_price(raw.get("max_price")),
        query=query,
    )


def normalize_pagination(raw: dict | None, policy: ListingPolicy) -> PageRequest:
    """Build a PageRequest from raw input, capping limit at max_page_size."""
    raw = raw or {}
    limit = _parse_positive_int(raw.get("limit")) or policy.default_page_size
    page = _parse_positive_int(raw.get("page")) or 1
    sort = raw.get("sort")
    order = raw.get("order")
    return PageRequest(
        page=page,
        limit=min(limit, policy.max_page_size),
        sort=sort if sort in policy.sort_fields else policy.default_sort,
        order=order if order in policy.sort_orders else policy.default_order,
    )


# ─── In-memory evaluation ────────────────────────────────────────

def matches_filters(product: dict, filters: ProductFilters) -> bool:
    if filters.category is not None and product.get("category") != filters.category:
        return False
    if filters.status is not None and product.get("status") is not filters.status:
        return False
    price = product.get("price", 0)
    if filters.min_price is not None and price < filters.min_price:
        return False
    if filters.max_price is not None and price > filters.max_price:
        return False
    if filters.query:
        term = filters.query.lower()
        title = str(product.get("title", "")).lower()
        description = str(product.get("description", "")).lower()
        if term not in title and term not in description:
            return False
    return True


def filter_products(products: list[dict], filters: ProductFilters | None) -> list[dict]:
    if filters is None:
        return list(products)
    return [p for p in products if matches_filters(p, filters)]


def _sort_key(field: str):
    # Missing or null values sort first ascending and last descending
    def key(record: dict) -> tuple:
        value = record.get(field)
        if value is None:
            return (0, "")
        if isinstance(value, str):
            return (1, value.lower())
        return (1, value)
    return key


def sort_products(products: list[dict], sort: str, order: str) -> list[dict]:
    """Stable sort; reverse=True keeps equal keys in their original order."""
    return sorted(
        products, key=_sort_key(sort), reverse=order == SortOrder.DESC.value,
    )


def build_page(items: list[dict], request: PageRequest, total: int) -> dict:
    """Page envelope shared by both backends."""
    total_pages = math.ceil(total / request.limit) if total else 0
    return {
        "items": items,
        "page": request.page,
        "limit": request.limit,
        "total": total,
        "total_pages": total_pages,
        "has_prev": request.page > 1,
        "has_next": request.page * request.limit < total,
    }


def paginate_records(
    products: list[dict], request: PageRequest, filters: ProductFilters | None = None,
) -> dict:
    """Filter, sort, then slice page x limit."""
    matched = sort_products(filter_products(products, filters), request.sort, request.order)
    start = (request.page - 1) * request.limit
    return build_page(matched[start:start + request.limit], request, len(matched))
