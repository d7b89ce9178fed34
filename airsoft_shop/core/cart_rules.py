"""Cart Rules — line-item checks, populate projection and totals.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - Checks return a violation message, or None when the line item is acceptable
    - A quantity <= 0 is equivalent to the item being absent
    - Totals are derived from the populated view; total_amount rounded to 2 decimals

Design Decisions:
    - Stock is compared against the product snapshot handed in by the service;
      carts are never re-validated on read (accepted staleness window)
    - Missing products in the populated view become a stub, not an error
"""

from typing import Any

from airsoft_shop.core.domain_types import MISSING_PRODUCT_TITLE
from airsoft_shop.core.validate_product import is_integer, is_number


def _label(product: dict) -> str:
    return product.get("title") or product.get("id", "?")


# ─── Line-item checks ────────────────────────────────────────────

def check_quantity(quantity: Any) -> str | None:
    if not is_integer(quantity) or quantity <= 0:
        return "quantity must be an integer greater than 0"
    return None


def check_in_stock(product: dict) -> str | None:
    if product.get("stock", 0) <= 0:
        return f"Product '{_label(product)}' has no stock available"
    return None


def check_available(product: dict) -> str | None:
    if not product.get("status", False):
        return f"Product '{_label(product)}' is unavailable"
    return None


def check_stock_bound(product: dict, requested: int) -> str | None:
    stock = product.get("stock", 0)
    if requested > stock:
        return (
            f"Insufficient stock for '{_label(product)}'. "
            f"Available: {stock}, requested: {requested}"
        )
    return None


def check_line_item(product: dict, requested: int) -> str | None:
    """Stock, availability and bound checks for a resulting line quantity."""
    return (
        check_in_stock(product)
        or check_available(product)
        or check_stock_bound(product, requested)
    )


# ─── Replacement ─────────────────────────────────────────────────

def normalize_replacement(entries: Any) -> tuple[dict[str, int], list[str]]:
    """Collapse [{product_id, quantity}] into an item map.

    Duplicate product ids are summed; quantities <= 0 are dropped.
    Returns (items, violations) where violations lists malformed entries.
    """
    if not isinstance(entries, list):
        return {}, ["items must be a list of {product_id, quantity} entries"]

    items: dict[str, int] = {}
    violations: list[str] = []
    for position, entry in enumerate(entries):
        product_id = entry.get("product_id") if isinstance(entry, dict) else None
        quantity = entry.get("quantity") if isinstance(entry, dict) else None
        if not isinstance(product_id, str) or not product_id:
            violations.append(f"items[{position}].product_id must be a non-empty string")
            continue
        if not is_integer(quantity):
            violations.append(f"items[{position}].quantity must be an integer")
            continue
        if quantity <= 0:
            continue
        items[product_id] = items.get(product_id, 0) + int(quantity)
    return items, violations


def replacement_violations(
    items: dict[str, int], products: dict[str, dict | None],
) -> tuple[list[str], list[str]]:
    """Return (missing_product_ids, violations) for a full item map."""
    missing = [pid for pid in items if products.get(pid) is None]
    violations = []
    for product_id, quantity in items.items():
        product = products.get(product_id)
        if product is None:
            continue
        error = check_line_item(product, quantity)
        if error:
            violations.append(error)
    return missing, violations


# ─── Populate & totals ───────────────────────────────────────────

def missing_product_stub(product_id: str) -> dict:
    return {"id": product_id, "title": MISSING_PRODUCT_TITLE, "price": 0}


def populate_items(
    items: dict[str, int], products: dict[str, dict | None],
) -> list[dict]:
    """Resolve each product id to its current record (or a stub)."""
    return [
        {
            "product": products.get(pid) or missing_product_stub(pid),
            "quantity": quantity,
        }
        for pid, quantity in items.items()
    ]


def summarize(detailed: dict) -> dict:
    total_items = 0
    total_amount = 0.0
    for line in detailed["items"]:
        price = line["product"].get("price", 0)
        total_items += line["quantity"]
        total_amount += (price if is_number(price) else 0) * line["quantity"]
    return {
        "id": detailed["id"],
        "total_items": total_items,
        "total_amount": round(total_amount, 2),
        "created_at": detailed.get("created_at"),
        "updated_at": detailed.get("updated_at"),
        "items": detailed["items"],
    }
