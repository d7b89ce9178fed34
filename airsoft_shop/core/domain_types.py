"""Domain Types — rich types and constants that replace bare primitives.

Invariants:
    - ProductId, CartId wrap str — ids are opaque strings on every backend
    - Category, WriteMode, SortOrder, ChangeEvent encode every valid state as an Enum
    - CATEGORY_SPECS is the single source of truth for per-category specs shape

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare equal to their raw values
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ProductId = NewType("ProductId", str)
CartId = NewType("CartId", str)


# ─── Enums ───────────────────────────────────────────────────────

class Category(str, Enum):
    """Fixed product categories. Each has its own specs schema."""
    REPLICAS = "replicas"
    MAGAZINES = "magazines"
    BBS = "bbs"
    BATTERIES = "batteries"


class WriteMode(str, Enum):
    """create: all required fields; update: only supplied fields."""
    CREATE = "create"
    UPDATE = "update"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SpecKind(str, Enum):
    """Value shape expected for a specs field."""
    TEXT = "text"
    POSITIVE_NUMBER = "positive_number"
    BOOLEAN = "boolean"
    TEXT_LIST = "text_list"


class ChangeEvent(str, Enum):
    """Event names emitted on the Change Notification Port."""
    PRODUCT_CATALOG_CHANGED = "product-catalog-changed"
    CART_CREATED = "cart-created"
    CART_UPDATED = "cart-updated"
    CART_DELETED = "cart-deleted"


# ─── Product rules ───────────────────────────────────────────────

MIN_TITLE_LENGTH = 3
MIN_DESCRIPTION_LENGTH = 10

CATEGORY_SPECS: dict[Category, dict[str, SpecKind]] = {
    Category.REPLICAS: {
        "caliber": SpecKind.TEXT,
        "weight": SpecKind.POSITIVE_NUMBER,
        "length": SpecKind.POSITIVE_NUMBER,
        "firing_mode": SpecKind.TEXT,
        "hop_up": SpecKind.BOOLEAN,
    },
    Category.MAGAZINES: {
        "capacity": SpecKind.POSITIVE_NUMBER,
        "compatibility": SpecKind.TEXT_LIST,
        "material": SpecKind.TEXT,
    },
    Category.BBS: {
        "weight": SpecKind.POSITIVE_NUMBER,
        "diameter": SpecKind.POSITIVE_NUMBER,
        "quantity": SpecKind.POSITIVE_NUMBER,
        "material": SpecKind.TEXT,
    },
    Category.BATTERIES: {
        "voltage": SpecKind.POSITIVE_NUMBER,
        "capacity": SpecKind.POSITIVE_NUMBER,
        "chemistry": SpecKind.TEXT,
        "connector": SpecKind.TEXT,
    },
}

ALL_CATEGORIES: tuple[str, ...] = tuple(c.value for c in Category)

# Caller-writable product fields; id and timestamps are service managed
PRODUCT_FIELDS = (
    "title", "code", "description", "price", "category",
    "stock", "status", "thumbnails", "specs",
)
SERVICE_MANAGED_FIELDS = ("id", "created_at", "updated_at")


# ─── Cart rules ──────────────────────────────────────────────────

MISSING_PRODUCT_TITLE = "Product not found"
