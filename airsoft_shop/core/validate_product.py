"""Product Validation — structural and per-category rules for product writes.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - Field checks return a violation message, or None when the value is valid
    - validate_product aggregates EVERY violation before raising; never first-only
    - Booleans, NaN and infinities are never accepted where a number is expected

Design Decisions:
    - create mode checks every required field; update mode checks only supplied
      fields, except that category or specs in the payload triggers the full specs
      schema against the effective category (payload first, then current record)
    - Specs rules are table-driven from CATEGORY_SPECS, not one function per category
"""

import math
from typing import Any

from airsoft_shop.core.domain_types import (
    ALL_CATEGORIES,
    CATEGORY_SPECS,
    MIN_DESCRIPTION_LENGTH,
    MIN_TITLE_LENGTH,
    PRODUCT_FIELDS,
    Category,
    SpecKind,
    WriteMode,
)
from airsoft_shop.core.errors import ValidationError


# ─── Value predicates ────────────────────────────────────────────

def is_number(value: Any) -> bool:
    """Finite int or float; bools, NaN and infinities are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _is_text(value: Any, min_length: int = 1) -> bool:
    return isinstance(value, str) and len(value.strip()) >= min_length


# ─── Field checks ────────────────────────────────────────────────

def check_title(value: Any) -> str | None:
    if not _is_text(value, MIN_TITLE_LENGTH):
        return f"title must be a string of at least {MIN_TITLE_LENGTH} characters"
    return None


def check_description(value: Any) -> str | None:
    if not _is_text(value, MIN_DESCRIPTION_LENGTH):
        return (
            f"description must be a string of at least "
            f"{MIN_DESCRIPTION_LENGTH} characters"
        )
    return None


def check_code(value: Any) -> str | None:
    if not _is_text(value):
        return "code is required and must be a non-empty string"
    return None


def check_price(value: Any) -> str | None:
    if not is_number(value) or value <= 0:
        return "price must be a number greater than 0"
    return None


def check_category(value: Any, categories: tuple[str, ...]) -> str | None:
    if value not in categories:
        return f"category must be one of: {', '.join(categories)}"
    return None


def check_status(value: Any) -> str | None:
    if not isinstance(value, bool):
        return "status must be a boolean (true/false)"
    return None


def check_stock(value: Any) -> str | None:
    if not is_integer(value) or value < 0:
        return "stock must be an integer greater than or equal to 0"
    return None


def check_thumbnails(value: Any) -> str | None:
    if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
        return "thumbnails must be a list of strings"
    return None


def check_spec_field(name: str, kind: SpecKind, value: Any) -> str | None:
    """Check one specs field against its declared kind."""
    if kind is SpecKind.TEXT and not _is_text(value):
        return f"specs.{name} is required and must be a non-empty string"
    if kind is SpecKind.POSITIVE_NUMBER and (not is_number(value) or value <= 0):
        return f"specs.{name} must be a number greater than 0"
    if kind is SpecKind.BOOLEAN and not isinstance(value, bool):
        return f"specs.{name} must be a boolean"
    if kind is SpecKind.TEXT_LIST and (
        not isinstance(value, list)
        or not value
        or not all(_is_text(v) for v in value)
    ):
        return f"specs.{name} must be a non-empty list of strings"
    return None


def check_specs(category: str, specs: Any) -> list[str]:
    """Full specs schema for one category. Unknown categories have no schema."""
    try:
        schema = CATEGORY_SPECS[Category(category)]
    except ValueError:
        return []
    if not isinstance(specs, dict):
        return [f"specs is required for category '{category}' and must be an object"]
    violations = []
    for name, kind in schema.items():
        error = check_spec_field(name, kind, specs.get(name))
        if error:
            violations.append(error)
    return violations


# ─── Composite validator ─────────────────────────────────────────

_SIMPLE_CHECKS = {
    "title": check_title,
    "description": check_description,
    "code": check_code,
    "price": check_price,
    "status": check_status,
    "stock": check_stock,
    "thumbnails": check_thumbnails,
}


def collect_violations(
    candidate: dict,
    mode: WriteMode,
    current: dict | None = None,
    categories: tuple[str, ...] = ALL_CATEGORIES,
) -> list[str]:
    """Return every violated rule for candidate. Empty list means valid."""
    if not isinstance(candidate, dict):
        return ["product data must be an object"]

    violations: list[str] = []
    full = mode is WriteMode.CREATE

    for name, check in _SIMPLE_CHECKS.items():
        if name == "thumbnails" and name not in candidate:
            continue  # optional on create too; defaults applied by the service
        if full or name in candidate:
            error = check(candidate.get(name))
            if error:
                violations.append(error)

    if full or "category" in candidate:
        error = check_category(candidate.get("category"), categories)
        if error:
            violations.append(error)

    violations.extend(_specs_violations(candidate, full, current))
    return violations


def _specs_violations(candidate: dict, full: bool, current: dict | None) -> list[str]:
    if not (full or "category" in candidate or "specs" in candidate):
        return []
    current = current or {}
    category = candidate.get("category", current.get("category"))
    specs = candidate["specs"] if "specs" in candidate else current.get("specs")
    return check_specs(category, specs)


def normalize_product(candidate: dict) -> dict:
    """Keep known fields only, trimming text fields."""
    normalized = {}
    for name in PRODUCT_FIELDS:
        if name not in candidate:
            continue
        value = candidate[name]
        if name in ("title", "code", "description") and isinstance(value, str):
            value = value.strip()
        if name == "thumbnails" and isinstance(value, list):
            value = [t.strip() for t in value]
        if name == "stock" and is_integer(value):
            value = int(value)
        normalized[name] = value
    return normalized


def validate_product(
    candidate: dict,
    mode: WriteMode,
    current: dict | None = None,
    categories: tuple[str, ...] = ALL_CATEGORIES,
) -> dict:
    """Validate a full or partial product; return the normalized candidate.

    Raises ValidationError listing all violations when any rule fails.
    """
    violations = collect_violations(candidate, mode, current, categories)
    if violations:
        raise ValidationError(violations)
    return normalize_product(candidate)
