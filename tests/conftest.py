"""Root conftest — shared test configuration and product payload factories."""

import os

import pytest

# Tests never reach a real MongoDB unless a suite opts in explicitly
os.environ.setdefault("BACKEND", "file")
os.environ.setdefault("LOG_FORMAT", "text")

SPECS_BY_CATEGORY = {
    "replicas": {
        "caliber": "6mm",
        "weight": 3.2,
        "length": 980,
        "firing_mode": "semi/auto",
        "hop_up": True,
    },
    "magazines": {
        "capacity": 120,
        "compatibility": ["M4", "HK416"],
        "material": "polymer",
    },
    "bbs": {
        "weight": 0.25,
        "diameter": 5.95,
        "quantity": 4000,
        "material": "bio",
    },
    "batteries": {
        "voltage": 11.1,
        "capacity": 1450,
        "chemistry": "LiPo",
        "connector": "Deans",
    },
}


def build_payload(category: str = "replicas", **overrides) -> dict:
    payload = {
        "title": f"Test {category}",
        "code": f"{category.upper()}-001",
        "description": f"A {category} product used in tests",
        "price": 100.0,
        "category": category,
        "stock": 10,
        "status": True,
        "specs": dict(SPECS_BY_CATEGORY[category]),
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def product_payload():
    """Factory: product_payload("bbs", code="X1", stock=0)."""
    return build_payload
