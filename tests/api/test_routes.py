"""HTTP Adapter — end-to-end tests through the FastAPI app on the file backend.

Tests cover:
    - product CRUD with 201 / 400 / 404 / 409 status mapping
    - listing query parameters forwarded and sanitized
    - cart lifecycle, line items and summary
    - health and readiness probes
    - extra notifier receives change events
"""

import json

import pytest
from fastapi.testclient import TestClient

from airsoft_shop.config import Settings
from airsoft_shop.main import create_app


class _Recorder:
    def __init__(self):
        self.events = []

    async def emit(self, event, payload=None):
        self.events.append(event)


@pytest.fixture
def recorder():
    return _Recorder()


@pytest.fixture
def client(tmp_path, recorder):
    settings = Settings(backend="file", data_dir=str(tmp_path / "data"), log_format="text")
    with TestClient(create_app(settings, recorder)) as c:
        yield c


def _create(client, payload):
    response = client.post("/api/products", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


# ─── products ────────────────────────────────────────────────────

def test_product_crud(client, product_payload):
    created = _create(client, product_payload())

    assert client.get(f"/api/products/{created['id']}").json()["code"] == created["code"]

    response = client.put(f"/api/products/{created['id']}", json={"price": 10})
    assert response.status_code == 200
    assert response.json()["price"] == 10

    assert client.delete(f"/api/products/{created['id']}").status_code == 200
    assert client.get(f"/api/products/{created['id']}").status_code == 404


def test_invalid_product_returns_all_violations(client, product_payload):
    payload = product_payload(title="x", price=-2)
    del payload["specs"]["hop_up"]
    response = client.post("/api/products", json=payload)
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert len(error["violations"]) == 3


def test_non_object_body_is_400(client):
    assert client.post("/api/products", json=[1, 2]).status_code == 400


def test_nan_price_is_rejected_and_store_stays_readable(client, product_payload):
    body = json.dumps(product_payload(price=float("nan")))
    response = client.post(
        "/api/products", content=body, headers={"content-type": "application/json"},
    )
    assert response.status_code == 400
    assert "price must be a number greater than 0" in response.json()["error"]["violations"]

    listing = client.get("/api/products")
    assert listing.status_code == 200
    assert listing.json()["total"] == 0


def test_duplicate_code_is_409(client, product_payload):
    _create(client, product_payload(code="DUP"))
    response = client.post("/api/products", json=product_payload("bbs", code="DUP"))
    assert response.status_code == 409
    assert response.json()["error"]["category"] == "conflict"


def test_update_unknown_product_is_404(client):
    assert client.put("/api/products/unknown", json={"price": 1}).status_code == 404


def test_listing(client, product_payload):
    for n in range(3):
        _create(client, product_payload("bbs", code=f"B{n}", price=5 + n))
    _create(client, product_payload("batteries", code="L1", price=40))

    page = client.get(
        "/api/products",
        params={"category": "bbs", "sort": "price", "order": "asc", "limit": 2},
    ).json()
    assert [p["code"] for p in page["items"]] == ["B0", "B1"]
    assert page["total"] == 3
    assert page["has_next"] is True

    fallback = client.get("/api/products", params={"limit": "lots", "status": "maybe"}).json()
    assert fallback["limit"] == 10
    assert fallback["total"] == 4


# ─── carts ───────────────────────────────────────────────────────

def test_cart_flow(client, product_payload, recorder):
    product = _create(client, product_payload("magazines", stock=3, price=12.5))
    cart = client.post("/api/carts").json()
    cart_id = cart["id"]

    response = client.post(f"/api/carts/{cart_id}/products/{product['id']}")
    assert response.status_code == 200
    assert response.json()["items"] == {product["id"]: 1}

    response = client.post(
        f"/api/carts/{cart_id}/products/{product['id']}", json={"quantity": 5},
    )
    assert response.status_code == 400

    response = client.put(
        f"/api/carts/{cart_id}/products/{product['id']}", json={"quantity": 3},
    )
    assert response.json()["items"] == {product["id"]: 3}

    summary = client.get(f"/api/carts/{cart_id}/summary").json()
    assert summary["total_items"] == 3
    assert summary["total_amount"] == 37.5

    detailed = client.get(f"/api/carts/{cart_id}").json()
    assert detailed["items"][0]["product"]["code"] == product["code"]

    response = client.delete(f"/api/carts/{cart_id}/products/{product['id']}")
    assert response.json()["items"] == {}

    assert "cart-created" in recorder.events
    assert "cart-updated" in recorder.events


def test_replace_and_clear_cart(client, product_payload):
    first = _create(client, product_payload("bbs", code="B1"))
    second = _create(client, product_payload("bbs", code="B2"))
    cart_id = client.post("/api/carts").json()["id"]

    response = client.put(f"/api/carts/{cart_id}", json=[
        {"product_id": first["id"], "quantity": 2},
        {"product_id": second["id"], "quantity": 1},
    ])
    assert response.status_code == 200
    assert response.json()["items"] == {first["id"]: 2, second["id"]: 1}

    response = client.put(f"/api/carts/{cart_id}", json=[
        {"product_id": first["id"], "quantity": 999},
    ])
    assert response.status_code == 400

    response = client.delete(f"/api/carts/{cart_id}")
    assert response.status_code == 200
    assert response.json()["items"] == {}


def test_unknown_cart_is_404(client):
    assert client.get("/api/carts/unknown").status_code == 404
    assert client.get("/api/carts/unknown/summary").status_code == 404


def test_malformed_cart_body_is_400(client):
    cart_id = client.post("/api/carts").json()["id"]
    response = client.put(f"/api/carts/{cart_id}", json=[{"quantity": 1}])
    assert response.status_code == 400
    assert response.json()["error"]["details"]


# ─── health ──────────────────────────────────────────────────────

def test_health_and_readiness(client):
    assert client.get("/api/v1/health/").json()["status"] == "healthy"
    ready = client.get("/api/v1/health/ready")
    assert ready.status_code == 200
    assert ready.json()["checks"] == {"file": "healthy"}
