"""File Gateways — tests for the product and cart gateways over JSON files.

Tests cover:
    - CRUD round trips; absent ids return None instead of raising
    - find_by_code and filtered get_all
    - paginate delegates to the shared page envelope
    - cart item operations bump updated_at and touch only the items map
    - bulk_load replaces the whole collection
    - unreadable files raise InternalError naming the operation and entity id
"""

import pytest

from airsoft_shop.core.catalog_query import PageRequest, ProductFilters
from airsoft_shop.core.errors import InternalError
from airsoft_shop.infrastructure.file_gateways import FileCartGateway, FileProductGateway


def _product(pid, **fields):
    record = {
        "id": pid, "code": f"C-{pid}", "title": f"Item {pid}",
        "description": "long enough text", "price": 10.0, "category": "bbs",
        "status": True, "stock": 5, "created_at": f"2024-01-0{pid}",
    }
    record.update(fields)
    return record


@pytest.fixture
def products(tmp_path):
    return FileProductGateway(tmp_path / "products.json")


@pytest.fixture
def carts(tmp_path):
    return FileCartGateway(tmp_path / "carts.json")


@pytest.mark.asyncio
async def test_create_and_get(products):
    await products.create(_product("1"))
    found = await products.get_by_id("1")
    assert found["code"] == "C-1"


@pytest.mark.asyncio
async def test_absent_ids_return_none(products):
    assert await products.get_by_id("nope") is None
    assert await products.update("nope", {"price": 1}) is None
    assert await products.delete("nope") is None


@pytest.mark.asyncio
async def test_update_merges_partial(products):
    await products.create(_product("1"))
    updated = await products.update("1", {"price": 42.0})
    assert updated["price"] == 42.0
    assert updated["title"] == "Item 1"
    assert (await products.get_by_id("1"))["price"] == 42.0


@pytest.mark.asyncio
async def test_delete_returns_removed_record(products):
    await products.create(_product("1"))
    await products.create(_product("2"))
    deleted = await products.delete("1")
    assert deleted["id"] == "1"
    assert [p["id"] for p in await products.get_all()] == ["2"]


@pytest.mark.asyncio
async def test_find_by_code(products):
    await products.create(_product("1"))
    assert (await products.find_by_code("C-1"))["id"] == "1"
    assert await products.find_by_code("C-9") is None


@pytest.mark.asyncio
async def test_get_all_with_filters(products):
    await products.create(_product("1", category="replicas"))
    await products.create(_product("2"))
    result = await products.get_all(ProductFilters(category="bbs"))
    assert [p["id"] for p in result] == ["2"]


@pytest.mark.asyncio
async def test_paginate(products):
    for pid in "12345":
        await products.create(_product(pid, price=float(pid)))
    page = await products.paginate(PageRequest(page=2, limit=2, sort="price", order="desc"))
    assert [p["id"] for p in page["items"]] == ["3", "2"]
    assert page["total"] == 5
    assert page["total_pages"] == 3


@pytest.mark.asyncio
async def test_bulk_load_replaces_collection(products):
    await products.create(_product("1"))
    count = await products.bulk_load([_product("7"), _product("8")])
    assert count == 2
    assert [p["id"] for p in await products.get_all()] == ["7", "8"]


@pytest.mark.asyncio
async def test_cart_item_operations(carts):
    await carts.create({"id": "c1", "items": {}, "created_at": "t0", "updated_at": "t0"})

    cart = await carts.set_item("c1", "p1", 2)
    assert cart["items"] == {"p1": 2}
    assert cart["updated_at"] != "t0"

    cart = await carts.set_item("c1", "p2", 1)
    assert cart["items"] == {"p1": 2, "p2": 1}

    cart = await carts.remove_item("c1", "p1")
    assert cart["items"] == {"p2": 1}

    cart = await carts.replace_items("c1", {"p9": 4})
    assert cart["items"] == {"p9": 4}
    assert cart["created_at"] == "t0"
    assert (await carts.get_by_id("c1"))["items"] == {"p9": 4}


@pytest.mark.asyncio
async def test_cart_item_operations_on_missing_cart(carts):
    assert await carts.set_item("unknown", "p1", 1) is None
    assert await carts.remove_item("unknown", "p1") is None
    assert await carts.replace_items("unknown", {}) is None
    assert await carts.get_all() == []


# ─── storage failures ────────────────────────────────────────────

@pytest.mark.asyncio
@pytest.mark.parametrize("operation", ["get_by_id", "update", "delete"])
async def test_corrupt_product_file_names_the_entity(tmp_path, products, operation):
    (tmp_path / "products.json").write_text("[{broken", encoding="utf-8")
    call = {
        "get_by_id": lambda: products.get_by_id("p7"),
        "update": lambda: products.update("p7", {"price": 5}),
        "delete": lambda: products.delete("p7"),
    }[operation]
    with pytest.raises(InternalError) as exc:
        await call()
    assert exc.value.entity_id == "p7"
    assert exc.value.context.entity_id == "p7"
    assert exc.value.operation == "read product"


@pytest.mark.asyncio
async def test_corrupt_cart_file_names_the_cart(tmp_path, carts):
    (tmp_path / "carts.json").write_text("not json", encoding="utf-8")
    with pytest.raises(InternalError) as exc:
        await carts.set_item("c3", "p1", 1)
    assert exc.value.entity_id == "c3"
    assert "(c3)" in exc.value.message
