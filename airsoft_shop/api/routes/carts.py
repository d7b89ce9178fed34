"""Cart Routes — cart lifecycle and line items over CartService.

Invariants:
    - GET /{cart_id} returns the populated view (products resolved)
    - DELETE /{cart_id} empties the cart; disposal stays a service-level call
"""

from fastapi import APIRouter, Depends, status

from airsoft_shop.api.dependencies import get_carts
from airsoft_shop.schemas.cart import CartItemIn, QuantityIn, QuantitySet
from airsoft_shop.services.cart_service import CartService

router = APIRouter(prefix="/api/carts", tags=["carts"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_cart(carts: CartService = Depends(get_carts)):
    return await carts.create()


@router.get("/{cart_id}")
async def get_cart(cart_id: str, carts: CartService = Depends(get_carts)):
    return await carts.get_detailed(cart_id)


@router.get("/{cart_id}/summary")
async def get_cart_summary(cart_id: str, carts: CartService = Depends(get_carts)):
    return await carts.summary(cart_id)


@router.put("/{cart_id}")
async def replace_cart_items(
    cart_id: str, body: list[CartItemIn], carts: CartService = Depends(get_carts),
):
    """Replace every item at once; nothing changes if any entry is rejected."""
    return await carts.replace_all(cart_id, [item.model_dump() for item in body])


@router.delete("/{cart_id}")
async def clear_cart(cart_id: str, carts: CartService = Depends(get_carts)):
    return await carts.clear(cart_id)


@router.post("/{cart_id}/products/{product_id}")
async def add_cart_item(
    cart_id: str,
    product_id: str,
    body: QuantityIn | None = None,
    carts: CartService = Depends(get_carts),
):
    quantity = body.quantity if body else 1
    return await carts.add_item(cart_id, product_id, quantity)


@router.put("/{cart_id}/products/{product_id}")
async def set_cart_item_quantity(
    cart_id: str,
    product_id: str,
    body: QuantitySet,
    carts: CartService = Depends(get_carts),
):
    return await carts.set_quantity(cart_id, product_id, body.quantity)


@router.delete("/{cart_id}/products/{product_id}")
async def remove_cart_item(
    cart_id: str, product_id: str, carts: CartService = Depends(get_carts),
):
    return await carts.remove_item(cart_id, product_id)
