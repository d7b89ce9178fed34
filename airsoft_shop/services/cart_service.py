"""Cart Service — cart lifecycle and line-item mutations under stock invariants.

Invariants:
    - Validate-before-write: every check runs against a fresh snapshot of the cart
      and the referenced products before the single gateway write is issued
    - After a successful mutation each item quantity <= product stock at that moment
    - A failing replace_all leaves the stored item map untouched
    - remove_item on an absent item is a no-op, never an error
    - Mutations on one cart id are serialized (KeyedLocks), closing the
      read-check-write race between concurrent requests in this process

Design Decisions:
    - Product lookups go through ProductCatalogService (NotFoundError semantics
      live in one place); cart storage through the injected CartGateway
    - Carts are not re-validated on read: a product whose stock dropped below a
      cart quantity surfaces only at the next mutation of that line
"""

import logging
import uuid
from datetime import datetime, timezone

from airsoft_shop.core.cart_rules import (
    check_line_item,
    check_quantity,
    check_stock_bound,
    normalize_replacement,
    populate_items,
    replacement_violations,
    summarize,
)
from airsoft_shop.core.domain_types import ChangeEvent
from airsoft_shop.core.errors import ErrorContext, NotFoundError, ValidationError
from airsoft_shop.core.repository_protocols import CartGateway, ChangeNotifier
from airsoft_shop.core.validate_product import is_integer
from airsoft_shop.services.catalog_service import ProductCatalogService
from airsoft_shop.services.keyed_locks import KeyedLocks
from airsoft_shop.services.notify import notify

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CartService:
    """Cart use cases over an injected CartGateway and the catalog."""

    def __init__(
        self,
        carts: CartGateway,
        catalog: ProductCatalogService,
        notifier: ChangeNotifier | None = None,
    ):
        self.carts = carts
        self.catalog = catalog
        self.notifier = notifier
        self._locks = KeyedLocks()

    # ─── Reads ───────────────────────────────────────────────────

    async def get(self, cart_id: str) -> dict:
        cart = await self.carts.get_by_id(str(cart_id))
        if cart is None:
            raise NotFoundError("Cart", cart_id)
        cart.setdefault("items", {})
        return cart

    async def get_detailed(self, cart_id: str) -> dict:
        """Cart with every item resolved to its current product (or a stub)."""
        cart = await self.get(cart_id)
        products = await self.catalog.get_many(list(cart["items"]))
        return {**cart, "items": populate_items(cart["items"], products)}

    async def summary(self, cart_id: str) -> dict:
        return summarize(await self.get_detailed(cart_id))

    # ─── Lifecycle ───────────────────────────────────────────────

    async def create(self) -> dict:
        now = _now()
        cart = await self.carts.create({
            "id": str(uuid.uuid4()),
            "items": {},
            "created_at": now,
            "updated_at": now,
        })
        await notify(self.notifier, ChangeEvent.CART_CREATED, cart)
        return cart

    async def delete(self, cart_id: str) -> dict:
        cart_id = str(cart_id)
        async with self._locks.hold(cart_id):
            deleted = await self.carts.delete(cart_id)
        if deleted is None:
            raise NotFoundError("Cart", cart_id)
        await notify(self.notifier, ChangeEvent.CART_DELETED, {"id": cart_id})
        return deleted

    # ─── Line-item mutations ─────────────────────────────────────

    async def add_item(self, cart_id: str, product_id: str, quantity: int = 1) -> dict:
        """Add quantity on top of what the cart already holds for product_id."""
        cart_id, product_id = str(cart_id), str(product_id)
        async with self._locks.hold(cart_id):
            cart = await self.get(cart_id)
            product = await self.catalog.get_by_id(product_id)

            error = check_quantity(quantity)
            if error:
                raise ValidationError(error, self._context(cart_id))

            new_quantity = cart["items"].get(product_id, 0) + int(quantity)
            error = check_line_item(product, new_quantity)
            if error:
                raise ValidationError(error, self._context(cart_id))

            updated = await self._write(
                self.carts.set_item(cart_id, product_id, new_quantity), cart_id,
            )

        logger.info(
            f"Cart {cart_id}: {product_id} now x{new_quantity}",
            extra={"entity_id": cart_id, "operation": "add_item"},
        )
        await notify(self.notifier, ChangeEvent.CART_UPDATED, updated)
        return updated

    async def remove_item(self, cart_id: str, product_id: str) -> dict:
        cart_id, product_id = str(cart_id), str(product_id)
        async with self._locks.hold(cart_id):
            cart = await self.get(cart_id)
            if product_id not in cart["items"]:
                return cart
            updated = await self._write(
                self.carts.remove_item(cart_id, product_id), cart_id,
            )

        await notify(self.notifier, ChangeEvent.CART_UPDATED, updated)
        return updated

    async def set_quantity(self, cart_id: str, product_id: str, quantity: int) -> dict:
        """Set an item's quantity directly; quantity <= 0 removes the item.

        Only lines already in the cart can be set: an absent product id raises
        NotFoundError instead of silently returning the unchanged cart. Use
        add_item to put a new product in the cart.
        """
        cart_id, product_id = str(cart_id), str(product_id)
        if not is_integer(quantity):
            raise ValidationError("quantity must be an integer", self._context(cart_id))
        if quantity <= 0:
            return await self.remove_item(cart_id, product_id)

        async with self._locks.hold(cart_id):
            cart = await self.get(cart_id)
            if product_id not in cart["items"]:
                raise NotFoundError(
                    "Cart item", product_id,
                    ErrorContext(entity_type="Cart item", entity_id=cart_id),
                )
            product = await self.catalog.get_by_id(product_id)
            error = check_stock_bound(product, int(quantity))
            if error:
                raise ValidationError(error, self._context(cart_id))

            updated = await self._write(
                self.carts.set_item(cart_id, product_id, int(quantity)), cart_id,
            )

        await notify(self.notifier, ChangeEvent.CART_UPDATED, updated)
        return updated

    async def replace_all(self, cart_id: str, entries: list[dict]) -> dict:
        """Replace the whole item map, all-or-nothing."""
        cart_id = str(cart_id)
        items, violations = normalize_replacement(entries)
        if violations:
            raise ValidationError(violations, self._context(cart_id))

        async with self._locks.hold(cart_id):
            await self.get(cart_id)
            products = await self.catalog.get_many(list(items))
            missing, violations = replacement_violations(items, products)
            if missing:
                raise NotFoundError("Product", ", ".join(missing))
            if violations:
                raise ValidationError(violations, self._context(cart_id))

            updated = await self._write(
                self.carts.replace_items(cart_id, items), cart_id,
            )

        logger.info(
            f"Cart {cart_id} replaced with {len(items)} item(s)",
            extra={"entity_id": cart_id, "operation": "replace_all"},
        )
        await notify(self.notifier, ChangeEvent.CART_UPDATED, updated)
        return updated

    async def clear(self, cart_id: str) -> dict:
        cart_id = str(cart_id)
        async with self._locks.hold(cart_id):
            await self.get(cart_id)
            updated = await self._write(self.carts.replace_items(cart_id, {}), cart_id)

        await notify(self.notifier, ChangeEvent.CART_UPDATED, updated)
        return updated

    # ─── Helpers ─────────────────────────────────────────────────

    @staticmethod
    def _context(cart_id: str) -> ErrorContext:
        return ErrorContext(entity_type="Cart", entity_id=cart_id)

    @staticmethod
    async def _write(operation, cart_id: str) -> dict:
        """Await a gateway write; a vanished cart (deleted elsewhere) is NotFound."""
        cart = await operation
        if cart is None:
            raise NotFoundError("Cart", cart_id)
        return cart
