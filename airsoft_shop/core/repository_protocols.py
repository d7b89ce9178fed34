"""Boundary Protocols — contracts between the services and the storage/notification shell.

Invariants:
    - Services NEVER import a concrete gateway — they hold these Protocol types only
    - Every gateway method is async because implementations do IO
    - Lookups return None for an absent id; they never raise NotFoundError
    - Gateways wrap storage failures in InternalError (core/errors.py)

Design Decisions:
    - Protocol over ABC: file and database gateways share no base class, only shape
    - One explicit interface implemented twice, selected once by gateway_factory;
      no caller ever probes for method presence to guess the backend
"""

from typing import Protocol

from airsoft_shop.core.catalog_query import PageRequest, ProductFilters


class ProductGateway(Protocol):
    """Contract for product persistence."""
    async def create(self, record: dict) -> dict: ...
    async def get_by_id(self, product_id: str) -> dict | None: ...
    async def get_all(self, filters: ProductFilters | None = None) -> list[dict]: ...
    async def find_by_code(self, code: str) -> dict | None: ...
    async def update(self, product_id: str, partial: dict) -> dict | None: ...
    async def delete(self, product_id: str) -> dict | None: ...
    async def paginate(
        self, request: PageRequest, filters: ProductFilters | None = None,
    ) -> dict: ...
    async def bulk_load(self, records: list[dict]) -> int: ...


class CartGateway(Protocol):
    """Contract for cart persistence. Item mutations bump updated_at."""
    async def create(self, record: dict) -> dict: ...
    async def get_by_id(self, cart_id: str) -> dict | None: ...
    async def get_all(self) -> list[dict]: ...
    async def update(self, cart_id: str, partial: dict) -> dict | None: ...
    async def delete(self, cart_id: str) -> dict | None: ...
    async def set_item(
        self, cart_id: str, product_id: str, quantity: int,
    ) -> dict | None: ...
    async def remove_item(self, cart_id: str, product_id: str) -> dict | None: ...
    async def replace_items(
        self, cart_id: str, items: dict[str, int],
    ) -> dict | None: ...
    async def bulk_load(self, records: list[dict]) -> int: ...


class ChangeNotifier(Protocol):
    """Outbound hook called after successful mutations. Fire-and-forget."""
    async def emit(self, event: str, payload: dict | None = None) -> None: ...
