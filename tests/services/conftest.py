"""Service test fixtures — file-backed gateways in a temp dir and a recording notifier."""

import pytest

from airsoft_shop.infrastructure.gateway_factory import build_file_gateways
from airsoft_shop.services.cart_service import CartService
from airsoft_shop.services.catalog_service import ProductCatalogService


class RecordingNotifier:
    """Collects (event, payload) pairs instead of delivering them."""

    def __init__(self):
        self.events: list[tuple[str, dict | None]] = []

    async def emit(self, event: str, payload: dict | None = None) -> None:
        self.events.append((event, payload))

    def names(self) -> list[str]:
        return [event for event, _ in self.events]


class FailingNotifier:
    async def emit(self, event: str, payload: dict | None = None) -> None:
        raise ConnectionError("push channel down")


@pytest.fixture
def gateways(tmp_path):
    return build_file_gateways(tmp_path)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return FailingNotifier()


@pytest.fixture
def catalog(gateways, notifier):
    return ProductCatalogService(gateways.products, notifier)


@pytest.fixture
def cart_service(gateways, catalog, notifier):
    return CartService(gateways.carts, catalog, notifier)
