"""Route Dependencies — hand the services wired at startup to route handlers."""

from fastapi import Request

from airsoft_shop.infrastructure.gateway_factory import Gateways
from airsoft_shop.services.cart_service import CartService
from airsoft_shop.services.catalog_service import ProductCatalogService


def get_catalog(request: Request) -> ProductCatalogService:
    return request.app.state.catalog


def get_carts(request: Request) -> CartService:
    return request.app.state.carts


def get_gateways(request: Request) -> Gateways:
    return request.app.state.gateways
