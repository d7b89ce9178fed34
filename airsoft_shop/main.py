"""Airsoft Shop API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ShopError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Gateways built once on startup from settings.backend and closed on shutdown;
      services receive them through their constructors

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - create_app(settings) factory: tests build apps against a temporary data dir
      while uvicorn serves the module-level app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from airsoft_shop.api.error_handlers import register_error_handlers
from airsoft_shop.api.routes import carts, health, products
from airsoft_shop.config import Settings, get_settings
from airsoft_shop.core.repository_protocols import ChangeNotifier
from airsoft_shop.infrastructure.gateway_factory import build_gateways
from airsoft_shop.infrastructure.notifier import FanOutNotifier, LoggingChangeNotifier
from airsoft_shop.infrastructure.observability import setup_logging
from airsoft_shop.services.cart_service import CartService
from airsoft_shop.services.catalog_service import ProductCatalogService

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None, notifier: ChangeNotifier | None = None,
) -> FastAPI:
    """Build the API. An extra notifier receives events alongside the log."""
    settings = settings or get_settings()
    change_notifier = (
        FanOutNotifier(LoggingChangeNotifier(), notifier)
        if notifier is not None
        else LoggingChangeNotifier()
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        gateways = build_gateways(settings)
        await gateways.open()
        catalog = ProductCatalogService(
            gateways.products, change_notifier, settings.listing_policy(),
        )
        app.state.gateways = gateways
        app.state.catalog = catalog
        app.state.carts = CartService(gateways.carts, catalog, change_notifier)
        logger.info(
            "Airsoft Shop API started", extra={"backend": gateways.backend},
        )
        try:
            yield
        finally:
            await gateways.close()
            logger.info("Airsoft Shop API shutting down")

    app = FastAPI(title="Airsoft Shop API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes — explicit registration
    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(carts.router)

    register_error_handlers(app)
    return app


app = create_app()
