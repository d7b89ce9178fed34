"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - backend is chosen once at startup: "file" or "database"
    - valid_categories is always a subset of the built-in category schemas
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for every setting: the file backend works out of the box
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from airsoft_shop.core.catalog_query import ListingPolicy
from airsoft_shop.core.domain_types import ALL_CATEGORIES


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Persistence
    backend: Literal["file", "database"] = "file"

    @field_validator("backend", mode="before")
    @classmethod
    def accept_mongo_alias(cls, v: str) -> str:
        """PERSISTENCE=mongo in older deployments means the database backend."""
        if isinstance(v, str) and v.strip().lower() == "mongo":
            return "database"
        return v.strip().lower() if isinstance(v, str) else v

    data_dir: str = "data"
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_database: str = "airsoft"
    mongo_timeout_ms: int = 5000

    # Catalog listing
    default_page_size: int = 10
    max_page_size: int = 100
    valid_categories: list[str] = list(ALL_CATEGORIES)
    valid_sort_fields: list[str] = ["title", "price", "category", "created_at"]
    valid_sort_orders: list[str] = ["asc", "desc"]
    default_sort_field: str = "created_at"
    default_sort_order: str = "desc"

    @field_validator("valid_categories")
    @classmethod
    def known_categories_only(cls, v: list[str]) -> list[str]:
        unknown = [c for c in v if c not in ALL_CATEGORIES]
        if unknown:
            raise ValueError(f"unknown categories: {', '.join(unknown)}")
        return v

    @model_validator(mode="after")
    def check_page_sizes(self) -> "Settings":
        if not 0 < self.default_page_size <= self.max_page_size:
            raise ValueError("default_page_size must be between 1 and max_page_size")
        return self

    # API
    cors_origins: list[str] = ["*"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def listing_policy(self) -> ListingPolicy:
        return ListingPolicy(
            default_page_size=self.default_page_size,
            max_page_size=self.max_page_size,
            sort_fields=tuple(self.valid_sort_fields),
            sort_orders=tuple(self.valid_sort_orders),
            default_sort=self.default_sort_field,
            default_order=self.default_sort_order,
            categories=tuple(self.valid_categories),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
