"""
Service configuration loader (database, staging cache, upstream RData service, events).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///./product_catalog.db"
    create_tables: bool = True


class UpstreamConfig(BaseModel):
    """RData microservice that owns the company roster."""

    base_url: str = ""
    companies_endpoint: str = "/api/v1/companies"
    api_key: str = ""
    timeout_seconds: float = Field(default=15.0, gt=0, le=300)
    mode: Literal["mock", "real"] = "mock"

    @property
    def companies_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.companies_endpoint}"


class CacheConfig(BaseModel):
    backend: Literal["memory", "redis"] = "memory"
    redis_url: str = ""
    key: str = "SapProducts"
    sliding_expiration_days: int = Field(default=6, ge=1)
    absolute_expiration_days: int = Field(default=30, ge=1)


class EventsConfig(BaseModel):
    backend: Literal["memory", "redis"] = "memory"
    redis_url: str = ""
    product_updated_topic: str = "products.product.updated"
    product_refreshed_topic: str = "products.product.refreshed"


class PaginationConfig(BaseModel):
    default_page_size: int = Field(default=10, ge=1, le=500)
    max_page_size: int = Field(default=100, ge=1, le=1000)


class ServiceConfig(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)


def _apply_env_overrides(data: dict) -> dict:
    """Environment wins over the YAML file for connection strings and endpoints."""
    database = data.setdefault("database", {})
    upstream = data.setdefault("upstream", {})
    cache = data.setdefault("cache", {})
    events = data.setdefault("events", {})

    if os.getenv("DATABASE_URL"):
        database["url"] = os.environ["DATABASE_URL"]

    if os.getenv("RDATA_BASE_URL"):
        upstream["base_url"] = os.environ["RDATA_BASE_URL"]
    if os.getenv("RDATA_COMPANIES_ENDPOINT"):
        upstream["companies_endpoint"] = os.environ["RDATA_COMPANIES_ENDPOINT"]
    if os.getenv("RDATA_API_KEY"):
        upstream["api_key"] = os.environ["RDATA_API_KEY"]

    mode = os.getenv("INTEGRATIONS_MODE", "").strip().lower()
    if mode in {"real", "live"}:
        upstream["mode"] = "real"
    elif mode in {"mock", "test"}:
        upstream["mode"] = "mock"

    redis_url = os.getenv("REDIS_URL")
    if redis_url:
        cache["backend"] = "redis"
        cache["redis_url"] = redis_url
        events["backend"] = "redis"
        events["redis_url"] = redis_url
    return data


def load_service_config(config_path: Optional[Path] = None, *, use_env: bool = True) -> ServiceConfig:
    """
    Load and validate the service configuration.

    Args:
        config_path: YAML file to read. Defaults to config/service_config.yml;
            a missing default file yields the built-in defaults.
        use_env: apply DATABASE_URL / REDIS_URL / RDATA_* overrides.

    Raises:
        FileNotFoundError: an explicit config_path does not exist
        ValidationError: the merged settings do not match the schema
    """
    data: dict = {}
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "service_config.yml"
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
    else:
        if not config_path.exists():
            raise FileNotFoundError(f"Service config file not found: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    if use_env:
        data = _apply_env_overrides(data)

    try:
        cfg = ServiceConfig(**data)
        logger.info("Loaded service config (cache=%s, events=%s, upstream=%s)", cfg.cache.backend, cfg.events.backend, cfg.upstream.mode)
        return cfg
    except ValidationError as e:
        logger.error("Service config validation failed: %s", e)
        raise
