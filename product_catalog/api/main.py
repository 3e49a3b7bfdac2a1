"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from product_catalog.api.products_router import router as products_router
from product_catalog.database.repository import ProductRepository
from product_catalog.error_handler import CatalogError, ErrorHandler, ValidationError
from product_catalog.events.bus import InMemoryMessageBus, RedisMessageBus
from product_catalog.events.publisher import EventPublisher
from product_catalog.services.product_service import ProductService
from product_catalog.services.reconciliation import ProductReconciler
from product_catalog.utils.config_loader import ServiceConfig, load_service_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

error_handler = ErrorHandler()


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

def build_product_service(cfg: ServiceConfig) -> ProductService:
    """Wire repository, staging cache, bus and company client from config; mock vs real is chosen here only."""
    repository = ProductRepository(connection_string=cfg.database.url)
    if cfg.database.create_tables:
        repository.create_tables()

    sliding = timedelta(days=cfg.cache.sliding_expiration_days)
    absolute = timedelta(days=cfg.cache.absolute_expiration_days)
    if cfg.cache.backend == "redis":
        from product_catalog.database.staging_cache_redis import RedisStagingCache

        staging_cache = RedisStagingCache(url=cfg.cache.redis_url, key=cfg.cache.key, sliding=sliding, absolute=absolute)
    else:
        from product_catalog.database.staging_cache import StagingCache

        staging_cache = StagingCache(key=cfg.cache.key, sliding=sliding, absolute=absolute)

    if cfg.events.backend == "redis":
        bus = RedisMessageBus(url=cfg.events.redis_url)
    else:
        bus = InMemoryMessageBus()
    publisher = EventPublisher(
        bus,
        updated_topic=cfg.events.product_updated_topic,
        refreshed_topic=cfg.events.product_refreshed_topic,
    )

    if cfg.upstream.mode == "real":
        from product_catalog.integrations.clients.real_http.rdata_companies import RDataCompanyClient

        company_client = RDataCompanyClient(cfg.upstream)
    else:
        from product_catalog.integrations.clients.mocks.local_companies import LocalCompanyClient

        company_client = LocalCompanyClient()

    reconciler = ProductReconciler(repository, staging_cache, company_client, publisher)
    return ProductService(
        repository,
        staging_cache,
        publisher,
        reconciler,
        default_page_size=cfg.pagination.default_page_size,
        max_page_size=cfg.pagination.max_page_size,
    )


def create_app(service: Optional[ProductService] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "product_service", None) is None:
            app.state.product_service = build_product_service(load_service_config())
            logger.info("Product service wired from configuration")
        yield

    app = FastAPI(
        title="Product Catalog API",
        description="Product records, SAP product staging and refresh",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.product_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        return JSONResponse(status_code=error_handler.status_code_for(exc), content=error_handler.handle_exception(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        error = ValidationError("Request validation failed", payload={"errors": jsonable_encoder(exc.errors())})
        content = error_handler.handle_exception(error)
        content["data"] = error.payload["errors"]
        return JSONResponse(status_code=error_handler.status_code_for(error), content=content)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        context = {"path": request.url.path, "method": request.method}
        return JSONResponse(status_code=500, content=error_handler.handle_exception(exc, context=context))

    @app.get("/health")
    async def health():
        svc = app.state.product_service
        cache_ok = bool(svc and svc.staging_cache.ping())
        return {"status": "ok" if cache_ok else "degraded", "cache": "connected" if cache_ok else "unavailable"}

    app.include_router(products_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("product_catalog.api.main:app", host="0.0.0.0", port=8000)
