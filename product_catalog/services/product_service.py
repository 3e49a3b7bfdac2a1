"""
Product service: the operations behind the /products endpoints.

Handlers stay thin; they call one method here and wrap the result in the
response envelope.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from product_catalog.database.models import Product, ProductStatusEnum, utcnow
from product_catalog.database.query_objects import ProductFilter, ProductQueryObject
from product_catalog.database.repository import ProductRepository, ProductSorting
from product_catalog.error_handler import NotFoundError, UnauthorizedError
from product_catalog.events.messages import ProductUpdatedMessage
from product_catalog.events.publisher import EventPublisher
from product_catalog.integrations.contracts.products import StagedSapProduct
from product_catalog.services.reconciliation import ProductReconciler, RefreshResult
from product_catalog.utils.pagination import normalize_page, page_count
from product_catalog.utils.responses import (
    NameAndCode,
    PaginatedList,
    ProductDetailResponse,
    ProductImageResponse,
    ProductResponse,
)

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = "Product not found"
PRODUCT_NOTFOUND_CODE = "PRODUCT_NOTFOUND"


@dataclass
class ProductQueryFilter:
    company_code: Optional[str] = None
    search_keyword: Optional[str] = None
    product_status_code: Optional[str] = None
    page_index: int = 1
    page_size: int = 10
    sort: ProductSorting = ProductSorting.DEFAULT


@dataclass
class _Snapshot:
    id: int
    name: str
    product_sap_number: str
    description: Optional[str]
    unit_of_measure_code: Optional[str]
    date_created: Optional[datetime]


class ProductService:
    def __init__(
        self,
        repository: ProductRepository,
        staging_cache,
        publisher: EventPublisher,
        reconciler: ProductReconciler,
        clock: Optional[Callable[[], datetime]] = None,
        default_page_size: int = 10,
        max_page_size: int = 100,
    ):
        self.repository = repository
        self.staging_cache = staging_cache
        self.publisher = publisher
        self.reconciler = reconciler
        self._clock = clock or utcnow
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    # ------------------------------------------------------------------ #
    # Staging
    # ------------------------------------------------------------------ #
    def add_products(self, products: List[StagedSapProduct]) -> List[StagedSapProduct]:
        return self.staging_cache.put(products)

    def get_cache_products(self) -> List[StagedSapProduct]:
        return self.staging_cache.get()

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #
    def get_products(self, query_filter: ProductQueryFilter) -> PaginatedList[ProductResponse]:
        page = normalize_page(
            query_filter.page_index,
            query_filter.page_size,
            default_size=self.default_page_size,
            max_size=self.max_page_size,
        )
        query = ProductQueryObject(
            ProductFilter(
                company_code=query_filter.company_code,
                product_status_code=query_filter.product_status_code,
                search_text=query_filter.search_keyword,
            )
        )
        products, total = self.repository.list_products(query, query_filter.sort, page)
        return PaginatedList[ProductResponse](
            items=[_to_list_item(p) for p in products],
            page_index=page.page_index,
            page_size=page.page_size,
            total_pages=page_count(total, page.page_size),
            total_count=total,
        )

    def get_product_by_id(self, product_id: int) -> ProductDetailResponse:
        product = self.repository.get_product(product_id)
        if product is None:
            raise NotFoundError(PRODUCT_NOT_FOUND, code=PRODUCT_NOTFOUND_CODE)
        return _to_detail(product)

    # ------------------------------------------------------------------ #
    # Activation
    # ------------------------------------------------------------------ #
    def activate_deactivate_product(self, product_id: int, activate: bool, user_id: int) -> bool:
        """
        Flip a product between Active and InActive and publish a product updated event.

        The event carries the product as it was before the change, except for
        the status, which is the new one.
        """
        user_id = _require_user_id(user_id)

        product = self.repository.get_product(product_id)
        if product is None:
            raise NotFoundError(PRODUCT_NOT_FOUND, code=PRODUCT_NOTFOUND_CODE)

        snapshot = _Snapshot(
            id=product.id,
            name=product.name,
            product_sap_number=product.product_sap_number,
            description=product.description,
            unit_of_measure_code=product.unit_of_measure_code,
            date_created=product.date_created,
        )

        target = ProductStatusEnum.ACTIVE if activate else ProductStatusEnum.INACTIVE
        status = self.repository.get_status(target)
        product.product_status_id = status.id
        product.status = status
        product.date_modified = self._clock()
        product.modified_by_user_id = user_id
        self.repository.update_product(product)
        logger.info("Product %s set to %s by user %s", product_id, status.code, user_id)

        self.publisher.publish_product_updated(
            ProductUpdatedMessage(
                product_id=snapshot.id,
                product_sap_number=snapshot.product_sap_number,
                name=snapshot.name,
                description=snapshot.description,
                unit_of_measure_code=snapshot.unit_of_measure_code,
                date_created=snapshot.date_created,
                product_status=NameAndCode(code=status.code, name=status.name),
            )
        )
        return activate

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #
    async def auto_refresh_products(self) -> RefreshResult:
        return await self.reconciler.refresh()


def _require_user_id(user_id: Optional[int]) -> int:
    if not user_id:
        raise UnauthorizedError("Access Denied.")
    return int(user_id)


def _primary_image_url(product: Product) -> Optional[str]:
    for image in product.images:
        if image.is_primary_image:
            return image.public_url
    return None


def _to_list_item(product: Product) -> ProductResponse:
    return ProductResponse(
        product_id=product.id,
        name=product.name,
        description=product.description,
        product_type=product.product_type,
        unit_of_measure=product.unit_of_measure_code,
        primary_product_image_url=_primary_image_url(product),
        product_status=NameAndCode(code=product.status.code, name=product.status.name),
        date_modified=product.date_modified,
    )


def _to_detail(product: Product) -> ProductDetailResponse:
    uom = product.unit_of_measure_code or ""
    return ProductDetailResponse(
        product_id=product.id,
        name=product.name,
        description=product.description,
        product_type=product.product_type,
        price=product.price,
        product_sap_number=product.product_sap_number,
        unit_of_measure=NameAndCode(code=uom, name=uom),
        product_status=NameAndCode(code=product.status.code, name=product.status.name),
        date_modified=product.date_modified,
        product_images=[
            ProductImageResponse(public_url=i.public_url, is_primary_image=i.is_primary_image) for i in product.images
        ],
    )
