"""
API endpoints for product records, the SAP staging cache and the refresh job.
"""
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from product_catalog.api.dependencies import get_authenticated_user_id, get_product_service
from product_catalog.database.repository import ProductSorting
from product_catalog.integrations.contracts.products import StagedSapProduct
from product_catalog.services.product_service import ProductQueryFilter, ProductService
from product_catalog.utils import responses

router = APIRouter(prefix="/api/v1/products", tags=["Products"])


class ActivateProductRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(validation_alias=AliasChoices("product_id", "productId"))
    activate: bool


@router.post("")
async def add_products(
    products: List[StagedSapProduct] = Body(...),
    service: ProductService = Depends(get_product_service),
):
    staged = service.add_products(products)
    return responses.success_response(responses.SUCCESSFUL_CACHE_ADD, staged)


@router.get("/cache-products")
async def get_cache_products(service: ProductService = Depends(get_product_service)):
    return responses.success_response(responses.SUCCESSFUL_CACHE_FETCH, service.get_cache_products())


@router.get("/autoRefresh")
async def auto_refresh_products(service: ProductService = Depends(get_product_service)):
    result = await service.auto_refresh_products()
    return responses.success_response(responses.SUCCESSFUL_PRODUCT_REFRESH, result.to_dict())


@router.post("/activate")
async def activate_or_deactivate_product(
    body: ActivateProductRequest,
    user_id: int = Depends(get_authenticated_user_id),
    service: ProductService = Depends(get_product_service),
):
    activated = service.activate_deactivate_product(body.product_id, body.activate, user_id)
    message = responses.SUCCESSFUL_PRODUCT_ACTIVATION if activated else responses.SUCCESSFUL_PRODUCT_DEACTIVATION
    return responses.success_response(message)


@router.get("")
async def get_products(
    company_code: Optional[str] = Query(default=None, alias="companyCode"),
    search_keyword: Optional[str] = Query(default=None, alias="searchKeyword"),
    product_status_code: Optional[str] = Query(default=None, alias="productStatusCode"),
    page_index: int = Query(default=1, alias="pageIndex"),
    page_size: int = Query(default=10, alias="pageSize"),
    sort: ProductSorting = Query(default=ProductSorting.DEFAULT),
    service: ProductService = Depends(get_product_service),
):
    page = service.get_products(
        ProductQueryFilter(
            company_code=company_code,
            search_keyword=search_keyword,
            product_status_code=product_status_code,
            page_index=page_index,
            page_size=page_size,
            sort=sort,
        )
    )
    return responses.success_response(responses.SUCCESSFUL_PRODUCT_LIST_RETRIEVAL, page)


@router.get("/{product_id}")
async def get_product_by_id(product_id: int, service: ProductService = Depends(get_product_service)):
    return responses.success_response(responses.SUCCESSFUL_PRODUCT_RETRIEVAL, service.get_product_by_id(product_id))
