"""
Response envelopes and read projections returned by the HTTP layer.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

SUCCESSFUL_PRODUCT_LIST_RETRIEVAL = "Products successfully retrieved"
SUCCESSFUL_PRODUCT_RETRIEVAL = "Product successfully retrieved"
SUCCESSFUL_PRODUCT_ACTIVATION = "Product successfully activated"
SUCCESSFUL_PRODUCT_DEACTIVATION = "Product successfully deactivated"
SUCCESSFUL_PRODUCT_REFRESH = "Products successfully refreshed"
SUCCESSFUL_CACHE_ADD = "Product Successfully added to Memory"
SUCCESSFUL_CACHE_FETCH = "Cache Products Successfully fetched"


class NameAndCode(BaseModel):
    code: str
    name: str


class ProductResponse(BaseModel):
    product_id: int
    name: str
    description: Optional[str] = None
    product_type: Optional[str] = None
    unit_of_measure: Optional[str] = None
    primary_product_image_url: Optional[str] = None
    product_status: NameAndCode
    date_modified: Optional[datetime] = None


class ProductImageResponse(BaseModel):
    public_url: str
    is_primary_image: bool = False


class ProductDetailResponse(BaseModel):
    product_id: int
    name: str
    description: Optional[str] = None
    product_type: Optional[str] = None
    price: Decimal
    product_sap_number: str
    unit_of_measure: NameAndCode
    product_status: NameAndCode
    date_modified: Optional[datetime] = None
    product_images: List[ProductImageResponse] = Field(default_factory=list)


class PaginatedList(BaseModel, Generic[T]):
    items: List[T] = Field(default_factory=list)
    page_index: int
    page_size: int
    total_pages: int
    total_count: int


def success_response(message: str, data: Any = None) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    elif isinstance(data, list):
        data = [d.model_dump(mode="json") if isinstance(d, BaseModel) else d for d in data]
    return {"success": True, "message": message, "data": data}
