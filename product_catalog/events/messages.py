"""
Domain event payloads published by the product service.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from product_catalog.utils.responses import NameAndCode


class ProductUpdatedMessage(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    product_id: int
    product_sap_number: str
    name: str
    description: Optional[str] = None
    unit_of_measure_code: Optional[str] = None
    date_created: Optional[datetime] = None
    product_status: NameAndCode


class ProductRefreshedMessage(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    product_id: int
    product_sap_number: str
    name: str
    description: Optional[str] = None
    company_code: str
    country_code: Optional[str] = None
    unit_of_measure_code: Optional[str] = None
    price: Decimal
    date_created: Optional[datetime] = None
    date_refreshed: datetime
    product_status: NameAndCode
