"""
SAP product contracts.

Shape of one row of an externally supplied product batch ("SAP products").
Rows are held in the staging cache until the next refresh reconciles them
against persisted products. There is no persistent identity; the SAP number
is the natural key.

Both snake_case and the upstream camelCase field names are accepted.
"""
from __future__ import annotations

from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class StagedSapProduct(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    description: str = ""
    product_type: str = Field(default="", validation_alias=AliasChoices("product_type", "productType"))
    product_status: str = Field(validation_alias=AliasChoices("product_status", "productStatus"))
    country_code: str = Field(default="", validation_alias=AliasChoices("country_code", "countryCode"))
    company_code: str = Field(validation_alias=AliasChoices("company_code", "companyCode"))
    unit_of_measure_code: str = Field(
        default="", validation_alias=AliasChoices("unit_of_measure_code", "unitOfMeasureCode")
    )
    product_sap_number: str = Field(
        min_length=1, validation_alias=AliasChoices("product_sap_number", "productSapNumber")
    )
    price: Decimal = Decimal("0")
