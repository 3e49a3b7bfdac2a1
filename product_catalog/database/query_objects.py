"""
Predicate builders for product queries.

A query object accumulates named SQLAlchemy clauses and exposes their
conjunction, so the repository can apply one `where(...)` regardless of
which filters the caller supplied.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from sqlalchemy import and_, or_, true
from sqlalchemy.sql.elements import ColumnElement

from product_catalog.database.models import Product, ProductStatus, ProductStatusEnum


@dataclass
class ProductFilter:
    company_code: Optional[str] = None
    product_status_code: Optional[str] = None
    search_text: Optional[str] = None


class QueryObject:
    def __init__(self) -> None:
        self._predicates: Dict[str, ColumnElement[bool]] = {}

    def and_(self, name: str, predicate: ColumnElement[bool]) -> "QueryObject":
        self._predicates[name] = predicate
        return self

    @property
    def names(self) -> list[str]:
        return list(self._predicates)

    @property
    def expression(self) -> ColumnElement[bool]:
        if not self._predicates:
            return true()
        return and_(*self._predicates.values())


class ProductQueryObject(QueryObject):
    """Status (default Active), company and free-text search over name, description and SAP number."""

    def __init__(self, product_filter: Optional[ProductFilter] = None) -> None:
        super().__init__()
        product_filter = product_filter or ProductFilter()

        status_code = (product_filter.product_status_code or "").strip() or ProductStatusEnum.ACTIVE.code
        self.and_("status", Product.status.has(ProductStatus.code == status_code))

        company_code = (product_filter.company_code or "").strip()
        if company_code:
            self.and_("company", Product.company_code == company_code)

        search_text = (product_filter.search_text or "").strip()
        if search_text:
            self.and_(
                "search",
                or_(
                    Product.name.icontains(search_text, autoescape=True),
                    Product.description.icontains(search_text, autoescape=True),
                    Product.product_sap_number.icontains(search_text, autoescape=True),
                ),
            )
