"""
Product refresh (reconciliation).

Diffs the staged SAP product batch against persisted products, scoped to the
companies the RData service currently knows about:

1. fetch the company roster (an upstream failure aborts before any write)
2. keep only staged rows whose company code is on the roster
3. load persisted products sharing those SAP numbers
4. per company, per staged row: create a product, or overwrite the persisted
   one in place
5. commit creates + updates in one transaction (skipped when empty)
6. publish one "product refreshed" event covering every committed record

Rows whose status matches no known product status are skipped and reported
instead of being given a default status.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from product_catalog.database.models import Product, ProductStatus, utcnow
from product_catalog.database.repository import ProductRepository
from product_catalog.events.messages import ProductRefreshedMessage
from product_catalog.events.publisher import EventPublisher
from product_catalog.integrations.contracts.companies import Company, CompanyRosterClient
from product_catalog.integrations.contracts.products import StagedSapProduct
from product_catalog.utils.responses import NameAndCode

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    created: List[int] = field(default_factory=list)
    updated: List[int] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def changed(self) -> int:
        return len(self.created) + len(self.updated)

    def to_dict(self) -> Dict[str, List]:
        return {"created": self.created, "updated": self.updated, "skipped": self.skipped}


class StatusCatalog:
    """Resolves a staged status string to a persisted ProductStatus (exact name, then exact code)."""

    def __init__(self, statuses: List[ProductStatus]) -> None:
        self._by_name = {s.name: s for s in statuses}
        self._by_code = {s.code: s for s in statuses}
        self._by_id = {s.id: s for s in statuses}

    def resolve(self, value: str) -> Optional[ProductStatus]:
        return self._by_name.get(value) or self._by_code.get(value)

    def by_id(self, status_id: int) -> Optional[ProductStatus]:
        return self._by_id.get(status_id)


class ProductReconciler:
    def __init__(
        self,
        repository: ProductRepository,
        staging_cache,
        company_client: CompanyRosterClient,
        publisher: EventPublisher,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.repository = repository
        self.staging_cache = staging_cache
        self.company_client = company_client
        self.publisher = publisher
        self._clock = clock or utcnow

    async def refresh(self) -> RefreshResult:
        companies = await self.company_client.list_companies()
        roster = _unique_by_code(companies)

        staged = [p for p in self.staging_cache.get() if p.company_code in roster]
        result = RefreshResult()
        if not staged:
            logger.info("No staged products for the %d upstream companies; nothing to refresh", len(roster))
            return result

        catalog = StatusCatalog(self.repository.list_statuses())
        # Duplicate SAP numbers in the table: the oldest record is the one updated
        existing: Dict[str, Product] = {}
        for product in self.repository.get_products_by_sap_numbers(p.product_sap_number for p in staged):
            existing.setdefault(product.product_sap_number, product)

        now = self._clock()
        new_products: List[Product] = []
        updated_products: List[Product] = []
        for company_code in roster:
            for row in (p for p in staged if p.company_code == company_code):
                status = catalog.resolve(row.product_status)
                if status is None:
                    logger.warning(
                        "Skipping SAP product %s: unknown product status %r", row.product_sap_number, row.product_status
                    )
                    result.skipped.append(row.product_sap_number)
                    continue

                product = existing.get(row.product_sap_number)
                if product is None:
                    new_products.append(_new_product(row, status, now))
                else:
                    _apply_row(product, row, status, now)
                    updated_products.append(product)

        if not new_products and not updated_products:
            logger.info("Refresh produced no changes (%d rows skipped)", len(result.skipped))
            return result

        persisted = self.repository.save_products(new_products, updated_products)
        result.created = [p.id for p in persisted[: len(new_products)]]
        result.updated = [p.id for p in persisted[len(new_products):]]

        messages = [_refreshed_message(p, catalog) for p in persisted]
        self.publisher.publish_products_refreshed(messages)

        logger.info(
            "Refresh complete: %d created, %d updated, %d skipped",
            len(result.created),
            len(result.updated),
            len(result.skipped),
        )
        return result


def _unique_by_code(companies: List[Company]) -> Dict[str, Company]:
    roster: Dict[str, Company] = {}
    for company in companies:
        roster.setdefault(company.code, company)
    return roster


def _new_product(row: StagedSapProduct, status: ProductStatus, now: datetime) -> Product:
    return Product(
        name=row.name,
        description=row.description,
        product_type=row.product_type,
        company_code=row.company_code,
        country_code=row.country_code,
        unit_of_measure_code=row.unit_of_measure_code,
        product_sap_number=row.product_sap_number,
        price=row.price,
        product_status_id=status.id,
        status=status,
        date_created=now,
        date_refreshed=now,
        images=[],
    )


def _apply_row(product: Product, row: StagedSapProduct, status: ProductStatus, now: datetime) -> None:
    product.name = row.name
    product.description = row.description
    product.price = row.price
    product.company_code = row.company_code
    product.country_code = row.country_code
    product.product_type = row.product_type
    product.unit_of_measure_code = row.unit_of_measure_code
    product.product_status_id = status.id
    product.status = status
    product.date_refreshed = now


def _refreshed_message(product: Product, catalog: StatusCatalog) -> ProductRefreshedMessage:
    status = catalog.by_id(product.product_status_id)
    return ProductRefreshedMessage(
        product_id=product.id,
        product_sap_number=product.product_sap_number,
        name=product.name,
        description=product.description,
        company_code=product.company_code,
        country_code=product.country_code,
        unit_of_measure_code=product.unit_of_measure_code,
        price=product.price,
        date_created=product.date_created,
        date_refreshed=product.date_refreshed,
        product_status=NameAndCode(code=status.code, name=status.name),
    )
