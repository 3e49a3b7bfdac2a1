"""Pytest fixtures for the product catalog service."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from product_catalog.database.models import Product, ProductStatusEnum
from product_catalog.database.repository import ProductRepository
from product_catalog.database.staging_cache import StagingCache
from product_catalog.events.bus import InMemoryMessageBus
from product_catalog.events.publisher import EventPublisher
from product_catalog.integrations.clients.mocks.local_companies import LocalCompanyClient
from product_catalog.integrations.contracts.products import StagedSapProduct
from product_catalog.services.product_service import ProductService
from product_catalog.services.reconciliation import ProductReconciler

NOW = datetime(2024, 3, 1, 12, 0, 0)


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def company_roster(*codes):
    return {
        "status": "00",
        "message": "ok",
        "data": {"data": {"companies": [{"code": c, "name": f"Company {c}"} for c in codes]}},
    }


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def roster():
    return company_roster


@pytest.fixture
def repository(tmp_path):
    """SQLite-backed repository, one database file per test."""
    repo = ProductRepository(f"sqlite:///{tmp_path / 'catalog.db'}")
    repo.create_tables()
    return repo


@pytest.fixture
def staging_cache(clock):
    return StagingCache(clock=clock)


@pytest.fixture
def bus():
    return InMemoryMessageBus()


@pytest.fixture
def publisher(bus):
    return EventPublisher(bus)


@pytest.fixture
def company_client():
    return LocalCompanyClient(company_roster("1000", "2000"))


@pytest.fixture
def reconciler(repository, staging_cache, company_client, publisher, clock):
    return ProductReconciler(repository, staging_cache, company_client, publisher, clock=clock)


@pytest.fixture
def service(repository, staging_cache, publisher, reconciler, clock):
    return ProductService(repository, staging_cache, publisher, reconciler, clock=clock)


@pytest.fixture
def make_staged():
    def _make(sap, *, price=10, company_code="1000", status="Active", name=None, **overrides):
        data = {
            "name": name or f"Staged {sap}",
            "description": f"Description of {sap}",
            "product_type": "Finished Good",
            "product_status": status,
            "country_code": "NG",
            "company_code": company_code,
            "unit_of_measure_code": "CS",
            "product_sap_number": sap,
            "price": price,
        }
        data.update(overrides)
        return StagedSapProduct(**data)

    return _make


@pytest.fixture
def seed_product(repository):
    def _seed(
        sap,
        *,
        name=None,
        status=ProductStatusEnum.ACTIVE,
        company_code="1000",
        description="",
        price=Decimal("10.00"),
        date_created=NOW,
        images=(),
    ):
        st = repository.get_status(status)
        product = Product(
            name=name or f"Product {sap}",
            description=description,
            product_type="Finished Good",
            company_code=company_code,
            country_code="NG",
            unit_of_measure_code="CS",
            product_sap_number=sap,
            price=price,
            product_status_id=st.id,
            status=st,
            date_created=date_created,
            images=[],
        )
        saved = repository.save_products([product], [])[0]
        for url, primary in images:
            repository.add_image(saved.id, url, primary)
        return saved

    return _seed
