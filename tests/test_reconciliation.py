import json
from decimal import Decimal

import httpx
import pytest

from product_catalog.database.models import ProductStatusEnum
from product_catalog.error_handler import EventPublishError, UpstreamServiceError
from product_catalog.events.bus import MessageBus
from product_catalog.events.publisher import PRODUCTS_PRODUCT_REFRESHED, EventPublisher
from product_catalog.integrations.clients.mocks.local_companies import LocalCompanyClient
from product_catalog.integrations.clients.real_http.rdata_companies import RDataCompanyClient
from product_catalog.services.reconciliation import ProductReconciler
from product_catalog.utils.config_loader import UpstreamConfig


def _refreshed_batches(bus):
    return [[json.loads(m) for m in json.loads(p)] for p in bus.on_topic(PRODUCTS_PRODUCT_REFRESHED)]


def _forbid_writes(monkeypatch, repository):
    def fail(*args, **kwargs):
        raise AssertionError("repository write during refresh")

    monkeypatch.setattr(repository, "save_products", fail)
    monkeypatch.setattr(repository, "update_product", fail)


@pytest.mark.asyncio
async def test_nothing_staged_is_a_no_op(reconciler, repository, bus, monkeypatch):
    _forbid_writes(monkeypatch, repository)

    result = await reconciler.refresh()

    assert result.changed == 0
    assert bus.published == []


@pytest.mark.asyncio
async def test_rows_for_unknown_companies_are_ignored(reconciler, staging_cache, repository, bus, make_staged):
    staging_cache.put([make_staged("A", company_code="9999")])

    result = await reconciler.refresh()

    assert result.to_dict() == {"created": [], "updated": [], "skipped": []}
    assert repository.count_products() == 0
    assert bus.published == []


@pytest.mark.asyncio
async def test_company_match_is_case_sensitive(
    repository, staging_cache, publisher, bus, clock, make_staged, roster
):
    reconciler = ProductReconciler(
        repository, staging_cache, LocalCompanyClient(roster("ABC")), publisher, clock=clock
    )
    staging_cache.put([make_staged("A", company_code="abc")])

    result = await reconciler.refresh()

    assert result.changed == 0
    assert bus.published == []


@pytest.mark.asyncio
async def test_new_row_creates_product_and_publishes(reconciler, staging_cache, repository, bus, clock, make_staged):
    staging_cache.put([make_staged("A", price=Decimal("99.50"))])

    result = await reconciler.refresh()

    assert len(result.created) == 1
    assert result.updated == []
    product = repository.get_product(result.created[0])
    assert product.product_sap_number == "A"
    assert product.price == Decimal("99.50")
    assert product.status.code == "Active"
    assert product.date_created == clock.now
    assert product.date_refreshed == clock.now

    batches = _refreshed_batches(bus)
    assert len(batches) == 1
    [message] = batches[0]
    assert message["product_id"] == product.id
    assert message["company_code"] == "1000"
    assert message["country_code"] == "NG"
    assert message["product_status"] == {"code": "Active", "name": "Active"}


@pytest.mark.asyncio
async def test_existing_product_is_updated_in_place(
    reconciler, staging_cache, repository, bus, clock, make_staged, seed_product
):
    existing = seed_product("A", name="Old name", price=Decimal("10.00"))
    staging_cache.put([make_staged("A", name="New name", price=Decimal("12.00"), status="Inactive")])

    result = await reconciler.refresh()

    assert result.updated == [existing.id]
    assert result.created == []
    assert repository.count_products() == 1

    product = repository.get_product(existing.id)
    assert product.name == "New name"
    assert product.price == Decimal("12.00")
    assert product.product_status_id == ProductStatusEnum.INACTIVE.value
    assert product.date_refreshed == clock.now
    assert product.date_created == existing.date_created

    [[message]] = _refreshed_batches(bus)
    assert message["product_status"]["code"] == "InActive"


@pytest.mark.asyncio
async def test_status_can_match_by_code(reconciler, staging_cache, repository, make_staged):
    staging_cache.put([make_staged("A", status="InActive")])

    result = await reconciler.refresh()

    assert repository.get_product(result.created[0]).status.code == "InActive"


@pytest.mark.asyncio
async def test_create_and_update_share_one_event(
    reconciler, staging_cache, repository, bus, make_staged, seed_product
):
    existing = seed_product("A")
    staging_cache.put([make_staged("A"), make_staged("B"), make_staged("C", company_code="2000")])

    result = await reconciler.refresh()

    assert result.updated == [existing.id]
    assert len(result.created) == 2
    assert repository.count_products() == 3

    [batch] = _refreshed_batches(bus)
    assert sorted(m["product_sap_number"] for m in batch) == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_products_missing_from_the_batch_are_kept(
    reconciler, staging_cache, repository, make_staged, seed_product
):
    untouched = seed_product("OLD", name="Legacy")
    staging_cache.put([make_staged("A")])

    await reconciler.refresh()

    assert repository.count_products() == 2
    assert repository.get_product(untouched.id).name == "Legacy"


@pytest.mark.asyncio
async def test_unknown_status_is_skipped_and_reported(reconciler, staging_cache, repository, bus, make_staged):
    staging_cache.put([make_staged("A", status="Pending"), make_staged("B")])

    result = await reconciler.refresh()

    assert result.skipped == ["A"]
    assert len(result.created) == 1
    assert [p.product_sap_number for p in repository.get_products_by_sap_numbers(["A", "B"])] == ["B"]
    [batch] = _refreshed_batches(bus)
    assert [m["product_sap_number"] for m in batch] == ["B"]


@pytest.mark.asyncio
async def test_only_unknown_statuses_means_no_writes(
    reconciler, staging_cache, repository, bus, make_staged, monkeypatch
):
    staging_cache.put([make_staged("A", status="Pending")])
    _forbid_writes(monkeypatch, repository)

    result = await reconciler.refresh()

    assert result.skipped == ["A"]
    assert bus.published == []


@pytest.mark.asyncio
async def test_duplicate_company_codes_are_processed_once(
    repository, staging_cache, publisher, clock, make_staged, roster
):
    client = LocalCompanyClient(roster("1000", "1000"))
    reconciler = ProductReconciler(repository, staging_cache, client, publisher, clock=clock)
    staging_cache.put([make_staged("A")])

    result = await reconciler.refresh()

    assert len(result.created) == 1
    assert repository.count_products() == 1


@pytest.mark.asyncio
async def test_upstream_failure_aborts_before_any_write(
    repository, staging_cache, publisher, bus, clock, make_staged, monkeypatch
):
    transport = httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable"))
    client = RDataCompanyClient(UpstreamConfig(base_url="http://rdata.local", mode="real"), transport=transport)
    reconciler = ProductReconciler(repository, staging_cache, client, publisher, clock=clock)
    staging_cache.put([make_staged("A")])
    _forbid_writes(monkeypatch, repository)

    with pytest.raises(UpstreamServiceError):
        await reconciler.refresh()

    assert bus.published == []
    assert len(staging_cache.get()) == 1


class BrokenBus(MessageBus):
    def publish(self, topic, payload):
        raise ConnectionError("bus down")


@pytest.mark.asyncio
async def test_publish_failure_surfaces_after_commit(
    repository, staging_cache, company_client, clock, make_staged
):
    reconciler = ProductReconciler(
        repository, staging_cache, company_client, EventPublisher(BrokenBus()), clock=clock
    )
    staging_cache.put([make_staged("A")])

    with pytest.raises(EventPublishError):
        await reconciler.refresh()

    assert repository.count_products() == 1


@pytest.mark.asyncio
async def test_numeric_roster_codes_match_staged_rows(
    repository, staging_cache, publisher, clock, make_staged
):
    client = LocalCompanyClient({"data": {"data": {"companies": [{"code": 1000}]}}})
    reconciler = ProductReconciler(repository, staging_cache, client, publisher, clock=clock)
    staging_cache.put([make_staged("A", company_code="1000")])

    result = await reconciler.refresh()

    assert len(result.created) == 1


@pytest.mark.asyncio
async def test_duplicate_sap_numbers_update_the_oldest_record(
    reconciler, staging_cache, repository, make_staged, seed_product
):
    first = seed_product("A", name="First")
    second = seed_product("A", name="Second")
    staging_cache.put([make_staged("A", name="Refreshed")])

    result = await reconciler.refresh()

    assert result.updated == [first.id]
    assert repository.get_product(first.id).name == "Refreshed"
    assert repository.get_product(second.id).name == "Second"
