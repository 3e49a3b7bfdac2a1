from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.dialects import postgresql

from product_catalog.database.models import ProductStatusEnum
from product_catalog.database.query_objects import ProductFilter, ProductQueryObject
from product_catalog.database.repository import ProductSorting
from product_catalog.error_handler import NotFoundError
from product_catalog.services.product_service import ProductQueryFilter
from product_catalog.utils.pagination import normalize_page, page_count


@pytest.fixture
def catalog(seed_product, clock):
    for i in range(1, 26):
        seed_product(f"SAP-{i:03d}", name=f"Product {i:02d}", date_created=clock.now + timedelta(minutes=i))
    seed_product("SAP-900", name="Retired Lager", status=ProductStatusEnum.INACTIVE)
    seed_product("SAP-901", name="Retired Malt", status=ProductStatusEnum.INACTIVE, company_code="2000")
    seed_product("SAP-500", name="Sparkling Water", company_code="2000", description="Lightly carbonated")


def test_normalize_page_defaults_and_caps():
    assert normalize_page(0, 0) == normalize_page(1, 10)
    assert normalize_page(3, 500).page_size == 100
    assert normalize_page(3, 20).offset == 40
    assert page_count(25, 10) == 3
    assert page_count(0, 10) == 0


def test_query_object_always_filters_on_status():
    assert ProductQueryObject().names == ["status"]
    query = ProductQueryObject(ProductFilter(company_code="1000", search_text="lager"))
    assert query.names == ["status", "company", "search"]


def test_second_page_by_name(service, catalog):
    page = service.get_products(
        ProductQueryFilter(company_code="1000", page_index=2, page_size=10, sort=ProductSorting.NAME_ASCENDING)
    )

    assert [p.name for p in page.items] == [f"Product {i}" for i in range(11, 21)]
    assert page.page_index == 2
    assert page.total_count == 25
    assert page.total_pages == 3


def test_last_page_is_partial(service, catalog):
    page = service.get_products(
        ProductQueryFilter(company_code="1000", page_index=3, sort=ProductSorting.NAME_ASCENDING)
    )
    assert len(page.items) == 5


def test_default_status_filter_is_active(service, catalog):
    page = service.get_products(ProductQueryFilter(page_size=100))

    assert page.total_count == 26
    assert all(p.product_status.code == "Active" for p in page.items)


def test_status_filter_by_code(service, catalog):
    page = service.get_products(ProductQueryFilter(product_status_code="InActive"))
    assert sorted(p.name for p in page.items) == ["Retired Lager", "Retired Malt"]


def test_company_filter(service, catalog):
    page = service.get_products(ProductQueryFilter(company_code="2000"))
    assert [p.name for p in page.items] == ["Sparkling Water"]


def test_search_matches_name_description_and_sap_number(service, catalog):
    by_description = service.get_products(ProductQueryFilter(search_keyword="carbonated"))
    by_sap = service.get_products(ProductQueryFilter(search_keyword="SAP-02"))
    by_name = service.get_products(ProductQueryFilter(search_keyword="Product 0", page_size=50))

    assert [p.name for p in by_description.items] == ["Sparkling Water"]
    assert by_sap.total_count == 6  # SAP-020 .. SAP-025
    assert by_name.total_count == 9


def test_search_treats_wildcards_literally(service, catalog):
    page = service.get_products(ProductQueryFilter(search_keyword="%"))
    assert page.total_count == 0


def test_default_sort_is_newest_first(service, catalog):
    page = service.get_products(ProductQueryFilter(company_code="1000", page_size=3))
    assert [p.name for p in page.items] == ["Product 25", "Product 24", "Product 23"]


def test_name_descending(service, catalog):
    page = service.get_products(ProductQueryFilter(page_size=2, sort=ProductSorting.NAME_DESCENDING))
    assert [p.name for p in page.items] == ["Sparkling Water", "Product 25"]


def test_page_size_is_capped(service, catalog):
    page = service.get_products(ProductQueryFilter(page_size=1000))
    assert page.page_size == 100


def test_list_item_carries_primary_image(service, seed_product):
    seed_product(
        "IMG-1",
        images=[("https://cdn.example.com/side.png", False), ("https://cdn.example.com/front.png", True)],
    )
    seed_product("IMG-2")

    items = {p.name: p for p in service.get_products(ProductQueryFilter()).items}
    assert items["Product IMG-1"].primary_product_image_url == "https://cdn.example.com/front.png"
    assert items["Product IMG-2"].primary_product_image_url is None


def test_get_product_by_id_returns_detail(service, seed_product):
    saved = seed_product(
        "DET-1",
        price=Decimal("1250.50"),
        status=ProductStatusEnum.INACTIVE,
        images=[("https://cdn.example.com/a.png", True)],
    )

    detail = service.get_product_by_id(saved.id)

    assert detail.product_id == saved.id
    assert detail.product_sap_number == "DET-1"
    assert detail.price == Decimal("1250.50")
    assert detail.unit_of_measure.code == "CS"
    assert detail.product_status.code == "InActive"
    assert detail.product_status.name == "Inactive"
    assert [i.public_url for i in detail.product_images] == ["https://cdn.example.com/a.png"]


def test_get_product_by_id_raises_not_found(service):
    with pytest.raises(NotFoundError) as exc_info:
        service.get_product_by_id(404)
    assert exc_info.value.code == "PRODUCT_NOTFOUND"


def test_search_ignores_case(service, catalog):
    by_name = service.get_products(ProductQueryFilter(search_keyword="sparkling"))
    by_description = service.get_products(ProductQueryFilter(search_keyword="CARBONATED"))
    by_sap = service.get_products(ProductQueryFilter(search_keyword="sap-500"))

    assert [p.name for p in by_name.items] == ["Sparkling Water"]
    assert [p.name for p in by_description.items] == ["Sparkling Water"]
    assert [p.name for p in by_sap.items] == ["Sparkling Water"]


def test_search_lowercases_both_sides_on_postgres():
    query = ProductQueryObject(ProductFilter(search_text="Lager"))
    sql = str(query.expression.compile(dialect=postgresql.dialect())).lower()

    assert sql.count("lower(products.name)") == 1
    assert "lower(products.description)" in sql
    assert "lower(products.product_sap_number)" in sql
