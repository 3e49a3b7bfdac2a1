"""
SQL-backed product repository (Postgres in production, SQLite for local runs and tests).
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from product_catalog.database.models import Base, Product, ProductImage, ProductStatus, ProductStatusEnum
from product_catalog.database.query_objects import QueryObject
from product_catalog.utils.pagination import PageFilter

logger = logging.getLogger(__name__)


class ProductSorting(str, Enum):
    DEFAULT = "Default"
    NAME_ASCENDING = "NameAscending"
    NAME_DESCENDING = "NameDescending"


def _normalize_connection_string(s: str) -> str:
    """Strip common mistakes: 'psql \'...\'', extra quotes, whitespace."""
    s = s.strip()
    if re.match(r"^psql\s+", s, re.IGNORECASE):
        s = re.sub(r"^psql\s+", "", s, flags=re.IGNORECASE).strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1].strip()
    return s


def _order_clauses(sort: ProductSorting):
    if sort == ProductSorting.NAME_ASCENDING:
        return [Product.name.asc(), Product.date_created.desc(), Product.id.desc()]
    if sort == ProductSorting.NAME_DESCENDING:
        return [Product.name.desc(), Product.date_created.desc(), Product.id.desc()]
    return [Product.date_created.desc(), Product.id.desc()]


class ProductRepository:
    """
    Product data access using SQLAlchemy. Every public method runs in its own
    session and commits once, so a call is one transaction.
    """

    def __init__(self, connection_string: str) -> None:
        connection_string = _normalize_connection_string(connection_string)
        if connection_string.startswith("sqlite"):
            self.engine = create_engine(connection_string, connect_args={"check_same_thread": False})
        else:
            self.engine = create_engine(connection_string, pool_pre_ping=True, pool_size=5, max_overflow=10)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        self._seed_statuses()

    def _seed_statuses(self) -> None:
        with self._session() as s:
            existing = {row.id for row in s.execute(select(ProductStatus)).scalars().all()}
            for status in ProductStatusEnum:
                if status.value not in existing:
                    s.add(ProductStatus(id=status.value, code=status.code, name=status.display_name))

    @contextmanager
    def _session(self) -> Session:
        s = self.SessionLocal()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    # ------------------------------------------------------------------ #
    # Statuses
    # ------------------------------------------------------------------ #
    def list_statuses(self) -> List[ProductStatus]:
        with self._session() as s:
            return list(s.execute(select(ProductStatus).order_by(ProductStatus.id)).scalars().all())

    def get_status(self, status: ProductStatusEnum) -> ProductStatus:
        with self._session() as s:
            row = s.get(ProductStatus, status.value)
            if row is None:
                raise LookupError(f"Product status {status.code} is not seeded")
            return row

    # ------------------------------------------------------------------ #
    # Products
    # ------------------------------------------------------------------ #
    def get_product(self, product_id: int) -> Optional[Product]:
        with self._session() as s:
            stmt = (
                select(Product)
                .where(Product.id == product_id)
                .options(selectinload(Product.status), selectinload(Product.images))
            )
            return s.execute(stmt).scalar_one_or_none()

    def list_products(
        self,
        query: QueryObject,
        sort: ProductSorting,
        page: PageFilter,
    ) -> Tuple[List[Product], int]:
        with self._session() as s:
            total = s.execute(select(func.count()).select_from(Product).where(query.expression)).scalar_one()
            stmt = (
                select(Product)
                .where(query.expression)
                .options(selectinload(Product.status), selectinload(Product.images))
                .order_by(*_order_clauses(sort))
                .offset(page.offset)
                .limit(page.page_size)
            )
            return list(s.execute(stmt).scalars().all()), int(total)

    def get_products_by_sap_numbers(self, sap_numbers: Iterable[str]) -> List[Product]:
        wanted = sorted(set(sap_numbers))
        if not wanted:
            return []
        with self._session() as s:
            stmt = (
                select(Product)
                .where(Product.product_sap_number.in_(wanted))
                .options(selectinload(Product.status), selectinload(Product.images))
                .order_by(Product.id)
            )
            return list(s.execute(stmt).scalars().all())

    def count_products(self) -> int:
        with self._session() as s:
            return int(s.execute(select(func.count()).select_from(Product)).scalar_one())

    def save_products(self, new_products: Sequence[Product], updated_products: Sequence[Product]) -> List[Product]:
        """Insert and update in one transaction; returns the persisted instances, creates first."""
        if not new_products and not updated_products:
            return []
        with self._session() as s:
            persisted = [s.merge(p) for p in new_products]
            persisted.extend(s.merge(p) for p in updated_products)
            s.flush()
            logger.info("Saved %d new and %d updated products", len(new_products), len(updated_products))
            return persisted

    def update_product(self, product: Product) -> Product:
        with self._session() as s:
            merged = s.merge(product)
            s.flush()
            return merged

    def add_image(self, product_id: int, public_url: str, is_primary_image: bool = False) -> ProductImage:
        with self._session() as s:
            image = ProductImage(product_id=product_id, public_url=public_url, is_primary_image=is_primary_image)
            s.add(image)
            s.flush()
            return image
