"""
SQLAlchemy models for products, product statuses and product images.
Used by the SQL repository in product_catalog/database/repository.py.
"""
from __future__ import annotations
from datetime import datetime, timezone
from decimal import Decimal
from enum import IntEnum
from typing import Optional
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, SmallInteger, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class ProductStatusEnum(IntEnum):
    ACTIVE = 1
    INACTIVE = 2

    @property
    def code(self) -> str:
        return {ProductStatusEnum.ACTIVE: "Active", ProductStatusEnum.INACTIVE: "InActive"}[self]

    @property
    def display_name(self) -> str:
        return {ProductStatusEnum.ACTIVE: "Active", ProductStatusEnum.INACTIVE: "Inactive"}[self]


class ProductStatus(Base):
    __tablename__ = "product_statuses"

    id: Mapped[int] = mapped_column(SmallInteger, primary_key=True, autoincrement=False)
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(64), nullable=False)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    product_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    company_code: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    country_code: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    unit_of_measure_code: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    product_sap_number: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))

    product_status_id: Mapped[int] = mapped_column(SmallInteger, ForeignKey("product_statuses.id"), nullable=False)

    date_created: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    date_modified: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    date_refreshed: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    modified_by_user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    status: Mapped["ProductStatus"] = relationship("ProductStatus")
    images: Mapped[list["ProductImage"]] = relationship(
        "ProductImage",
        back_populates="product",
        order_by="ProductImage.id",
        cascade="all, delete-orphan",
    )


class ProductImage(Base):
    __tablename__ = "product_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    public_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    # At most one primary image per product; callers keep this true, the table does not.
    is_primary_image: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    product: Mapped["Product"] = relationship("Product", back_populates="images")
