# sizes, variants and categories: small named lookups attached to products
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class SizeModel(Base):
    __tablename__ = "sizes"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), unique=True, nullable=False)
    size_cost = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)


class VariantModel(Base):
    __tablename__ = "variants"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), unique=True, nullable=False)
    variant_cost = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)


class CategoryModel(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), unique=True, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
