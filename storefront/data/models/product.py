from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric, ForeignKey, Table
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


product_sizes = Table(
    "product_sizes",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("size_id", Integer, ForeignKey("sizes.id", ondelete="CASCADE"), primary_key=True),
)

product_variants = Table(
    "product_variants",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("variant_id", Integer, ForeignKey("variants.id", ondelete="CASCADE"), primary_key=True),
)

product_categories = Table(
    "product_categories",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    discount_percent = Column(Numeric(5, 2), nullable=False, default=0)
    rating = Column(Numeric(3, 1), nullable=False, default=5)
    is_flash_sale = Column(Boolean, nullable=False, default=False)
    stock = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    is_favourite = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
    created_by = Column(Integer, nullable=True)
    updated_by = Column(Integer, nullable=True)

    images = relationship(
        "ProductImageModel",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductImageModel.id",
    )
    sizes = relationship("SizeModel", secondary=product_sizes, order_by="SizeModel.id")
    variants = relationship("VariantModel", secondary=product_variants, order_by="VariantModel.id")
    categories = relationship("CategoryModel", secondary=product_categories, order_by="CategoryModel.id")

    @property
    def primary_image(self) -> str:
        for img in self.images:
            if img.is_primary:
                return img.product_image
        return ""


class ProductImageModel(Base):
    __tablename__ = "product_images"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    product_image = Column(String(255), nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)

    product = relationship("ProductModel", back_populates="images")
