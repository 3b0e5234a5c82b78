# storefront/data/models/transaction.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class TransactionModel(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    no_invoice = Column(String(32), unique=True, nullable=False, index=True)  # INV-20250101-00042
    date_transaction = Column(DateTime(timezone=True), nullable=False, default=_now, index=True)

    # contact snapshot, later profile edits must not touch it
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)

    payment_method_id = Column(Integer, ForeignKey("payment_methods.id"), nullable=False)
    order_method_id = Column(Integer, ForeignKey("order_methods.id"), nullable=False)
    status_id = Column(Integer, ForeignKey("statuses.id"), nullable=False, default=1)

    delivery_fee = Column(Numeric(12, 2), nullable=False, default=0)
    admin_fee = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    total_transaction = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
    created_by = Column(Integer, nullable=True)
    updated_by = Column(Integer, nullable=True)

    status = relationship("StatusModel")
    order_method = relationship("OrderMethodModel")
    payment_method = relationship("PaymentMethodModel")
    items = relationship(
        "TransactionItemModel",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionItemModel.id",
    )


class TransactionItemModel(Base):
    __tablename__ = "transaction_items"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    # line snapshot at purchase time
    product_name = Column(String(100), nullable=False)
    product_price = Column(Numeric(12, 2), nullable=False)
    discount_percent = Column(Numeric(5, 2), nullable=False, default=0)
    discount_price = Column(Numeric(12, 2), nullable=False, default=0)
    size = Column(String(50), nullable=False, default="")
    size_cost = Column(Numeric(12, 2), nullable=False, default=0)
    variant = Column(String(50), nullable=False, default="")
    variant_cost = Column(Numeric(12, 2), nullable=False, default=0)
    amount = Column(Integer, nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    created_by = Column(Integer, nullable=True)
    updated_by = Column(Integer, nullable=True)

    transaction = relationship("TransactionModel", back_populates="items")
    product = relationship("ProductModel")
