from sqlalchemy import Column, Integer, String, Numeric

from storefront.data.database import Base


class OrderMethodModel(Base):
    __tablename__ = "order_methods"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), unique=True, nullable=False)
    delivery_fee = Column(Numeric(12, 2), nullable=False, default=0)


class PaymentMethodModel(Base):
    __tablename__ = "payment_methods"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), unique=True, nullable=False)
    image = Column(String(255), nullable=True)
    admin_fee = Column(Numeric(12, 2), nullable=False, default=0)


class StatusModel(Base):
    __tablename__ = "statuses"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), unique=True, nullable=False)
