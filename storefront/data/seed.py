# storefront/data/seed.py
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.models import OrderMethodModel, PaymentMethodModel, StatusModel
from storefront.domain.constants import STATUS_NAMES, ORDER_METHOD_NAMES, OrderMethod
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DELIVERY_FEES = {
    OrderMethod.DINE_IN: Decimal("0"),
    OrderMethod.DOOR_DELIVERY: Decimal("10000"),
    OrderMethod.PICK_UP: Decimal("0"),
}

PAYMENT_METHODS = [
    ("BRI", "bri.png", Decimal("1000")),
    ("Dana", "dana.png", Decimal("500")),
    ("BCA", "bca.png", Decimal("1000")),
    ("Gopay", "gopay.png", Decimal("500")),
    ("Ovo", "ovo.png", Decimal("500")),
    ("Cash On Delivery", "cod.png", Decimal("0")),
]


def seed(db: Session):
    """Insert lookup rows (statuses, order and payment methods) when the tables are empty."""
    # not forcing: only seed what is empty
    if not db.query(StatusModel).first():
        for status_id, name in STATUS_NAMES.items():
            db.add(StatusModel(id=int(status_id), name=name))
        logger.info("Seeded transaction statuses")

    if not db.query(OrderMethodModel).first():
        for method_id, name in ORDER_METHOD_NAMES.items():
            db.add(OrderMethodModel(id=int(method_id), name=name, delivery_fee=DELIVERY_FEES[method_id]))
        logger.info("Seeded order methods")

    if not db.query(PaymentMethodModel).first():
        for idx, (name, image, admin_fee) in enumerate(PAYMENT_METHODS, start=1):
            db.add(PaymentMethodModel(id=idx, name=name, image=image, admin_fee=admin_fee))
        logger.info("Seeded payment methods")

    db.commit()
