# storefront/repos/transaction_repo.py
from datetime import datetime, date, time, timedelta, timezone
from typing import List

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from storefront.data.models.method import OrderMethodModel, PaymentMethodModel, StatusModel
from storefront.data.models.transaction import TransactionModel, TransactionItemModel


class TransactionRepo:
    def __init__(self, db: Session):
        self.db = db

    # lookups
    def get_order_method(self, order_method_id: int) -> OrderMethodModel | None:
        return self.db.get(OrderMethodModel, order_method_id)

    def get_payment_method(self, payment_method_id: int) -> PaymentMethodModel | None:
        return self.db.get(PaymentMethodModel, payment_method_id)

    def get_status(self, status_id: int) -> StatusModel | None:
        return self.db.get(StatusModel, status_id)

    def list_order_methods(self) -> List[OrderMethodModel]:
        return list(self.db.execute(select(OrderMethodModel).order_by(OrderMethodModel.id)).scalars().all())

    def list_payment_methods(self) -> List[PaymentMethodModel]:
        return list(self.db.execute(select(PaymentMethodModel).order_by(PaymentMethodModel.id)).scalars().all())

    # writes
    def invoice_exists(self, no_invoice: str) -> bool:
        stmt = select(TransactionModel.id).where(TransactionModel.no_invoice == no_invoice)
        return self.db.execute(stmt).first() is not None

    def add_transaction(self, transaction: TransactionModel) -> TransactionModel:
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def add_item(self, item: TransactionItemModel):
        self.db.add(item)

    # reads
    def get_transaction(self, transaction_id: int) -> TransactionModel | None:
        return self.db.get(TransactionModel, transaction_id)

    def get_by_invoice(self, user_id: int, no_invoice: str) -> TransactionModel | None:
        stmt = select(TransactionModel).where(
            TransactionModel.user_id == user_id,
            TransactionModel.no_invoice == no_invoice,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def _admin_filters(self, search: str, status: str):
        conditions = []
        if search:
            conditions.append(TransactionModel.no_invoice.ilike(f"%{search}%"))
        if status:
            conditions.append(TransactionModel.status.has(func.lower(StatusModel.name) == status.lower()))
        return conditions

    def count_admin(self, search: str = "", status: str = "") -> int:
        stmt = select(func.count(TransactionModel.id)).where(*self._admin_filters(search, status))
        return self.db.execute(stmt).scalar_one()

    def list_admin(self, page: int, limit: int, search: str = "", status: str = "") -> List[TransactionModel]:
        stmt = (
            select(TransactionModel)
            .where(*self._admin_filters(search, status))
            .order_by(TransactionModel.date_transaction.desc(), TransactionModel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def _history_filters(self, user_id: int, day: date | None, status_id: int):
        conditions = [TransactionModel.user_id == user_id]
        if day is not None:
            start = datetime.combine(day, time.min, tzinfo=timezone.utc)
            conditions.append(TransactionModel.date_transaction >= start)
            conditions.append(TransactionModel.date_transaction < start + timedelta(days=1))
        if status_id > 0:
            conditions.append(TransactionModel.status_id == status_id)
        return conditions

    def count_histories(self, user_id: int, day: date | None, status_id: int) -> int:
        stmt = select(func.count(TransactionModel.id)).where(*self._history_filters(user_id, day, status_id))
        return self.db.execute(stmt).scalar_one()

    def list_histories(self, user_id: int, page: int, limit: int, day: date | None, status_id: int) -> List[TransactionModel]:
        stmt = (
            select(TransactionModel)
            .where(*self._history_filters(user_id, day, status_id))
            .order_by(TransactionModel.date_transaction.desc(), TransactionModel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
