# storefront/repos/cart_repo.py
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_lines(self, user_id: int) -> List[CartModel]:
        stmt = (
            select(CartModel)
            .where(CartModel.user_id == user_id)
            .order_by(CartModel.updated_at.desc(), CartModel.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_line(self, line_id: int) -> CartModel | None:
        return self.db.get(CartModel, line_id)

    def find_line(self, user_id: int, product_id: int, size_id: int | None, variant_id: int | None) -> CartModel | None:
        stmt = select(CartModel).where(
            CartModel.user_id == user_id,
            CartModel.product_id == product_id,
            CartModel.size_id == size_id,
            CartModel.variant_id == variant_id,
        )
        return self.db.execute(stmt).scalars().first()

    def add_line(self, line: CartModel) -> CartModel:
        self.db.add(line)
        self.db.flush()
        return line

    def delete_line(self, line: CartModel):
        self.db.delete(line)

    def clear(self, user_id: int) -> int:
        result = self.db.execute(delete(CartModel).where(CartModel.user_id == user_id))
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
