# storefront/repos/product_repo.py
from decimal import Decimal
from typing import List, Sequence

from sqlalchemy import select, func, or_, update
from sqlalchemy.orm import Session

from storefront.data.models.catalog import CategoryModel
from storefront.data.models.product import ProductModel

SORTS = {
    "name_asc": ProductModel.name.asc(),
    "name_desc": ProductModel.name.desc(),
    "price_asc": ProductModel.price.asc(),
    "price_desc": ProductModel.price.desc(),
}


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_products_for_update(self, ids: Sequence[int]) -> List[ProductModel]:
        # row locks until commit/rollback, no-op on sqlite
        stmt = (
            select(ProductModel)
            .where(ProductModel.id.in_(ids))
            .order_by(ProductModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    def decrement_stock(self, product_id: int, amount: int) -> int:
        # guarded decrement, rowcount 0 means the stock was not enough
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= amount)
            .values(stock=ProductModel.stock - amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def name_taken(self, name: str, exclude_id: int | None = None) -> bool:
        stmt = select(ProductModel.id).where(func.lower(ProductModel.name) == name.lower())
        if exclude_id is not None:
            stmt = stmt.where(ProductModel.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    # =====================================================
    # PUBLIC
    # =====================================================
    def _public_filters(self, q: str, categories: Sequence[str], min_price: Decimal, max_price: Decimal):
        conditions = [ProductModel.is_active.is_(True)]
        if q:
            conditions.append(ProductModel.name.ilike(f"%{q}%"))
        if categories:
            conditions.append(ProductModel.categories.any(CategoryModel.name.in_(list(categories))))
        if min_price > 0:
            conditions.append(ProductModel.price >= min_price)
        if max_price > 0:
            conditions.append(ProductModel.price <= max_price)
        return conditions

    def count_public(self, q: str, categories: Sequence[str], min_price: Decimal, max_price: Decimal) -> int:
        stmt = select(func.count(ProductModel.id)).where(*self._public_filters(q, categories, min_price, max_price))
        return self.db.execute(stmt).scalar_one()

    def list_public(
        self,
        q: str,
        categories: Sequence[str],
        sort: str,
        min_price: Decimal,
        max_price: Decimal,
        page: int,
        limit: int,
    ) -> List[ProductModel]:
        stmt = (
            select(ProductModel)
            .where(*self._public_filters(q, categories, min_price, max_price))
            .order_by(SORTS.get(sort, ProductModel.id.asc()))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_favourites(self, limit: int) -> List[ProductModel]:
        stmt = (
            select(ProductModel)
            .where(ProductModel.is_favourite.is_(True), ProductModel.is_active.is_(True))
            .order_by(ProductModel.id)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_recommendations(self, product: ProductModel, limit: int = 5) -> List[ProductModel]:
        category_ids = [c.id for c in product.categories]
        if not category_ids:
            return []
        stmt = (
            select(ProductModel)
            .where(
                ProductModel.id != product.id,
                ProductModel.is_active.is_(True),
                ProductModel.categories.any(CategoryModel.id.in_(category_ids)),
            )
            .order_by(ProductModel.id)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    # =====================================================
    # ADMIN
    # =====================================================
    def _admin_search(self, search: str):
        pattern = f"%{search}%"
        return or_(
            ProductModel.name.ilike(pattern),
            ProductModel.description.ilike(pattern),
            ProductModel.categories.any(CategoryModel.name.ilike(pattern)),
        )

    def count_admin(self, search: str = "") -> int:
        stmt = select(func.count(ProductModel.id))
        if search:
            stmt = stmt.where(self._admin_search(search))
        return self.db.execute(stmt).scalar_one()

    def list_admin(self, search: str, page: int, limit: int) -> List[ProductModel]:
        stmt = select(ProductModel)
        if search:
            stmt = stmt.where(self._admin_search(search))
        stmt = stmt.order_by(ProductModel.id).offset((page - 1) * limit).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete_product(self, product: ProductModel):
        self.db.delete(product)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
