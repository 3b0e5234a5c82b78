# storefront/repos/catalog_repo.py
from typing import List, Sequence

from sqlalchemy import select, func
from sqlalchemy.orm import Session


class CatalogRepo:
    """Shared queries for the named lookups: sizes, variants, categories."""

    def __init__(self, db: Session, model):
        self.db = db
        self.model = model

    def get(self, item_id: int):
        return self.db.get(self.model, item_id)

    def get_many(self, ids: Sequence[int]) -> List:
        if not ids:
            return []
        return list(self.db.execute(select(self.model).where(self.model.id.in_(ids))).scalars().all())

    def name_taken(self, name: str, exclude_id: int | None = None) -> bool:
        stmt = select(self.model.id).where(func.lower(self.model.name) == name.lower())
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    def count(self, search: str = "") -> int:
        stmt = select(func.count(self.model.id))
        if search:
            stmt = stmt.where(self.model.name.ilike(f"%{search}%"))
        return self.db.execute(stmt).scalar_one()

    def list(self, page: int, limit: int, search: str = "") -> List:
        stmt = select(self.model)
        if search:
            stmt = stmt.where(self.model.name.ilike(f"%{search}%"))
        stmt = stmt.order_by(self.model.id).offset((page - 1) * limit).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def add(self, item):
        self.db.add(item)
        self.db.flush()
        return item

    def delete(self, item):
        self.db.delete(item)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
