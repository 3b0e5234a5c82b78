# storefront/services/catalog_service.py
from typing import Any, Dict, List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.catalog import SizeModel, VariantModel, CategoryModel
from storefront.domain.constants import PRODUCTS_PATTERNS
from storefront.domain.errors import ConflictError, NotFoundError
from storefront.domain.schemas import CatalogItemIn, CatalogItemUpdateIn
from storefront.repos.catalog_repo import CatalogRepo
from storefront.services.cache_service import CacheService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogKind:
    """Describes one named lookup: its model, the cost column if any and the listing path."""

    def __init__(self, name: str, label: str, model, path: str, cost_field: str | None = None):
        self.name = name
        self.label = label
        self.model = model
        self.path = path
        self.cost_field = cost_field

    @property
    def cost_key(self) -> str | None:
        # size_cost -> sizeCost
        if not self.cost_field:
            return None
        head, tail = self.cost_field.split("_", 1)
        return head + tail.capitalize()


SIZES = CatalogKind("sizes", "Size", SizeModel, "/sizes", cost_field="size_cost")
VARIANTS = CatalogKind("variants", "Variant", VariantModel, "/variants", cost_field="variant_cost")
CATEGORIES = CatalogKind("categories", "Category", CategoryModel, "/categories")


class CatalogService:
    def __init__(self, db: Session, kind: CatalogKind, cache: CacheService | None = None):
        self.repo = CatalogRepo(db, kind.model)
        self.kind = kind
        self.cache = cache

    def list_items(self, page: int, limit: int, search: str = "") -> Tuple[List[Dict[str, Any]], int]:
        total = self.repo.count(search)
        return [self._item_dict(item) for item in self.repo.list(page, limit, search)], total

    def get_item(self, item_id: int) -> Dict[str, Any]:
        return self._item_dict(self._get(item_id))

    def create_item(self, payload: CatalogItemIn) -> Dict[str, Any]:
        name = payload.name.strip()
        if self.repo.name_taken(name):
            raise ConflictError(f'{self.kind.label} "{name}" already exists')

        item = self.kind.model(name=name)
        if self.kind.cost_field:
            setattr(item, self.kind.cost_field, payload.cost)

        self.repo.add(item)
        self.repo.commit()
        logger.info(f"{self.kind.label} {item.id} ({item.name}) created")

        self._invalidate_caches()
        return self._item_dict(item)

    def update_item(self, item_id: int, payload: CatalogItemUpdateIn) -> Dict[str, Any]:
        item = self._get(item_id)

        if payload.name is not None:
            name = payload.name.strip()
            if self.repo.name_taken(name, exclude_id=item_id):
                raise ConflictError(f'{self.kind.label} "{name}" already exists')
            item.name = name
        if payload.cost is not None and self.kind.cost_field:
            setattr(item, self.kind.cost_field, payload.cost)

        self.repo.commit()
        logger.info(f"{self.kind.label} {item_id} updated")

        self._invalidate_caches()
        return self._item_dict(item)

    def delete_item(self, item_id: int):
        item = self._get(item_id)
        try:
            self.repo.delete(item)
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            raise ConflictError(f"{self.kind.label} is still used and cannot be deleted")
        logger.info(f"{self.kind.label} {item_id} deleted")

        self._invalidate_caches()

    def _get(self, item_id: int):
        item = self.repo.get(item_id)
        if not item:
            raise NotFoundError(f"{self.kind.label} not found")
        return item

    def _invalidate_caches(self):
        if self.cache is None:
            return
        # product details embed these names
        for pattern in (f"{self.kind.path}*", *PRODUCTS_PATTERNS):
            self.cache.invalidate(pattern)

    def _item_dict(self, item) -> Dict[str, Any]:
        data = {"id": item.id, "name": item.name}
        if self.kind.cost_field:
            data[self.kind.cost_key] = getattr(item, self.kind.cost_field)
        return data
