# storefront/services/product_service.py
import random
from decimal import Decimal
from typing import Any, Dict, List, Sequence, Tuple

from sqlalchemy.orm import Session

from storefront.data.models.catalog import SizeModel, VariantModel, CategoryModel
from storefront.data.models.product import ProductModel, ProductImageModel
from storefront.domain.constants import PRODUCTS_PATTERNS
from storefront.domain.errors import ConflictError, NotFoundError, ValidationError
from storefront.domain.schemas import ProductIn, ProductUpdateIn
from storefront.repos.catalog_repo import CatalogRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.cache_service import CacheService
from storefront.utils.logging import get_logger
from storefront.utils.money import discount_price
from storefront.utils.uploads import public_url

logger = get_logger(__name__)

RECOMMENDATIONS = 5


class ProductService:
    """
    -public catalog: listing with filters, favourites, detail with recommendations
    -admin CRUD, every write drops the cached product listings
    """

    def __init__(self, db: Session, cache: CacheService | None = None):
        self.repo = ProductRepo(db)
        self.sizes = CatalogRepo(db, SizeModel)
        self.variants = CatalogRepo(db, VariantModel)
        self.categories = CatalogRepo(db, CategoryModel)
        self.cache = cache

    # =====================================================
    # PUBLIC
    # =====================================================
    def list_products(
        self,
        q: str,
        categories: Sequence[str],
        sort: str,
        min_price: Decimal,
        max_price: Decimal,
        page: int,
        limit: int,
    ) -> Tuple[List[Dict[str, Any]], int]:
        if min_price > 0 and max_price > 0 and min_price > max_price:
            raise ValidationError("minprice cannot be greater than maxprice")

        total = self.repo.count_public(q, categories, min_price, max_price)
        products = self.repo.list_public(q, categories, sort, min_price, max_price, page, limit)
        return [self._summary(p) for p in products], total

    def list_favourites(self, limit: int) -> List[Dict[str, Any]]:
        return [self._summary(p) for p in self.repo.list_favourites(limit)]

    def get_product(self, product_id: int, rng: random.Random | None = None) -> Dict[str, Any]:
        product = self.repo.get_product(product_id)
        if not product or not product.is_active:
            raise NotFoundError("Product not found")

        recommendations = [self._summary(p) for p in self.repo.list_recommendations(product, RECOMMENDATIONS)]
        (rng or random).shuffle(recommendations)

        detail = self._detail(product)
        detail["recommendations"] = recommendations
        return detail

    # =====================================================
    # ADMIN
    # =====================================================
    def list_admin(self, search: str, page: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        total = self.repo.count_admin(search)
        return [self._summary(p) for p in self.repo.list_admin(search, page, limit)], total

    def get_admin(self, product_id: int) -> Dict[str, Any]:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return self._detail(product)

    def create_product(self, payload: ProductIn, actor_id: int) -> Dict[str, Any]:
        name = payload.name.strip()
        if self.repo.name_taken(name):
            raise ConflictError(f'Product "{name}" already exists')

        product = ProductModel(
            name=name,
            description=payload.description,
            price=payload.price,
            discount_percent=payload.discount_percent,
            rating=payload.rating,
            is_flash_sale=payload.is_flash_sale,
            stock=payload.stock,
            is_active=payload.is_active,
            is_favourite=payload.is_favourite,
            created_by=actor_id,
            updated_by=actor_id,
        )
        product.images = self._images(payload.images)
        product.sizes = self._lookup(self.sizes, payload.size_ids, "size")
        product.variants = self._lookup(self.variants, payload.variant_ids, "variant")
        product.categories = self._lookup(self.categories, payload.category_ids, "category")

        self.repo.add_product(product)
        self.repo.commit()
        logger.info(f"Product {product.id} ({product.name}) created by {actor_id}")

        self._invalidate_caches()
        return self._detail(product)

    def update_product(self, product_id: int, payload: ProductUpdateIn, actor_id: int) -> Dict[str, Any]:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        changes = payload.model_dump(
            exclude_unset=True,
            exclude={"images", "size_ids", "variant_ids", "category_ids"},
        )
        if changes.get("name") is not None:
            name = changes["name"].strip()
            if self.repo.name_taken(name, exclude_id=product_id):
                raise ConflictError(f'Product "{name}" already exists')
            changes["name"] = name

        for field, value in changes.items():
            if value is not None:
                setattr(product, field, value)

        if payload.images is not None:
            product.images = self._images(payload.images)
        if payload.size_ids is not None:
            product.sizes = self._lookup(self.sizes, payload.size_ids, "size")
        if payload.variant_ids is not None:
            product.variants = self._lookup(self.variants, payload.variant_ids, "variant")
        if payload.category_ids is not None:
            product.categories = self._lookup(self.categories, payload.category_ids, "category")

        product.updated_by = actor_id
        self.repo.commit()
        logger.info(f"Product {product_id} updated by {actor_id}")

        self._invalidate_caches()
        return self._detail(product)

    def delete_product(self, product_id: int):
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        self.repo.delete_product(product)
        self.repo.commit()
        logger.info(f"Product {product_id} deleted")

        self._invalidate_caches()

    # =====================================================
    # HELPERS
    # =====================================================
    def _images(self, urls: Sequence[str]) -> List[ProductImageModel]:
        # first image is the primary one
        return [
            ProductImageModel(product_image=url, is_primary=(i == 0))
            for i, url in enumerate(u.strip() for u in urls if u and u.strip())
        ]

    def _lookup(self, repo: CatalogRepo, ids: Sequence[int], label: str) -> List:
        unique_ids = list(dict.fromkeys(ids))
        items = repo.get_many(unique_ids)
        found = {item.id for item in items}
        missing = [i for i in unique_ids if i not in found]
        if missing:
            raise NotFoundError(f"Invalid {label} id {missing[0]}")
        return items

    def _invalidate_caches(self):
        if self.cache is None:
            return
        for pattern in PRODUCTS_PATTERNS:
            self.cache.invalidate(pattern)

    def _summary(self, product: ProductModel) -> Dict[str, Any]:
        return {
            "id": product.id,
            "name": product.name,
            "description": product.description or "",
            "price": product.price,
            "discountPercent": product.discount_percent,
            "discountPrice": discount_price(product.price, product.discount_percent),
            "rating": product.rating,
            "isFlashSale": product.is_flash_sale,
            "isFavourite": product.is_favourite,
            "stock": product.stock,
            "image": public_url(product.primary_image),
            "categories": [c.name for c in product.categories],
        }

    def _detail(self, product: ProductModel) -> Dict[str, Any]:
        detail = self._summary(product)
        detail.update({
            "isActive": product.is_active,
            "images": [public_url(img.product_image) for img in product.images],
            "sizes": [{"id": s.id, "name": s.name, "sizeCost": s.size_cost} for s in product.sizes],
            "variants": [{"id": v.id, "name": v.name, "variantCost": v.variant_cost} for v in product.variants],
            "categories": [{"id": c.id, "name": c.name} for c in product.categories],
        })
        return detail
