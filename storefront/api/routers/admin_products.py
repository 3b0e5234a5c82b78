# storefront/api/routers/admin_products.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.api.caching import read_through
from storefront.api.deps import CurrentUser, get_cache, get_current_user, get_db
from storefront.api.responses import ok, paged
from storefront.domain.schemas import ProductIn, ProductUpdateIn
from storefront.services.cache_service import CacheService
from storefront.services.product_service import ProductService
from storefront.utils.pagination import check_pagination

router = APIRouter(prefix="/admin/products", tags=["admin products"])


def get_service(db: Session, cache: CacheService):
    return ProductService(db, cache)


@router.get("")
def list_products(
    request: Request,
    search: str = "",
    page: int = 1,
    limit: int = 10,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    check_pagination(page, limit)

    def compute():
        products, total = get_service(db, cache).list_admin(search.strip(), page, limit)
        return paged(request, "Success get products", products, page, limit, total)

    return read_through(request, cache, compute)


@router.get("/{product_id}")
def get_product(
    product_id: int,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    return read_through(
        request,
        cache,
        lambda: ok("Success get product", data=get_service(db, cache).get_admin(product_id)),
    )


@router.post("", status_code=201)
def create_product(
    payload: ProductIn,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    """
    Images are URLs, the first one becomes the primary image.
    """
    return ok("Product created successfully", data=get_service(db, cache).create_product(payload, user.id))


@router.patch("/{product_id}")
def update_product(
    product_id: int,
    payload: ProductUpdateIn,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    return ok(
        "Product updated successfully",
        data=get_service(db, cache).update_product(product_id, payload, user.id),
    )


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    get_service(db, cache).delete_product(product_id)
    return ok("Product deleted successfully")
