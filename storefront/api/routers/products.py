# storefront/api/routers/products.py
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from storefront.api.caching import read_through
from storefront.api.deps import get_cache, get_db
from storefront.api.responses import ok, paged
from storefront.domain.errors import ValidationError
from storefront.services.cache_service import CacheService
from storefront.services.product_service import ProductService
from storefront.utils.pagination import check_pagination

router = APIRouter(tags=["products"])

SORT_DIRECTIONS = ("asc", "desc")


def resolve_sort(sort_name: str | None, sort_price: str | None) -> str:
    """sort[name]=asc -> name_asc; name wins when both are given."""
    for field, direction in (("name", sort_name), ("price", sort_price)):
        if not direction:
            continue
        direction = direction.lower()
        if direction not in SORT_DIRECTIONS:
            raise ValidationError(f"Invalid sort[{field}] value, use asc or desc")
        return f"{field}_{direction}"
    return ""


@router.get("/products")
def list_products(
    request: Request,
    q: str = "",
    cat: List[str] = Query([]),
    minprice: Decimal = Decimal("0"),
    maxprice: Decimal = Decimal("0"),
    sort_name: str | None = Query(None, alias="sort[name]"),
    sort_price: str | None = Query(None, alias="sort[price]"),
    page: int = 1,
    limit: int = 10,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    """
    Public product listing.
    Filters: q (name), cat (repeatable), minprice / maxprice, sort[name] / sort[price].
    """
    check_pagination(page, limit)
    sort = resolve_sort(sort_name, sort_price)

    def compute():
        products, total = ProductService(db).list_products(
            q.strip(), [c for c in cat if c], sort, minprice, maxprice, page, limit
        )
        return paged(request, "Success get products", products, page, limit, total)

    return read_through(request, cache, compute)


@router.get("/favourite-products")
def list_favourite_products(
    request: Request,
    limit: int = 4,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    check_pagination(1, limit, max_limit=20)
    return read_through(
        request,
        cache,
        lambda: ok("Success get favourite products", data=ProductService(db).list_favourites(limit)),
    )


@router.get("/products/{product_id}")
def get_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    return read_through(
        request,
        cache,
        lambda: ok("Success get product detail", data=ProductService(db).get_product(product_id)),
    )
