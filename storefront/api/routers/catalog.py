# storefront/api/routers/catalog.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.api.caching import read_through
from storefront.api.deps import CurrentUser, get_cache, get_current_user, get_db
from storefront.api.responses import ok, paged
from storefront.domain.schemas import CatalogItemIn, CatalogItemUpdateIn
from storefront.services.cache_service import CacheService
from storefront.services.catalog_service import CatalogKind, CatalogService, SIZES, VARIANTS, CATEGORIES
from storefront.utils.pagination import check_pagination


def build_public_router(kind: CatalogKind) -> APIRouter:
    router = APIRouter(prefix=kind.path, tags=[kind.name])

    @router.get("")
    def list_items(
        request: Request,
        search: str = "",
        page: int = 1,
        limit: int = 10,
        db: Session = Depends(get_db),
        cache: CacheService = Depends(get_cache),
    ):
        check_pagination(page, limit)

        def compute():
            items, total = CatalogService(db, kind).list_items(page, limit, search.strip())
            return paged(request, f"Success get {kind.name}", items, page, limit, total)

        return read_through(request, cache, compute)

    return router


def build_admin_router(kind: CatalogKind) -> APIRouter:
    router = APIRouter(prefix=f"/admin{kind.path}", tags=[f"admin {kind.name}"])

    def get_service(db: Session, cache: CacheService):
        return CatalogService(db, kind, cache)

    @router.get("/{item_id}")
    def get_item(
        item_id: int,
        user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
        cache: CacheService = Depends(get_cache),
    ):
        return ok(f"Success get {kind.label.lower()}", data=get_service(db, cache).get_item(item_id))

    @router.post("", status_code=201)
    def create_item(
        payload: CatalogItemIn,
        user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
        cache: CacheService = Depends(get_cache),
    ):
        return ok(f"{kind.label} created successfully", data=get_service(db, cache).create_item(payload))

    @router.patch("/{item_id}")
    def update_item(
        item_id: int,
        payload: CatalogItemUpdateIn,
        user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
        cache: CacheService = Depends(get_cache),
    ):
        return ok(f"{kind.label} updated successfully", data=get_service(db, cache).update_item(item_id, payload))

    @router.delete("/{item_id}")
    def delete_item(
        item_id: int,
        user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
        cache: CacheService = Depends(get_cache),
    ):
        get_service(db, cache).delete_item(item_id)
        return ok(f"{kind.label} deleted successfully")

    return router


KINDS = (SIZES, VARIANTS, CATEGORIES)

routers = [build_public_router(kind) for kind in KINDS] + [build_admin_router(kind) for kind in KINDS]
