# storefront/api/routers/admin_transactions.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.api.caching import read_through
from storefront.api.deps import CurrentUser, get_cache, get_current_user, get_db
from storefront.api.responses import ok, paged
from storefront.domain.schemas import StatusUpdateIn
from storefront.services.cache_service import CacheService
from storefront.services.transaction_service import TransactionService
from storefront.utils.pagination import check_pagination

router = APIRouter(prefix="/admin/transactions", tags=["admin transactions"])


def get_service(db: Session, cache: CacheService):
    return TransactionService(db, cache)


@router.get("")
def list_transactions(
    request: Request,
    page: int = 1,
    limit: int = 10,
    search: str = "",
    status: str = "",
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    check_pagination(page, limit)

    def compute():
        items, total = get_service(db, cache).list_transactions(page, limit, search.strip(), status.strip())
        return paged(request, "Success get transactions", items, page, limit, total, links=False)

    return read_through(request, cache, compute)


@router.get("/{transaction_id}")
def get_transaction(
    transaction_id: int,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    return read_through(
        request,
        cache,
        lambda: ok("Success get transaction detail", data=get_service(db, cache).get_transaction(transaction_id)),
    )


@router.patch("/{transaction_id}")
def update_transaction_status(
    transaction_id: int,
    payload: StatusUpdateIn,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    """
    Dine In and Pick Up orders cannot be set to 'Sending Goods'.
    """
    return get_service(db, cache).update_status(transaction_id, payload.status_id, user.id)
