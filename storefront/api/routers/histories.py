# storefront/api/routers/histories.py
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.api.caching import read_through
from storefront.api.deps import CurrentUser, get_cache, get_current_user, get_db
from storefront.api.responses import ok, paged
from storefront.domain.errors import ValidationError
from storefront.services.cache_service import CacheService
from storefront.services.transaction_service import TransactionService
from storefront.utils.pagination import check_pagination

router = APIRouter(prefix="/histories", tags=["histories"])


def parse_day(value: str):
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date format, use YYYY-MM-DD")


@router.get("")
def list_histories(
    request: Request,
    page: int = 1,
    limit: int = 5,
    date: str = "",
    statusid: int = 1,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    """
    Transactions of the current user, newest first.
    Cached per user, the key keeps the /histories prefix.
    """
    check_pagination(page, limit, max_limit=10)
    day = parse_day(date.strip())

    def compute():
        histories, total = TransactionService(db).list_histories(user.id, page, limit, day, statusid)
        return paged(request, "Success get histories", histories, page, limit, total)

    return read_through(request, cache, compute, scope=f"user:{user.id}")


@router.get("/{no_invoice}")
def get_history(
    no_invoice: str,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    return read_through(
        request,
        cache,
        lambda: ok("Success get history detail", data=TransactionService(db).get_history(user.id, no_invoice)),
        scope=f"user:{user.id}",
    )
