# storefront/api/routers/methods.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.api.caching import read_through
from storefront.api.deps import get_cache, get_db
from storefront.api.responses import ok
from storefront.services.cache_service import CacheService
from storefront.services.transaction_service import TransactionService

router = APIRouter(tags=["methods"])


@router.get("/order-methods")
def list_order_methods(
    request: Request,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    return read_through(
        request,
        cache,
        lambda: ok("Success get order methods", data=TransactionService(db).list_order_methods()),
    )


@router.get("/payment-methods")
def list_payment_methods(
    request: Request,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    return read_through(
        request,
        cache,
        lambda: ok("Success get payment methods", data=TransactionService(db).list_payment_methods()),
    )
