# storefront/api/routers/transactions.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import CurrentUser, get_cache, get_current_user, get_db
from storefront.api.responses import ok
from storefront.domain.schemas import CheckoutIn, CheckoutOut
from storefront.services.cache_service import CacheService
from storefront.services.checkout_service import CheckoutService

router = APIRouter(prefix="/transactions", tags=["transactions"])


def get_service(db: Session, cache: CacheService):
    return CheckoutService(db, cache)


@router.post("", status_code=201)
def create_transaction(
    payload: CheckoutIn,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    """
    Checks out the cart of the current user.
    Stock is re-checked, the cart is emptied and an order notification is queued.
    """
    result = get_service(db, cache).checkout(user.id, payload)
    return ok("Transaction created successfully", data=CheckoutOut(**result).model_dump(by_alias=True))
