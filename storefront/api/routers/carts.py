# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import CurrentUser, get_current_user, get_db
from storefront.api.responses import ok
from storefront.domain.schemas import CartIn
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session):
    return CartService(db)


@router.get("")
def list_cart(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok("Success get carts", data=get_service(db).list_cart(user.id))


@router.post("", status_code=201)
def add_to_cart(
    payload: CartIn,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Adds a product to the cart.
    Same product, size and variant go to one line, amounts are summed.
    """
    return ok("Product added to cart", data=get_service(db).add_to_cart(user.id, payload))


@router.delete("/{cart_id}")
def remove_from_cart(
    cart_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    get_service(db).remove_line(user.id, cart_id)
    return ok("Cart deleted successfully")
