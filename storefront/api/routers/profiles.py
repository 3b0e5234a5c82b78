# storefront/api/routers/profiles.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import CurrentUser, get_current_user, get_db
from storefront.api.responses import ok
from storefront.domain.schemas import ProfileUpdateIn
from storefront.services.user_service import UserService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("")
def get_profile(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok("Success get profile", data=UserService(db).get_profile(user.id))


@router.patch("")
def update_profile(
    payload: ProfileUpdateIn,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok("Profile updated successfully", data=UserService(db).update_profile(user.id, payload))
