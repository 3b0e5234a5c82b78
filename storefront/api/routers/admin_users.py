# storefront/api/routers/admin_users.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.api.deps import CurrentUser, get_current_user, get_db
from storefront.api.responses import ok, paged
from storefront.domain.schemas import UserCreateIn, UserUpdateIn
from storefront.services.user_service import UserService
from storefront.utils.pagination import check_pagination

router = APIRouter(prefix="/admin/users", tags=["admin users"])


@router.get("")
def list_users(
    request: Request,
    search: str = "",
    page: int = 1,
    limit: int = 10,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    check_pagination(page, limit)
    users, total = UserService(db).list_users(search.strip(), page, limit)
    return paged(request, "Success get users", users, page, limit, total)


@router.get("/{user_id}")
def get_user(
    user_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok("Success get user", data=UserService(db).get_user(user_id))


@router.post("", status_code=201)
def create_user(
    payload: UserCreateIn,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok("User created successfully", data=UserService(db).create_user(payload, user.id))


@router.patch("/{user_id}")
def update_user(
    user_id: int,
    payload: UserUpdateIn,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok("User updated successfully", data=UserService(db).update_user(user_id, payload, user.id))


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    UserService(db).delete_user(user_id)
    return ok("User deleted successfully")
