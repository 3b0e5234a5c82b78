# storefront/api/routers/auth.py
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from storefront.api.deps import bearer, get_bearer_token, get_cache, get_db
from storefront.api.responses import ok
from storefront.domain.schemas import ForgotPasswordIn, LoginIn, RegisterIn, ResetPasswordIn, TokenOut
from storefront.services.auth_service import AuthService
from storefront.services.cache_service import CacheService

router = APIRouter(prefix="/auth", tags=["auth"])


def get_service(db: Session, cache: CacheService):
    return AuthService(db, cache)


@router.post("/register", status_code=201)
def register(
    payload: RegisterIn,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    user = get_service(db, cache).register(payload)
    return ok("Register success", data=user)


@router.post("/login")
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    token = get_service(db, cache).login(payload)
    return ok("Login success", data=TokenOut(token=token).model_dump(by_alias=True))


@router.post("/logout")
def logout(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    """
    Revokes the bearer token until it expires.
    """
    get_service(db, cache).logout(token)
    return ok("Logout success")


@router.post("/forgot-password")
def forgot_password(
    payload: ForgotPasswordIn,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    """
    Issues a reset token valid for one hour and emails it; older tokens are dropped.
    """
    data = get_service(db, cache).forgot_password(payload)
    return ok("Password reset link sent to email", data=data)


@router.post("/reset-password")
def reset_password(
    payload: ResetPasswordIn,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    caller_token = credentials.credentials if credentials else None
    get_service(db, cache).reset_password(payload, caller_token)
    return ok("Password has been reset successfully")
