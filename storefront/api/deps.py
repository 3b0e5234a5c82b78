# storefront/api/deps.py
from typing import Iterator, NamedTuple

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storefront.domain.errors import UnauthorizedError
from storefront.services.cache_service import CacheService
from storefront.utils.security import decode_access_token

bearer = HTTPBearer(auto_error=False)


class CurrentUser(NamedTuple):
    id: int
    role: str


def get_db(request: Request) -> Iterator[Session]:
    """One session per request, closed when the response is sent."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_cache(request: Request) -> CacheService:
    return request.app.state.cache


def get_bearer_token(credentials: HTTPAuthorizationCredentials | None = Depends(bearer)) -> str:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Unauthorized, token is required")
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    cache: CacheService = Depends(get_cache),
) -> CurrentUser:
    payload = decode_access_token(token)
    if cache.is_blacklisted(token):
        raise UnauthorizedError("Token has been revoked, please login again")
    return CurrentUser(id=int(payload["id"]), role=payload.get("role") or "customer")
