# storefront/api/caching.py
from typing import Any, Callable

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from storefront.services.cache_service import CacheService
from storefront.utils.settings import CACHE_TTL_SECONDS


def cache_key(request: Request, scope: str | None = None) -> str:
    """
    Path plus query string, e.g. /products?page=2&limit=10.
    A scope is appended after '#' so per-user entries still match the path pattern.
    """
    key = request.url.path
    if request.url.query:
        key = f"{key}?{request.url.query}"
    if scope:
        key = f"{key}#{scope}"
    return key


def read_through(
    request: Request,
    cache: CacheService,
    compute: Callable[[], Any],
    scope: str | None = None,
    ttl: int = CACHE_TTL_SECONDS,
) -> JSONResponse:
    key = cache_key(request, scope)

    cached = cache.get_json(key)
    if cached is not None:
        return JSONResponse(cached)

    # stored as the exact json body so a hit answers with the same bytes
    body = jsonable_encoder(compute())
    cache.set_json(key, body, ttl)
    return JSONResponse(body)
