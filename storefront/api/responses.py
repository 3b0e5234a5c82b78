# storefront/api/responses.py
from typing import Any, Dict

from storefront.utils.pagination import build_links, check_page_range, page_meta


def ok(message: str, data: Any = None, meta: Dict[str, Any] | None = None, links: Dict[str, Any] | None = None):
    body: Dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    if meta is not None:
        body["meta"] = meta
    if links is not None:
        body["_links"] = links
    return body


def fail(message: str, error: str | None = None):
    body: Dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body


def paged(request, message: str, items, page: int, limit: int, total: int, links: bool = True):
    """Envelope for paginated listings; a page past the last one is an error."""
    check_page_range(page, limit, total)
    return ok(
        message,
        data=items,
        meta=page_meta(page, limit, total),
        links=build_links(request, page, limit, total) if links else None,
    )
