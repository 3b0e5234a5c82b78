# storefront/utils/pagination.py
import math
from typing import Any, Dict
from urllib.parse import urlencode

from fastapi import Request

from storefront.domain.errors import ValidationError


def check_pagination(page: int, limit: int, max_limit: int = 100):
    if page < 1:
        raise ValidationError("Invalid pagination parameter: 'page' must be greater than 0")
    if limit < 1:
        raise ValidationError("Invalid pagination parameter: 'limit' must be greater than 0")
    if limit > max_limit:
        raise ValidationError(f"Invalid pagination parameter: 'limit' cannot exceed {max_limit}")


def total_pages(total_data: int, limit: int) -> int:
    return math.ceil(total_data / limit)


def check_page_range(page: int, limit: int, total_data: int):
    pages = total_pages(total_data, limit)
    if page > pages and pages > 0:
        raise ValidationError("Page is out of range")


def page_meta(page: int, limit: int, total_data: int) -> Dict[str, int]:
    return {
        "currentPage": page,
        "perPage": limit,
        "totalData": total_data,
        "totalPages": total_pages(total_data, limit),
    }


def build_links(request: Request, page: int, limit: int, total_data: int) -> Dict[str, Any]:
    """HATEOAS links for a paginated listing; other query params are carried over."""
    last_page = total_pages(total_data, limit) or 1
    kept = [(k, v) for k, v in request.query_params.multi_items() if k not in ("page", "limit")]

    def make_url(page_num: int) -> str:
        query = urlencode(kept + [("page", page_num), ("limit", limit)])
        return str(request.url.replace(query=query))

    return {
        "self": make_url(page),
        "first": make_url(1),
        "last": make_url(last_page),
        "prev": make_url(page - 1) if page > 1 else None,
        "next": make_url(page + 1) if page < last_page else None,
    }
