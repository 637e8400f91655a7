"""
The JSON envelope every endpoint answers with.

Success::

    {"success": true, "message": "...", "data": ..., "timestamp": "..."}

Error::

    {"success": false, "message": "...", "errors": [...], "timestamp": "..."}

Paginated lists carry a ``pagination`` block instead of a message.
"""
from __future__ import annotations

import math
from typing import Any, Optional

from django.utils import timezone
from rest_framework import status as http
from rest_framework.response import Response

from .timestamps import to_external_format

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def now_iso() -> str:
    return to_external_format(timezone.now())


def success_body(data: Any = None, message: str = 'Success') -> dict:
    return {'success': True, 'message': message, 'data': data, 'timestamp': now_iso()}


def error_body(message: str = 'An error occurred', errors: Optional[list] = None) -> dict:
    body = {'success': False, 'message': message}
    if errors:
        body['errors'] = errors
    body['timestamp'] = now_iso()
    return body


def pagination_meta(page: int, limit: int, total: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        'page': page,
        'limit': limit,
        'total': total,
        'totalPages': total_pages,
        'hasNext': page * limit < total,
        'hasPrev': page > 1,
    }


def success_response(data: Any = None, message: str = 'Success', status: int = http.HTTP_200_OK) -> Response:
    return Response(success_body(data, message), status=status)


def error_response(message: str = 'An error occurred', status: int = http.HTTP_500_INTERNAL_SERVER_ERROR,
                   errors: Optional[list] = None) -> Response:
    return Response(error_body(message, errors), status=status)


def paginated_response(data: list, page: int, limit: int, total: int, message: Optional[str] = None) -> Response:
    body = {'success': True}
    if message:
        body['message'] = message
    body['data'] = data
    body['pagination'] = pagination_meta(page, limit, total)
    body['timestamp'] = now_iso()
    return Response(body, status=http.HTTP_200_OK)


def page_params(request) -> tuple[int, int, int]:
    """Read ``page``/``limit`` from the query string; returns ``(page, limit, offset)``."""
    def _int(name, default):
        try:
            return int(request.query_params.get(name, default))
        except (TypeError, ValueError):
            return default

    page = max(_int('page', 1), 1)
    limit = min(max(_int('limit', DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
    return page, limit, (page - 1) * limit
