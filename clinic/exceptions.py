"""
Error taxonomy and the unified API exception handler.

Handlers raise the exceptions below (or let DRF/Django/the database raise
their own); :func:`api_exception_handler` is the single place that turns
any failure into the ``{success: false, message, errors?, timestamp}``
envelope with the right HTTP status.
"""
from __future__ import annotations

import logging
import traceback

import jwt
from django.conf import settings
from django.db import IntegrityError
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class ApiError(drf_exceptions.APIException):
    """Base class; ``errors`` is an optional list of ``{field, message, value}``."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'internal'

    def __init__(self, detail=None, errors=None):
        super().__init__(detail=detail or self.default_detail, code=self.default_code)
        self.errors = errors


class ValidationFailed(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Validation failed'
    default_code = 'validation_failed'


class AuthenticationRequired(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authentication required. No token provided.'
    default_code = 'authentication_required'


class InvalidCredential(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid token'
    default_code = 'invalid_credential'


class InsufficientPermissions(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied. Insufficient permissions.'
    default_code = 'insufficient_permissions'

    def __init__(self, required_roles, user_role):
        self.required_roles = list(required_roles)
        self.user_role = user_role
        super().__init__(errors=[{
            'field': 'role',
            'message': f"Requires one of: {', '.join(self.required_roles)}",
            'value': user_role,
            'requiredRoles': self.required_roles,
        }])


class ResourceNotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found'
    default_code = 'not_found'


class DuplicateEntry(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Duplicate entry. This record already exists.'
    default_code = 'duplicate_entry'


class SchedulingConflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Time slot conflict detected'
    default_code = 'scheduling_conflict'


class DanglingReference(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Referenced record not found'
    default_code = 'dangling_reference'


class InvalidTimestamp(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid date/time'
    default_code = 'invalid_timestamp'


class Internal(ApiError):
    pass


def _validation_errors(detail, data, prefix: str = '') -> list[dict]:
    """Flatten DRF's nested ``ValidationError.detail`` into field entries."""
    out: list[dict] = []
    if isinstance(detail, dict):
        for field, value in detail.items():
            name = f'{prefix}.{field}' if prefix else str(field)
            sub = data.get(field) if isinstance(data, dict) else None
            out.extend(_validation_errors(value, sub, name) if isinstance(value, (dict, list)) else [
                {'field': name, 'message': str(value), 'value': sub}
            ])
    elif isinstance(detail, list):
        for i, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                sub = data[i] if isinstance(data, list) and i < len(data) else None
                out.extend(_validation_errors(value, sub, f'{prefix}[{i}]'))
            else:
                out.append({'field': prefix or 'non_field_errors', 'message': str(value), 'value': data})
    else:
        out.append({'field': prefix or 'non_field_errors', 'message': str(detail), 'value': data})
    return out


def _classify_integrity_error(exc: IntegrityError) -> ApiError:
    text = str(exc).lower()
    if 'foreign key' in text or 'cannot add or update a child row' in text:
        return DanglingReference(errors=[{'field': None, 'message': str(exc), 'value': None}])
    return DuplicateEntry(errors=[{'field': None, 'message': str(exc), 'value': None}])


def _translate(exc, context) -> ApiError | drf_exceptions.APIException:
    """Map foreign exception types onto the taxonomy."""
    if isinstance(exc, ApiError):
        return exc
    if isinstance(exc, drf_exceptions.ValidationError):
        request = context.get('request')
        data = getattr(request, 'data', None) if request is not None else None
        return ValidationFailed(errors=_validation_errors(exc.detail, data))
    if isinstance(exc, drf_exceptions.NotAuthenticated):
        return AuthenticationRequired()
    if isinstance(exc, drf_exceptions.AuthenticationFailed):
        return InvalidCredential(str(exc.detail))
    if isinstance(exc, jwt.ExpiredSignatureError):
        return InvalidCredential('Token expired')
    if isinstance(exc, jwt.InvalidTokenError):
        return InvalidCredential('Invalid token')
    if isinstance(exc, drf_exceptions.PermissionDenied):
        return _forbidden(exc)
    if isinstance(exc, (Http404, drf_exceptions.NotFound)):
        return ResourceNotFound(str(exc) or None)
    if isinstance(exc, IntegrityError):
        return _classify_integrity_error(exc)
    return exc


def _forbidden(exc) -> ApiError:
    err = ApiError(str(exc.detail))
    err.status_code = status.HTTP_403_FORBIDDEN
    return err


def api_exception_handler(exc, context):
    """DRF ``EXCEPTION_HANDLER``: every failure leaves as an error envelope."""
    # rest_framework.views loads the authentication classes, which import
    # this module; importing it at module level would be circular.
    from rest_framework.views import set_rollback

    from .responses import error_body

    exc = _translate(exc, context)
    set_rollback()

    if isinstance(exc, ApiError):
        if exc.status_code >= 500:
            logger.error('Unhandled API error: %s', exc.detail)
        return Response(error_body(str(exc.detail), exc.errors), status=exc.status_code)

    if isinstance(exc, drf_exceptions.APIException):
        # Throttled, MethodNotAllowed, ParseError, UnsupportedMediaType...
        headers = {}
        wait = getattr(exc, 'wait', None)
        if wait is not None:
            headers['Retry-After'] = str(int(wait))
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return Response(error_body(detail), status=exc.status_code, headers=headers)

    view = context.get('view')
    logger.error('Unhandled exception in %s', getattr(view, '__name__', view), exc_info=exc)
    body = error_body(str(Internal(str(exc) or None).detail))
    if settings.ENV != 'prod':
        body['stack'] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
