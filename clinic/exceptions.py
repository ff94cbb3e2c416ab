"""
Error taxonomy and the project-wide DRF exception handler.

Services raise the exceptions below; the handler turns them, together
with DRF's own validation, authentication, permission and throttling
errors, into the response envelope
``{"success": false, "message": ..., "code": ..., "data": ...}``.
"""
from __future__ import annotations

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ClinicError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'INTERNAL_ERROR'


class ValidationError(ClinicError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input'
    default_code = 'VALIDATION_ERROR'


class AuthenticationError(ClinicError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authentication required'
    default_code = 'UNAUTHORIZED'


class AuthorizationError(ClinicError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied'
    default_code = 'FORBIDDEN'


class NotFoundError(ClinicError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'NOT_FOUND'


class ConflictError(ClinicError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict'
    default_code = 'CONFLICT'


# DRF exceptions mapped onto the codes above.
_DRF_CODES = {
    status.HTTP_400_BAD_REQUEST: 'VALIDATION_ERROR',
    status.HTTP_401_UNAUTHORIZED: 'UNAUTHORIZED',
    status.HTTP_403_FORBIDDEN: 'FORBIDDEN',
    status.HTTP_404_NOT_FOUND: 'NOT_FOUND',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'METHOD_NOT_ALLOWED',
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: 'UNSUPPORTED_MEDIA_TYPE',
    status.HTTP_429_TOO_MANY_REQUESTS: 'THROTTLED',
}


def first_error_message(detail) -> str:
    """Return the first human readable message found in a DRF error detail."""
    if isinstance(detail, dict):
        for value in detail.values():
            message = first_error_message(value)
            if message:
                return message
        return ''
    if isinstance(detail, (list, tuple)):
        for value in detail:
            message = first_error_message(value)
            if message:
                return message
        return ''
    return str(detail)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.error('Unhandled error in %s', type(view).__name__ if view else 'unknown view', exc_info=exc)
        return Response(
            {'success': False, 'message': 'Internal server error', 'code': 'INTERNAL_ERROR'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    payload: dict[str, object] = {'success': False}
    if isinstance(exc, ClinicError):
        payload['message'] = str(exc.detail)
        payload['code'] = exc.get_codes()
    elif isinstance(exc, exceptions.ValidationError):
        payload['message'] = first_error_message(exc.detail) or 'Invalid input'
        payload['code'] = 'VALIDATION_ERROR'
        payload['data'] = {'errors': resp.data}
    else:
        payload['message'] = first_error_message(resp.data) or 'Request failed'
        payload['code'] = _DRF_CODES.get(resp.status_code, 'API_ERROR')

    headers = {k: v for k, v in resp.items() if k in ('WWW-Authenticate', 'Retry-After')}
    return Response(payload, status=resp.status_code, headers=headers)
