"""
API exceptions and the project wide DRF exception handler.

Every error leaves the API with the same JSON shape::

    {"statusCode": 404, "message": "...", "error": "Not Found",
     "path": "/api/...", "timestamp": "...", "details": {...}}
"""
from __future__ import annotations

import logging
from http import HTTPStatus

from django.db import IntegrityError
from django.db.models import ProtectedError
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists'
    default_code = 'conflict'


def _first_message(data) -> str:
    """Dig the first human readable message out of DRF error data."""
    if isinstance(data, dict):
        if 'detail' in data:
            return _first_message(data['detail'])
        for value in data.values():
            return _first_message(value)
        return 'Validation failed'
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else 'Validation failed'
    return str(data)


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return 'Error'


def api_exception_handler(exc, context):
    if isinstance(exc, ProtectedError):
        exc = Conflict('Resource is still referenced by other records')
    elif isinstance(exc, IntegrityError):
        exc = Conflict('Resource conflicts with an existing record')

    resp = drf_exception_handler(exc, context)
    request = context.get('request')
    path = request.path if request is not None else ''

    if resp is None:
        logger.error('Unhandled error on %s', path, exc_info=exc)
        body = {
            'statusCode': 500,
            'message': 'Internal server error',
            'error': _reason(500),
            'path': path,
            'timestamp': timezone.now().isoformat(),
        }
        return Response(body, status=500)

    message = _first_message(resp.data)
    body = {
        'statusCode': resp.status_code,
        'message': message,
        'error': _reason(resp.status_code),
        'path': path,
        'timestamp': timezone.now().isoformat(),
    }
    if isinstance(exc, ValidationError):
        body['details'] = {'validationErrors': resp.data}

    if resp.status_code >= 500:
        logger.error('%s %s -> %s: %s', getattr(request, 'method', ''), path, resp.status_code, message)
    else:
        logger.warning('%s %s -> %s: %s', getattr(request, 'method', ''), path, resp.status_code, message)

    resp.data = body
    return resp
