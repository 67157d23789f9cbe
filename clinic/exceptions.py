import functools

import structlog
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = structlog.get_logger(__name__)


class DataFetchError(APIException):
    """The record store failed while serving a request; nothing partial is returned."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Failed to fetch data'
    default_code = 'data_fetch_error'


def fails_as(message):
    """Turn database errors raised by a view into a logged :class:`DataFetchError`."""
    def decorator(view):
        @functools.wraps(view)
        def wrapper(request, *args, **kwargs):
            try:
                return view(request, *args, **kwargs)
            except DatabaseError as exc:
                logger.exception('data_fetch_failed', view=view.__name__, path=request.path)
                raise DataFetchError(message) from exc
        return wrapper
    return decorator


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('unhandled_api_error', view=type(view).__name__ if view else None, error=str(exc))
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}}, status=500)
    # normalize response
    code = getattr(exc, 'default_code', None) or 'api_error'
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    headers = {'WWW-Authenticate': exc.auth_header} if getattr(exc, 'auth_header', None) else None
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code, headers=headers)
