import time
import uuid

import structlog

logger = structlog.get_logger(__name__)


class RequestLogMiddleware:
    """Bind a request id to the log context and log one line per response."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.headers.get('X-Request-ID') or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, method=request.method, path=request.path)
        started = time.monotonic()
        try:
            response = self.get_response(request)
            duration_ms = round((time.monotonic() - started) * 1000, 1)
            level = 'warning' if response.status_code >= 500 else 'info'
            getattr(logger, level)('request_finished', status=response.status_code, duration_ms=duration_ms)
        finally:
            structlog.contextvars.clear_contextvars()
        response['X-Request-ID'] = request_id
        return response
