import structlog
from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.utils import timezone

logger = structlog.get_logger(__name__)


def healthz(request):
    now = timezone.now().isoformat()
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return JsonResponse({'status': 'OK', 'timestamp': now, 'db': bool(row and row[0] == 1)})
    except DatabaseError:
        logger.exception('health_check_failed')
        return JsonResponse({'status': 'ERROR', 'timestamp': now, 'db': False}, status=503)
