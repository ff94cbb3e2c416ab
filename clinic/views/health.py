import logging

from django.db import DatabaseError, connections
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def healthz(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return JsonResponse({'success': True, 'db': bool(row and row[0] == 1)})
    except DatabaseError as e:
        logger.error('Health check failed: %s', e)
        return JsonResponse({'success': False, 'message': 'Database unavailable'}, status=503)
