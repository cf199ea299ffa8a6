# apps/api/v1/views/health.py
"""
Health check endpoint for load balancers and monitoring.

No authentication required.
"""
import logging

from django.db import DatabaseError, connection
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    """
    GET /api/v1/health/

    Returns 200 while the database answers, 503 otherwise.
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
    except DatabaseError as exc:
        logger.error("Health check failed: %s", exc)
        return Response({'status': 'unhealthy', 'database': f'error: {type(exc).__name__}'}, status=503)
    return Response({'status': 'healthy', 'database': 'connected'})
