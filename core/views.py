import logging
import time

from django.db import connection
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .models import RestaurantSettings

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    """
    Health check endpoint that verifies database connectivity.
    Returns 200 when healthy, 503 otherwise.
    """
    health_status = {
        'status': 'healthy',
        'timestamp': time.time(),
        'services': {}
    }

    try:
        start_time = time.time()
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
        health_status['services']['database'] = {
            'status': 'healthy',
            'response_time_ms': round((time.time() - start_time) * 1000, 2)
        }
    except Exception as e:
        logger.error(f'Database health check failed: {e}')
        health_status['services']['database'] = {
            'status': 'unhealthy',
            'error': str(e)
        }
        health_status['status'] = 'unhealthy'

    status_code = 200 if health_status['status'] == 'healthy' else 503
    return Response(health_status, status=status_code)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_settings(request):
    """Business details and booking rules guests need before they book."""
    row = RestaurantSettings.get_or_create_defaults()
    return Response({
        'business_name': row.business_name,
        'contact_email': row.contact_email,
        'contact_phone': row.contact_phone,
        'enable_reservations': row.enable_reservations,
        'dining_duration': row.dining_duration,
        'min_party_size': row.min_party_size,
        'max_party_size': row.max_party_size,
        'max_advance_days': row.max_advance_days,
        'time_slots': row.time_slots,
    })
