# maydiv/app/core/views.py
import logging
import math

from django.conf import settings
from django.http import FileResponse, JsonResponse
from django.utils import timezone

from .decorators import api_ratelimit

logger = logging.getLogger(__name__)


def _now_iso():
    return timezone.now().isoformat().replace('+00:00', 'Z')


def health(request):
    """ Liveness probe. """
    return JsonResponse({
        'status': 'success',
        'message': 'MayDiv API is running',
        'timestamp': _now_iso(),
        'environment': settings.ENVIRONMENT,
        'version': settings.APP_VERSION,
    })


@api_ratelimit
def api_test(request):
    return JsonResponse({
        'status': 'success',
        'message': 'Backend is working with SQLite!',
        'database': 'SQLite',
        'timestamp': _now_iso(),
    })


def dashboard(request):
    return FileResponse(open(settings.DASHBOARD_FILE, 'rb'), content_type='text/html')


def route_not_found(request, exception=None):
    """ JSON 404 for every path (or method) no route claims. """
    return JsonResponse({
        'status': 'error',
        'message': f"Route {request.get_full_path()} not found",
    }, status=404)


def server_error(request):
    logger.error(f"Unhandled error while serving {request.path}")
    return JsonResponse({'status': 'error', 'message': 'Internal server error'}, status=500)


def rate_limited(request, exception=None):
    """ Called by RatelimitMiddleware when an /api/ view trips the per-IP ceiling. """
    logger.warning(f"Rate limit exceeded for {request.META.get('REMOTE_ADDR')} on {request.path}")
    return JsonResponse({
        'error': 'Too many requests from this IP, please try again later.',
        'retryAfter': math.ceil(settings.RATE_LIMIT_WINDOW_MS / 1000 / 60),
    }, status=429)
