# maydiv/app/admin_api/views.py
import hmac
import logging
from functools import wraps

from django.conf import settings
from django.db.models import Avg, Count, Q
from django.http import JsonResponse
from django.utils import timezone

from core.decorators import api_ratelimit
from core.views import route_not_found
from seo.views import not_found, parse_record_id, server_error

logger = logging.getLogger(__name__)


def admin_token_required(view_func):
    """ Decorator to ensure the request carries the configured admin bearer token. """
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        expected = settings.ADMIN_TOKEN
        if not expected:
            return JsonResponse({'success': False, 'error': 'Admin access is not configured.'}, status=503)

        scheme, _, token = request.headers.get('Authorization', '').partition(' ')
        if scheme.lower() != 'bearer' or not hmac.compare_digest(token.strip(), expected):
            logger.warning(f"[admin] Rejected request to {request.path}: bad or missing token.")
            return JsonResponse({'success': False, 'error': 'Unauthorized'}, status=401)
        return view_func(request, *args, **kwargs)
    return _wrapped_view


@api_ratelimit
@admin_token_required
def seo_stats(request, storage):
    if request.method != 'GET':
        return route_not_found(request)
    try:
        totals = storage.records().aggregate(
            total=Count('id'),
            published=Count('id', filter=Q(is_published=True)),
            average_score=Avg('seo_score'),
        )
        average = totals['average_score']
        return JsonResponse({
            'success': True,
            'stats': {
                'total': totals['total'],
                'published': totals['published'],
                'unpublished': totals['total'] - totals['published'],
                'averageScore': round(average, 2) if average is not None else 0,
            },
        })
    except Exception as e:
        logger.error(f"[admin] Error computing SEO stats: {e}")
        return server_error(e)


def _set_published(request, record_id, storage, published):
    if request.method != 'POST':
        return route_not_found(request)

    pk = parse_record_id(record_id)
    if pk is None:
        return not_found()

    try:
        changed = storage.records().filter(pk=pk).update(
            is_published=published, updated_at=timezone.now()
        )
        if changed == 0:
            return not_found()

        record = storage.records().get(pk=pk)
        state = 'published' if published else 'unpublished'
        logger.info(f"[admin] SEO data #{pk} {state}.")
        return JsonResponse({
            'success': True,
            'message': f"SEO data {state} successfully",
            'seoData': record.to_dict(),
        })
    except Exception as e:
        logger.error(f"[admin] Error changing publish state of SEO data #{pk}: {e}")
        return server_error(e)


@api_ratelimit
@admin_token_required
def publish_seo(request, record_id, storage):
    return _set_published(request, record_id, storage, True)


@api_ratelimit
@admin_token_required
def unpublish_seo(request, record_id, storage):
    return _set_published(request, record_id, storage, False)
