# maydiv/app/seo/views.py
"""
CRUD views over the `seo` table.

Every view receives its SeoStorage through the URLconf (see seo/urls.py)
and never touches the database any other way. Failures are reported as
{'success': False, 'error': <message>} with a 500, except unknown ids (404).
"""
import json
import logging

from django.db import transaction
from django.http import JsonResponse, QueryDict
from django.utils import timezone

from core.decorators import api_ratelimit
from core.views import route_not_found
from .defaults import fallback_record
from .models import SeoRecord

logger = logging.getLogger(__name__)

NOT_FOUND_ERROR = 'SEO data not found'


class InvalidBody(ValueError):
    pass


def parse_body(request):
    """ Request payload as a dict. Supports both JSON body and standard form data. """
    if request.content_type == 'application/json':
        if not request.body:
            return {}
        try:
            data = json.loads(request.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidBody(str(e))
        if not isinstance(data, dict):
            raise InvalidBody('Expected a JSON object.')
        return data
    if request.content_type == 'application/x-www-form-urlencoded':
        # request.POST is only populated for POST; PUT bodies are parsed by hand.
        return QueryDict(request.body, encoding=request.encoding).dict()
    return request.POST.dict()


def parse_record_id(raw_id):
    """ Path ids that are not integers can never match a row. """
    try:
        return int(raw_id)
    except (TypeError, ValueError):
        return None


def editable_values(data):
    """
    Maps a body dict onto SeoRecord fields. Absent keys become None so an
    update replaces every editable column; a falsy score becomes 0.
    """
    values = {name: data.get(SeoRecord.body_key(name)) for name in SeoRecord.EDITABLE_FIELDS}
    values['seo_score'] = values['seo_score'] or 0
    return values


def not_found():
    return JsonResponse({'success': False, 'error': NOT_FOUND_ERROR}, status=404)


def server_error(e):
    return JsonResponse({'success': False, 'error': str(e)}, status=500)


def invalid_body():
    return JsonResponse({'success': False, 'error': 'Invalid request body.'}, status=400)


@api_ratelimit
def seo_collection(request, storage):
    if request.method == 'GET':
        return list_seo(request, storage)
    if request.method == 'POST':
        return create_seo(request, storage)
    return route_not_found(request)


@api_ratelimit
def seo_detail(request, record_id, storage):
    if request.method == 'PUT':
        return update_seo(request, record_id, storage)
    if request.method == 'DELETE':
        return delete_seo(request, record_id, storage)
    return route_not_found(request)


def list_seo(request, storage):
    try:
        records = storage.records().order_by('-created_at', '-id')
        return JsonResponse({
            'success': True,
            'seoData': [record.to_dict() for record in records],
        })
    except Exception as e:
        logger.error(f"Error fetching SEO data: {e}")
        return server_error(e)


@api_ratelimit
def seo_for_page(request, page_path, storage):
    if request.method != 'GET':
        return route_not_found(request)
    try:
        record = storage.records().filter(page_path=page_path, is_published=True).first()
        if record is not None:
            return JsonResponse({'success': True, 'seoData': record.to_dict()})

        # Not configured yet (or unpublished): the renderer still needs tags.
        logger.info(f"No published SEO data for '{page_path}', serving fallback.")
        return JsonResponse({'success': True, 'seoData': fallback_record(page_path)})
    except Exception as e:
        logger.error(f"Error fetching SEO data for page: {e}")
        return server_error(e)


def create_seo(request, storage):
    try:
        data = parse_body(request)
    except InvalidBody as e:
        logger.warning(f"Rejected SEO create body: {e}")
        return invalid_body()

    try:
        values = editable_values(data)
        if values['robots'] is None:
            del values['robots']  # model default: 'index, follow'
        with transaction.atomic(using=storage.alias):
            now = timezone.now()
            record = storage.records().create(
                is_published=True, created_at=now, updated_at=now, **values
            )
        # Re-read so the response reflects exactly what the store holds.
        record = storage.records().get(pk=record.pk)
        logger.info(f"Created SEO data #{record.pk} for '{record.page_path}'")
        return JsonResponse({
            'success': True,
            'message': 'SEO data created successfully',
            'seoData': record.to_dict(),
        }, status=201)
    except Exception as e:
        logger.error(f"Error creating SEO data: {e}")
        return server_error(e)


def update_seo(request, record_id, storage):
    try:
        data = parse_body(request)
    except InvalidBody as e:
        logger.warning(f"Rejected SEO update body: {e}")
        return invalid_body()

    pk = parse_record_id(record_id)
    if pk is None:
        return not_found()

    try:
        with transaction.atomic(using=storage.alias):
            changed = storage.records().filter(pk=pk).update(
                updated_at=timezone.now(), **editable_values(data)
            )
        if changed == 0:
            return not_found()

        record = storage.records().get(pk=pk)
        logger.info(f"Updated SEO data #{pk}")
        return JsonResponse({
            'success': True,
            'message': 'SEO data updated successfully',
            'seoData': record.to_dict(),
        })
    except Exception as e:
        logger.error(f"Error updating SEO data: {e}")
        return server_error(e)


def delete_seo(request, record_id, storage):
    pk = parse_record_id(record_id)
    if pk is None:
        return not_found()

    try:
        deleted, _ = storage.records().filter(pk=pk).delete()
        if deleted == 0:
            return not_found()

        logger.info(f"Deleted SEO data #{pk}")
        return JsonResponse({'success': True, 'message': 'SEO data deleted successfully'})
    except Exception as e:
        logger.error(f"Error deleting SEO data: {e}")
        return server_error(e)
