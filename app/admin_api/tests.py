# maydiv/app/admin_api/tests.py
import json

from django.apps import apps
from django.core.cache import cache
from django.test import TestCase, override_settings

TOKEN = 'test-admin-token'
AUTH = {'HTTP_AUTHORIZATION': f'Bearer {TOKEN}'}


@override_settings(ADMIN_TOKEN=TOKEN)
class AdminApiTests(TestCase):

    def setUp(self):
        cache.clear()
        self.storage = apps.get_app_config('seo').storage
        self.storage.initialize()

    def create(self, page_path, score=0):
        response = self.client.post('/api/v1/seo', data=json.dumps({
            'pagePath': page_path,
            'pageTitle': 'Title',
            'metaTitle': 'Meta',
            'metaDescription': 'Description',
            'seoScore': score,
        }), content_type='application/json')
        return response.json()['seoData']

    def test_missing_token_is_401(self):
        response = self.client.get('/api/v1/admin/stats')
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])

    def test_wrong_token_is_401(self):
        response = self.client.get('/api/v1/admin/stats', HTTP_AUTHORIZATION='Bearer nope')
        self.assertEqual(response.status_code, 401)

    @override_settings(ADMIN_TOKEN='')
    def test_unconfigured_admin_is_503(self):
        response = self.client.get('/api/v1/admin/stats', **AUTH)
        self.assertEqual(response.status_code, 503)

    def test_stats_on_empty_store(self):
        response = self.client.get('/api/v1/admin/stats', **AUTH)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['stats'], {
            'total': 0, 'published': 0, 'unpublished': 0, 'averageScore': 0,
        })

    def test_unpublish_hides_record_and_updates_stats(self):
        first = self.create('/a', score=80)
        self.create('/b', score=60)

        response = self.client.post(f"/api/v1/admin/seo/{first['id']}/unpublish", **AUTH)
        self.assertEqual(response.status_code, 200)
        self.assertIs(response.json()['seoData']['isPublished'], False)

        stats = self.client.get('/api/v1/admin/stats', **AUTH).json()['stats']
        self.assertEqual(stats, {'total': 2, 'published': 1, 'unpublished': 1, 'averageScore': 70})

        page = self.client.get('/api/v1/seo/page//a').json()['seoData']
        self.assertNotIn('id', page)

    def test_publish_restores_record(self):
        record = self.create('/c')
        self.client.post(f"/api/v1/admin/seo/{record['id']}/unpublish", **AUTH)
        response = self.client.post(f"/api/v1/admin/seo/{record['id']}/publish", **AUTH)
        self.assertEqual(response.json()['message'], 'SEO data published successfully')
        page = self.client.get('/api/v1/seo/page//c').json()['seoData']
        self.assertEqual(page['id'], record['id'])

    def test_publish_unknown_id_is_404(self):
        response = self.client.post('/api/v1/admin/seo/404/publish', **AUTH)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'SEO data not found')

    def test_publish_requires_post(self):
        record = self.create('/d')
        response = self.client.get(f"/api/v1/admin/seo/{record['id']}/publish", **AUTH)
        self.assertEqual(response.status_code, 404)
