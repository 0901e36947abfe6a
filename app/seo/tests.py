# maydiv/app/seo/tests.py
import json
import tempfile
import threading
from datetime import timedelta
from pathlib import Path
from unittest import mock

from django.apps import apps
from django.core.cache import cache
from django.db import OperationalError, connection, connections, models
from django.test import RequestFactory, TestCase, TransactionTestCase, override_settings
from django.utils import timezone

from . import views
from .models import SeoRecord
from .storage import SchemaUpgrade, SeoStorage, StorageNotInitialized

ABOUT = {
    'pagePath': '/about',
    'pageTitle': 'About',
    'metaTitle': 'About Us',
    'metaDescription': 'desc',
}


def seo_row_count():
    with connection.cursor() as cursor:
        cursor.execute('SELECT COUNT(*) FROM seo')
        return cursor.fetchone()[0]


class SeoStorageTests(TestCase):

    def test_operations_before_initialize_fail(self):
        storage = SeoStorage()
        self.assertFalse(storage.is_initialized)
        with self.assertRaises(StorageNotInitialized):
            storage.handle()
        with self.assertRaises(StorageNotInitialized):
            storage.records()

    def test_initialize_creates_table_and_returns_handle(self):
        storage = SeoStorage().initialize()
        self.assertTrue(storage.is_initialized)
        self.assertIs(storage.handle(), connections['default'])
        self.assertIn('seo', connection.introspection.table_names())
        self.assertEqual(storage.records().count(), 0)

    def test_initialize_is_repeatable(self):
        storage = SeoStorage().initialize()
        storage.records().create(page_path='/x', page_title='X', meta_title='X', meta_description='X')
        with self.assertLogs('seo.storage', level='INFO') as logs:
            storage.initialize()
        self.assertTrue(any('already applied' in line for line in logs.output))
        self.assertEqual(storage.records().count(), 1)

    def test_legacy_table_gains_content_column_without_data_loss(self):
        with connection.cursor() as cursor:
            cursor.execute(
                'CREATE TABLE seo ('
                'id INTEGER PRIMARY KEY AUTOINCREMENT, pagePath TEXT UNIQUE NOT NULL, '
                'pageTitle TEXT NOT NULL, metaTitle TEXT NOT NULL, metaDescription TEXT NOT NULL, '
                'keywords TEXT, canonicalUrl TEXT, ogTitle TEXT, ogDescription TEXT, ogImage TEXT, '
                'twitterTitle TEXT, twitterDescription TEXT, twitterImage TEXT, '
                "robots TEXT DEFAULT 'index, follow', seoScore INTEGER DEFAULT 0, "
                'isPublished BOOLEAN DEFAULT 0, createdAt DATETIME DEFAULT CURRENT_TIMESTAMP, '
                'updatedAt DATETIME DEFAULT CURRENT_TIMESTAMP)'
            )
            cursor.execute(
                "INSERT INTO seo (pagePath, pageTitle, metaTitle, metaDescription, isPublished) "
                "VALUES ('/legacy', 'Legacy', 'Legacy', 'Old row', 1)"
            )

        with self.assertLogs('seo.storage', level='INFO') as logs:
            storage = SeoStorage().initialize()
        self.assertTrue(any("'add-content-column' applied" in line for line in logs.output))

        with connection.cursor() as cursor:
            columns = [c.name for c in connection.introspection.get_table_description(cursor, 'seo')]
        self.assertIn('content', columns)

        record = storage.records().get(page_path='/legacy')
        self.assertEqual(record.meta_description, 'Old row')
        self.assertIsNone(record.content)
        self.assertTrue(record.is_published)

    def test_duplicate_column_error_is_a_logged_no_op(self):
        SeoStorage().initialize()
        storage = SeoStorage()
        # Introspection misses the column, so the ALTER runs and is rejected.
        with mock.patch.object(connection.introspection, 'get_table_description', return_value=[]):
            with self.assertLogs('seo.storage', level='INFO') as logs:
                storage.initialize()
        self.assertTrue(storage.is_initialized)
        self.assertTrue(any('already applied' in line for line in logs.output))
        self.assertEqual(storage.records().count(), 0)

    def test_other_upgrade_failures_propagate(self):
        broken = SchemaUpgrade('broken', 'bogus', 'ALTER TABLE no_such_table ADD COLUMN bogus TEXT')
        storage = SeoStorage(upgrades=[broken])
        with self.assertLogs('seo.storage', level='ERROR'):
            with self.assertRaises(OperationalError):
                storage.initialize()
        self.assertFalse(storage.is_initialized)

    def test_open_failure_propagates(self):
        storage = SeoStorage()
        failure = OperationalError('unable to open database file')
        with mock.patch.object(connection, 'ensure_connection', side_effect=failure):
            with self.assertLogs('seo.storage', level='ERROR'):
                with self.assertRaises(OperationalError):
                    storage.initialize()
        with self.assertRaises(StorageNotInitialized):
            storage.handle()

    def test_parent_directory_is_created_for_file_databases(self):
        with tempfile.TemporaryDirectory() as tmp:
            db_file = Path(tmp) / 'nested' / 'data' / 'maydiv.db'
            fake = mock.Mock(vendor='sqlite', settings_dict={'NAME': str(db_file)})
            fake.is_in_memory_db.return_value = False
            SeoStorage._ensure_parent_dir(fake)
            self.assertTrue(db_file.parent.is_dir())

    def test_close_resets_to_uninitialized(self):
        storage = SeoStorage().initialize()
        with mock.patch.object(connection, 'close') as close:
            storage.close()
        close.assert_called_once_with()
        self.assertFalse(storage.is_initialized)


class SeoStorageThreadTests(TransactionTestCase):
    """ Request threads get their own connection from an initialized store. """

    def tearDown(self):
        # The seo table is unmanaged, so the flush between tests leaves it behind.
        with connection.cursor() as cursor:
            cursor.execute('DROP TABLE IF EXISTS seo')

    def test_handle_is_usable_from_another_thread(self):
        storage = SeoStorage().initialize()
        storage.records().create(page_path='/t', page_title='T', meta_title='T', meta_description='T')
        results = {}

        def worker():
            try:
                handle = storage.handle()
                results['handle'] = handle
                with handle.cursor() as cursor:
                    cursor.execute('SELECT COUNT(*) FROM seo')
                    results['count'] = cursor.fetchone()[0]
                results['listed'] = storage.records().count()
            except Exception as e:
                results['error'] = e
            finally:
                connections.close_all()

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        self.assertNotIn('error', results)
        self.assertEqual(results['count'], 1)
        self.assertEqual(results['listed'], 1)
        self.assertIsNot(results['handle'], storage.handle())
        self.assertIs(storage.handle(), connections['default'])


class SeoApiTestCase(TestCase):

    def setUp(self):
        cache.clear()
        self.storage = apps.get_app_config('seo').storage
        self.storage.initialize()

    def post_json(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def put_json(self, url, data):
        return self.client.put(url, data=json.dumps(data), content_type='application/json')

    def create(self, **overrides):
        response = self.post_json('/api/v1/seo', {**ABOUT, **overrides})
        self.assertEqual(response.status_code, 201, response.content)
        return response.json()['seoData']


class SeoCreateTests(SeoApiTestCase):

    def test_create_returns_published_record(self):
        response = self.post_json('/api/v1/seo', ABOUT)
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['message'], 'SEO data created successfully')

        record = body['seoData']
        self.assertEqual(record['id'], 1)
        self.assertEqual(record['pagePath'], '/about')
        self.assertIs(record['isPublished'], True)
        self.assertEqual(record['seoScore'], 0)
        self.assertEqual(record['robots'], 'index, follow')
        self.assertIsNone(record['content'])
        self.assertIsNotNone(record['createdAt'])
        self.assertEqual(record['createdAt'], record['updatedAt'])

    def test_create_ignores_client_publish_flag(self):
        record = self.create(isPublished=False, pagePath='/draft')
        self.assertIs(record['isPublished'], True)

    def test_create_assigns_fresh_ids(self):
        first = self.create(pagePath='/one')
        second = self.create(pagePath='/two')
        self.assertNotEqual(first['id'], second['id'])

    def test_duplicate_page_path_fails_and_keeps_one_row(self):
        self.create()
        response = self.post_json('/api/v1/seo', {**ABOUT, 'pageTitle': 'Again'})
        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertIn('UNIQUE', body['error'])
        self.assertEqual(self.storage.records().filter(page_path='/about').count(), 1)

    def test_missing_required_field_is_a_store_failure(self):
        response = self.post_json('/api/v1/seo', {'pagePath': '/incomplete'})
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()['success'])
        self.assertEqual(seo_row_count(), 0)

    def test_form_encoded_body_is_accepted(self):
        response = self.client.post('/api/v1/seo', {**ABOUT, 'seoScore': '40'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['seoData']['seoScore'], 40)

    def test_malformed_json_is_rejected(self):
        response = self.client.post('/api/v1/seo', data='{not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'success': False, 'error': 'Invalid request body.'})


class SeoReadTests(SeoApiTestCase):

    def test_list_is_newest_first_and_complete(self):
        ids = [self.create(pagePath=f'/page-{i}')['id'] for i in range(3)]
        response = self.client.get('/api/v1/seo')
        self.assertEqual(response.status_code, 200)
        listed = [r['id'] for r in response.json()['seoData']]
        self.assertEqual(listed, list(reversed(ids)))

    def test_list_orders_by_created_at_not_id(self):
        oldest_id = self.create(pagePath='/first')['id']
        middle_id = self.create(pagePath='/second')['id']
        newest_id = self.create(pagePath='/third')['id']
        # The lowest id now carries the latest creation time.
        self.storage.records().filter(pk=oldest_id).update(created_at=timezone.now() + timedelta(hours=1))

        listed = [r['id'] for r in self.client.get('/api/v1/seo').json()['seoData']]
        self.assertEqual(listed, [oldest_id, newest_id, middle_id])

    def test_list_empty_store(self):
        response = self.client.get('/api/v1/seo')
        self.assertEqual(response.json(), {'success': True, 'seoData': []})

    def test_get_by_path_returns_stored_record(self):
        created = self.create()
        response = self.client.get('/api/v1/seo/page//about')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['seoData'], created)

    def test_get_by_path_accepts_encoded_slash(self):
        created = self.create()
        response = self.client.get('/api/v1/seo/page/%2Fabout')
        self.assertEqual(response.json()['seoData']['id'], created['id'])

    def test_get_by_path_falls_back_when_missing(self):
        response = self.client.get('/api/v1/seo/page//services/web')
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['seoData'], {
            'pagePath': '/services/web',
            'metaTitle': 'MayDiv - /services/web',
            'metaDescription': 'Digital Agency Services',
            'keywords': 'digital agency, web design, development',
            'canonicalUrl': 'https://maydiv.com/services/web',
            'ogTitle': 'MayDiv - /services/web',
            'ogDescription': 'Digital Agency Services',
            'ogImage': 'https://maydiv.com/og-image.jpg',
            'twitterCard': 'summary_large_image',
            'robots': 'index, follow',
            'seoScore': 85,
            'isPublished': True,
        })
        self.assertEqual(seo_row_count(), 0)

    @override_settings(SEO_SITE_NAME='Acme', SEO_SITE_URL='https://acme.test')
    def test_fallback_uses_configured_site(self):
        data = self.client.get('/api/v1/seo/page//pricing').json()['seoData']
        self.assertEqual(data['metaTitle'], 'Acme - /pricing')
        self.assertEqual(data['canonicalUrl'], 'https://acme.test/pricing')

    def test_unpublished_record_is_not_served(self):
        created = self.create()
        self.storage.records().filter(pk=created['id']).update(is_published=False)
        data = self.client.get('/api/v1/seo/page//about').json()['seoData']
        self.assertNotIn('id', data)
        self.assertEqual(data['seoScore'], 85)


class SeoUpdateDeleteTests(SeoApiTestCase):

    def test_update_replaces_fields_and_refreshes_updated_at(self):
        created = self.create(pagePath='/keep', keywords='old')
        other = self.create(pagePath='/other')
        before = self.storage.records().get(pk=created['id'])

        later = before.updated_at + timedelta(minutes=5)
        with mock.patch('django.utils.timezone.now', return_value=later):
            response = self.put_json(f"/api/v1/seo/{created['id']}", {**ABOUT, 'pagePath': '/keep', 'seoScore': 95})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['message'], 'SEO data updated successfully')
        self.assertEqual(body['seoData']['seoScore'], 95)
        self.assertIsNone(body['seoData']['keywords'])

        after = self.storage.records().get(pk=created['id'])
        self.assertEqual(after.created_at, before.created_at)
        self.assertEqual(after.updated_at, later)
        self.assertGreater(after.updated_at, before.updated_at)
        untouched = self.storage.records().get(pk=other['id'])
        self.assertEqual(untouched.page_title, 'About')

    def test_update_unknown_id_is_404_and_changes_nothing(self):
        self.create()
        response = self.put_json('/api/v1/seo/999', {**ABOUT, 'pagePath': '/new'})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'success': False, 'error': 'SEO data not found'})
        self.assertEqual(seo_row_count(), 1)
        self.assertFalse(self.storage.records().filter(page_path='/new').exists())

    def test_update_non_numeric_id_is_404(self):
        response = self.put_json('/api/v1/seo/abc', ABOUT)
        self.assertEqual(response.status_code, 404)

    def test_update_to_taken_path_is_500(self):
        self.create()
        second = self.create(pagePath='/second')
        response = self.put_json(f"/api/v1/seo/{second['id']}", ABOUT)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(self.storage.records().get(pk=second['id']).page_path, '/second')

    def test_delete_removes_exactly_one(self):
        created = self.create()
        self.create(pagePath='/other')
        response = self.client.delete(f"/api/v1/seo/{created['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'success': True, 'message': 'SEO data deleted successfully'})
        self.assertEqual(seo_row_count(), 1)
        self.assertFalse(self.storage.records().filter(pk=created['id']).exists())

    def test_delete_unknown_id_is_404(self):
        self.create()
        response = self.client.delete('/api/v1/seo/42')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(seo_row_count(), 1)

    def test_unsupported_method_is_route_not_found(self):
        response = self.client.patch('/api/v1/seo/1')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'status': 'error', 'message': 'Route /api/v1/seo/1 not found'})


class SeoScenarioTests(SeoApiTestCase):

    def test_about_page_lifecycle(self):
        created = self.create()
        self.assertEqual((created['id'], created['isPublished'], created['seoScore']), (1, True, 0))

        fetched = self.client.get('/api/v1/seo/page//about').json()['seoData']
        self.assertEqual(fetched, created)

        updated = self.put_json('/api/v1/seo/1', {**ABOUT, 'seoScore': 95})
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()['seoData']['seoScore'], 95)

        self.assertEqual(self.client.delete('/api/v1/seo/1').status_code, 200)

        after = self.client.get('/api/v1/seo/page//about')
        self.assertEqual(after.status_code, 200)
        data = after.json()['seoData']
        self.assertNotIn('id', data)
        self.assertEqual(data['pagePath'], '/about')
        self.assertEqual(data['metaTitle'], 'MayDiv - /about')


class SeoIsolatedStorageTests(TestCase):
    """ Views driven directly with a gateway that was never initialized. """

    def setUp(self):
        cache.clear()
        self.factory = RequestFactory()
        self.storage = SeoStorage()

    def test_list_reports_uninitialized_store_as_500(self):
        response = views.seo_collection(self.factory.get('/api/v1/seo'), storage=self.storage)
        self.assertEqual(response.status_code, 500)
        error = json.loads(response.content)['error']
        self.assertIn('not initialized', error)

    def test_get_by_path_store_error_is_500_not_fallback(self):
        response = views.seo_for_page(self.factory.get('/api/v1/seo/page//about'), page_path='/about', storage=self.storage)
        self.assertEqual(response.status_code, 500)

    def test_create_store_error_is_500(self):
        request = self.factory.post('/api/v1/seo', data=json.dumps(ABOUT), content_type='application/json')
        response = views.seo_collection(request, storage=self.storage)
        self.assertEqual(response.status_code, 500)
        body = json.loads(response.content)
        self.assertFalse(body['success'])
        self.assertIn('not initialized', body['error'])

    def test_update_store_error_is_500(self):
        request = self.factory.put('/api/v1/seo/1', data=json.dumps(ABOUT), content_type='application/json')
        response = views.seo_detail(request, record_id='1', storage=self.storage)
        self.assertEqual(response.status_code, 500)
        body = json.loads(response.content)
        self.assertFalse(body['success'])
        self.assertIn('not initialized', body['error'])

    def test_delete_store_error_is_500(self):
        response = views.seo_detail(self.factory.delete('/api/v1/seo/1'), record_id='1', storage=self.storage)
        self.assertEqual(response.status_code, 500)


class SeoRecordModelTests(TestCase):

    def test_body_keys_are_column_names(self):
        self.assertEqual(SeoRecord.body_key('page_path'), 'pagePath')
        self.assertEqual(SeoRecord.body_key('content'), 'content')
        self.assertEqual(SeoRecord.body_key('twitter_image'), 'twitterImage')

    def test_primary_key_matches_integer_id_column(self):
        self.assertEqual(apps.get_app_config('seo').default_auto_field, 'django.db.models.AutoField')
        self.assertIs(type(SeoRecord._meta.pk), models.AutoField)

    def test_to_dict_covers_every_column(self):
        record = SeoRecord(id=3, page_path='/p', page_title='P', meta_title='M', meta_description='D',
                           created_at=timezone.now(), updated_at=timezone.now())
        data = record.to_dict()
        self.assertEqual(len(data), 19)
        self.assertEqual(data['robots'], 'index, follow')
        self.assertIs(data['isPublished'], False)
