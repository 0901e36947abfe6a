# maydiv/app/core/tests.py
from io import StringIO
from unittest import mock

from django.apps import apps
from django.core.cache import cache
from django.core.management import CommandError, call_command
from django.db import OperationalError
from django.test import RequestFactory, TestCase, override_settings

from . import views


class OperationalEndpointTests(TestCase):

    def setUp(self):
        cache.clear()

    @override_settings(ENVIRONMENT='test', APP_VERSION='9.9.9')
    def test_health(self):
        response = self.client.get('/health')
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['status'], 'success')
        self.assertEqual(body['message'], 'MayDiv API is running')
        self.assertEqual(body['environment'], 'test')
        self.assertEqual(body['version'], '9.9.9')
        self.assertTrue(body['timestamp'].endswith('Z'))

    def test_api_smoke_test(self):
        body = self.client.get('/api/test').json()
        self.assertEqual(body['status'], 'success')
        self.assertEqual(body['database'], 'SQLite')

    def test_dashboard_serves_static_html(self):
        response = self.client.get('/dashboard')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response['Content-Type'].startswith('text/html'))
        self.assertIn(b'SEO Dashboard', b''.join(response.streaming_content))

    def test_public_mount(self):
        response = self.client.get('/public/complete-dashboard.html')
        self.assertEqual(response.status_code, 200)
        response.close()

    def test_unknown_route_is_json_404(self):
        response = self.client.get('/nope?x=1')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'status': 'error', 'message': 'Route /nope?x=1 not found'})

    def test_unknown_api_route_is_json_404(self):
        response = self.client.post('/api/v1/unknown')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['message'], 'Route /api/v1/unknown not found')

    def test_server_error_handler_is_json(self):
        response = views.server_error(RequestFactory().get('/boom'))
        self.assertEqual(response.status_code, 500)
        self.assertIn(b'"status": "error"', response.content)


class RequestPipelineTests(TestCase):

    def setUp(self):
        cache.clear()

    @override_settings(API_RATE_LIMIT='2/h', RATE_LIMIT_WINDOW_MS=15 * 60 * 1000)
    def test_api_routes_share_one_per_ip_ceiling(self):
        self.assertEqual(self.client.get('/api/test').status_code, 200)
        self.assertEqual(self.client.get('/api/test').status_code, 200)

        response = self.client.get('/api/v1/seo')
        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.json(), {
            'error': 'Too many requests from this IP, please try again later.',
            'retryAfter': 15,
        })

        # A different client address has its own budget.
        self.assertEqual(self.client.get('/api/test', REMOTE_ADDR='10.0.0.7').status_code, 200)

    @override_settings(API_RATE_LIMIT='1/h')
    def test_health_is_not_rate_limited(self):
        for _ in range(3):
            self.assertEqual(self.client.get('/health').status_code, 200)

    def test_cors_allows_configured_origin(self):
        response = self.client.get('/health', HTTP_ORIGIN='http://localhost:3000')
        self.assertEqual(response['Access-Control-Allow-Origin'], 'http://localhost:3000')
        self.assertEqual(response['Access-Control-Allow-Credentials'], 'true')

    def test_cors_ignores_other_origins(self):
        response = self.client.get('/health', HTTP_ORIGIN='http://evil.example')
        self.assertNotIn('Access-Control-Allow-Origin', response)


class RunserverCommandTests(TestCase):

    def test_store_failure_aborts_startup(self):
        storage = apps.get_app_config('seo').storage
        failure = OperationalError('unable to open database file')
        with mock.patch.object(storage, 'initialize', side_effect=failure):
            with mock.patch('django.core.management.commands.runserver.Command.handle') as serve:
                with self.assertRaises(CommandError) as ctx:
                    call_command('runserver', use_reloader=False)
        self.assertIn('unable to open database file', str(ctx.exception))
        serve.assert_not_called()

    def test_store_is_initialized_before_serving(self):
        storage = apps.get_app_config('seo').storage
        with mock.patch.object(storage, 'initialize') as initialize:
            with mock.patch('django.core.management.commands.runserver.Command.handle') as serve:
                call_command('runserver', use_reloader=False)
        initialize.assert_called_once_with()
        serve.assert_called_once()


class InitStoreCommandTests(TestCase):

    def test_initstore_reports_record_count(self):
        out = StringIO()
        call_command('initstore', stdout=out)
        self.assertIn('SEO store ready (0 records).', out.getvalue())

    def test_initstore_failure_is_command_error(self):
        storage = apps.get_app_config('seo').storage
        with mock.patch.object(storage, 'initialize', side_effect=OperationalError('disk I/O error')):
            with self.assertRaises(CommandError):
                call_command('initstore')
