# maydiv/app/core/wsgi.py
"""
WSGI entry point. The SEO store is opened before the first request;
if that fails the import fails and the server never starts.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'core.settings')

application = get_wsgi_application()

from django.apps import apps  # noqa: E402

apps.get_app_config('seo').storage.initialize()
