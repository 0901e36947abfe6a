# maydiv/app/seo/apps.py
from django.apps import AppConfig
from django.conf import settings


class SeoConfig(AppConfig):
    default_auto_field = 'django.db.models.AutoField'
    name = 'seo'

    def ready(self):
        # Built here, opened later: initialize() runs at server startup.
        from .storage import SeoStorage
        self.storage = SeoStorage(alias=settings.SEO_DATABASE_ALIAS)
