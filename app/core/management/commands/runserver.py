# maydiv/app/core/management/commands/runserver.py
import logging

from django.apps import apps
from django.conf import settings
from django.core.management.base import CommandError
from django.core.management.commands.runserver import Command as RunserverCommand

logger = logging.getLogger(__name__)


class Command(RunserverCommand):
    help = 'Initializes the SEO store, then starts the development server on PORT.'
    default_addr = '0.0.0.0'

    def handle(self, *args, **options):
        self.default_port = str(settings.PORT)

        storage = apps.get_app_config('seo').storage
        try:
            storage.initialize()
        except Exception as e:
            # No store, no server.
            raise CommandError(f"Failed to start server: {e}")

        port = options.get('addrport') or self.default_port
        logger.info(f"MayDiv API server starting on {port} in {settings.ENVIRONMENT} mode")
        logger.info(f"Health check: http://localhost:{settings.PORT}/health")
        logger.info(f"API Base URL: http://localhost:{settings.PORT}/api/v1")
        logger.info(f"SEO endpoints: http://localhost:{settings.PORT}/api/v1/seo")

        super().handle(*args, **options)
