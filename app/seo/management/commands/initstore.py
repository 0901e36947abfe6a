# maydiv/app/seo/management/commands/initstore.py

from django.apps import apps
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = 'Creates the SEO database file and table, applying pending schema upgrades.'

    def handle(self, *args, **options):
        storage = apps.get_app_config('seo').storage
        try:
            storage.initialize()
        except Exception as e:
            raise CommandError(f"Database initialization failed: {e}")

        count = storage.records().count()
        self.stdout.write(self.style.SUCCESS(f'SEO store ready ({count} records).'))
