# maydiv/app/admin_api/apps.py
from django.apps import AppConfig


class AdminApiConfig(AppConfig):
    name = 'admin_api'
