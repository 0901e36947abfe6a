# maydiv/app/core/urls.py

from django.apps import apps
from django.conf import settings
from django.urls import path, re_path, include
from django.views.static import serve

from admin_api.urls import admin_urlpatterns
from seo.urls import seo_urlpatterns
from . import views as core_views

handler404 = 'core.views.route_not_found'
handler500 = 'core.views.server_error'

# The one gateway instance every data route shares (see SeoConfig.ready).
storage = apps.get_app_config('seo').storage

urlpatterns = [
    path('health', core_views.health, name='health'),
    path('api/test', core_views.api_test, name='api_test'),

    path('api/v1/admin/', include((admin_urlpatterns(storage), 'admin_api'))),
    re_path(r'^api/v1/seo', include((seo_urlpatterns(storage), 'seo'))),

    path('dashboard', core_views.dashboard, name='dashboard'),
    re_path(r'^public/(?P<path>.*)$', serve, {'document_root': settings.PUBLIC_ROOT}),
    re_path(r'^uploads/(?P<path>.*)$', serve, {'document_root': settings.UPLOADS_ROOT}),

    # Must stay last.
    re_path(r'^.*$', core_views.route_not_found),
]
