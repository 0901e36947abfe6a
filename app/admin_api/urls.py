# maydiv/app/admin_api/urls.py
from django.urls import path
from . import views

app_name = 'admin_api'


def admin_urlpatterns(storage):
    """ Routes for /api/v1/admin/, bound to the given SeoStorage. """
    bound = {'storage': storage}
    return [
        path('stats', views.seo_stats, bound, name='seo_stats'),
        path('seo/<str:record_id>/publish', views.publish_seo, bound, name='publish_seo'),
        path('seo/<str:record_id>/unpublish', views.unpublish_seo, bound, name='unpublish_seo'),
    ]
