# maydiv/app/seo/urls.py
from django.urls import re_path
from . import views

app_name = 'seo'


def seo_urlpatterns(storage):
    """ Routes for /api/v1/seo, bound to the given SeoStorage. """
    bound = {'storage': storage}
    return [
        re_path(r'^/?$', views.seo_collection, bound, name='seo_collection'),
        # pagePath keeps its slashes: /api/v1/seo/page//about -> "/about"
        re_path(r'^/page/(?P<page_path>.+)$', views.seo_for_page, bound, name='seo_for_page'),
        re_path(r'^/(?P<record_id>[^/]+)/?$', views.seo_detail, bound, name='seo_detail'),
    ]
