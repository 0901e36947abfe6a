# maydiv/app/seo/models.py
from django.db import models
from django.utils import timezone


class SeoRecord(models.Model):
    """
    One row of SEO metadata for a single site page.

    The `seo` table is owned by SeoStorage (see seo/storage.py), which
    creates and upgrades it on startup, so Django never migrates it.
    Column names are camelCase and double as the JSON keys of the API.
    """
    id = models.AutoField(primary_key=True)
    page_path = models.TextField(db_column='pagePath', unique=True)
    page_title = models.TextField(db_column='pageTitle')
    meta_title = models.TextField(db_column='metaTitle')
    meta_description = models.TextField(db_column='metaDescription')
    content = models.TextField(null=True, blank=True)
    keywords = models.TextField(null=True, blank=True)
    canonical_url = models.TextField(db_column='canonicalUrl', null=True, blank=True)
    og_title = models.TextField(db_column='ogTitle', null=True, blank=True)
    og_description = models.TextField(db_column='ogDescription', null=True, blank=True)
    og_image = models.TextField(db_column='ogImage', null=True, blank=True)
    twitter_title = models.TextField(db_column='twitterTitle', null=True, blank=True)
    twitter_description = models.TextField(db_column='twitterDescription', null=True, blank=True)
    twitter_image = models.TextField(db_column='twitterImage', null=True, blank=True)
    robots = models.TextField(null=True, blank=True, default='index, follow')
    seo_score = models.IntegerField(db_column='seoScore', default=0)
    is_published = models.BooleanField(db_column='isPublished', default=False)
    created_at = models.DateTimeField(db_column='createdAt', default=timezone.now)
    updated_at = models.DateTimeField(db_column='updatedAt', default=timezone.now)

    # Everything a client may replace through create/update, in body-key order.
    EDITABLE_FIELDS = (
        'page_path', 'page_title', 'meta_title', 'meta_description', 'content',
        'keywords', 'canonical_url', 'og_title', 'og_description', 'og_image',
        'twitter_title', 'twitter_description', 'twitter_image', 'robots',
        'seo_score',
    )

    class Meta:
        db_table = 'seo'
        managed = False
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.page_title} ({self.page_path})"

    @classmethod
    def body_key(cls, field_name):
        """The JSON key (== column name) for a model field."""
        return cls._meta.get_field(field_name).column

    def to_dict(self):
        return {
            field.column: getattr(self, field.attname)
            for field in self._meta.concrete_fields
        }
