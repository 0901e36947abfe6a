# maydiv/app/seo/defaults.py
from django.conf import settings

DEFAULT_DESCRIPTION = 'Digital Agency Services'
DEFAULT_KEYWORDS = 'digital agency, web design, development'
DEFAULT_ROBOTS = 'index, follow'
DEFAULT_SCORE = 85


def fallback_record(page_path):
    """
    Synthesized SEO data for a page that has no published record.
    Never persisted. The site renderer relies on always getting usable tags.
    """
    title = f"{settings.SEO_SITE_NAME} - {page_path}"
    return {
        'pagePath': page_path,
        'metaTitle': title,
        'metaDescription': DEFAULT_DESCRIPTION,
        'keywords': DEFAULT_KEYWORDS,
        'canonicalUrl': f"{settings.SEO_SITE_URL}{page_path}",
        'ogTitle': title,
        'ogDescription': DEFAULT_DESCRIPTION,
        'ogImage': f"{settings.SEO_SITE_URL}/og-image.jpg",
        'twitterCard': 'summary_large_image',
        'robots': DEFAULT_ROBOTS,
        'seoScore': DEFAULT_SCORE,
        'isPublished': True,
    }
