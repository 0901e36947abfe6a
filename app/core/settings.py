# maydiv/app/core/settings.py
"""
Django settings for the MayDiv SEO API.

All deployment-specific values come from the environment (optionally a
.env file next to manage.py or at the repository root).
"""
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = BASE_DIR.parent

load_dotenv(PROJECT_ROOT / '.env')
load_dotenv(BASE_DIR / '.env')


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# --- Application ---
ENVIRONMENT = os.getenv('APP_ENV', 'development')
APP_VERSION = os.getenv('APP_VERSION', '1.0.0')
PORT = int(os.getenv('PORT', '3001'))

SECRET_KEY = os.getenv('SESSION_SECRET', 'maydiv-secret-key')
DEBUG = env_bool('DEBUG', ENVIRONMENT == 'development')
ALLOWED_HOSTS = [h.strip() for h in os.getenv('ALLOWED_HOSTS', '*').split(',') if h.strip()]

INSTALLED_APPS = [
    'corsheaders',
    'core',
    'seo',
    'admin_api',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.gzip.GZipMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'django_ratelimit.middleware.RatelimitMiddleware',
]

ROOT_URLCONF = 'core.urls'
WSGI_APPLICATION = 'core.wsgi.application'

# The catch-all JSON 404 route owns unmatched paths, slash or not.
APPEND_SLASH = False

# --- Database ---
SEO_DATABASE_PATH = os.getenv('SEO_DATABASE_PATH', str(PROJECT_ROOT / 'data' / 'maydiv.db'))
SEO_DATABASE_ALIAS = 'default'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': SEO_DATABASE_PATH,
    }
}

# --- SEO fallback content ---
SEO_SITE_NAME = os.getenv('SEO_SITE_NAME', 'MayDiv')
SEO_SITE_URL = os.getenv('SEO_SITE_URL', 'https://maydiv.com').rstrip('/')

# --- Admin route group ---
ADMIN_TOKEN = os.getenv('ADMIN_TOKEN', '')

# --- CORS ---
CORS_ALLOWED_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGIN', 'http://localhost:3000').split(',') if o.strip()]
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS']
CORS_ALLOW_HEADERS = ['content-type', 'authorization', 'x-requested-with']

# --- Rate limiting (per IP, every /api/ route) ---
RATE_LIMIT_WINDOW_MS = int(os.getenv('RATE_LIMIT_WINDOW_MS', str(15 * 60 * 1000)))
RATE_LIMIT_MAX_REQUESTS = int(os.getenv('RATE_LIMIT_MAX_REQUESTS', '100'))
# django-ratelimit understands "<count>/<n><unit>", e.g. "100/900s".
API_RATE_LIMIT = f"{RATE_LIMIT_MAX_REQUESTS}/{max(RATE_LIMIT_WINDOW_MS // 1000, 1)}s"
RATELIMIT_ENABLE = env_bool('RATELIMIT_ENABLE', True)
RATELIMIT_VIEW = 'core.views.rate_limited'
# A per-process counter is enough for a single-process deployment.
SILENCED_SYSTEM_CHECKS = ['django_ratelimit.E003', 'django_ratelimit.W001']

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'maydiv-ratelimit',
    }
}

# --- Sessions & security ---
SESSION_ENGINE = 'django.contrib.sessions.backends.signed_cookies'
SESSION_COOKIE_AGE = 24 * 60 * 60
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SECURE = ENVIRONMENT == 'production'
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'SAMEORIGIN'

# --- Request bodies ---
DATA_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024

# --- Static mounts ---
PUBLIC_ROOT = BASE_DIR / 'public'
UPLOADS_ROOT = BASE_DIR / 'uploads'
DASHBOARD_FILE = PUBLIC_ROOT / 'complete-dashboard.html'

USE_TZ = True
TIME_ZONE = 'UTC'

# --- Logging ---
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'stream': 'ext://sys.stdout',
            'formatter': 'standard',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django.server': {
            'handlers': ['console'],
            'level': 'INFO' if DEBUG else 'WARNING',
            'propagate': False,
        },
        'django.request': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
}
