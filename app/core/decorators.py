# maydiv/app/core/decorators.py
from django.conf import settings
from django_ratelimit.decorators import ratelimit

# One bucket for the whole /api/ tree, like a prefix-mounted limiter.
API_RATELIMIT_GROUP = 'api'


def api_rate(group, request):
    # Read per request so deployments and tests can retune it.
    return settings.API_RATE_LIMIT


# Per-IP request ceiling shared by every /api/ view. Raises Ratelimited when exceeded.
api_ratelimit = ratelimit(group=API_RATELIMIT_GROUP, key='ip', rate=api_rate, block=True)
