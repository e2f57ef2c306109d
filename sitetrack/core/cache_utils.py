"""
Caching helpers for per-site dashboard payloads
"""
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone
import hashlib
import logging

logger = logging.getLogger(__name__)


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def dashboard_cache_key(site_id, day=None):
    """Dashboard payloads include today's totals, so the key is per site and per day"""
    day = day or timezone.localdate()
    return make_cache_key('dashboard', site_id, day.isoformat())


def get_or_build_dashboard(site_id, builder):
    """Return the cached dashboard for a site, building and caching it on a miss"""
    cache_key = dashboard_cache_key(site_id)
    cached_data = cache.get(cache_key)
    if cached_data is not None:
        logger.debug(f"Cache HIT for dashboard site={site_id}")
        return cached_data

    logger.debug(f"Cache MISS for dashboard site={site_id}")
    data = builder()
    cache.set(cache_key, data, settings.DASHBOARD_CACHE_TTL)
    return data


def invalidate_site_cache(site_id):
    if site_id is None:
        return
    cache.delete(dashboard_cache_key(site_id))
    logger.debug(f"Invalidated dashboard cache for site={site_id}")
