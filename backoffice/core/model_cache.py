"""
Caching for per-user list endpoints: contacts and products.

List payloads are cached under a key that embeds a per-user version number.
Invalidation bumps the version, so every cached variant of the list (one per
filter combination) becomes unreachable at once without key scanning.
"""
from django.core.cache import cache
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache key prefixes
CONTACT_LIST_KEY_PREFIX = 'contact_list:'
CONTACT_LIST_VERSION_PREFIX = 'contact_list_version:'
PRODUCT_LIST_KEY_PREFIX = 'product_list:'
PRODUCT_LIST_VERSION_PREFIX = 'product_list_version:'

# Cache TTL (Time To Live) in seconds
CONTACT_LIST_CACHE_TTL = 300  # 5 minutes
PRODUCT_LIST_CACHE_TTL = 180  # 3 minutes
VERSION_TTL = 60 * 60 * 24


def _get_version(prefix: str, user_id) -> int:
    key = f"{prefix}{user_id}"
    version = cache.get(key)
    if version is None:
        version = 1
        cache.set(key, version, VERSION_TTL)
    return version


def _bump_version(prefix: str, user_id):
    key = f"{prefix}{user_id}"
    try:
        cache.incr(key)
    except ValueError:
        # Key missing or expired
        cache.set(key, 2, VERSION_TTL)


def _filters_digest(filters: dict) -> str:
    raw = '&'.join(f"{k}={filters[k]}" for k in sorted(filters) if filters[k] not in (None, ''))
    return hashlib.md5(raw.encode('utf-8')).hexdigest()


# ==================== CONTACT CACHING ====================

def get_contact_list_cache_key(user_id, **filters) -> str:
    """Get cache key for a user's contact list (filtered)"""
    version = _get_version(CONTACT_LIST_VERSION_PREFIX, user_id)
    return f"{CONTACT_LIST_KEY_PREFIX}{user_id}:v{version}:{_filters_digest(filters)}"


def invalidate_contact_list(user_id):
    _bump_version(CONTACT_LIST_VERSION_PREFIX, user_id)
    logger.debug(f"Invalidated contact list cache for user {user_id}")


# ==================== PRODUCT CACHING ====================

def get_product_list_cache_key(user_id, **filters) -> str:
    """Get cache key for a user's product list (filtered)"""
    version = _get_version(PRODUCT_LIST_VERSION_PREFIX, user_id)
    return f"{PRODUCT_LIST_KEY_PREFIX}{user_id}:v{version}:{_filters_digest(filters)}"


def invalidate_product_list(user_id):
    _bump_version(PRODUCT_LIST_VERSION_PREFIX, user_id)
    logger.debug(f"Invalidated product list cache for user {user_id}")
