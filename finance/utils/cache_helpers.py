"""
Cache utilities para o dashboard do DroneFlow.
Os valores do fecho mensal nunca vêm daqui: só o dashboard é cacheado.
"""

import hashlib
import logging

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

DASHBOARD_PREFIX = "droneflow:dashboard"


def make_key(key: str, key_prefix: str = "") -> str:
    full_key = f"{key_prefix}:{key}" if key_prefix else key

    # Hash do SECRET_KEY para isolar projetos que partilham o mesmo Redis
    secret_hash = hashlib.sha256(settings.SECRET_KEY.encode()).hexdigest()[:10]
    full_key = f"{full_key}:{secret_hash}"

    if len(full_key) > 240 or " " in full_key:
        return f"hashed:{hashlib.sha256(full_key.encode()).hexdigest()}"
    return full_key


def dashboard_cache_key(kind: str, year: int, month: int | None = None) -> str:
    suffix = f"{year}-{month:02d}" if month else str(year)
    return make_key(f"{kind}:{suffix}", DASHBOARD_PREFIX)


def dashboard_timeout() -> int:
    return int(getattr(settings, "DRONEFLOW", {}).get("DASHBOARD_CACHE_TIMEOUT", 300))


def remember_dashboard_key(key: str) -> None:
    index_key = make_key("keys", DASHBOARD_PREFIX)
    keys = set(cache.get(index_key) or ())
    keys.add(key)
    cache.set(index_key, sorted(keys), None)


def clear_dashboard_cache() -> int:
    """Drop every cached dashboard payload; called after close/reopen."""
    index_key = make_key("keys", DASHBOARD_PREFIX)
    keys = cache.get(index_key) or []
    if keys:
        cache.delete_many(keys)
    cache.delete(index_key)
    logger.debug("Cleared %s dashboard cache entries", len(keys))
    return len(keys)
