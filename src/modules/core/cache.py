"""Cache key conventions and best-effort invalidation.

Keys follow ``<kind>:<id>`` for single aggregates and
``<kinds>:list:...`` for list pages, joined by ``CACHE_KEY_SEPARATOR``.
Invalidation never raises: a stale cache entry is preferable to a
failed projection.
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.core.cache import BaseCache, cache as default_cache

logger = structlog.get_logger(__name__)


def _sep() -> str:
    return getattr(settings, "CACHE_KEY_SEPARATOR", ":")


class CacheKeys:
    """Key generators shared by readers and invalidators."""

    @staticmethod
    def product(product_id: UUID | str) -> str:
        return f"product{_sep()}{product_id}"

    @staticmethod
    def products_pattern() -> str:
        return f"products{_sep()}*"

    @staticmethod
    def order(order_id: UUID | str) -> str:
        return f"order{_sep()}{order_id}"

    @staticmethod
    def orders_list(customer_id: UUID | str, page: int, page_size: int) -> str:
        s = _sep()
        return f"orders{s}list{s}{customer_id}{s}{page}{s}{page_size}"

    @staticmethod
    def orders_pattern(customer_id: UUID | str | None = None) -> str:
        s = _sep()
        if customer_id is None:
            return f"orders{s}*"
        return f"orders{s}*{s}{customer_id}{s}*"

    @staticmethod
    def customer(customer_id: UUID | str) -> str:
        return f"customer{_sep()}{customer_id}"

    @staticmethod
    def customers_pattern() -> str:
        return f"customers{_sep()}*"


class CacheInvalidationService:
    """Removes cache entries; logs and swallows backend errors."""

    def __init__(self, cache: Optional[BaseCache] = None) -> None:
        self._cache = cache

    @property
    def cache(self) -> Any:
        return self._cache if self._cache is not None else default_cache

    def invalidate(self, key: str) -> None:
        try:
            self.cache.delete(key)
        except Exception:
            logger.exception("cache.invalidate_failed", key=key)
            return
        logger.debug("cache.invalidated", key=key)

    def invalidate_pattern(self, pattern: str) -> None:
        """Delete every key matching a glob pattern.

        Only backends with pattern support (django-redis) can do this;
        elsewhere the call is a logged no-op.
        """
        delete_pattern = getattr(self.cache, "delete_pattern", None)
        if delete_pattern is None:
            logger.debug("cache.pattern_unsupported", pattern=pattern)
            return
        try:
            delete_pattern(pattern)
        except Exception:
            logger.exception("cache.invalidate_pattern_failed", pattern=pattern)
            return
        logger.debug("cache.pattern_invalidated", pattern=pattern)
