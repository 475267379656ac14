"""Template for read-model projection handlers.

A projection turns a domain event into a read document, writes it to a
search index and drops the cache entries that may now be stale.

Failure handling:
- index refuses the document (returns ``False``): warning, no retry;
- anything raises: error with traceback, then re-raise so the event bus
  transport redelivers the event.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Iterable, Optional, TypeVar

import structlog
from pydantic import BaseModel

from modules.core.cache import CacheInvalidationService
from modules.core.search import ISearchIndex
from shared.domain.bus import IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)

E = TypeVar("E", bound=DomainEvent)


class ProjectionHandler(IEventHandler[E], Generic[E], ABC):
    """Subclasses implement ``build_document`` and the cache key hooks."""

    def __init__(
        self,
        search_index: ISearchIndex,
        cache: Optional[CacheInvalidationService] = None,
    ) -> None:
        self._index = search_index
        self._cache = cache

    @abstractmethod
    def build_document(self, event: E) -> Optional[BaseModel]:
        """Read document for ``event``; ``None`` means nothing to index."""

    def cache_keys(self, event: E) -> Iterable[str]:
        return ()

    def cache_patterns(self, event: E) -> Iterable[str]:
        return ()

    def handle(self, event: E) -> None:
        log = logger.bind(
            projection=type(self).__name__,
            event_name=event.event_name,
            event_id=str(event.event_id),
            aggregate_id=str(event.aggregate_id),
        )
        log.info("projection.started")
        try:
            document = self.build_document(event)
            if document is None:
                log.info("projection.skipped")
                return
            if not self._index.index_document(document):
                log.warning("projection.index_rejected")
                return
            self._invalidate(event)
        except Exception:
            log.exception("projection.failed")
            raise
        log.info("projection.completed")

    def _invalidate(self, event: E) -> None:
        if self._cache is None:
            return
        for key in self.cache_keys(event):
            self._cache.invalidate(key)
        for pattern in self.cache_patterns(event):
            self._cache.invalidate_pattern(pattern)
