from __future__ import annotations

import structlog
from django.apps import AppConfig, apps
from django.conf import settings

from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)

EVENT_BUS_BACKENDS = ("celery", "memory")


def build_event_bus(backend: str) -> IEventBus:
    from shared.infrastructure.bus import CeleryEventBus, InMemoryEventBus

    if backend == "celery":
        return CeleryEventBus()
    if backend == "memory":
        return InMemoryEventBus()
    raise ValueError(
        f"Unknown EVENT_BUS_BACKEND '{backend}', expected one of {EVENT_BUS_BACKENDS}"
    )


class CoreConfig(AppConfig):
    """Owns the process-wide event bus and cache invalidation service.

    Listed first in ``INSTALLED_APPS`` so that the other apps can
    subscribe their projections from their own ``ready()``.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.core"
    label = "core"

    def ready(self) -> None:
        from modules.core.cache import CacheInvalidationService

        backend = getattr(settings, "EVENT_BUS_BACKEND", "celery")
        self.event_bus = build_event_bus(backend)
        self.cache_invalidation = CacheInvalidationService()
        logger.debug("core.event_bus_ready", backend=backend)


def get_event_bus() -> IEventBus:
    return apps.get_app_config("core").event_bus


def get_cache_invalidation():
    return apps.get_app_config("core").cache_invalidation
