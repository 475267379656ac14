from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.orders"
    label = "orders"

    def ready(self) -> None:
        from modules.core.apps import get_cache_invalidation, get_event_bus
        from modules.core.search import DatabaseSearchIndex
        from modules.orders.events import (
            OrderCancelled,
            OrderPlaced,
            OrderStatusChanged,
        )
        from modules.orders.handlers import OrderProjection

        event_bus = get_event_bus()
        projection = OrderProjection(DatabaseSearchIndex("orders"), get_cache_invalidation())

        event_bus.subscribe(OrderPlaced, projection)
        event_bus.subscribe(OrderStatusChanged, projection)
        event_bus.subscribe(OrderCancelled, projection)
