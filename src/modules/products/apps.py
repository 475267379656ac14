from django.apps import AppConfig


class ProductsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.products"
    label = "products"

    def ready(self) -> None:
        from modules.core.apps import get_cache_invalidation, get_event_bus
        from modules.core.search import DatabaseSearchIndex
        from modules.products.events import ProductCreated, ProductStockUpdated
        from modules.products.handlers import (
            ProductCreatedProjection,
            ProductStockProjection,
        )

        event_bus = get_event_bus()
        index = DatabaseSearchIndex("products")
        cache = get_cache_invalidation()

        event_bus.subscribe(ProductCreated, ProductCreatedProjection(index, cache))
        event_bus.subscribe(ProductStockUpdated, ProductStockProjection(index, cache))
