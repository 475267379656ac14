from django.apps import AppConfig


class CustomersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.customers"
    label = "customers"

    def ready(self) -> None:
        from modules.core.apps import get_cache_invalidation, get_event_bus
        from modules.core.search import DatabaseSearchIndex
        from modules.customers.events import CustomerRegistered
        from modules.customers.handlers import CustomerRegisteredProjection

        get_event_bus().subscribe(
            CustomerRegistered,
            CustomerRegisteredProjection(
                DatabaseSearchIndex("customers"), get_cache_invalidation()
            ),
        )
