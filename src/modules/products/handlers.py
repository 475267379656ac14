"""Read-model projections for Products domain events."""

from __future__ import annotations

from typing import Iterable, Optional

import structlog
from django.conf import settings

from modules.core.cache import CacheKeys
from modules.core.projections import ProjectionHandler
from modules.products.events import ProductCreated, ProductStockUpdated
from modules.products.models import Product
from modules.products.read_models import ProductReadModel

logger = structlog.get_logger(__name__)


class ProductCreatedProjection(ProjectionHandler[ProductCreated]):
    """Indexes a new product straight from the event payload."""

    def build_document(self, event: ProductCreated) -> ProductReadModel:
        threshold = getattr(settings, "LOW_STOCK_THRESHOLD", 10)
        return ProductReadModel(
            id=event.product_id,
            name=event.name,
            sku=event.sku,
            price=event.price,
            currency=event.currency,
            stock_quantity=event.stock_quantity,
            category_id=event.category_id,
            is_active=True,
            is_featured=False,
            is_in_stock=event.stock_quantity > 0,
            is_low_stock=event.stock_quantity <= threshold,
            is_out_of_stock=event.stock_quantity == 0,
            suggest=[event.name],
            created_at=event.occurred_on,
            updated_at=event.occurred_on,
        )

    def cache_keys(self, event: ProductCreated) -> Iterable[str]:
        return [CacheKeys.product(event.product_id)]

    def cache_patterns(self, event: ProductCreated) -> Iterable[str]:
        return [CacheKeys.products_pattern()]


class ProductStockProjection(ProjectionHandler[ProductStockUpdated]):
    """Re-indexes the full product document after a stock movement."""

    def build_document(self, event: ProductStockUpdated) -> Optional[ProductReadModel]:
        product = Product.objects.alive().filter(id=event.product_id).first()
        if product is None:
            logger.warning("product.projection_source_missing", product_id=str(event.product_id))
            return None
        return ProductReadModel.from_entity(product)

    def cache_keys(self, event: ProductStockUpdated) -> Iterable[str]:
        return [CacheKeys.product(event.product_id)]

    def cache_patterns(self, event: ProductStockUpdated) -> Iterable[str]:
        return [CacheKeys.products_pattern()]
