"""Product service layer (Use Cases).

Only catalog creation lives here; stock movements belong to the order
coordinators, which lock and mutate products inside their own unit of
work.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from modules.core.unit_of_work import DjangoUnitOfWork
from modules.products.dtos import CreateProductDTO
from modules.products.events import ProductCreated
from modules.products.exceptions import ProductAlreadyExists
from modules.products.models import Product
from shared.domain.exceptions import CommandValidationError

if TYPE_CHECKING:
    from modules.core.unit_of_work import IUnitOfWork
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases."""

    def __init__(
        self,
        event_bus: Optional[IEventBus],
        unit_of_work_factory: Callable[..., IUnitOfWork] = DjangoUnitOfWork,
    ) -> None:
        self._event_bus = event_bus
        self._uow_factory = unit_of_work_factory

    def create_product(self, dto: Union[CreateProductDTO, Mapping[str, Any]]) -> Product:
        """Add a product to the catalog and publish ``ProductCreated``.

        Raises:
            CommandValidationError: malformed input.
            ProductAlreadyExists: the SKU is already taken.
        """
        if not isinstance(dto, CreateProductDTO):
            try:
                dto = CreateProductDTO.model_validate(dto)
            except PydanticValidationError as exc:
                raise CommandValidationError.from_pydantic(exc) from exc

        log = logger.bind(sku=dto.sku)
        with self._uow_factory(self._event_bus) as uow:
            if uow.products.get_by_sku(dto.sku):
                log.warning("product.duplicate_sku")
                raise ProductAlreadyExists(f"SKU {dto.sku} already registered.")

            product = Product(
                sku=dto.sku,
                name=dto.name,
                description=dto.description,
                price=dto.price,
                currency=dto.currency,
                stock_quantity=dto.stock_quantity,
                minimum_stock_level=dto.minimum_stock_level,
                category_id=dto.category_id,
                is_featured=dto.is_featured,
            )
            product.add_domain_event(
                ProductCreated(
                    aggregate_id=product.id,
                    name=product.name,
                    sku=product.sku,
                    price=product.price,
                    currency=product.currency,
                    stock_quantity=product.stock_quantity,
                    category_id=product.category_id,
                )
            )
            uow.products.add(product)
            uow.save_changes()

        log.info("product.created", product_id=str(product.id))
        return product
