"""Order coordinators (Use Cases).

``OrderPlacementService`` and ``OrderStatusService`` each run one command
inside one ``DjangoUnitOfWork``.  Business-rule violations are returned
as ``Result.failure(error)`` after the transaction has rolled back;
infrastructure errors propagate.

Concurrency: every product whose stock is read for a decision is
locked first (``SELECT ... FOR UPDATE``, ascending id order), and status
changes lock the order row before inspecting its status.  Check and
mutation therefore happen under the same locks.

Events are attached to the aggregates and written to the outbox by
``save_changes()``; they reach the event bus only after commit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Type, TypeVar, Union
from uuid import UUID

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from modules.core.unit_of_work import DjangoUnitOfWork
from modules.customers.exceptions import CustomerNotFound
from modules.orders.constants import (
    DEFAULT_CANCELLATION_REASON,
    STOCK_RESTORING_STATES,
    OrderStatus,
)
from modules.orders.dtos import (
    CancelOrderDTO,
    OrderStatusEnum,
    PlaceOrderDTO,
    UpdateOrderStatusDTO,
)
from modules.orders.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from modules.orders.exceptions import OrderNotFound
from modules.orders.models import Order, OrderItem
from modules.products.events import ProductStockUpdated
from modules.products.exceptions import ProductNotFound
from shared.domain.exceptions import (
    CommandValidationError,
    DomainError,
    InsufficientStock,
    InvalidRevertToPending,
)
from shared.domain.money import Money
from shared.domain.result import Result

if TYPE_CHECKING:
    from modules.core.unit_of_work import IUnitOfWork
    from modules.products.models import Product
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)

D = TypeVar("D", bound=BaseModel)

Command = Union[BaseModel, Mapping[str, Any]]


def parse_command(dto_class: Type[D], command: Command) -> D:
    """Coerce a mapping into ``dto_class``.

    Raises:
        CommandValidationError: first pydantic error as ``(field, reason)``.
    """
    if isinstance(command, dto_class):
        return command
    if isinstance(command, BaseModel):
        command = command.model_dump()
    try:
        return dto_class.model_validate(command)
    except PydanticValidationError as exc:
        raise CommandValidationError.from_pydantic(exc) from exc


class _Coordinator:
    def __init__(
        self,
        event_bus: Optional[IEventBus],
        unit_of_work_factory: Callable[..., IUnitOfWork] = DjangoUnitOfWork,
    ) -> None:
        self._event_bus = event_bus
        self._uow_factory = unit_of_work_factory

    def _unit_of_work(self) -> IUnitOfWork:
        return self._uow_factory(self._event_bus)


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


class OrderPlacementService(_Coordinator):
    """Places orders: validates stock, deducts it and persists atomically."""

    def place_order(self, command: Command) -> Result[UUID]:
        """Place an order.

        Steps:
        1. Validate the command.
        2. Load the customer.
        3. Lock every referenced product (ascending id) and check stock.
        4. Build the order (PENDING) with the caller's prices.
        5. Deduct stock for every line.
        6. Persist order + products in one transaction.
        7. After commit ``OrderPlaced`` (and ``ProductStockUpdated`` per
           product) are published.

        Failures: ``CommandValidationError``, ``CustomerNotFound``,
        ``ProductNotFound``, ``InsufficientStock``.
        """
        try:
            dto = parse_command(PlaceOrderDTO, command)
        except CommandValidationError as exc:
            logger.warning("order.placement_invalid", field=exc.field, reason=exc.reason)
            return Result.failure(exc)

        log = logger.bind(customer_id=str(dto.customer_id), item_count=len(dto.items))
        log.info("order.placement_started")

        try:
            with self._unit_of_work() as uow:
                order = self._place(uow, dto, log)
        except DomainError as exc:
            log.warning("order.placement_rejected", error=type(exc).__name__, reason=str(exc))
            return Result.failure(exc)

        log.info(
            "order.placed",
            order_id=str(order.id),
            order_number=order.order_number,
            total=str(order.total),
        )
        return Result.success(order.id)

    def _place(self, uow: IUnitOfWork, dto: PlaceOrderDTO, log: Any) -> Order:
        customer = uow.customers.get_by_id(dto.customer_id)
        if customer is None:
            raise CustomerNotFound(dto.customer_id)

        products = {
            product.id: product
            for product in uow.products.lock_many(item.product_id for item in dto.items)
        }
        for item in dto.items:
            product = products.get(item.product_id)
            if product is None:
                raise ProductNotFound(item.product_id)
            if product.stock_quantity < item.quantity:
                raise InsufficientStock(
                    available=product.stock_quantity,
                    requested=item.quantity,
                    product_id=product.id,
                    product_name=product.name,
                )
            _flag_price_divergence(product, item, log)

        order = Order.create(
            customer=customer,
            shipping_address=dto.shipping_address,
            billing_address=dto.billing_address,
            items=[
                OrderItem.build(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=Money(item.unit_price, item.currency),
                    discount=Money(item.discount, item.currency),
                )
                for item in dto.items
            ],
        )
        order.add_domain_event(
            OrderPlaced(
                aggregate_id=order.id,
                customer_id=customer.id,
                total_amount=order.total_amount,
                currency=order.currency,
                item_count=order.total_item_count,
                shipping_address=order.shipping_address,
            )
        )
        uow.orders.add(order)

        for item in sorted(dto.items, key=lambda i: str(i.product_id)):
            product = products[item.product_id]
            previous_stock = product.stock_quantity
            product.deduct(item.quantity)
            product.add_domain_event(
                ProductStockUpdated(
                    aggregate_id=product.id,
                    previous_stock=previous_stock,
                    new_stock=product.stock_quantity,
                    reason=f"order_placed:{order.id}",
                )
            )
            uow.products.update(product)
            log.info(
                "order.stock_deducted",
                product_id=str(product.id),
                quantity=item.quantity,
                remaining=product.stock_quantity,
            )

        uow.save_changes()
        return order


def _flag_price_divergence(product: Product, item: Any, log: Any) -> None:
    """Warn when the command's price differs from the catalog.

    The command price is kept; this only leaves a trace for follow-up.
    """
    if item.unit_price == product.price and item.currency == product.currency:
        return
    log.warning(
        "order.price_divergence",
        product_id=str(product.id),
        catalog_price=str(product.price),
        catalog_currency=product.currency,
        requested_price=str(item.unit_price),
        requested_currency=item.currency,
    )


# ---------------------------------------------------------------------------
# Cancellation / status changes
# ---------------------------------------------------------------------------


class OrderStatusService(_Coordinator):
    """Moves orders through their lifecycle and restores stock on cancel."""

    def cancel_order(self, command: Command) -> Result[UUID]:
        """Cancel an order.

        Stock is returned for every line only if the order was PENDING or
        CONFIRMED; products that no longer exist are skipped.

        Failures: ``CommandValidationError``, ``OrderNotFound``,
        ``InvalidOrderState`` (DELIVERED or already CANCELLED).
        """
        try:
            dto = parse_command(CancelOrderDTO, command)
        except CommandValidationError as exc:
            return Result.failure(exc)
        return self._run(
            dto.order_id, "cancel", lambda uow, log: self._cancel(uow, dto.order_id, dto.reason, log)
        )

    def update_status(self, command: Command) -> Result[UUID]:
        """Move an order to ``new_status``.

        PENDING is always refused with ``InvalidRevertToPending``;
        CANCELLED follows the ``cancel_order`` rules.
        """
        try:
            dto = parse_command(UpdateOrderStatusDTO, command)
        except CommandValidationError as exc:
            return Result.failure(exc)

        if dto.new_status == OrderStatusEnum.PENDING:
            error = InvalidRevertToPending()
            logger.warning("order.revert_to_pending_rejected", order_id=str(dto.order_id))
            return Result.failure(error)

        if dto.new_status == OrderStatusEnum.CANCELLED:
            reason = dto.reason or DEFAULT_CANCELLATION_REASON
            return self._run(
                dto.order_id, "cancel", lambda uow, log: self._cancel(uow, dto.order_id, reason, log)
            )
        return self._run(
            dto.order_id,
            "update_status",
            lambda uow, log: self._transition(uow, dto.order_id, dto.new_status.value, log),
        )

    # ------------------------------------------------------------------

    def _run(
        self, order_id: UUID, operation: str, work: Callable[[IUnitOfWork, Any], Order]
    ) -> Result[UUID]:
        log = logger.bind(order_id=str(order_id), operation=operation)
        try:
            with self._unit_of_work() as uow:
                order = work(uow, log)
        except DomainError as exc:
            log.warning("order.status_change_rejected", error=type(exc).__name__, reason=str(exc))
            return Result.failure(exc)
        log.info("order.status_changed", new_status=order.status)
        return Result.success(order.id)

    def _load_locked(self, uow: IUnitOfWork, order_id: UUID) -> Order:
        order = uow.orders.get_for_update(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def _transition(self, uow: IUnitOfWork, order_id: UUID, new_status: str, log: Any) -> Order:
        order = self._load_locked(uow, order_id)
        previous = order.transition_to(new_status)
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                customer_id=order.customer_id,
                old_status=previous,
                new_status=order.status,
            )
        )
        uow.orders.update(order)
        uow.save_changes()
        log.info("order.transitioned", old_status=previous, new_status=order.status)
        return order

    def _cancel(self, uow: IUnitOfWork, order_id: UUID, reason: str, log: Any) -> Order:
        order = self._load_locked(uow, order_id)
        previous = order.cancel(reason)

        restore_stock = previous in STOCK_RESTORING_STATES
        if restore_stock:
            self._restore_stock(uow, order, log)
        else:
            log.info("order.stock_not_restored", previous_status=previous)

        order.add_domain_event(
            OrderCancelled(
                aggregate_id=order.id,
                customer_id=order.customer_id,
                old_status=previous,
                new_status=OrderStatus.CANCELLED.value,
                reason=order.cancellation_reason,
                stock_restored=restore_stock,
            )
        )
        uow.orders.update(order)
        uow.save_changes()
        return order

    def _restore_stock(self, uow: IUnitOfWork, order: Order, log: Any) -> None:
        lines = sorted(order.lines, key=lambda line: str(line.product_id))
        products = {
            product.id: product
            for product in uow.products.lock_many(line.product_id for line in lines)
        }
        for line in lines:
            product = products.get(line.product_id)
            if product is None:
                log.warning(
                    "order.restore_skipped",
                    product_id=str(line.product_id),
                    quantity=line.quantity,
                )
                continue
            previous_stock = product.stock_quantity
            product.restore(line.quantity)
            product.add_domain_event(
                ProductStockUpdated(
                    aggregate_id=product.id,
                    previous_stock=previous_stock,
                    new_stock=product.stock_quantity,
                    reason=f"order_cancelled:{order.id}",
                )
            )
            uow.products.update(product)
            log.info(
                "order.stock_restored",
                product_id=str(product.id),
                quantity=line.quantity,
                restored_stock=product.stock_quantity,
            )
