"""Business-rule error taxonomy shared by every module.

Coordinators catch ``DomainError`` subclasses after the transaction has
rolled back and hand them to the caller as ``Result.failure(error)``.
Anything that is not a ``DomainError`` (database, broker, programming
errors) propagates unchanged.
"""

from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base class for business-rule violations."""


class NotFound(DomainError):
    """A referenced aggregate does not exist."""

    kind = "Entity"

    def __init__(self, id: Any, kind: Optional[str] = None) -> None:
        if kind is not None:
            self.kind = kind
        self.id = id
        super().__init__(f"{self.kind} with ID '{id}' not found")


class InsufficientStock(DomainError):
    """Requested quantity exceeds the available stock."""

    def __init__(
        self,
        available: int,
        requested: int,
        product_id: Any = None,
        product_name: Optional[str] = None,
    ) -> None:
        self.available = available
        self.requested = requested
        self.product_id = product_id
        self.product_name = product_name
        if product_name:
            message = (
                f"Insufficient stock for product '{product_name}'. "
                f"Available: {available}, Requested: {requested}"
            )
        else:
            message = f"Insufficient stock. Available: {available}, Requested: {requested}"
        super().__init__(message)


class InvalidOrderState(DomainError):
    """The requested lifecycle action is illegal in the current status."""

    def __init__(self, current: str, attempted: str) -> None:
        self.current = current
        self.attempted = attempted
        super().__init__(f"Cannot {attempted} order in {str(current).title()} state")


class InvalidRevertToPending(DomainError):
    """Orders never move back to Pending once created."""

    def __init__(self) -> None:
        super().__init__("Cannot change order status back to Pending")


class CommandValidationError(DomainError):
    """A command or value failed validation before touching storage."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")

    @classmethod
    def from_pydantic(cls, exc: Any) -> CommandValidationError:
        """Build from the first error of a ``pydantic.ValidationError``."""
        errors = exc.errors()
        if not errors:
            return cls("command", str(exc))
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "command"
        reason = first.get("msg", "Invalid value")
        # pydantic prefixes custom ValueError messages
        reason = reason.removeprefix("Value error, ")
        return cls(field, reason)


# Short alias matching the error name used across the codebase docs.
ValidationError = CommandValidationError
