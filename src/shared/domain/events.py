"""Domain events primitives for the modular monolith."""

from __future__ import annotations

import typing
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, ClassVar, Dict, Type
from uuid import UUID

import uuid6

# event_name -> event class; filled in by ``DomainEvent.__init_subclass__``
_EVENT_REGISTRY: Dict[str, Type[DomainEvent]] = {}


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base domain event (immutable).

    Subclasses add their payload as keyword-only fields.  Every concrete
    subclass registers itself by class name so a serialized payload can
    be turned back into the right type on the consuming side.
    """

    version: ClassVar[int] = 1

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid6.uuid7)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _EVENT_REGISTRY[cls.__name__] = cls

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", self.__class__.__name__)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_payload(self) -> Dict[str, Any]:
        """JSON-safe dict of every field (UUID/Decimal/datetime as strings)."""
        payload = {f.name: _normalize_for_json(getattr(self, f.name)) for f in fields(self)}
        payload["version"] = self.version
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> DomainEvent:
        """Rebuild an event from ``to_payload`` output.

        Called on the base class, dispatches on ``event_name``.
        """
        event_cls = cls
        if cls is DomainEvent:
            event_cls = get_event_class(payload["event_name"])

        hints = typing.get_type_hints(event_cls)
        kwargs = {}
        for f in fields(event_cls):
            if not f.init or f.name not in payload:
                continue
            kwargs[f.name] = _coerce(payload[f.name], hints.get(f.name, Any))
        return event_cls(**kwargs)


def get_event_class(event_name: str) -> Type[DomainEvent]:
    try:
        return _EVENT_REGISTRY[event_name]
    except KeyError:
        raise LookupError(f"Unknown domain event '{event_name}'") from None


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value


def _coerce(value: Any, hint: Any) -> Any:
    if value is None:
        return None
    # Optional[X] / X | None
    args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
    if args and typing.get_origin(hint) not in (list, dict, tuple):
        hint = args[0]
    if hint is UUID and not isinstance(value, UUID):
        return UUID(str(value))
    if hint is Decimal and not isinstance(value, Decimal):
        return Decimal(str(value))
    if hint is datetime and isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


class DomainEventMixin:
    """Mixin for aggregate roots that collect domain events in memory."""

    _domain_events: list[DomainEvent]

    def add_domain_event(self, event: DomainEvent) -> None:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        self._domain_events.append(event)

    def clear_domain_events(self) -> None:
        if hasattr(self, "_domain_events"):
            self._domain_events.clear()

    @property
    def domain_events(self) -> list[DomainEvent]:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        return list(self._domain_events)
