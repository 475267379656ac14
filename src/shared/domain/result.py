"""Success/failure value returned by the order coordinators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from shared.domain.exceptions import DomainError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a ``DomainError``, never both."""

    value: Optional[T] = None
    error: Optional[DomainError] = None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: DomainError) -> Result[T]:
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    def unwrap(self) -> T:
        """Return the value, re-raising the error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
