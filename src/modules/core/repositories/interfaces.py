"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that every
aggregate repository extends.  Repositories never commit: ``add``,
``update`` and ``delete`` register work with the owning unit of work,
which writes it on ``save_changes()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar
from uuid import UUID

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` is the aggregate root managed by the repository
    (e.g. ``Order``, ``Product``).
    """

    @abstractmethod
    def get_by_id(self, id: UUID | str) -> Optional[T]:
        """Retrieve an aggregate by primary key, ``None`` if missing."""

    @abstractmethod
    def add(self, entity: T) -> None:
        """Register a new aggregate for insertion."""

    @abstractmethod
    def update(self, entity: T) -> None:
        """Register a modified aggregate for persistence."""

    @abstractmethod
    def delete(self, entity: T) -> None:
        """Register an aggregate for (soft) deletion."""


class ILockingRepository(IRepository[T]):
    """Repository able to load an aggregate under a row-level lock."""

    @abstractmethod
    def get_for_update(self, id: UUID | str) -> Optional[T]:
        """Retrieve an aggregate with ``SELECT ... FOR UPDATE``.

        Must be called inside the unit of work's transaction.
        """
