"""Django ORM base repository bound to a unit of work.

Reads go straight to the database; writes are only registered and are
executed by ``DjangoUnitOfWork.save_changes()`` through ``persist``.
Missing or malformed ids return ``None`` (Null Object), the coordinator
decides how to report it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Generic, Optional, Type, TypeVar
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models

from modules.core.repositories.interfaces import ILockingRepository
from modules.core.unit_of_work import DELETE, INSERT, UPDATE

if TYPE_CHECKING:
    from modules.core.unit_of_work import DjangoUnitOfWork

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=models.Model)


class DjangoRepository(ILockingRepository[M], Generic[M]):
    model: ClassVar[Type[models.Model]]
    topic: ClassVar[str]

    def __init__(self, uow: DjangoUnitOfWork) -> None:
        self._uow = uow

    def _queryset(self) -> models.QuerySet:
        manager = self.model.objects
        return manager.alive() if hasattr(manager, "alive") else manager.all()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, id: UUID | str) -> Optional[M]:
        try:
            return self._queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: UUID | str) -> Optional[M]:
        try:
            return self._queryset().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    # ------------------------------------------------------------------
    # Writes (deferred)
    # ------------------------------------------------------------------

    def add(self, entity: M) -> None:
        self._uow.register(self, entity, INSERT)

    def update(self, entity: M) -> None:
        self._uow.register(self, entity, UPDATE)

    def delete(self, entity: M) -> None:
        self._uow.register(self, entity, DELETE)

    def persist(self, entity: M, operation: str) -> int:
        """Write one registered aggregate; returns rows affected."""
        if operation == DELETE:
            count, _ = entity.delete()
            logger.info(f"{self.topic}.deleted", id=str(entity.pk))
            return count
        entity.save(force_insert=operation == INSERT)
        return 1
