"""Search index used by the read-model projections.

``index_document`` distinguishes two kinds of failure:

- the document is refused (cannot be serialized, violates a constraint):
  returns ``False``; retrying the same document would fail again;
- the index is unreachable or broken (``OperationalError`` and friends):
  the exception propagates so the event can be redelivered.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Union

import structlog
from django.db import DataError, IntegrityError, transaction
from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from modules.core.models import ReadModelDocument

logger = structlog.get_logger(__name__)

Document = Union[BaseModel, Mapping[str, Any]]


class ISearchIndex(Protocol):
    def index_document(self, document: Document) -> bool: ...


class DatabaseSearchIndex:
    """Stores read documents as JSON rows in ``read_model_documents``."""

    def __init__(self, index_name: str) -> None:
        self.index_name = index_name

    def _serialize(self, document: Document) -> dict:
        if isinstance(document, BaseModel):
            return document.model_dump(mode="json")
        return dict(document)

    def index_document(self, document: Document) -> bool:
        log = logger.bind(index=self.index_name)
        try:
            body = self._serialize(document)
            document_id = str(body["id"])
        except (KeyError, TypeError, ValueError, PydanticSerializationError) as exc:
            log.warning("search_index.document_invalid", error=str(exc))
            return False

        try:
            with transaction.atomic():
                ReadModelDocument.objects.update_or_create(
                    index=self.index_name,
                    document_id=document_id,
                    defaults={"body": body},
                )
        except (IntegrityError, DataError) as exc:
            log.warning("search_index.document_rejected", document_id=document_id, error=str(exc))
            return False

        log.debug("search_index.document_indexed", document_id=document_id)
        return True

    def get_document(self, document_id: Any) -> Optional[dict]:
        row = ReadModelDocument.objects.filter(
            index=self.index_name, document_id=str(document_id)
        ).first()
        return row.body if row else None

    def delete_document(self, document_id: Any) -> bool:
        deleted, _ = ReadModelDocument.objects.filter(
            index=self.index_name, document_id=str(document_id)
        ).delete()
        return deleted > 0
