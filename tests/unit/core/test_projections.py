"""Unit tests for the projection handler failure policy."""

from __future__ import annotations

import logging
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from pydantic import BaseModel

from modules.core.projections import ProjectionHandler
from modules.products.events import ProductCreated

pytestmark = pytest.mark.unit

LOGGER = "modules.core.projections"


class Doc(BaseModel):
    id: str
    name: str


class SampleProjection(ProjectionHandler[ProductCreated]):
    def build_document(self, event):
        if event.name == "skip":
            return None
        return Doc(id=str(event.aggregate_id), name=event.name)

    def cache_keys(self, event):
        return [f"product:{event.aggregate_id}"]

    def cache_patterns(self, event):
        return ["products:*"]


def _event(name="Chair") -> ProductCreated:
    return ProductCreated(
        aggregate_id=uuid4(), name=name, sku="CH-1", price=Decimal("80.00"),
        currency="USD", stock_quantity=4,
    )


def _messages(caplog, level):
    return [r.getMessage() for r in caplog.records if r.levelno == level]


class TestProjectionHandler:
    def test_success_indexes_then_invalidates_cache(self, caplog):
        index, cache = MagicMock(), MagicMock()
        index.index_document.return_value = True
        event = _event()

        with caplog.at_level(logging.INFO, logger=LOGGER):
            SampleProjection(index, cache).handle(event)

        index.index_document.assert_called_once_with(Doc(id=str(event.aggregate_id), name="Chair"))
        cache.invalidate.assert_called_once_with(f"product:{event.aggregate_id}")
        cache.invalidate_pattern.assert_called_once_with("products:*")
        assert any("projection.completed" in m for m in _messages(caplog, logging.INFO))

    def test_rejected_document_warns_and_returns(self, caplog):
        index, cache = MagicMock(), MagicMock()
        index.index_document.return_value = False

        with caplog.at_level(logging.INFO, logger=LOGGER):
            SampleProjection(index, cache).handle(_event())

        assert any("projection.index_rejected" in m for m in _messages(caplog, logging.WARNING))
        assert not _messages(caplog, logging.ERROR)
        cache.invalidate.assert_not_called()
        cache.invalidate_pattern.assert_not_called()

    def test_index_error_is_logged_and_reraised(self, caplog):
        index, cache = MagicMock(), MagicMock()
        index.index_document.side_effect = ConnectionError("search cluster down")

        with caplog.at_level(logging.INFO, logger=LOGGER):
            with pytest.raises(ConnectionError):
                SampleProjection(index, cache).handle(_event())

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "projection.failed" in errors[0].getMessage()
        assert "search cluster down" in errors[0].getMessage()
        cache.invalidate.assert_not_called()

    def test_nothing_to_index_is_skipped(self):
        index = MagicMock()
        SampleProjection(index).handle(_event(name="skip"))
        index.index_document.assert_not_called()

    def test_works_without_cache(self):
        index = MagicMock()
        index.index_document.return_value = True
        SampleProjection(index).handle(_event())
        index.index_document.assert_called_once()


class TestProjectionContract:
    def test_build_document_is_required(self):
        class Incomplete(ProjectionHandler[ProductCreated]):
            def cache_keys(self, event):
                return []

        with pytest.raises(TypeError, match="build_document"):
            Incomplete(MagicMock())
