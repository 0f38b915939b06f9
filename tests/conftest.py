"""
Shared fixtures. Every test runs against a fresh in-memory mongomock database.
"""
from __future__ import annotations

from typing import Any

import mongomock
import pytest

from personbook import create_type_registry, set_mongo_db, close_mongo_db
from personbook.utilities.special_values import ABSTRACT


@pytest.fixture(autouse=True)
def mongo_db():
    """Injects an empty in-memory database for the duration of the test."""
    db = mongomock.MongoClient()["personbook_test"]
    set_mongo_db(db)
    yield db
    close_mongo_db()


class DoneRecorder:
    """Stands in for a completion callback and remembers how it was called."""

    def __init__(self) -> None:
        self.calls: list[tuple[BaseException | None, Any]] = []

    def __call__(self, error: BaseException | None, result: Any) -> None:
        self.calls.append((error, result))

    @property
    def error(self) -> BaseException | None:
        assert len(self.calls) == 1, f"done was called {len(self.calls)} times"
        return self.calls[0][0]

    @property
    def result(self) -> Any:
        assert len(self.calls) == 1, f"done was called {len(self.calls)} times"
        assert self.calls[0][0] is None, f"done received an error: {self.calls[0][0]!r}"
        return self.calls[0][1]


@pytest.fixture()
def done() -> DoneRecorder:
    return DoneRecorder()


@pytest.fixture()
def scratch_classes():
    """Collects classes defined inside a test. Afterwards they are made abstract so they drop out of the type registry."""
    classes: list[type] = []
    yield classes
    for cls in classes:
        cls.__type_id__ = ABSTRACT
    create_type_registry()
