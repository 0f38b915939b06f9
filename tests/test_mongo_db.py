"""
Connecting to the database from the environment.
"""
from __future__ import annotations

import pytest

from personbook import SetupError, close_mongo_db, create_mongo_db
from personbook.document import mongo_db as mongo_db_module


@pytest.fixture()
def environment(monkeypatch):
    """Starts without a cached database and keeps any local .env file out of the way."""
    monkeypatch.setattr(mongo_db_module, "load_dotenv", lambda: False)
    monkeypatch.delenv("MONGO_URI", raising=False)
    monkeypatch.delenv("MONGO_DB_NAME", raising=False)
    close_mongo_db()
    yield monkeypatch
    close_mongo_db()


def test_missing_uri_is_a_setup_error(environment):
    with pytest.raises(SetupError):
        create_mongo_db()


def test_database_name_comes_from_the_uri(environment):
    environment.setenv("MONGO_URI", "mongodb://localhost:27017/people_db")

    assert create_mongo_db().name == "people_db"


def test_database_name_falls_back_to_the_default(environment):
    environment.setenv("MONGO_URI", "mongodb://localhost:27017")

    assert create_mongo_db().name == mongo_db_module.DEFAULT_DB_NAME


def test_explicit_database_name_wins(environment):
    environment.setenv("MONGO_URI", "mongodb://localhost:27017/people_db")
    environment.setenv("MONGO_DB_NAME", "override")

    assert create_mongo_db().name == "override"


def test_database_is_cached_until_closed(environment):
    environment.setenv("MONGO_URI", "mongodb://localhost:27017/first")
    first = create_mongo_db()

    environment.setenv("MONGO_URI", "mongodb://localhost:27017/second")
    assert create_mongo_db() is first

    close_mongo_db()
    assert create_mongo_db().name == "second"
