"""
The exercises against a real MongoDB server. Skipped unless PERSONBOOK_TEST_MONGO_URI points at one.
The tests use (and drop) a scratch database, never the one named in the URI.
"""
from __future__ import annotations

import os

import pytest
from pymongo import MongoClient

from personbook import DeleteManyResult, Person, set_mongo_db
from personbook import challenges
from personbook.challenges import ARRAY_OF_PEOPLE

TEST_MONGO_URI = os.environ.get("PERSONBOOK_TEST_MONGO_URI")
TEST_DB_NAME = "personbook_integration_test"

pytestmark = pytest.mark.skipif(not TEST_MONGO_URI, reason="PERSONBOOK_TEST_MONGO_URI is not set")


@pytest.fixture()
def real_db(mongo_db):
    client: MongoClient = MongoClient(TEST_MONGO_URI, serverSelectionTimeoutMS=5000)
    client.drop_database(TEST_DB_NAME)
    set_mongo_db(client[TEST_DB_NAME])
    yield client[TEST_DB_NAME]
    client.drop_database(TEST_DB_NAME)
    client.close()


def test_full_lifecycle(real_db, done):
    challenges.create_many_people(ARRAY_OF_PEOPLE + [{"name": "Mary", "age": 30, "favoriteFoods": ["burrito"]}], done)
    people = done.result
    sol = next(person for person in people if person.name == "Sol")

    done.calls.clear()
    challenges.find_edit_then_save(sol._id, done)
    assert done.result.favoriteFoods == ["roast chicken", "hamburger"]

    done.calls.clear()
    challenges.find_and_update("Sol", done, age_to_set=20)
    assert done.result.age == 20
    assert done.result.__version__ == 1

    done.calls.clear()
    challenges.remove_by_id(sol._id, done)
    assert done.result._id == sol._id

    done.calls.clear()
    challenges.remove_many_people(done)
    assert done.result == DeleteManyResult(acknowledged=True, deleted_count=1)

    assert sorted(person.name for person in Person.db_find_many({})) == ["Frankie", "Robert"]
