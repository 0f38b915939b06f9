"""
The Person exercises, end to end against the in-memory database.
"""
from __future__ import annotations

import logging

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from personbook import DeleteManyResult, Person, ValidationError
from personbook import challenges
from personbook.challenges import ARRAY_OF_PEOPLE, JANE_FONDA


def _insert(name: str, age: int, foods: list[str]) -> Person:
    return Person.db_insert_one(Person(name, age, foods))


def test_create_and_save_person_then_find_by_id(done):
    challenges.create_and_save_person(done)

    created = done.result
    assert isinstance(created, Person)
    assert created._id

    found = Person.db_find_one_by_id(created._id)
    assert found is not None
    assert (found.name, found.age, found.favoriteFoods) == (JANE_FONDA["name"], JANE_FONDA["age"], JANE_FONDA["favoriteFoods"])


def test_create_and_save_person_with_custom_fields(done):
    challenges.create_and_save_person(done, {"name": "Ada", "age": 36, "favoriteFoods": ["tea"]})

    assert done.result.name == "Ada"
    assert Person.db_count_documents() == 1


def test_create_and_save_person_forwards_validation_error(done, caplog):
    with caplog.at_level(logging.ERROR, logger="personbook"):
        challenges.create_and_save_person(done, {"name": "No Age", "favoriteFoods": []})

    assert isinstance(done.error, ValidationError)
    assert done.error.field_name == "age"
    assert done.calls[0][1] is None
    assert Person.db_count_documents() == 0
    assert "Creating a person failed" in caplog.text


def test_create_many_people_inserts_each(done):
    challenges.create_many_people(ARRAY_OF_PEOPLE, done)

    people = done.result
    assert [person.name for person in people] == ["Frankie", "Sol", "Robert"]
    assert Person.db_count_documents() == len(ARRAY_OF_PEOPLE)
    for person in people:
        assert Person.db_find_one_by_id(person._id) is not None


def test_create_many_people_rejects_the_whole_batch_on_a_bad_record(done):
    batch = ARRAY_OF_PEOPLE + [{"name": "Bad", "age": "old", "favoriteFoods": []}]

    challenges.create_many_people(batch, done)

    assert isinstance(done.error, ValidationError)
    assert Person.db_count_documents() == 0


def test_find_people_by_name_only_returns_matches(done):
    _insert("Sol", 76, ["roast chicken"])
    _insert("Sol", 30, ["soup"])
    _insert("Frankie", 74, ["Del Taco"])

    challenges.find_people_by_name("Sol", done)

    assert sorted(person.age for person in done.result) == [30, 76]
    assert all(person.name == "Sol" for person in done.result)


def test_find_people_by_name_without_matches_is_empty(done):
    _insert("Sol", 76, ["roast chicken"])

    challenges.find_people_by_name("Nobody", done)

    assert done.result == []


def test_find_one_by_food_matches_inside_the_list(done):
    _insert("Robert", 78, ["wine", "cheese"])

    challenges.find_one_by_food("cheese", done)

    assert done.result.name == "Robert"


def test_find_one_by_food_without_match_is_none(done):
    challenges.find_one_by_food("durian", done)

    assert done.result is None


def test_find_person_by_id_unknown_is_none(done):
    challenges.find_person_by_id("000000000000000000000000", done)

    assert done.result is None


def test_find_edit_then_save_appends_food(done):
    person = _insert("Frankie", 74, ["Del Taco", "tamales"])

    challenges.find_edit_then_save(person._id, done)

    updated = done.result
    assert updated.favoriteFoods == ["Del Taco", "tamales", "hamburger"]
    stored = Person.db_require_one_by_id(person._id)
    assert len(stored.favoriteFoods) == 3
    assert stored.favoriteFoods[-1] == "hamburger"


def test_find_edit_then_save_unknown_id_forwards_error(done):
    challenges.find_edit_then_save("missing-id", done)

    assert isinstance(done.error, ValueError)


def test_find_and_update_sets_age_and_nothing_else(done):
    person = _insert("Sol", 76, ["roast chicken"])

    challenges.find_and_update("Sol", done)

    updated = done.result
    assert updated.age == 20
    assert updated._id == person._id
    assert updated.name == "Sol"
    assert updated.favoriteFoods == ["roast chicken"]
    assert Person.db_require_one_by_id(person._id).age == 20


def test_find_and_update_without_match_is_none(done):
    challenges.find_and_update("Nobody", done, age_to_set=50)

    assert done.result is None


def test_remove_by_id_then_find_by_id_is_empty(done):
    person = _insert("Robert", 78, ["wine"])

    challenges.remove_by_id(person._id, done)

    assert done.result.name == "Robert"
    assert Person.db_find_one_by_id(person._id) is None


def test_remove_many_people_removes_every_match(done):
    _insert("Mary", 20, ["pie"])
    _insert("Mary", 40, ["cake"])
    _insert("Robert", 78, ["wine"])

    challenges.remove_many_people(done)

    assert done.result == DeleteManyResult(acknowledged=True, deleted_count=2)
    assert [person.name for person in Person.db_find_many({})] == ["Robert"]


def test_query_chain_filters_sorts_limits_and_projects(done):
    _insert("Pablo", 30, ["burrito"])
    _insert("Amy", 25, ["burrito", "tacos"])
    _insert("Mary", 45, ["burrito"])
    _insert("Aaron", 50, ["sushi"])

    challenges.query_chain(done)

    people = done.result
    assert [person.name for person in people] == ["Amy", "Mary"]
    for person in people:
        assert person.is_partial()
        assert not hasattr(person, "age")
        assert "burrito" in person.favoriteFoods


def test_store_errors_are_forwarded_unchanged(done, monkeypatch):
    store_error = ServerSelectionTimeoutError("no servers")

    class _UnreachableCollection:
        def find_one(self, *args, **kwargs):
            raise store_error

    monkeypatch.setattr(Person, "get_collection", classmethod(lambda cls: _UnreachableCollection()))

    challenges.find_person_by_id("abc", done)

    assert done.error is store_error


def test_errors_raised_by_done_propagate():
    def exploding_done(error, result):
        raise RuntimeError("callback bug")

    with pytest.raises(RuntimeError):
        challenges.find_one_by_food("anything", exploding_done)


def test_create_and_save_person_refuses_undeclared_fields(done, mongo_db):
    challenges.create_and_save_person(done, JANE_FONDA | {"password": "hunter2"})

    assert isinstance(done.error, ValidationError)
    assert mongo_db["people"].count_documents({}) == 0


def test_people_stored_with_object_ids_are_reachable_by_id(done, mongo_db):
    object_id = ObjectId()
    mongo_db["people"].insert_one({"_id": object_id, "__type_id__": "person", "name": "Sol", "age": 76, "favoriteFoods": ["roast chicken"]})

    challenges.find_person_by_id(str(object_id), done)
    assert done.result.name == "Sol"

    done.calls.clear()
    challenges.find_edit_then_save(str(object_id), done)
    assert mongo_db["people"].find_one({"_id": object_id})["favoriteFoods"] == ["roast chicken", "hamburger"]

    done.calls.clear()
    challenges.remove_by_id(str(object_id), done)
    assert done.result._id == str(object_id)
    assert mongo_db["people"].count_documents({}) == 0
