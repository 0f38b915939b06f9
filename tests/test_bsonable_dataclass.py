"""
Schema declaration, validation and bson conversion for BsonableDataclasses.
"""
from __future__ import annotations

import pytest

from personbook import Person, SchemaConfig, ValidationError, create_type_registry
from personbook.typing import get_field_name
from personbook.typing.bsonable_dataclass.bsonable_dataclass import BsonableDataclass
from personbook.typing.fields.field_schema import FieldSchema
from personbook.utilities.special_values import ABSTRACT, AUTO


def test_person_fields_are_registered_in_order():
    assert list(Person.__bsonable_fields__) == ["_id", "__version__", "__last_modified__", "name", "age", "favoriteFoods"]
    assert isinstance(Person.name, FieldSchema)
    assert get_field_name(Person.favoriteFoods) == "favoriteFoods"
    assert str(Person.favoriteFoods.type_expectation) == "list[str]"


def test_person_positional_and_keyword_construction_agree():
    by_position = Person("Sol", 76, ["roast chicken"])
    by_keyword = Person(name="Sol", age=76, favoriteFoods=["roast chicken"])

    assert by_position.to_bson() | {"_id": None} == by_keyword.to_bson() | {"_id": None}
    assert by_position._id != by_keyword._id


@pytest.mark.parametrize(
    "fields",
    [
        {"name": 1, "age": 30, "favoriteFoods": []},
        {"name": "Bool", "age": True, "favoriteFoods": []},
        {"name": "Float", "age": 30.5, "favoriteFoods": []},
        {"name": "Tuple", "age": 30, "favoriteFoods": ("soup",)},
        {"name": "Mixed", "age": 30, "favoriteFoods": ["soup", 3]},
        {"name": None, "age": 30, "favoriteFoods": []},
    ],
)
def test_person_rejects_wrongly_typed_fields(fields):
    with pytest.raises(ValidationError):
        Person(**fields)


def test_missing_required_field_names_the_field():
    with pytest.raises(ValidationError) as excinfo:
        Person(name="Nameless Foods", age=3)

    assert excinfo.value.field_name == "favoriteFoods"


def test_too_many_positional_arguments():
    with pytest.raises(TypeError):
        Person("Sol", 76, [], "extra")


def test_extra_keyword_fields_round_trip_on_loose_classes(scratch_classes):
    class Note(BsonableDataclass):
        __type_id__ = "test_loose_note"
        text: str
    scratch_classes.append(Note)

    note = Note("hello", nickname="Solly")

    bson = note.to_bson()
    assert bson["nickname"] == "Solly"
    assert Note.from_bson(bson, None).nickname == "Solly"


def test_documents_reject_undeclared_keywords():
    with pytest.raises(ValidationError) as excinfo:
        Person("Sol", 76, [], db_update_self="shadowed")

    assert excinfo.value.field_name == "db_update_self"


def test_documents_drop_undeclared_stored_keys():
    bson = Person("Sol", 76, []).to_bson() | {"__v": 0, "nickname": "Solly"}

    sol = Person.from_bson(bson, None)

    assert not hasattr(sol, "nickname")
    assert "nickname" not in sol.to_bson()


def test_to_bson_writes_type_id_and_plain_id():
    bson = Person("Sol", 76, ["soup"]).to_bson()

    assert bson["__type_id__"] == "person"
    assert type(bson["_id"]) is str
    assert bson["favoriteFoods"] == ["soup"]


def test_from_bson_does_not_mutate_its_input():
    bson = Person("Sol", 76, ["soup"]).to_bson()
    snapshot = dict(bson)

    Person.from_bson(bson, None)

    assert bson == snapshot


def test_partial_objects_raise_attribute_error_for_missing_fields():
    person = Person.from_bson({"_id": "p1", "name": "Amy"}, None, partial=True)

    assert person.name == "Amy"
    assert person.is_partial()
    with pytest.raises(AttributeError):
        person.age


def test_partial_objects_still_validate_what_they_have():
    with pytest.raises(ValidationError):
        Person.from_bson({"_id": "p1", "name": 5}, None, partial=True)


def test_defaults_and_validation_funcs(scratch_classes):
    def not_negative(value):
        if value < 0:
            raise ValidationError("count must not be negative", "count")

    class Counter(BsonableDataclass):
        __type_id__ = AUTO
        label: str
        count: int = SchemaConfig(default=0, validation_func=not_negative)
        tags: list[str] = SchemaConfig(default_factory=list)
        note: str | None = None
    scratch_classes.append(Counter)

    counter = Counter("clicks")
    assert Counter.__type_id__ == "Counter"
    assert (counter.count, counter.tags, counter.note) == (0, [], None)
    assert Counter("other").tags is not counter.tags
    with pytest.raises(ValidationError):
        Counter("clicks", -1)


def test_default_must_match_annotation():
    with pytest.raises(ValueError):
        class BadDefault(BsonableDataclass):
            __type_id__ = ABSTRACT
            count: int = "zero"


def test_abstract_classes_cannot_be_serialized():
    class Shape(BsonableDataclass):
        __type_id__ = ABSTRACT
        sides: int = 0

    with pytest.raises(ValueError):
        Shape().to_bson()
    with pytest.raises(ValueError):
        Shape.from_bson({"sides": 3}, None)


def test_from_bson_resolves_registered_subtypes(scratch_classes):
    class Animal(BsonableDataclass):
        __type_id__ = ABSTRACT
        name: str

    class Dog(Animal):
        __type_id__ = "test_dog"
        good: bool = True
    scratch_classes.extend([Animal, Dog])
    create_type_registry()

    animal = Animal.from_bson({"__type_id__": "test_dog", "name": "Rex", "good": True}, None)

    assert isinstance(animal, Dog)
    assert animal.name == "Rex"
