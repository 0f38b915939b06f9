"""
The Person exercises: create, find, update, remove and chain queries against the people collection.

Every function reports through an error-first callback, done(error, result). Store failures, validation failures and
missing documents are logged and handed to done unchanged, with None as the result.
"""
from typing import Any

from .models.person import Person
from .utilities.done import Done, complete


JANE_FONDA: dict[str, Any] = {
	"name": "Jane Fonda",
	"age": 84,
	"favoriteFoods": ["eggs", "fish", "fresh fruit"],
}

ARRAY_OF_PEOPLE: list[dict[str, Any]] = [
	{ "name": "Frankie", "age": 74, "favoriteFoods": ["Del Taco"] },
	{ "name": "Sol", "age": 76, "favoriteFoods": ["roast chicken"] },
	{ "name": "Robert", "age": 78, "favoriteFoods": ["wine"] },
]


def create_and_save_person(done: Done, person_fields: dict[str, Any] | None = None) -> None:
	fields = dict(person_fields if person_fields is not None else JANE_FONDA)
	complete(done, lambda: Person.db_insert_one(Person(**fields)), "Creating a person")

def create_many_people(array_of_people: list[dict[str, Any]], done: Done) -> None:
	complete(done, lambda: Person.db_insert_many([Person(**fields) for fields in array_of_people]), "Creating people")

def find_people_by_name(person_name: str, done: Done) -> None:
	complete(done, lambda: Person.db_find_many({ "name": person_name }), f"Finding people named {person_name!r}")

def find_one_by_food(food: str, done: Done) -> None:
	""" favoriteFoods is a list, so this matches anyone with the food anywhere in it. """
	complete(done, lambda: Person.db_find_one({ "favoriteFoods": food }), f"Finding a person who likes {food!r}")

def find_person_by_id(person_id: str, done: Done) -> None:
	complete(done, lambda: Person.db_find_one_by_id(person_id), f"Finding person {person_id}")

def find_edit_then_save(person_id: str, done: Done, food_to_add: str = "hamburger") -> None:
	""" Load the person, append a favorite food in memory, and save the whole document back. """
	def edit() -> Person:
		person = Person.db_require_one_by_id(person_id)
		person.favoriteFoods.append(food_to_add)
		person.db_update_self()
		return person

	complete(done, edit, f"Adding {food_to_add!r} to person {person_id}")

def find_and_update(person_name: str, done: Done, age_to_set: int = 20) -> None:
	""" Set the age of the first person with this name in a single round trip. Passes the updated person, or None. """
	complete(
		done,
		lambda: Person.db_find_one_and_update({ "name": person_name }, { "age": age_to_set }, return_after_update=True),
		f"Setting the age of {person_name!r}"
	)

def remove_by_id(person_id: str, done: Done) -> None:
	""" Passes the removed person, or None if there was nobody with this id. """
	complete(done, lambda: Person.db_find_one_and_delete(Person.id_query(person_id)), f"Removing person {person_id}")

def remove_many_people(done: Done, name_to_remove: str = "Mary") -> None:
	""" Removes *everyone* with this name. Passes a DeleteManyResult. """
	complete(done, lambda: Person.db_delete_many({ "name": name_to_remove }), f"Removing people named {name_to_remove!r}")

def query_chain(done: Done, food_to_search: str = "burrito") -> None:
	""" The first two people (by name) who like the food, without their age. """
	def run_query() -> list[Person]:
		return (
			Person.db_query({ "favoriteFoods": food_to_search })
			.sort({ "name": 1 })
			.limit(2)
			.select({ "age": 0 })
			.exec()
		)

	complete(done, run_query, f"Querying people who like {food_to_search!r}")
