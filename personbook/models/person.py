from ..document.document import Document


class Person(Document):
	""" One person and the foods they like. Field names match the stored documents. """
	__type_id__ = "person"
	__collection_name__ = "people"

	name: str
	age: int
	favoriteFoods: list[str]
