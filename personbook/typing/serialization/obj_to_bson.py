from typing import Any

from .primitives import PRIMITIVES


def obj_to_bson(obj: Any) -> Any:
	"""
	Serializes Python object into Bson.
	"""
	from ..bsonable_dataclass.bsonable_dataclass import BsonableDataclass
	from ...document.document_id import DocumentId

	# Handle types from specific (complex) to general (simple)
	if isinstance(obj, BsonableDataclass):
		return obj.to_bson()

	# DocumentId inherits from str, so it has to be caught before primitives
	elif isinstance(obj, DocumentId):
		return str(obj)

	elif type(obj) is list:
		return [obj_to_bson(item) for item in obj]

	elif type(obj) is dict:
		for key in obj:
			if not isinstance(key, str):
				raise TypeError(f"Dictionary keys must be strings to be stored in Mongo. Got key {key!r}.")
		return {key: obj_to_bson(value) for key, value in obj.items()}

	# Catch primitives based on an exact type match. (The Python mongo driver handles datetimes natively.)
	elif type(obj) in PRIMITIVES:
		return obj

	elif obj is None:
		return None

	else:
		raise TypeError(f"Type {type(obj)} not serializable.")
