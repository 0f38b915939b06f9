from bidict import bidict

from .get_all_subclasses import get_all_subclasses
from ...utilities.logger import logger
from ...utilities.setup_error import SetupError
from ...utilities.special_values import ABSTRACT


def create_type_registry() -> None:
	"""
	Uses introspection to find all subclasses of BsonableDataclass and registers the concrete ones.
	Call this after all of your Document classes have been imported.

	In the process, we validate:
	- All concrete classes have unique type ids
	- All concrete Document classes define a collection name
	- All collection names are unique across Document classes
	"""
	from ..bsonable_dataclass.bsonable_dataclass import BsonableDataclass
	from ...document.document import Document

	logger.debug("Creating type registry...")

	type_id_dict: bidict[str, type] = bidict()
	collection_dict: bidict[str, type] = bidict()
	abstract_names: list[str] = []

	# Sort for a deterministic registration order (and deterministic error messages)
	for bsonable_dataclass in sorted(get_all_subclasses(BsonableDataclass), key=lambda cls: cls.__qualname__):
		type_id = bsonable_dataclass.__type_id__

		if type_id == ABSTRACT:
			abstract_names.append(bsonable_dataclass.__name__)
			continue

		# Ensure the type id is globally unique
		if type_id in type_id_dict:
			raise SetupError(f"{bsonable_dataclass.__name__} uses a duplicate type id '{type_id}' already used by {type_id_dict[type_id].__name__}!")
		type_id_dict[type_id] = bsonable_dataclass

		if not issubclass(bsonable_dataclass, Document):
			continue

		# Concrete documents must be bound to a collection
		collection_name = bsonable_dataclass.__collection_name__
		if not collection_name or collection_name == ABSTRACT:
			raise SetupError(f"Document class {bsonable_dataclass.__name__} does not define a __collection_name__. For abstract documents, set __type_id__ to ABSTRACT.")

		# Enforce unique collection names
		if collection_name in collection_dict:
			raise SetupError(f"Collection name {collection_name} defined in Document class {bsonable_dataclass.__name__} already exists.")
		collection_dict[collection_name] = bsonable_dataclass

	logger.debug(f"Registered abstract BsonableDataclasses: {', '.join(abstract_names)}")
	logger.debug(f"Registered concrete BsonableDataclasses: {', '.join(cls.__name__ for cls in type_id_dict.values())}")

	# Update the module-level type registry
	from .. import type_registry
	type_registry.type_id_dict = type_id_dict
	type_registry.collection_dict = collection_dict
