from datetime import datetime
from typing import Any, ClassVar, Mapping, Self
import time

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo import ReturnDocument

from .document_id import DocumentId
from .document_context import DocumentContext
from .update_method import UpdateMethod
from ..typing.bsonable_dataclass.bsonable_dataclass import BsonableDataclass
from ..typing.bsonable_dataclass.bsonable_dataclass_meta import __object_id__
from ..typing.fields.schema_config import SchemaConfig
from ..typing.fields.field_schema import get_field_name
from ..typing.registration.type_expectation import TypeExpectation
from ..typing.serialization.obj_to_bson import obj_to_bson
from ..utilities.special_values import ABSTRACT
from ..utilities.validation_error import ValidationError
from ..utilities.result import DeleteManyResult
from ..utilities.logger import logger
from ..typing.serialization.vars import __type_id__

from typing import TYPE_CHECKING
if TYPE_CHECKING:
	from .document_query import DocumentQuery


SortSpec = Mapping[str, int] | list[tuple[str, int]]

# Update operators, grouped by how their values are checked
VALUE_OPERATORS = ("$set", "$setOnInsert", "$min", "$max")
NUMERIC_OPERATORS = ("$inc", "$mul")
ELEMENT_OPERATORS = ("$push", "$addToSet")
LIST_REMOVING_OPERATORS = ("$pull", "$pullAll", "$pop")
FIELD_REMOVING_OPERATORS = ("$unset", "$rename")
UPDATE_OPERATORS = VALUE_OPERATORS + NUMERIC_OPERATORS + ELEMENT_OPERATORS + LIST_REMOVING_OPERATORS + FIELD_REMOVING_OPERATORS


class Document(BsonableDataclass):
	""" A BsonableDataclass that is stored as a document in its own MongoDb collection.

	Subclasses must define a __type_id__ and a __collection_name__. Every query issued through the class is scoped to
	documents carrying the class's __type_id__, so several document types could share a collection.

	Newly created objects are assigned an ObjectId-based _id unless you specify one. Retrieved objects carry the _id from the database.
	"""
	# Class fields
	__type_id__ = ABSTRACT
	__collection_name__: ClassVar[str] = ABSTRACT
	__allow_loose_fields__ = False

	@classmethod
	def get_collection_name(cls) -> str:
		if not cls.__collection_name__ or cls.__collection_name__ == ABSTRACT:
			raise ValueError(f"Collection name not defined for {cls}. __collection_name__ must be specified for concrete document classes.")
		return cls.__collection_name__

	# Instance fields
	# kw_only, so subclasses can declare required fields positionally after these defaulted ones
	_id: DocumentId = SchemaConfig(default_factory=DocumentId, kw_only=True)
	__version__: int = SchemaConfig(default=0, kw_only=True)
	""" Incremented by every partial update. """
	__last_modified__: float | None = SchemaConfig(default=None, kw_only=True)
	""" Timestamp of the last write through this class. """

	@classmethod
	def get_collection(cls) -> Collection:
		""" The pymongo collection this class is stored in. """
		return cls.get_db()[cls.get_collection_name()]

	@classmethod
	def get_db(cls) -> Database:
		from .mongo_db import create_mongo_db
		return create_mongo_db()

	@classmethod
	def __class_query__(cls) -> dict:
		""" Conditions merged into every query issued through this class. """
		return { __type_id__: cls.__type_id__ }

	@classmethod
	def __class_validation__(cls, document: Self) -> Self:
		""" This method runs against all documents before and after any database operations are performed.
		Returns the document unchanged, or raises. """
		return document

	# region: Document <> Bson
	def to_document(self) -> dict[str, Any]:
		""" Validates this object and converts it into the bson we store. Stamps __last_modified__. """
		if self.is_partial():
			raise ValueError(f"This {type(self).__name__} was loaded with a projection and is missing fields. Load the full document before saving it.")

		# Validate that this object is still in a valid state (it may have been mutated since construction)
		self._validate_self()

		self.__last_modified__ = datetime.now().timestamp()

		document = obj_to_bson(self)
		document["_id"] = self._stored_id()
		return document

	@classmethod
	def from_document(cls, document: Any, *, partial: bool = False) -> Self:
		if not isinstance(document, dict):
			raise TypeError(f"Expected a dict from the database, got {type(document).__name__}.")

		document_id = document.get("_id")
		if not document_id and not partial:
			raise ValueError(f"Document for {cls.__name__} has no _id.")
		context = DocumentContext(
			document_path=cls.__name__,
			document_id=str(document_id) if document_id else None,
			collection_name=cls.get_collection_name()
		)

		obj = cls.from_bson(document, context, partial=partial)
		if not isinstance(obj, cls):
			raise ValueError(f"Stored document with type id of {type(obj).__name__} can't be loaded as {cls.__name__}.")

		# _id is a str on the object, remember to write it back as an ObjectId
		if isinstance(document_id, ObjectId):
			setattr(obj, __object_id__, True)
		return cls.__class_validation__(obj)
	# endregion

	def _validate_self(self) -> None:
		"""
		Force revalidation of the instance by rebuilding it from its own bson.
		"""
		type(self).from_bson(self.to_bson(), None)

	def __before_deleting__(self) -> bool:
		""" Return False to refuse the delete. """
		return True

	def __before_saving__(self, update_method: UpdateMethod) -> None:
		""" Extend this if you want to perform operations before saving. Useful for validation that spans several fields. """
		logger.debug(f"Saving {type(self).__name__} {self._id} ({update_method})")

	def _stored_id(self) -> str | ObjectId:
		""" The _id in the form it has in the store. """
		if getattr(self, __object_id__, False):
			return ObjectId(self._id)
		return self._id

	# DB Class Methods
	@classmethod
	def db_insert_one(cls, document: 'Document') -> Self:
		""" Insert the document, then read it back so the caller gets the stored state. """
		if not isinstance(document, cls):
			raise TypeError(f"Expected {cls.__name__}, but got {type(document).__name__}")

		document.db_insert_self()
		return cls.db_require_one_by_id(document._id)

	@classmethod
	def db_insert_many(cls, objs: list[Self]) -> list[Self]:
		""" Insert multiple objects into the Mongo database. Returns the inserted objects, in order. """
		if not objs:
			return []

		start_time = time.time()

		documents = []
		for obj in objs:
			if not isinstance(obj, cls):
				raise TypeError(f"Expected {cls.__name__}, but got {type(obj).__name__}")
			obj.__before_saving__(UpdateMethod.INSERT)
			documents.append(cls.__class_validation__(obj).to_document())

		cls.get_collection().insert_many(documents)

		logger.debug(f"Database Usage Logging: Inserted {len(documents)} documents of type '{cls.__name__}' in {(time.time() - start_time):.3f} seconds")
		return objs

	# Retrieval
	@classmethod
	def db_find_one(cls, query: dict | None = None) -> Self | None:
		""" The first matching object, or None. """
		start_time = time.time()

		if query is None:
			query = {}

		document = cls.get_collection().find_one(cls.__class_query__() | query)

		logger.debug(f"Database Usage Logging: Retrieved document of type '{cls.__name__}' for query: {query} in {(time.time() - start_time):.3f} seconds")

		if not document:
			return None
		return cls.from_document(document)

	@staticmethod
	def id_query(_id: str | ObjectId) -> dict[str, Any]:
		""" Matches an _id stored as a string or, for ids that look like one, as an ObjectId (as other clients write them). """
		_id = str(_id)
		if ObjectId.is_valid(_id):
			return { "_id": { "$in": [_id, ObjectId(_id)] } }
		return { "_id": _id }

	@classmethod
	def db_find_one_by_id(cls, _id: str) -> Self | None:
		""" Return one by id, or None. """
		return cls.db_find_one(cls.id_query(_id))

	@classmethod
	def db_require_one_by_id(cls, _id: str) -> Self:
		""" Like db_find_one_by_id, but a missing document is a ValueError. """
		obj = cls.db_find_one_by_id(_id)
		if obj is None:
			raise ValueError(f"No {cls.__name__} found with _id {_id}.")
		return obj

	@classmethod
	def db_find_many(cls, query: dict | None = None, sort: SortSpec | None = None, limit: int | None = None, skip: int | None = None, projection: Mapping[str, int] | None = None) -> list[Self]:
		""" Query the database and return all matching documents as Python objects.
		When a projection is given, the returned objects are partial and can't be saved. """
		start_time = time.time()

		if query is None:
			query = {}

		cursor = cls.get_collection().find(cls.__class_query__() | query, dict(projection) if projection else None)
		if sort:
			cursor = cursor.sort(list(sort.items()) if isinstance(sort, Mapping) else list(sort))
		if skip:
			cursor = cursor.skip(skip)
		if limit:
			cursor = cursor.limit(limit)

		objs: list[Self] = [cls.from_document(document, partial=bool(projection)) for document in cursor]

		logger.debug(f"Database Usage Logging: Retrieved {len(objs)} documents of type '{cls.__name__}' for query: {query} in {(time.time() - start_time):.3f} seconds")
		return objs

	@classmethod
	def db_query(cls, query: dict | None = None) -> 'DocumentQuery[Self]':
		""" Start a chainable query, i.e. Person.db_query({"name": "Sol"}).sort("age").limit(2).select("-age").exec() """
		from .document_query import DocumentQuery
		return DocumentQuery(cls, query)

	@classmethod
	def db_count_documents(cls, query: dict | None = None) -> int:
		""" Number of matching documents of this type. """
		return cls.get_collection().count_documents(cls.__class_query__() | (query or {}))

	@classmethod
	def db_find_one_and_update(cls, filter: dict, update: dict, return_after_update: bool = True) -> Self | None:
		""" Find a single document and update it in one round trip, returning either the original or the updated document.

		An update without operators, i.e. {"age": 20}, is applied as {"$set": {"age": 20}}. The update is checked against the
		schema (see _prepare_update) before anything is sent. Returns None if nothing matched. """
		start_time = time.time()

		return_option = ReturnDocument.AFTER if return_after_update else ReturnDocument.BEFORE

		document = cls.get_collection().find_one_and_update(
			filter=cls.__class_query__() | filter,
			update=cls._prepare_update(update),
			return_document=return_option
		)

		logger.debug(f"Database Usage Logging: Updated document of type '{cls.__name__}' for filter: {filter} in {(time.time() - start_time):.3f} seconds")

		if document:
			return cls.from_document(document)
		return None

	@classmethod
	def _prepare_update(cls, update: dict[str, Any]) -> dict[str, Any]:
		""" Checks an update against the schema before it is sent. A stored document must stay loadable, so:
		values written by $set and friends must match their field, $push/$addToSet elements must match the list's element
		type, $inc/$mul only apply to numbers, and required fields can't be $unset or $rename-d away. """
		if not update:
			raise ValueError("Update document is empty.")

		operator_keys = [key for key in update if key.startswith("$")]
		if not operator_keys:
			update = { "$set": dict(update) }
		elif len(operator_keys) != len(update):
			raise ValueError(f"Update document mixes update operators and plain fields: {update}")
		else:
			update = { operator: dict(fields) for operator, fields in update.items() }

		for operator, fields in update.items():
			if operator not in UPDATE_OPERATORS:
				raise ValueError(f"Unsupported update operator {operator}.")

			for path, value in fields.items():
				field_name, expectation = cls._path_expectation(path)

				if operator in VALUE_OPERATORS:
					if path == field_name:
						cls.__bsonable_fields__[field_name].validate_field_value(value)
					else:
						expectation.validate(value, None, field_name=field_name)
					fields[path] = obj_to_bson(value)

				elif operator in NUMERIC_OPERATORS:
					if expectation.type_info.type_ not in (int, float):
						raise ValidationError(f"{operator} can't be applied to '{path}', which is {expectation}.", field_name)
					expectation.validate(value, None, field_name=field_name)

				elif operator in ELEMENT_OPERATORS:
					element_expectation = expectation.element_expectation
					if element_expectation is None:
						raise ValidationError(f"{operator} needs a list field, but '{path}' is {expectation}.", field_name)
					elements = value["$each"] if isinstance(value, dict) and "$each" in value else [value]
					for element in elements:
						element_expectation.validate(element, None, field_name=field_name)
					fields[path] = obj_to_bson(value)

				elif operator in LIST_REMOVING_OPERATORS:
					if expectation.type_info.type_ is not list:
						raise ValidationError(f"{operator} needs a list field, but '{path}' is {expectation}.", field_name)

				# $unset and $rename take the value away from the field
				elif path != field_name or not cls.__bsonable_fields__[field_name].schema_config.has_default():
					raise ValidationError(f"{operator} would leave {cls.__name__} without required field '{path}'.", field_name)

				elif operator == "$rename":
					raise ValidationError(f"$rename can't be used on field '{path}' of {cls.__name__}.", field_name)

		set_fields: dict[str, Any] = update.setdefault("$set", {})

		# Update the document's metadata
		set_fields.setdefault(get_field_name(Document.__last_modified__), datetime.now().timestamp())
		version_field_name = get_field_name(Document.__version__)
		if version_field_name not in set_fields:
			update.setdefault("$inc", {}).setdefault(version_field_name, 1)

		return update

	@classmethod
	def _path_expectation(cls, path: str) -> tuple[str, TypeExpectation]:
		""" The field an update path writes to, and what a value written there must look like.
		"favoriteFoods.0" and "favoriteFoods.$" address single elements of a list field. """
		field_name, _, rest = path.partition(".")
		field_schema = cls.__bsonable_fields__.get(field_name)
		if field_schema is None:
			raise ValidationError(f"{cls.__name__} has no field '{field_name}'.", field_name)
		if not rest:
			return field_name, field_schema.type_expectation

		element_expectation = field_schema.type_expectation.element_expectation
		if element_expectation is None or "." in rest or not (rest.isdigit() or rest.startswith("$")):
			raise ValidationError(f"Can't update '{path}'. Update whole fields or single list elements.", field_name)
		return field_name, element_expectation

	@classmethod
	def db_find_one_and_delete(cls, filter: dict) -> Self | None:
		""" Remove a single matching document and return it as it was before removal. Returns None if nothing matched. """
		document = cls.get_collection().find_one_and_delete(cls.__class_query__() | filter)
		if document:
			return cls.from_document(document)
		return None

	@classmethod
	def db_delete_many(cls, query: dict[str, Any]) -> DeleteManyResult:
		""" Delete all objects matching the query from the Mongo database. """
		result = cls.get_collection().delete_many(cls.__class_query__() | query)
		logger.debug(f"Database Usage Logging: Deleted {result.deleted_count} documents of type '{cls.__name__}' for query: {query}")
		return DeleteManyResult(acknowledged=result.acknowledged, deleted_count=result.deleted_count)

	# DB Instance Methods
	def db_insert_self(self) -> None:
		""" Insert this object into the Mongo database.
		Keeps a caller-supplied _id.
		"""
		self.__before_saving__(UpdateMethod.INSERT)
		document = type(self).__class_validation__(self).to_document()
		type(self).get_collection().insert_one(document)

	def db_update_self(self) -> None:
		""" Persist the changes to the database by replacing the stored document with this one. """
		start_time = time.time()

		self.__before_saving__(UpdateMethod.REPLACE)
		document = type(self).__class_validation__(self).to_document()
		result = type(self).get_collection().replace_one(type(self).__class_query__() | {"_id": self._stored_id()}, document)
		if result.matched_count != 1:
			raise ValueError(f"No stored {type(self).__name__} with _id {self._id} to replace.")

		logger.debug(f"Database Usage Logging: Updated document of type '{type(self).__name__}' with _id: {self._id} in {(time.time() - start_time):.3f} seconds")

	def db_delete_self(self) -> None:
		""" Remove this object's stored document. """
		if not self.__before_deleting__():
			raise ValueError(f"Deleting {type(self).__name__} {self._id} was refused by __before_deleting__.")

		result = type(self).get_collection().delete_one(type(self).__class_query__() | {"_id": self._stored_id()})
		if result.deleted_count != 1:
			raise ValueError(f"No stored {type(self).__name__} with _id {self._id} to delete.")
