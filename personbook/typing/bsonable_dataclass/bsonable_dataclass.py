from abc import ABC
from typing import Any, ClassVar, Self

from .bsonable_dataclass_meta import SPECIAL_INSTANCE_FIELDS, BsonableDataclassMeta, __partial__
from ..fields.field_schema import FieldSchema
from ...utilities.special_values import ABSTRACT
from ...utilities.validation_error import ValidationError
from ..serialization.vars import __type_id__, get_type_id
from ...utilities.logger import logger

from typing import TYPE_CHECKING
if TYPE_CHECKING:
	from ...document.document_context import DocumentContext


class BsonableDataclass(ABC, metaclass=BsonableDataclassMeta):
	""" Base for every class that can be converted to and from bson.

	Concrete subclasses set a unique __type_id__ (or AUTO to use the class name). The type id is written into the bson
	so that loading through a base class returns the right subclass. """
	__bsonable_fields__: ClassVar[dict[str, FieldSchema]] # field name -> FieldSchema, filled in by the metaclass
	__type_id__: ClassVar[str] = ABSTRACT
	__allow_loose_fields__: ClassVar[bool] = True
	""" Whether keywords and stored keys beyond the declared fields are kept. Documents set this to False. """

	def __str__(self) -> str:
		lines = [f"{type(self).__name__}("]
		lines += [f"\t{name}={value!r}," for name, value in self.__dict__.items() if name not in SPECIAL_INSTANCE_FIELDS]
		lines.append(")")
		return "\n".join(lines)

	def __post_init__(self) -> None:
		""" Hook that runs at the end of the generated __init__. """
		return

	def is_partial(self) -> bool:
		""" True if this object was loaded through a projection and is missing some of its fields. """
		return getattr(self, __partial__, False)

	@classmethod
	def inspect_type_id(cls, bson: Any, document_context: 'DocumentContext | None') -> type['BsonableDataclass'] | None:
		""" The registered subclass of cls named by the bson's __type_id__, if there is one. None means "use cls". """
		from .. import type_registry

		type_id = get_type_id(bson, document_context)
		if not type_id:
			return None

		asserted_type = type_registry.lookup_type_by_type_id(type_id)
		if asserted_type is None:
			if type_id != cls.__type_id__:
				logger.info(f"Unrecognized __type_id__ '{type_id}' while loading {cls.__name__}.\n{document_context}")
			return None

		if asserted_type is not cls and issubclass(asserted_type, cls):
			return asserted_type
		if asserted_type is not cls:
			logger.info(f"__type_id__ '{type_id}' belongs to {asserted_type.__name__}, which is not a {cls.__name__}.\n{document_context}")
		return None

	def to_bson(self) -> dict[str, Any]:
		from ..serialization.obj_to_bson import obj_to_bson

		if type(self).__type_id__ == ABSTRACT:
			raise ValueError(f"Can't serialize {type(self).__name__}: it is abstract.")

		output = { __type_id__: type(self).__type_id__ }

		for field_name in type(self).__bsonable_fields__:
			output[field_name] = obj_to_bson(getattr(self, field_name))

		# Loose fields, i.e. ones passed to __init__ without being declared
		for key, value in self.__dict__.items():
			if key in type(self).__bsonable_fields__ or key.startswith("__"):
				continue
			output[key] = obj_to_bson(value)

		return output

	@classmethod
	def from_bson(cls, bson: Any, document_context: 'DocumentContext | None', *, partial: bool = False) -> Self:
		""" Build an instance from bson, validating every declared field.

		A missing field takes its default (with a warning) or raises ValidationError if it has none.
		With partial=True, missing fields are left unset instead (used for projected queries). """
		subtype = cls.inspect_type_id(bson, document_context)
		if subtype:
			return subtype.from_bson(bson, document_context, partial=partial) # type: ignore

		# A concrete subclass would have been picked above
		if cls.__type_id__ == ABSTRACT:
			raise ValueError(f"Can't load abstract {cls.__name__} from bson without a __type_id__ naming one of its concrete subclasses.\n{document_context}")

		if not isinstance(bson, dict):
			raise ValidationError(f"Expected a document for {cls.__name__}, got {type(bson).__name__}.\n{document_context}")

		obj_dict = cls._load_fields(bson, document_context, partial)

		for key, value in bson.items():
			if key in cls.__bsonable_fields__ or key == __type_id__:
				continue
			if cls.__allow_loose_fields__:
				obj_dict[key] = value
			else:
				logger.debug(f"Ignoring undeclared key '{key}' while loading {cls.__name__}.\n{document_context}")

		if partial:
			return cls._construct_partial(obj_dict)
		return cls(**obj_dict)

	@classmethod
	def _load_fields(cls, bson: dict[str, Any], document_context: 'DocumentContext | None', partial: bool) -> dict[str, Any]:
		from ..serialization.bson_to_type_expectation import bson_to_type_expectation

		loaded: dict[str, Any] = {}
		for field_name, field_schema in cls.__bsonable_fields__.items():
			if field_name in bson:
				field_context = document_context.subpath(field_name) if document_context else None
				loaded[field_name] = bson_to_type_expectation(bson[field_name], field_schema.type_expectation, field_context)
			elif partial:
				continue
			elif field_schema.schema_config.has_default():
				default_value = field_schema.schema_config.get_default()
				logger.warning(f"{cls.__name__}.{field_name} missing from stored document, using default {default_value!r}.\n{document_context}")
				loaded[field_name] = default_value
			else:
				raise ValidationError(f"Stored document for {cls.__name__} has no value for required field '{field_name}'.\n{document_context}", field_name)
		return loaded

	@classmethod
	def _construct_partial(cls, obj_dict: dict[str, Any]) -> Self:
		""" Build an instance from whatever fields are present, validating the ones we have. """
		obj = cls.__new__(cls)
		for field_name, field_value in obj_dict.items():
			field_schema = cls.__bsonable_fields__.get(field_name)
			if field_schema is not None:
				field_schema.validate_field_value(field_value)
			setattr(obj, field_name, field_value)
		setattr(obj, __partial__, True)
		return obj
