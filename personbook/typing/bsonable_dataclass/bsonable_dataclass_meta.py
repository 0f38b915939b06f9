from abc import ABCMeta
from typing import Any, Callable, ClassVar, dataclass_transform, get_origin
import inspect

from ..fields.schema_config import SchemaConfig, _SchemaConfig
from ..fields.field_schema import FieldSchema
from ..registration.type_expectation import get_type_expectation_from_type_annotation
from ...utilities.special_values import AUTO
from ...utilities.undefined import UNDEFINED
from ...utilities.validation_error import ValidationError


__bsonable_fields__ = "__bsonable_fields__"

# Dunder annotations (__type_id__, __collection_name__, ...) are class metadata, not fields.
# These two are the exception: every Document stores them.
INCLUDE_SPECIAL_FIELDS = [
	"__version__",
	"__last_modified__"
]

__partial__ = "__partial__"
__object_id__ = "__object_id__"

# Set on instances by the mapper itself, never serialized
SPECIAL_INSTANCE_FIELDS = (
	__partial__,
	__object_id__,
)


def _collect_annotations(new_cls: type) -> dict[str, Any]:
	""" Collect the annotations of the class and all of its parents, parents first. """
	annotations_dict: dict[str, Any] = {}
	for klass in reversed(new_cls.__mro__):
		if klass is object:
			continue
		annotations_dict.update(inspect.get_annotations(klass, eval_str=True))
	return annotations_dict


def _is_field(field_name: str, field_annotation: Any) -> bool:
	if get_origin(field_annotation) is ClassVar or field_annotation is ClassVar:
		return False
	is_dunder = field_name.startswith("__") and field_name.endswith("__")
	return not is_dunder or field_name in INCLUDE_SPECIAL_FIELDS


def _resolve_schema_config(class_value: Any) -> _SchemaConfig:
	""" Work out the configuration of a field from whatever the class body (or a parent class) assigned to it. """
	if class_value is UNDEFINED:
		return SchemaConfig()
	if isinstance(class_value, _SchemaConfig):
		return class_value
	# Inherited fields were already turned into FieldSchemas by the parent's metaclass run
	if isinstance(class_value, FieldSchema):
		return class_value.schema_config
	return SchemaConfig(default=class_value)


def _build_init(class_name: str) -> Callable[..., None]:
	""" The generated __init__ accepts non-kw_only fields positionally or by keyword and kw_only fields by keyword.
	Every value is validated. Unknown keywords are stored on the instance as loose fields,
	or rejected with a ValidationError when the class sets __allow_loose_fields__ = False. """

	def __init__(self, *args, **kwargs):
		fields: dict[str, FieldSchema] = type(self).__bsonable_fields__
		positional_names = [name for name, schema in fields.items() if not schema.schema_config.kw_only]

		if len(args) > len(positional_names):
			extra_args_str = ", ".join(repr(value) for value in args[len(positional_names):])
			raise TypeError(f"{class_name}() takes {len(positional_names)} positional arguments but {len(args)} were given. Unexpected: {extra_args_str}")

		supplied = dict(zip(positional_names, args))
		for name in supplied:
			if name in kwargs:
				raise TypeError(f"{class_name}() got multiple values for field '{name}'.")

		for field_name, field_schema in fields.items():
			if field_name in supplied:
				value = supplied[field_name]
			elif field_name in kwargs:
				value = kwargs.pop(field_name)
			elif field_schema.schema_config.has_default():
				value = field_schema.schema_config.get_default()
			else:
				raise ValidationError(f"Error creating {class_name}: field '{field_name}' is required.", field_name)

			field_schema.validate_field_value(value)
			setattr(self, field_name, value)

		if kwargs and not type(self).__allow_loose_fields__:
			unknown_name = next(iter(kwargs))
			raise ValidationError(f"{class_name} has no field '{unknown_name}'.", unknown_name)

		for loose_name, loose_value in kwargs.items():
			setattr(self, loose_name, loose_value)

		self.__post_init__()

	return __init__


@dataclass_transform(field_specifiers=(SchemaConfig,), kw_only_default=False)
class BsonableDataclassMeta(ABCMeta):
	"""Turns the annotations of a BsonableDataclass into validated fields.

	Example usage:
		class Person(Document):
			__type_id__ = "person"
			__collection_name__ = "people"

			name: str
			age: int = SchemaConfig(default=0, validation_func=validate_not_negative)

	Each annotated field becomes a FieldSchema that is set as the class attribute and recorded in
	cls.__bsonable_fields__, parents' fields first. Plain defaults and SchemaConfig defaults are checked against the
	annotation when the class is created. The class also gets a generated, validating __init__.
	"""

	def __new__(cls, name, bases, dct):
		new_cls = super().__new__(cls, name, bases, dct)

		if getattr(new_cls, '__type_id__', None) == AUTO:
			setattr(new_cls, '__type_id__', name)

		bsonable_fields: dict[str, FieldSchema] = {}

		# Inherited fields get a fresh FieldSchema too, so containing_cls always points at this class
		for field_name, field_annotation in _collect_annotations(new_cls).items():
			if not _is_field(field_name, field_annotation):
				continue

			type_expectation = get_type_expectation_from_type_annotation(field_annotation)
			schema_config = _resolve_schema_config(getattr(new_cls, field_name, UNDEFINED))

			if schema_config.has_default():
				default_value = schema_config.get_default()
				if not type_expectation._is_valid_value(default_value):
					raise ValueError(f"{name}.{field_name} is annotated as '{type_expectation}' but its default is {default_value!r}.")

			field_schema = FieldSchema(
				field_name=field_name,
				containing_cls=new_cls, #type: ignore
				type_expectation=type_expectation,
				configuration=schema_config
			)
			setattr(new_cls, field_name, field_schema)
			bsonable_fields[field_name] = field_schema

		setattr(new_cls, __bsonable_fields__, bsonable_fields)
		new_cls.__init__ = _build_init(name)

		return new_cls
