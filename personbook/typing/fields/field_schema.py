from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .schema_config import _SchemaConfig
if TYPE_CHECKING:
    from ..bsonable_dataclass.bsonable_dataclass import BsonableDataclass
    from ..registration.type_expectation import TypeExpectation


class FieldSchema:
    """ Stores the schema for the field, i.e. its type and configuration.
    
    FieldSchemas are stored as class attributes. Instance values shadow them, so reading a field that was never loaded
    (for example one excluded by a projection) raises AttributeError instead of returning the schema. """
    def __init__(self, 
                 field_name: str,
                 containing_cls: type[BsonableDataclass],
                 type_expectation: TypeExpectation,
                 configuration: _SchemaConfig
                ) -> None:
        self.field_name = field_name
        self.containing_cls = containing_cls
        self.type_expectation = type_expectation
        self.schema_config = configuration

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        raise AttributeError(f"'{type(obj).__name__}' object has no value for field '{self.field_name}'. Was it excluded from the query projection?")

    def __repr__(self) -> str:
        return f"FieldSchema({self.containing_cls.__name__}.{self.field_name}: {self.type_expectation})"

    def validate_field_value(self, field_value: Any) -> None:
        """ Validates the field value first against the type expectation, then against the validation func, if any. 
        These raise a ValidationError with a client-shareable error message. """
        self.type_expectation.validate(field_value, None, field_name=self.field_name)
        
        if self.schema_config.validation_func is not None:
            self.schema_config.validation_func(field_value)


def get_field_name(bsonable_field: Any) -> str:
    """ Get the name of the bsonable field, i.e. get_field_name(Person.name) -> "name". """
    if not isinstance(bsonable_field, FieldSchema):
        raise TypeError(f"Expected a FieldSchema, got {type(bsonable_field).__name__}.")
    return bsonable_field.field_name
