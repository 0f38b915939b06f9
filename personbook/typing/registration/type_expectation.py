from dataclasses import dataclass
from types import UnionType
from typing import Any

from .type_info import TypeInfo
from .get_type_info import get_type_info_list
from ...utilities.validation_error import ValidationError
from typing import TYPE_CHECKING
if TYPE_CHECKING:
	from ...document.document_context import DocumentContext


@dataclass
class TypeExpectation:
	type_info: TypeInfo
	is_nullable: bool

	def __str__(self) -> str:
		output = self.type_info.type_.__name__
		if self.type_info.sub_type is not None:
			if isinstance(self.type_info.sub_type, type):
				output += f"[{self.type_info.sub_type.__name__}]"
			else:
				output += f"[{self.type_info.sub_type}]" # Handle ForwardRefs and unions
		if self.is_nullable:
			output += " | None"

		return output

	@property
	def element_expectation(self) -> 'TypeExpectation | None':
		""" The expectation for each element of a list. None if this is not a list or the element type is unknown. """
		if self.type_info.type_ is not list or self.type_info.sub_type is None:
			return None
		return get_type_expectation_from_type_annotation(self.type_info.sub_type) # type: ignore

	def validate(self, value: Any, document_context: 'DocumentContext | None', *, field_name: str | None = None) -> None:
		""" Raises a ValidationError if the provided value does not match this TypeExpectation. """
		if not self._is_valid_value(value):
			location = f"Field '{field_name}': " if field_name else ""
			context = f"\n{document_context}" if document_context else ""
			raise ValidationError(f"{location}Value {value!r} is not valid according to type expectation '{self}'.{context}", field_name)

	def _is_valid_value(self, value: Any) -> bool:
		""" Validate that a value is consistent with this TypeExpectation. """
		if value is None:
			return self.is_nullable

		expected_type = self.type_info.type_

		# bool is a subclass of int, but a bool is never a valid int field
		if expected_type in (int, float) and isinstance(value, bool):
			return False
		# Ints are acceptable wherever floats are
		if expected_type is float and isinstance(value, int):
			return True

		if not isinstance(value, expected_type):
			return False

		element_expectation = self.element_expectation
		if element_expectation is not None:
			return all(element_expectation._is_valid_value(item) for item in value)

		return True


def get_type_expectation_from_type_annotation(type_annotation: type | UnionType) -> TypeExpectation:
	""" Interpret a type annotation, including nullable types and types with sub-types. """

	expected_type_info_list = get_type_info_list(type_annotation)

	# If there's only one type option, the expected_type should be that option
	if len(expected_type_info_list) == 1:
		return TypeExpectation(
			type_info=expected_type_info_list[0],
			is_nullable=False
		)

	# If there's two type options, one of them has to be None
	if len(expected_type_info_list) == 2:
		non_null_type_infos = [type_info for type_info in expected_type_info_list if type_info.type_ is not type(None)]
		if len(non_null_type_infos) != 1:
			raise ValueError("The only reason we should have multiple annotated types is if one is None.")
		return TypeExpectation(
			type_info=non_null_type_infos[0],
			is_nullable=True
		)

	raise NotImplementedError("We don't handle annotations with more than two types.")
