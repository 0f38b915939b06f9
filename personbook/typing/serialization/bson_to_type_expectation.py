from typing import Any

from bson import ObjectId

from .bson_to_primitive import bson_to_primitive
from .primitives import PRIMITIVES
from ..registration.type_expectation import TypeExpectation
from ...utilities.validation_error import ValidationError
from typing import TYPE_CHECKING
if TYPE_CHECKING:
	from ...document.document_context import DocumentContext


def bson_to_type_expectation(bson: Any, type_expectation: TypeExpectation, document_context: 'DocumentContext | None') -> Any:
	""" Deserializes a Bson value into the specified type expectation. """
	from ..bsonable_dataclass.bsonable_dataclass import BsonableDataclass
	from ...document.document_id import DocumentId

	# Handle valid null cases
	if bson is None:
		if type_expectation.is_nullable:
			return None
		else:
			raise ValidationError(f"Received None for type expectation {type_expectation} which is not nullable.\n{document_context}")

	expected_type = type_expectation.type_info.type_

	# Handle types from specific (complex) to general (simple)
	if isinstance(expected_type, type) and issubclass(expected_type, BsonableDataclass):
		return expected_type.from_bson(bson, document_context)

	elif expected_type is DocumentId:
		# Ids written by other clients may be ObjectIds rather than strings
		if not isinstance(bson, (str, ObjectId)):
			raise ValidationError(f"{bson!r} is not a valid document id.\n{document_context}")
		return DocumentId(str(bson))

	elif expected_type is list:
		if not isinstance(bson, list):
			raise ValidationError(f"{bson!r} not of the expected type {type_expectation}.\n{document_context}")
		element_expectation = type_expectation.element_expectation
		if element_expectation is None:
			return list(bson)
		return [
			bson_to_type_expectation(item, element_expectation, document_context.subidx(idx) if document_context else None)
			for idx, item in enumerate(bson)
		]

	elif expected_type in PRIMITIVES:
		return bson_to_primitive(bson, type_expectation.type_info, document_context)

	else:
		raise ValueError(f"Unable to deserialize unregistered expected type {expected_type}.\n{document_context}")
