from typing import Any, Generic, Iterator, Mapping, Self, TypeVar

from typing import TYPE_CHECKING
if TYPE_CHECKING:
	from .document import Document


T = TypeVar('T', bound='Document')

SORT_DIRECTIONS: dict[Any, int] = {
	1: 1,
	-1: -1,
	"asc": 1,
	"ascending": 1,
	"desc": -1,
	"descending": -1,
}


def parse_sort(sort: Mapping[str, Any] | str) -> list[tuple[str, int]]:
	""" Accepts {"name": 1, "age": -1}, {"name": "asc"} or "name -age". """
	if isinstance(sort, str):
		keys = []
		for token in sort.split():
			if token.startswith("-"):
				keys.append((token[1:], -1))
			else:
				keys.append((token.lstrip("+"), 1))
		return keys

	keys = []
	for field_name, direction in sort.items():
		if isinstance(direction, bool) or direction not in SORT_DIRECTIONS:
			raise ValueError(f"Invalid sort direction {direction!r} for field '{field_name}'. Use 1, -1, 'asc' or 'desc'.")
		keys.append((field_name, SORT_DIRECTIONS[direction]))
	return keys


def parse_projection(projection: Mapping[str, Any] | str) -> dict[str, int]:
	""" Accepts {"age": 0}, {"name": 1} or "-age" / "name favoriteFoods".
	Inclusion and exclusion can't be mixed, except for excluding _id. """
	if isinstance(projection, str):
		parsed = {}
		for token in projection.split():
			if token.startswith("-"):
				parsed[token[1:]] = 0
			else:
				parsed[token.lstrip("+")] = 1
	else:
		parsed = { field_name: 1 if flag else 0 for field_name, flag in projection.items() }

	flags = { flag for field_name, flag in parsed.items() if field_name != "_id" }
	if len(flags) > 1:
		raise ValueError(f"Projection cannot both include and exclude fields: {parsed}")
	return parsed


class DocumentQuery(Generic[T]):
	""" A find that is built up step by step and only runs on exec().

	Person.db_query({"favoriteFoods": "burrito"}).sort({"name": 1}).limit(2).select({"age": 0}).exec()
	"""
	def __init__(self, document_cls: type[T], query: dict | None = None) -> None:
		self.document_cls = document_cls
		self.query: dict[str, Any] = dict(query or {})
		self.sort_keys: list[tuple[str, int]] = []
		self.limit_count: int | None = None
		self.skip_count: int | None = None
		self.projection: dict[str, int] | None = None

	def __repr__(self) -> str:
		return f"DocumentQuery({self.document_cls.__name__}, query={self.query}, sort={self.sort_keys}, limit={self.limit_count}, skip={self.skip_count}, projection={self.projection})"

	def where(self, query: dict[str, Any]) -> Self:
		""" Add conditions to the filter. Later conditions on the same field win. """
		self.query.update(query)
		return self

	def sort(self, sort: Mapping[str, Any] | str) -> Self:
		self.sort_keys = parse_sort(sort)
		return self

	def limit(self, count: int) -> Self:
		if count < 0:
			raise ValueError(f"Limit must not be negative, got {count}.")
		self.limit_count = count
		return self

	def skip(self, count: int) -> Self:
		if count < 0:
			raise ValueError(f"Skip must not be negative, got {count}.")
		self.skip_count = count
		return self

	def select(self, projection: Mapping[str, Any] | str) -> Self:
		self.projection = parse_projection(projection)
		return self

	def exec(self) -> list[T]:
		return self.document_cls.db_find_many(
			self.query,
			sort=self.sort_keys or None,
			limit=self.limit_count,
			skip=self.skip_count,
			projection=self.projection
		)

	def first(self) -> T | None:
		previous_limit = self.limit_count
		self.limit_count = 1
		try:
			results = self.exec()
		finally:
			self.limit_count = previous_limit
		return results[0] if results else None

	def count(self) -> int:
		""" Number of matching documents, ignoring sort, limit and projection. """
		return self.document_cls.db_count_documents(self.query)

	def __iter__(self) -> Iterator[T]:
		return iter(self.exec())
