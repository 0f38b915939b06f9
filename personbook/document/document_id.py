from bson import ObjectId


class DocumentId(str):
	""" Used for a document's own _id field.
	New ids are ObjectId hex strings stored as plain strings, so they sort by creation time like ids generated by other Mongo clients.
	Ids another client stored as ObjectIds are written back as ObjectIds (see Document._stored_id). """
	def __new__(cls, _id: 'str | ObjectId | None' = None):
		if not _id:
			_id = ObjectId()
		instance = super().__new__(cls, str(_id))
		return instance

	def __repr__(self) -> str:
		return f"DocumentId({str(self)!r})"
