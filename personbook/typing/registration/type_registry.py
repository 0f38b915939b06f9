from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from bidict import bidict

if TYPE_CHECKING:
    from ..bsonable_dataclass.bsonable_dataclass import BsonableDataclass
    from ...document.document import Document


@dataclass
class TypeRegistry:
    """ A registry of all types that can be stored and retrieved from MongoDb. """
    type_id_dict: bidict[str, type['BsonableDataclass']] = field(default_factory=bidict)
    """ Concrete BsonableDataclasses (including Documents) keyed by their __type_id__. """

    collection_dict: bidict[str, type['Document']] = field(default_factory=bidict)
    """ Concrete Documents keyed by their __collection_name__. """

    @classmethod
    def initialize(cls) -> 'TypeRegistry':
        return TypeRegistry()

    def type_to_type_id(self, type_: type) -> str | None:
        """ Return the type id for the type. """
        return self.type_id_dict.inverse.get(type_)

    def lookup_type_by_type_id(self, type_id: str) -> type['BsonableDataclass'] | None:
        """ Returns None if no Bsonable found with matching type id. """
        return self.type_id_dict.get(type_id)

    def collection_name_to_cls(self, collection_name: str) -> type['Document']:
        if collection_name not in self.collection_dict:
            raise ValueError(f"Document class with collection name {collection_name} not found in our type registry.")
        return self.collection_dict[collection_name]

    @property
    def document_classes(self) -> list[type['Document']]:
        return list(self.collection_dict.values())
