from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class DocumentContext:
    """ Where we are within a document while deserializing it. Printed into error messages. """
    document_path: str
    """ The path of the current field relative to the document root. 
    List elements will be returned as [idx]. """
    
    document_id: str | None = None
    collection_name: str | None = None

    def replace(self, document_path: str | None = None) -> 'DocumentContext':
        return DocumentContext(
            document_path=document_path if document_path else self.document_path,
            document_id=self.document_id,
            collection_name=self.collection_name
        )

    def subpath(self, field_name: str) -> 'DocumentContext':
        """ Returns a new DocumentContext pointing at a subfield of the current path. """
        return self.replace(document_path=f"{self.document_path}.{field_name}")

    def subidx(self, idx: int) -> 'DocumentContext':
        """ Returns a new DocumentContext pointing at a list element of the current path. """
        return self.replace(document_path=f"{self.document_path}[{idx}]")

    def __str__(self) -> str:
        """ Printable to logs. """
        return f"Collection: {self.collection_name}\nDocument _id: {self.document_id}\nDocument path: {self.document_path}"
