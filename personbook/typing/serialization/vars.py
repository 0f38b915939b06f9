from typing import Any

from ...utilities.logger import logger

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from ...document.document_context import DocumentContext


__type_id__ = "__type_id__"

def get_type_id(bson: Any, document_context: 'DocumentContext | None') -> str | None:
    """ Get the type_id from the bson, if present. """
    
    if not isinstance(bson, dict):
        return None
    
    type_id = bson.get(__type_id__, None)
    if not type_id:
        # Inclusion projections drop __type_id__, so this is not necessarily a problem
        logger.info(f"Bson did not assert a __type_id__.\n{document_context}")
        return None
    
    if not isinstance(type_id, str):
        logger.warning(f"Warning: Bson asserted a __type_id__ that is not a string.\n{document_context}")
        return None
    
    return type_id
