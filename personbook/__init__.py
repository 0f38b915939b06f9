"""
personbook: a Person collection in MongoDB behind a small object-document mapper.

Importing the package defines the models and builds the type registry. The database connection is opened on first use
from MONGO_URI (see personbook.document.mongo_db).
"""

from .typing import type_registry, create_type_registry, SchemaConfig, ValidationError
from .document import Document, DocumentId, DocumentQuery, create_mongo_db, set_mongo_db, close_mongo_db
from .models import Person
from .utilities.setup_error import SetupError
from .utilities.result import DeleteManyResult
from .utilities.logger import logger, set_logger, set_log_level

# Register all models imported above
create_type_registry()
