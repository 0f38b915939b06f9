"""
Document module for managing document operations and database interactions.

This module provides functionality for:
- Document CRUD operations
- MongoDB integration
- Chainable queries
"""

from .document_id import DocumentId
from .document import Document
from .document_query import DocumentQuery
from .update_method import UpdateMethod
from .mongo_db import create_mongo_db, set_mongo_db, close_mongo_db
