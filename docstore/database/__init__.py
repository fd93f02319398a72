"""
Database module initialization.
Exports the document contract, connection context and generic repository.
"""

from .blocking import BlockingRepository
from .context import MongoContext, database_name_from_url, sanitize_mongodb_url
from .document import Document
from .exceptions import (
    DocstoreConnectionError,
    DocstoreError,
    DocstoreMultipleResultsError,
    DocstoreNotFoundError,
    DocstoreSerializationError,
)
from .filters import Filter, and_, field, not_, or_
from .repository import DocumentQuery, MongoRepository

__all__ = [
    # Connection management
    "MongoContext",
    "database_name_from_url",
    "sanitize_mongodb_url",
    # Documents and repositories
    "Document",
    "MongoRepository",
    "DocumentQuery",
    "BlockingRepository",
    # Filters
    "Filter",
    "field",
    "and_",
    "or_",
    "not_",
    # Errors
    "DocstoreError",
    "DocstoreConnectionError",
    "DocstoreSerializationError",
    "DocstoreNotFoundError",
    "DocstoreMultipleResultsError",
]
