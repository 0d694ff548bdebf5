"""
Primitive tools for low-level Elasticsearch operations.
"""

from .search import search_elastic, scroll_elastic, clear_scroll, search_elasticsearch
from .indices import check_index_exists, require_index, get_index_mapping, fetch_indices, create_index
from .documents import insert_document, update_document, delete_document
from .fields import resolve_fields, extract_field_names
from .scroll import ScrollReader, ScrollState

__all__ = [
    # Search operations
    "search_elastic",
    "scroll_elastic",
    "clear_scroll",
    "search_elasticsearch",
    # Index operations
    "check_index_exists",
    "require_index",
    "get_index_mapping",
    "fetch_indices",
    "create_index",
    # Document operations
    "insert_document",
    "update_document",
    "delete_document",
    # Export building blocks
    "resolve_fields",
    "extract_field_names",
    "ScrollReader",
    "ScrollState",
]
