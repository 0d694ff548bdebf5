"""
Utility functions for the MCP Elasticsearch server.
"""

from .connection import get_elasticsearch_client, get_cluster_info
from .errors import (
    ElasticMCPError,
    ValidationError,
    NotFoundError,
    ElasticsearchError,
    build_error_response,
)
from .validation import (
    validate_index_pattern,
    validate_index_name,
    validate_size,
    validate_max_rows,
    clamp_value,
)
from .query_sanitizer import sanitize_query, validate_query
from .document_validator import validate_document, validate_script
from .response_parser import (
    response_body,
    parse_mapping_properties,
)

__all__ = [
    # Connection
    "get_elasticsearch_client",
    "get_cluster_info",
    # Errors
    "ElasticMCPError",
    "ValidationError",
    "NotFoundError",
    "ElasticsearchError",
    "build_error_response",
    # Validation
    "validate_index_pattern",
    "validate_index_name",
    "validate_size",
    "validate_max_rows",
    "clamp_value",
    # Query and document safety
    "sanitize_query",
    "validate_query",
    "validate_document",
    "validate_script",
    # Response parsing
    "response_body",
    "parse_mapping_properties",
]
