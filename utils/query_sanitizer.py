"""
Query DSL sanitization and safety checks.

Every operation that hands a caller-supplied query to the cluster (search,
delete-by-query, export) runs it through ``sanitize_query`` first. The checks
are pure functions over the query tree; the only side effects are warning
logs for shapes that are allowed but worth flagging.
"""

import copy
import json
import logging
from typing import Any, Dict, List, Optional

from utils.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_QUERY_DEPTH = 20
MAX_SORT_CRITERIA = 20
MAX_AGGREGATIONS = 50
MAX_HIGHLIGHT_FIELDS = 20
MAX_SOURCE_FIELDS = 100
MAX_FIELD_NAME_LENGTH = 256

SCRIPT_QUERY_MARKERS = ("script_score", "script_query")
PATTERN_QUERY_MARKERS = ("wildcard", "prefix")


def match_all_query() -> Dict[str, Any]:
    return {"match_all": {}}


def sanitize_query(
    query: Optional[Dict[str, Any]],
    operation: str = "search",
) -> Optional[Dict[str, Any]]:
    """
    Validate a caller-supplied query and return a clean copy.

    Args:
        query: Raw query tree (may be None)
        operation: Operation name used in messages ("search", "delete", "export")

    Returns:
        A deep copy of the query, or None when the query is absent or empty,
        meaning "match everything"

    Raises:
        ValidationError: If the query is not an object, embeds a script or is
            nested too deeply
    """
    if query is None:
        return None

    if not isinstance(query, dict):
        raise ValidationError("Query must be a JSON object", {"operation": operation})

    if not query:
        return None

    validate_query(query, operation)
    return copy.deepcopy(query)


def validate_query(query: Dict[str, Any], operation: str = "search") -> None:
    """
    Reject unsafe query shapes and warn about expensive ones.

    Raises:
        ValidationError: On script markers or excessive nesting
    """
    query_str = json.dumps(query, default=str).lower()

    if any(marker in query_str for marker in SCRIPT_QUERY_MARKERS):
        raise ValidationError(
            f"Script-based queries are not allowed in {operation} operations",
            {"operation": operation},
        )

    validate_query_depth(query, 0)

    if "match_all" in query_str and "size" not in query_str and "from" not in query_str:
        logger.warning(
            "Detected match_all query without size limit",
            extra={"context": {"operation": operation}},
        )

    if any(marker in query_str for marker in PATTERN_QUERY_MARKERS):
        logger.warning(
            "Wildcard/prefix queries detected - may impact performance",
            extra={"context": {"operation": operation, "query": query}},
        )


def validate_query_depth(node: Dict[str, Any], current_depth: int = 0) -> None:
    """
    Ensure no chain of nested objects exceeds MAX_QUERY_DEPTH.

    Only object values are followed; arrays end the chain.

    Raises:
        ValidationError: If the depth limit is exceeded
    """
    if current_depth > MAX_QUERY_DEPTH:
        raise ValidationError(f"Query nesting exceeds maximum depth of {MAX_QUERY_DEPTH}")

    for value in node.values():
        if isinstance(value, dict):
            validate_query_depth(value, current_depth + 1)


def validate_sort(sort: List[Any]) -> None:
    if len(sort) > MAX_SORT_CRITERIA:
        raise ValidationError(f"Too many sort criteria (max {MAX_SORT_CRITERIA})")

    for sort_item in sort:
        if not isinstance(sort_item, dict):
            raise ValidationError("Each sort item must be an object")

        if "_script" in json.dumps(sort_item, default=str).lower():
            raise ValidationError("Script-based sorting is not allowed")


def validate_aggregations(aggregations: Dict[str, Any]) -> None:
    if not isinstance(aggregations, dict):
        raise ValidationError("Aggregations must be an object")

    if "script" in json.dumps(aggregations, default=str).lower():
        raise ValidationError("Script-based aggregations require additional security validation")

    validate_query_depth(aggregations, 0)

    if len(aggregations) > MAX_AGGREGATIONS:
        raise ValidationError(f"Too many aggregations (max {MAX_AGGREGATIONS})")


def validate_highlight(highlight: Dict[str, Any]) -> None:
    if not isinstance(highlight, dict):
        raise ValidationError("Highlight must be an object")

    fields = highlight.get("fields")
    if isinstance(fields, (dict, list)) and len(fields) > MAX_HIGHLIGHT_FIELDS:
        raise ValidationError(f"Too many highlight fields (max {MAX_HIGHLIGHT_FIELDS})")

    if "script" in json.dumps(highlight, default=str).lower():
        raise ValidationError("Script-based highlighting is not allowed")


def validate_source_fields(fields: List[Any]) -> None:
    """
    Validate a list of field names used for source filtering or export columns.

    Raises:
        ValidationError: On too many fields, empty names or overlong names
    """
    if len(fields) > MAX_SOURCE_FIELDS:
        raise ValidationError(f"Too many source fields specified (max {MAX_SOURCE_FIELDS})")

    for field in fields:
        if not isinstance(field, str) or not field:
            raise ValidationError("Source fields must be non-empty strings")

        if len(field) > MAX_FIELD_NAME_LENGTH:
            raise ValidationError(
                f"Source field name too long: '{field[:50]}...' (max {MAX_FIELD_NAME_LENGTH} characters)"
            )
