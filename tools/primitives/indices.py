"""
Primitive index operations for Elasticsearch.
"""

import logging
import re
from typing import Dict, Any, List, Optional
from elasticsearch import Elasticsearch

from es_types.primitives import IndexInfo, IndexSortBy
from utils.connection import get_elasticsearch_client
from utils.errors import ElasticsearchError, NotFoundError, ValidationError
from utils.response_parser import response_body
from utils.validation import validate_index_name, validate_index_pattern

logger = logging.getLogger(__name__)

VALID_FIELD_TYPES = {
    "text", "keyword", "integer", "long", "float", "double", "boolean",
    "date", "ip", "geo_point", "geo_shape", "nested", "object", "binary",
    "integer_range", "float_range", "long_range", "double_range", "date_range", "ip_range",
}


def check_index_exists(
    index_pattern: str,
    es: Optional[Elasticsearch] = None,
) -> bool:
    """
    Check if any indices match the pattern.

    Args:
        index_pattern: Index pattern to check

    Returns:
        True if at least one index matches

    Raises:
        ElasticsearchError: If the existence check itself fails
    """
    validate_index_pattern(index_pattern)

    es = es or get_elasticsearch_client()

    try:
        return bool(es.indices.exists(index=index_pattern))
    except Exception as e:
        raise ElasticsearchError(
            "Failed to check index existence",
            e,
            {"index": index_pattern},
        ) from e


def require_index(index: str, es: Optional[Elasticsearch] = None) -> None:
    """
    Raises:
        NotFoundError: If the index does not exist
    """
    if not check_index_exists(index, es=es):
        raise NotFoundError(f"Index '{index}' does not exist", {"index": index})


def get_index_mapping(
    index_pattern: str,
    es: Optional[Elasticsearch] = None,
) -> Dict[str, Any]:
    """
    Get field mappings for indices.

    Args:
        index_pattern: Index pattern to get mappings for

    Returns:
        Dictionary of index mappings keyed by index name

    Raises:
        ElasticsearchError: If mapping retrieval fails
    """
    validate_index_pattern(index_pattern)

    es = es or get_elasticsearch_client()

    try:
        return response_body(es.indices.get_mapping(index=index_pattern))
    except Exception as e:
        raise ElasticsearchError("Failed to get index mappings", e, {"index": index_pattern}) from e


def fetch_indices(
    pattern: Optional[str] = None,
    include_system_indices: bool = False,
    sort_by: str = "name",
    es: Optional[Elasticsearch] = None,
) -> Dict[str, Any]:
    """
    List indices with health, document count and size.

    System indices (names starting with '.') are excluded unless requested.

    Args:
        pattern: Index pattern filter (e.g. "logs-*")
        include_system_indices: Include '.'-prefixed indices
        sort_by: "name", "size" or "docs"

    Returns:
        {"indices": [...], "total": int}
    """
    try:
        sort_key = IndexSortBy(sort_by or "name")
    except ValueError as e:
        raise ValidationError(f"Invalid sortBy '{sort_by}': expected name, size or docs") from e

    if pattern:
        validate_index_pattern(pattern)

    index_pattern = pattern or "*"
    if not include_system_indices and index_pattern == "*":
        index_pattern = "*,-.*"

    logger.info(
        "Fetching indices",
        extra={"context": {"pattern": index_pattern, "sort_by": sort_key.value}},
    )

    es = es or get_elasticsearch_client()

    try:
        rows = response_body(es.cat.indices(
            index=index_pattern,
            format="json",
            h="index,health,status,docs.count,store.size,creation.date,uuid",
            s=sort_key.cat_parameter,
        ))
    except Exception as e:
        raise ElasticsearchError(
            "Failed to fetch indices from Elasticsearch",
            e,
            {"pattern": index_pattern},
        ) from e

    indices = [IndexInfo.from_cat(row) for row in rows or []]
    indices = filter_indices(indices, pattern, include_system_indices)

    logger.info("Successfully fetched indices", extra={"context": {"total": len(indices)}})
    return {
        "indices": [index.to_dict() for index in indices],
        "total": len(indices),
    }


def filter_indices(
    indices: List[IndexInfo],
    pattern: Optional[str],
    include_system_indices: bool,
) -> List[IndexInfo]:
    """Client-side filtering of system indices and wildcard patterns."""
    filtered = list(indices)

    if not include_system_indices:
        filtered = [index for index in filtered if not index.name.startswith(".")]

    if pattern and pattern != "*" and "," not in pattern:
        regex = re.compile(
            ".*".join(re.escape(part) for part in pattern.split("*")),
            re.IGNORECASE,
        )
        filtered = [index for index in filtered if regex.fullmatch(index.name)]

    return filtered


def validate_mappings(mappings: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(mappings, dict):
        raise ValidationError("Mappings must be a valid object")

    properties = mappings.get("properties")
    if properties is not None:
        if not isinstance(properties, dict):
            raise ValidationError("Mappings properties must be an object")
        validate_mapping_properties(properties)

    return mappings


def validate_mapping_properties(properties: Dict[str, Any]) -> None:
    for field_name, field_config in properties.items():
        if not isinstance(field_config, dict):
            continue

        field_type = field_config.get("type")
        if isinstance(field_type, str) and field_type not in VALID_FIELD_TYPES:
            raise ValidationError(f"Invalid field type '{field_type}' for field '{field_name}'")

        nested = field_config.get("properties")
        if isinstance(nested, dict):
            validate_mapping_properties(nested)


def validate_settings(settings: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(settings, dict):
        raise ValidationError("Settings must be a valid object")

    shards = settings.get("number_of_shards")
    if isinstance(shards, int) and not 1 <= shards <= 1024:
        raise ValidationError("Number of shards must be between 1 and 1024")

    replicas = settings.get("number_of_replicas")
    if isinstance(replicas, int) and not 0 <= replicas <= 10:
        raise ValidationError("Number of replicas must be between 0 and 10")

    return settings


def build_aliases(aliases: List[str]) -> Dict[str, Dict[str, Any]]:
    result: Dict[str, Dict[str, Any]] = {}
    for alias in aliases:
        if not isinstance(alias, str) or not alias.strip():
            raise ValidationError("All aliases must be non-empty strings")

        alias = alias.strip()
        if any(ch.isspace() for ch in alias):
            raise ValidationError(f"Invalid alias name '{alias}': cannot contain whitespace")

        result[alias] = {}
    return result


def create_index(
    name: str,
    mappings: Optional[Dict[str, Any]] = None,
    settings: Optional[Dict[str, Any]] = None,
    aliases: Optional[List[str]] = None,
    es: Optional[Elasticsearch] = None,
) -> Dict[str, Any]:
    """
    Create an index with optional mappings, settings and aliases.

    Returns:
        {"acknowledged", "index", "shardsAcknowledged"}

    Raises:
        ValidationError: On an invalid name/body or if the index already exists
        ElasticsearchError: If creation fails
    """
    validate_index_name(name)

    body: Dict[str, Any] = {}
    if mappings:
        body["mappings"] = validate_mappings(mappings)
    if settings:
        body["settings"] = validate_settings(settings)
    if aliases:
        body["aliases"] = build_aliases(aliases)

    logger.info(
        "Creating index",
        extra={"context": {
            "name": name,
            "has_mappings": bool(mappings),
            "has_settings": bool(settings),
            "alias_count": len(aliases or []),
        }},
    )

    es = es or get_elasticsearch_client()

    if check_index_exists(name, es=es):
        raise ValidationError(f"Index '{name}' already exists", {"index": name})

    try:
        response = response_body(es.indices.create(index=name, body=body))
    except Exception as e:
        raise ElasticsearchError("Failed to create index in Elasticsearch", e, {"index": name}) from e

    logger.info("Successfully created index", extra={"context": {"name": name}})
    return {
        "acknowledged": bool(response.get("acknowledged")),
        "index": name,
        "shardsAcknowledged": bool(response.get("shards_acknowledged")),
    }
