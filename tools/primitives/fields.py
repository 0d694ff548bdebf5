"""
Field discovery for CSV exports.
"""

import logging
from typing import Dict, Any, List, Optional
from elasticsearch import Elasticsearch

from tools.primitives.indices import get_index_mapping
from tools.primitives.search import search_elastic
from utils.connection import get_elasticsearch_client
from utils.errors import ElasticMCPError, ValidationError
from utils.response_parser import parse_mapping_properties

logger = logging.getLogger(__name__)


def extract_field_names(properties: Dict[str, Any], prefix: str = "") -> List[str]:
    """
    Flatten mapping properties into dotted field names.

    A property with a ``type`` is a field. A property without a type but with
    nested ``properties`` is descended into.

    >>> extract_field_names({"title": {"type": "text"}, "user": {"properties": {"name": {"type": "keyword"}}}})
    ['title', 'user.name']
    """
    fields: List[str] = []

    for key, value in properties.items():
        if not isinstance(value, dict):
            continue

        field_name = f"{prefix}.{key}" if prefix else key
        if value.get("type"):
            fields.append(field_name)
        elif isinstance(value.get("properties"), dict):
            fields.extend(extract_field_names(value["properties"], field_name))

    return fields


def fields_from_mapping(index: str, es: Optional[Elasticsearch] = None) -> List[str]:
    """
    Field names declared in the index mapping; empty when the lookup fails.
    """
    try:
        mapping = get_index_mapping(index, es=es)
    except ElasticMCPError as e:
        logger.warning(
            "Failed to get field mapping, using sample document",
            extra={"context": {"index": index, "error": str(e)}},
        )
        return []

    return extract_field_names(parse_mapping_properties(mapping))


def fields_from_sample(index: str, es: Optional[Elasticsearch] = None) -> List[str]:
    """
    Top-level keys of one sample document; empty when the index has none.

    Raises:
        ElasticsearchError: If the sample query fails
    """
    response = search_elastic(index_pattern=index, size=1, es=es)
    if not response.hits:
        return []
    return list(response.sources[0].keys())


def resolve_fields(
    index: str,
    explicit_fields: Optional[List[str]] = None,
    es: Optional[Elasticsearch] = None,
) -> List[str]:
    """
    Decide which columns an export writes.

    Explicit fields are returned as given. Otherwise the index mapping is
    flattened, and if that yields nothing a single sample document's
    top-level keys are used.

    Raises:
        ValidationError: If no fields could be determined
    """
    if explicit_fields:
        return list(explicit_fields)

    es = es or get_elasticsearch_client()

    fields = fields_from_mapping(index, es=es)
    if fields:
        return fields

    fields = fields_from_sample(index, es=es)
    if fields:
        logger.info(
            "Using sample document fields for export",
            extra={"context": {"index": index, "field_count": len(fields)}},
        )
        return fields

    raise ValidationError(
        "Could not determine fields to export and no fields specified",
        {"index": index},
    )
