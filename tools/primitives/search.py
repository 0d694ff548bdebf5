"""
Primitive search operations for Elasticsearch.
"""

import logging
from typing import Dict, Any, List, Optional, Union
from elasticsearch import Elasticsearch

from config.environments import get_search_config
from es_types.primitives import ElasticQuery, ElasticResponse
from tools.primitives.indices import require_index
from utils.connection import get_elasticsearch_client
from utils.errors import ElasticsearchError
from utils.query_sanitizer import (
    match_all_query,
    sanitize_query,
    validate_aggregations,
    validate_highlight,
    validate_sort,
    validate_source_fields,
)
from utils.response_parser import response_body
from utils.validation import validate_index_pattern, validate_size

logger = logging.getLogger(__name__)


def search_elastic(
    index_pattern: str,
    query: Optional[Dict[str, Any]] = None,
    size: Optional[int] = None,
    from_: Optional[int] = None,
    sort: Optional[List[Dict[str, Any]]] = None,
    aggregations: Optional[Dict[str, Any]] = None,
    highlight: Optional[Dict[str, Any]] = None,
    _source: Union[None, bool, List[str]] = None,
    scroll: Optional[str] = None,
    timeout: Optional[str] = None,
    es: Optional[Elasticsearch] = None,
) -> ElasticResponse:
    """
    Execute an Elasticsearch search request.

    This is the foundational search primitive that the search tool, field
    discovery and the scroll reader build upon. It performs no query safety
    checks; callers sanitize first.

    Args:
        index_pattern: Index pattern to search (e.g., "logs-*")
        query: Elasticsearch Query DSL query (match_all when omitted)
        size: Number of results to return (clamped to 1-10000)
        from_: Offset for pagination
        sort: Sort criteria
        aggregations: Aggregation definitions
        highlight: Highlight configuration
        _source: Source filtering (True, False, or field list)
        scroll: Scroll keep-alive for cursor-based reads (e.g. "5m")
        timeout: Server-side search timeout
        es: Client to use (shared client when omitted)

    Returns:
        ElasticResponse with search results

    Raises:
        ValidationError: If the index pattern is invalid
        ElasticsearchError: If Elasticsearch query fails
    """
    validate_index_pattern(index_pattern)
    max_size = get_search_config()["max_size"]
    if size is not None:
        size = validate_size(size, max_size=max_size)
    if from_ is not None:
        from_ = max(0, from_)

    elastic_query = ElasticQuery(
        index_pattern=index_pattern,
        query=query or match_all_query(),
        size=size,
        from_=from_,
        sort=sort,
        aggregations=aggregations,
        highlight=highlight,
        _source=_source,
    )

    es = es or get_elasticsearch_client()
    request: Dict[str, Any] = {"index": index_pattern, "body": elastic_query.to_dict()}
    if scroll:
        request["scroll"] = scroll
    if timeout:
        request["timeout"] = timeout

    try:
        response = es.search(**request)
    except Exception as e:
        raise ElasticsearchError(
            "Elasticsearch query failed",
            e,
            {"index": index_pattern, "scroll": scroll},
        ) from e

    return ElasticResponse.from_dict(response_body(response))


def scroll_elastic(
    scroll_id: str,
    scroll: str = "5m",
    es: Optional[Elasticsearch] = None,
) -> ElasticResponse:
    """
    Continue scrolling through search results.

    Must be called after an initial search with the scroll parameter.

    Args:
        scroll_id: Scroll ID from previous response
        scroll: Keep-alive extension (e.g., "5m", "30s")

    Returns:
        ElasticResponse with next batch of results

    Raises:
        ElasticsearchError: If the scroll fails (including expired contexts)
    """
    es = es or get_elasticsearch_client()

    try:
        response = es.scroll(scroll_id=scroll_id, scroll=scroll)
    except Exception as e:
        raise ElasticsearchError("Elasticsearch scroll failed", e) from e

    return ElasticResponse.from_dict(response_body(response))


def clear_scroll(scroll_id: str, es: Optional[Elasticsearch] = None) -> bool:
    """
    Clear a scroll context to free server resources.

    Best effort: a failure is logged as a warning and reported through the
    return value, never raised.

    Returns:
        True if the cluster acknowledged the clear
    """
    es = es or get_elasticsearch_client()

    try:
        es.clear_scroll(scroll_id=scroll_id)
    except Exception as e:
        logger.warning("Failed to clear scroll: %s", e)
        return False
    return True


def search_elasticsearch(
    index: str,
    query: Optional[Dict[str, Any]] = None,
    size: Optional[int] = None,
    from_: Optional[int] = None,
    sort: Optional[List[Dict[str, Any]]] = None,
    aggregations: Optional[Dict[str, Any]] = None,
    highlight: Optional[Dict[str, Any]] = None,
    source: Union[None, bool, List[str]] = None,
    es: Optional[Elasticsearch] = None,
) -> Dict[str, Any]:
    """
    Search one index with validated query, sort, aggregation and highlight.

    All caller input is validated before the cluster is contacted.

    Returns:
        {"hits": {"total": {...}, "hits": [...]}, "aggregations"?, "took"}

    Raises:
        ValidationError: On unsafe or malformed input
        NotFoundError: If the index does not exist
        ElasticsearchError: If the search fails
    """
    validate_index_pattern(index)
    sanitized = sanitize_query(query, operation="search")
    if sort:
        validate_sort(sort)
    if aggregations:
        validate_aggregations(aggregations)
    if highlight:
        validate_highlight(highlight)
    if isinstance(source, list):
        validate_source_fields(source)

    logger.info(
        "Executing search",
        extra={"context": {
            "index": index,
            "has_query": sanitized is not None,
            "size": size,
            "from": from_,
            "has_sort": bool(sort),
            "has_aggregations": bool(aggregations),
            "has_highlight": bool(highlight),
        }},
    )

    es = es or get_elasticsearch_client()
    require_index(index, es=es)

    response = search_elastic(
        index_pattern=index,
        query=sanitized,
        size=size,
        from_=from_,
        sort=sort or None,
        aggregations=aggregations,
        highlight=highlight,
        _source=source,
        timeout=get_search_config()["timeout"],
        es=es,
    )

    logger.info(
        "Search executed successfully",
        extra={"context": {"index": index, "total_hits": response.total, "took": response.took}},
    )
    return response.to_result()
