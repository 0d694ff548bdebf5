"""
Primitive document write operations for Elasticsearch.
"""

import logging
from typing import Dict, Any, Optional, Union
from elasticsearch import Elasticsearch

from es_types.documents import DeleteResult, WriteResult
from tools.primitives.indices import check_index_exists, require_index
from utils.connection import get_elasticsearch_client
from utils.document_validator import validate_document, validate_script
from utils.errors import ElasticsearchError, NotFoundError, ValidationError
from utils.query_sanitizer import sanitize_query
from utils.response_parser import response_body
from utils.validation import normalize_refresh, validate_index_pattern

logger = logging.getLogger(__name__)

RefreshPolicy = Optional[Union[bool, str]]

CONFLICT_POLICIES = ("abort", "proceed")


def _is_not_found(error: Exception) -> bool:
    if getattr(error, "status_code", None) == 404:
        return True
    message = str(error).lower()
    return "not_found" in message or "document_missing" in message


def insert_document(
    index: str,
    document: Dict[str, Any],
    id: Optional[str] = None,
    refresh: RefreshPolicy = None,
    es: Optional[Elasticsearch] = None,
) -> Dict[str, Any]:
    """
    Index a single document.

    A missing index is not an error: the cluster creates it on first write,
    which is logged as a warning.

    Returns:
        {"_id", "_index", "_version", "result"}

    Raises:
        ValidationError: If the document is invalid
        ElasticsearchError: If indexing fails
    """
    validate_index_pattern(index)
    validate_document(document)

    logger.info(
        "Inserting document",
        extra={"context": {"index": index, "has_id": bool(id), "document_keys": list(document)}},
    )

    es = es or get_elasticsearch_client()

    if not check_index_exists(index, es=es):
        logger.warning(
            "Index does not exist, it will be created automatically",
            extra={"context": {"index": index}},
        )

    request: Dict[str, Any] = {
        "index": index,
        "document": document,
        "refresh": normalize_refresh(refresh),
    }
    if id:
        request["id"] = id

    try:
        response = response_body(es.index(**request))
    except Exception as e:
        raise ElasticsearchError(
            "Failed to insert document into Elasticsearch",
            e,
            {"index": index, "id": id},
        ) from e

    result = WriteResult.from_dict(response)
    logger.info("Successfully inserted document", extra={"context": result.to_dict()})
    return result.to_dict()


def update_document(
    index: str,
    id: str,
    document: Optional[Dict[str, Any]] = None,
    script: Optional[Dict[str, Any]] = None,
    upsert: bool = False,
    refresh: RefreshPolicy = None,
    es: Optional[Elasticsearch] = None,
) -> Dict[str, Any]:
    """
    Update a document with a partial document, a script, or both.

    Args:
        index: Index name
        id: Document ID
        document: Partial document merged into the stored one
        script: {"source": str, "params": dict} painless update
        upsert: Create the document when it does not exist
        refresh: Refresh policy

    Returns:
        {"_id", "_index", "_version", "result"}

    Raises:
        ValidationError: On invalid input or a version conflict
        NotFoundError: If the index or the document does not exist
        ElasticsearchError: If the update fails
    """
    validate_index_pattern(index)
    if not id:
        raise ValidationError("Document ID is required")
    if document is None and script is None:
        raise ValidationError("Either document or script must be provided")

    body: Dict[str, Any] = {}
    if document is not None:
        validate_document(document, label="Update document")
        body["doc"] = document
        if upsert:
            body["doc_as_upsert"] = True

    if script is not None:
        body["script"] = validate_script(script)
        if upsert and document is not None:
            body.pop("doc_as_upsert", None)
            body["upsert"] = body.pop("doc")

    logger.info(
        "Updating document",
        extra={"context": {
            "index": index,
            "id": id,
            "has_document": document is not None,
            "has_script": script is not None,
            "upsert": upsert,
        }},
    )

    es = es or get_elasticsearch_client()
    require_index(index, es=es)

    try:
        response = response_body(es.update(
            index=index,
            id=id,
            body=body,
            refresh=normalize_refresh(refresh),
            retry_on_conflict=3,
        ))
    except Exception as e:
        if _is_not_found(e):
            raise NotFoundError(
                f"Document with ID '{id}' not found in index '{index}'",
                {"index": index, "id": id},
            ) from e
        if "version_conflict" in str(e).lower():
            raise ValidationError("Document was modified by another process, please retry") from e
        raise ElasticsearchError(
            "Failed to update document in Elasticsearch",
            e,
            {"index": index, "id": id},
        ) from e

    result = WriteResult.from_dict(response)
    logger.info("Successfully updated document", extra={"context": result.to_dict()})
    return result.to_dict()


def delete_document(
    index: str,
    id: Optional[str] = None,
    query: Optional[Dict[str, Any]] = None,
    conflicts: str = "abort",
    refresh: RefreshPolicy = None,
    es: Optional[Elasticsearch] = None,
) -> Dict[str, Any]:
    """
    Delete one document by ID or every document matching a query.

    The query is sanitized before the cluster is contacted; script-based
    queries are rejected.

    Returns:
        {"deleted", "tookMs", "timedOut", ...}

    Raises:
        ValidationError: On invalid input
        NotFoundError: If the index or the document does not exist
        ElasticsearchError: If the delete fails
    """
    validate_index_pattern(index)
    if conflicts not in CONFLICT_POLICIES:
        raise ValidationError("conflicts must be 'abort' or 'proceed'")

    if not id and query is None:
        raise ValidationError("Either id or query must be provided")

    sanitized = sanitize_query(query, operation="delete")
    if not id and sanitized is None:
        raise ValidationError("Query cannot be empty")

    logger.info(
        "Deleting document(s)",
        extra={"context": {"index": index, "has_id": bool(id), "has_query": sanitized is not None}},
    )

    es = es or get_elasticsearch_client()
    require_index(index, es=es)

    if id:
        return _delete_by_id(es, index, id, refresh)
    return _delete_by_query(es, index, sanitized, conflicts, refresh)


def _delete_by_id(es: Elasticsearch, index: str, id: str, refresh: RefreshPolicy) -> Dict[str, Any]:
    try:
        response = response_body(es.delete(index=index, id=id, refresh=normalize_refresh(refresh)))
    except Exception as e:
        if _is_not_found(e):
            raise NotFoundError(
                f"Document with ID '{id}' not found in index '{index}'",
                {"index": index, "id": id},
            ) from e
        raise ElasticsearchError(
            "Failed to delete document(s) from Elasticsearch",
            e,
            {"index": index, "id": id},
        ) from e

    logger.info(
        "Successfully deleted document by ID",
        extra={"context": {"index": index, "id": id, "result": response.get("result")}},
    )
    return DeleteResult(deleted=1 if response.get("result") == "deleted" else 0).to_dict()


def _delete_by_query(
    es: Elasticsearch,
    index: str,
    query: Dict[str, Any],
    conflicts: str,
    refresh: RefreshPolicy,
) -> Dict[str, Any]:
    try:
        response = response_body(es.delete_by_query(
            index=index,
            body={"query": query},
            refresh=bool(normalize_refresh(refresh)),
            conflicts=conflicts,
            timeout="5m",
            wait_for_completion=True,
        ))
    except Exception as e:
        raise ElasticsearchError(
            "Failed to delete document(s) from Elasticsearch",
            e,
            {"index": index},
        ) from e

    result = DeleteResult.from_delete_by_query(response)
    logger.info("Successfully executed delete by query", extra={"context": {"index": index, **result.to_dict()}})
    return result.to_dict()
