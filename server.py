"""
FastMCP Elasticsearch Server.

This server provides data-access tools over an Elasticsearch cluster:
- health: Check cluster connectivity
- fetch_indices: List indices with health, document count and size
- search_elasticsearch: Validated Query DSL search
- create_index: Create an index with mappings, settings and aliases
- insert_data / update_document / delete_document: Document writes
- export_to_csv: Stream matching documents into a CSV file
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from dotenv import load_dotenv

from config import get_current_environment, get_environment_config, get_logging_config
from es_types.export import CsvFormat, ExportRequest
from tools.primitives import (
    create_index as create_index_primitive,
    delete_document as delete_document_primitive,
    fetch_indices as fetch_indices_primitive,
    insert_document,
    search_elasticsearch as search_elasticsearch_primitive,
    update_document as update_document_primitive,
)
from tools.flows.export_csv import export_to_csv as export_to_csv_flow
from utils import get_cluster_info
from utils.errors import ElasticMCPError, build_error_response
from utils.log import configure_logging

# Load environment variables
load_dotenv()

logging_config = get_logging_config()
configure_logging(level=logging_config["level"], fmt=logging_config["format"])

logger = logging.getLogger("elastic_mcp.server")

# Initialize MCP server
mcp = FastMCP(get_environment_config()["name"])


def _call_tool(tool_name: str, operation: Callable[..., Any], **kwargs: Any) -> Any:
    """
    Run a tool operation and turn failures into a ToolError.

    The ToolError text is the structured error payload, with sensitive
    context masked.
    """
    try:
        return operation(**kwargs)
    except ElasticMCPError as e:
        logger.warning(
            "Tool %s failed: %s", tool_name, e.message,
            extra={"context": {"tool": tool_name, "code": e.code}},
        )
        raise ToolError(json.dumps(build_error_response(e), default=str)) from e
    except Exception as e:
        logger.exception("Unexpected error in tool %s", tool_name)
        raise ToolError(json.dumps(build_error_response(e), default=str)) from e


# ========== HEALTH TOOL ==========

@mcp.tool()
def health() -> Dict[str, Any]:
    """
    Check connectivity to the Elasticsearch cluster.

    Returns status information about the cluster connection and the
    server configuration.
    """
    config = get_environment_config()
    cluster = get_cluster_info()

    return {
        "overall_status": "healthy" if cluster["connected"] else "degraded",
        "environment": get_current_environment(),
        "version": config["version"],
        "services": {
            "elasticsearch": {"service": "elasticsearch", **cluster},
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ========== INDEX TOOLS ==========

@mcp.tool()
def fetch_indices(
    pattern: Optional[str] = None,
    include_system_indices: bool = False,
    sort_by: str = "name",
) -> Dict[str, Any]:
    """
    List indices with their health, status, document count and size.

    Args:
        pattern: Index pattern filter (e.g., "logs-*")
        include_system_indices: Include indices whose name starts with '.'
        sort_by: "name", "size" or "docs"

    Returns:
        {"indices": [...], "total": int}
    """
    return _call_tool(
        "fetch_indices",
        fetch_indices_primitive,
        pattern=pattern,
        include_system_indices=include_system_indices,
        sort_by=sort_by,
    )


@mcp.tool()
def create_index(
    name: str,
    mappings: Optional[Dict[str, Any]] = None,
    settings: Optional[Dict[str, Any]] = None,
    aliases: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Create a new index.

    Args:
        name: Index name (lowercase, no special characters)
        mappings: Field mappings, e.g. {"properties": {"title": {"type": "text"}}}
        settings: Index settings, e.g. {"number_of_shards": 1}
        aliases: Alias names for the index

    Returns:
        {"acknowledged", "index", "shardsAcknowledged"}
    """
    return _call_tool(
        "create_index",
        create_index_primitive,
        name=name,
        mappings=mappings,
        settings=settings,
        aliases=aliases,
    )


# ========== SEARCH TOOL ==========

@mcp.tool()
def search_elasticsearch(
    index: str,
    query: Optional[Dict[str, Any]] = None,
    size: int = 10,
    from_offset: int = 0,
    sort: Optional[List[Dict[str, Any]]] = None,
    aggregations: Optional[Dict[str, Any]] = None,
    highlight: Optional[Dict[str, Any]] = None,
    source: Optional[Union[bool, List[str]]] = None,
) -> Dict[str, Any]:
    """
    Search an index with Elasticsearch Query DSL.

    Script queries are rejected and query nesting is limited.

    Args:
        index: Index to search
        query: Query DSL query (match_all when omitted)
        size: Number of results (1-10000)
        from_offset: Pagination offset
        sort: Sort criteria
        aggregations: Aggregation definitions
        highlight: Highlight configuration
        source: True, False, or a list of fields to return

    Returns:
        {"hits": {"total": {...}, "hits": [...]}, "aggregations"?, "took"}
    """
    return _call_tool(
        "search_elasticsearch",
        search_elasticsearch_primitive,
        index=index,
        query=query,
        size=size,
        from_=from_offset,
        sort=sort,
        aggregations=aggregations,
        highlight=highlight,
        source=source,
    )


# ========== DOCUMENT TOOLS ==========

@mcp.tool()
def insert_data(
    index: str,
    document: Dict[str, Any],
    id: Optional[str] = None,
    refresh: Optional[Union[bool, str]] = None,
) -> Dict[str, Any]:
    """
    Insert a single document.

    Args:
        index: Target index (created automatically if missing)
        document: Document body; field names may not start with '_'
        id: Document ID (generated when omitted)
        refresh: true, false or "wait_for"

    Returns:
        {"_id", "_index", "_version", "result"}
    """
    return _call_tool(
        "insert_data",
        insert_document,
        index=index,
        document=document,
        id=id,
        refresh=refresh,
    )


@mcp.tool()
def update_document(
    index: str,
    id: str,
    document: Optional[Dict[str, Any]] = None,
    script: Optional[Dict[str, Any]] = None,
    upsert: bool = False,
    refresh: Optional[Union[bool, str]] = None,
) -> Dict[str, Any]:
    """
    Update a document with a partial document or a painless script.

    Args:
        index: Index name
        id: Document ID
        document: Fields to merge into the stored document
        script: {"source": "...", "params": {...}}
        upsert: Create the document if it does not exist
        refresh: true, false or "wait_for"

    Returns:
        {"_id", "_index", "_version", "result"}
    """
    return _call_tool(
        "update_document",
        update_document_primitive,
        index=index,
        id=id,
        document=document,
        script=script,
        upsert=upsert,
        refresh=refresh,
    )


@mcp.tool()
def delete_document(
    index: str,
    id: Optional[str] = None,
    query: Optional[Dict[str, Any]] = None,
    conflicts: str = "abort",
    refresh: Optional[Union[bool, str]] = None,
) -> Dict[str, Any]:
    """
    Delete a document by ID, or all documents matching a query.

    Args:
        index: Index name
        id: Document ID
        query: Query DSL selecting documents to delete
        conflicts: "abort" or "proceed" on version conflicts
        refresh: true, false or "wait_for"

    Returns:
        {"deleted", "tookMs", "timedOut", ...}
    """
    return _call_tool(
        "delete_document",
        delete_document_primitive,
        index=index,
        id=id,
        query=query,
        conflicts=conflicts,
        refresh=refresh,
    )


# ========== FLOW TOOLS ==========

@mcp.tool()
def export_to_csv(
    index: str,
    query: Optional[Dict[str, Any]] = None,
    fields: Optional[List[str]] = None,
    filename: Optional[str] = None,
    format: Optional[Dict[str, Any]] = None,
    max_rows: Optional[int] = None,
    compress: bool = False,
) -> Dict[str, Any]:
    """
    Export documents matching a query to a CSV file.

    Documents are read in batches through a scroll cursor and streamed to
    disk, so large result sets never sit in memory.

    Args:
        index: Index to export from
        query: Query DSL filter (all documents when omitted)
        fields: Columns to export; discovered from the mapping when omitted
        filename: Output file name (".csv" is appended when missing)
        format: {"delimiter": ",", "quote": "\\"", "escape": null, "header": true}
        max_rows: Maximum rows to export (1-1000000, default 1000000)
        compress: Gzip the file

    Returns:
        {"filename", "rowsExported", "fileSize", "downloadUrl"}
    """
    def run_export() -> Dict[str, Any]:
        request = ExportRequest(
            index=index,
            query=query,
            fields=fields,
            filename=filename,
            format=CsvFormat.from_dict(format),
            max_rows=max_rows,
            compress=compress,
        )
        return export_to_csv_flow(request).to_dict()

    return _call_tool("export_to_csv", run_export)


if __name__ == "__main__":
    mcp.run()
