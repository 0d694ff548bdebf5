"""
Type definitions for the Elasticsearch MCP server.
"""

from .primitives import (
    ElasticQuery,
    ElasticResponse,
    IndexInfo,
    IndexSortBy,
)

from .documents import (
    WriteResult,
    DeleteResult,
)

from .export import (
    CsvFormat,
    ExportRequest,
    ExportArtifact,
    ExportResult,
)

__all__ = [
    # Primitives
    "ElasticQuery",
    "ElasticResponse",
    "IndexInfo",
    "IndexSortBy",
    # Documents
    "WriteResult",
    "DeleteResult",
    # Export
    "CsvFormat",
    "ExportRequest",
    "ExportArtifact",
    "ExportResult",
]
