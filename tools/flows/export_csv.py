"""
Flow tool for streaming an index into a CSV file.

Composes the primitives: query sanitizing, field discovery, the scroll reader
and the CSV sink. Everything the caller supplied is validated before the
cluster is contacted, and the index is checked before any file is created.
"""

import logging
import os
import re
import threading
import time
from datetime import datetime, timezone
from typing import Optional
from elasticsearch import Elasticsearch

from config.environments import get_export_config
from es_types.export import ExportRequest, ExportResult
from tools.primitives.fields import resolve_fields
from tools.primitives.indices import require_index
from tools.primitives.scroll import ScrollReader
from utils.connection import get_elasticsearch_client
from utils.csv_sink import CsvSink, validate_csv_format
from utils.errors import ElasticMCPError, ElasticsearchError
from utils.query_sanitizer import sanitize_query, validate_source_fields
from utils.validation import validate_index_pattern, validate_max_rows

logger = logging.getLogger(__name__)

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")
REPEATED_UNDERSCORES = re.compile(r"_{2,}")


def generate_filename(index: str, filename: Optional[str] = None) -> str:
    """
    Build a safe CSV file name.

    >>> generate_filename("logs", "my report!.csv")
    'my_report_.csv'
    >>> generate_filename("logs", "summary")
    'summary.csv'
    """
    if filename:
        name = UNSAFE_FILENAME_CHARS.sub("_", filename)
        name = REPEATED_UNDERSCORES.sub("_", name)
        return name if name.endswith(".csv") else f"{name}.csv"

    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    safe_index = REPEATED_UNDERSCORES.sub("_", UNSAFE_FILENAME_CHARS.sub("_", index))
    return f"{safe_index}_export_{date}.csv"


def export_to_csv(
    request: ExportRequest,
    es: Optional[Elasticsearch] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ExportResult:
    """
    Export the documents matching a query to a CSV file.

    Args:
        request: Index, query, fields, file name, format, row cap, compression
        es: Client to use (shared client when omitted)
        cancel_event: Set to stop the export between batches

    Returns:
        ExportResult with the file name, row count, size and file URL

    Raises:
        ValidationError: On invalid input or when no fields can be found
        NotFoundError: If the index does not exist
        ExportCancelledError: If the export was cancelled
        ElasticsearchError: If reading from the cluster or writing the file fails
    """
    export_config = get_export_config()

    validate_index_pattern(request.index)
    max_rows = validate_max_rows(
        request.max_rows,
        default=export_config["default_max_rows"],
        ceiling=export_config["max_rows_ceiling"],
    )
    if request.fields:
        validate_source_fields(request.fields)
    validate_csv_format(request.format)
    query = sanitize_query(request.query, operation="export")

    logger.info(
        "Starting CSV export",
        extra={"context": {
            "index": request.index,
            "has_query": query is not None,
            "field_count": len(request.fields or []),
            "max_rows": max_rows,
            "compress": request.compress,
        }},
    )

    es = es or get_elasticsearch_client()
    require_index(request.index, es=es)

    filename = generate_filename(request.index, request.filename)
    path = os.path.join(export_config["directory"], filename)

    started = time.monotonic()
    try:
        fields = resolve_fields(request.index, request.fields, es=es)

        with CsvSink(path, fields, request.format) as sink:
            with ScrollReader(
                request.index,
                query=query,
                fields=fields,
                batch_size=export_config["batch_size"],
                max_rows=max_rows,
                keep_alive=export_config["scroll_keep_alive"],
                es=es,
                cancel_event=cancel_event,
            ) as reader:
                for batch in reader.batches():
                    sink.write_records(batch)
                    logger.debug(
                        "Exported batch",
                        extra={"context": {"batch": reader.batches_read, "rows": sink.rows_written}},
                    )

            artifact = sink.finalize(compress=request.compress)
    except ElasticMCPError:
        raise
    except Exception as e:
        raise ElasticsearchError(
            "Failed to export data to CSV",
            e,
            {"index": request.index, "filename": filename},
        ) from e

    result = ExportResult(
        filename=os.path.basename(artifact.path),
        rows_exported=sink.rows_written,
        file_size=artifact.size_human,
        download_url=f"file://{os.path.abspath(artifact.path)}",
    )

    logger.info(
        "CSV export completed",
        extra={"context": {
            "index": request.index,
            "filename": result.filename,
            "rows_exported": result.rows_exported,
            "file_size": result.file_size,
            "stop_reason": reader.stop_reason.value if reader.stop_reason else None,
            "duration_ms": int((time.monotonic() - started) * 1000),
        }},
    )
    return result
