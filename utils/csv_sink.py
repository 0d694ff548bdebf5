"""
CSV sink for streaming exports.

Rows are written to ``<path>.tmp`` while the export runs. ``finalize`` turns
the temporary file into the final artifact exactly once, either by renaming
it or by gzip-compressing it to ``<path>.gz``. If anything fails before that,
the temporary file is removed.
"""

import csv
import gzip
import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional

from es_types.export import CsvFormat, ExportArtifact
from utils.errors import ValidationError

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"
GZIP_SUFFIX = ".gz"
SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_file_size(size_bytes: int) -> str:
    """
    Human-readable size with base-1024 units and two decimals.

    >>> format_file_size(1536)
    '1.50 KB'
    """
    size = float(size_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(SIZE_UNITS) - 1:
        size /= 1024
        unit_index += 1
    return f"{size:.2f} {SIZE_UNITS[unit_index]}"


def extract_field_value(source: Optional[Dict[str, Any]], field_path: str) -> Any:
    """
    Read the value at a dotted path.

    Returns None when a segment is missing or when a non-object is met
    before the last segment. Objects and arrays are returned as compact JSON
    text.
    """
    value: Any = source
    for part in field_path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)

    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)

    return value


def to_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _check_single_char(name: str, value: Optional[str]) -> None:
    if value is not None and (not isinstance(value, str) or len(value) != 1):
        raise ValidationError(f"CSV {name} must be a single character", {name: value})


def validate_csv_format(csv_format: CsvFormat) -> None:
    """
    Raises:
        ValidationError: If delimiter, quote or escape is not one character
    """
    _check_single_char("delimiter", csv_format.delimiter)
    _check_single_char("quote", csv_format.quote)
    _check_single_char("escape", csv_format.escape)

    if csv_format.delimiter == csv_format.quote:
        raise ValidationError("CSV delimiter and quote character must differ")


class CsvSink:
    """
    Writes export rows for a fixed list of fields.

    Usage::

        with CsvSink(path, fields, csv_format) as sink:
            sink.write_records(records)
            artifact = sink.finalize(compress=False)
    """

    def __init__(self, path: str, fields: List[str], csv_format: Optional[CsvFormat] = None):
        self.path = path
        self.temp_path = f"{path}{TEMP_SUFFIX}"
        self.fields = list(fields)
        self.csv_format = csv_format or CsvFormat()
        validate_csv_format(self.csv_format)

        self.rows_written = 0
        self.artifact: Optional[ExportArtifact] = None
        self._file = None
        self._writer = None

    def __enter__(self) -> "CsvSink":
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self.artifact is None:
            self.discard()

    def _writer_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "delimiter": self.csv_format.delimiter,
            "quotechar": self.csv_format.quote,
            "lineterminator": "\n",
            "quoting": csv.QUOTE_MINIMAL,
        }
        escape = self.csv_format.escape
        if escape and escape != self.csv_format.quote:
            options["escapechar"] = escape
            options["doublequote"] = False
        return options

    def open(self) -> None:
        """Create the temporary file and write the header row."""
        if self._file is not None or self.artifact is not None:
            raise RuntimeError(f"CSV sink for '{self.path}' was already opened")

        self._file = open(self.temp_path, "w", encoding="utf-8", newline="")
        self._writer = csv.writer(self._file, **self._writer_options())

        if self.csv_format.header:
            self._writer.writerow(self.fields)

        logger.debug("Opened CSV sink", extra={"context": {"path": self.temp_path, "fields": len(self.fields)}})

    def write_records(self, records: Iterable[Dict[str, Any]]) -> int:
        """
        Append one row per record.

        Returns:
            Number of rows written by this call
        """
        if self._writer is None:
            raise RuntimeError("CSV sink is not open")

        rows = [
            [to_cell(extract_field_value(record, field)) for field in self.fields]
            for record in records
        ]
        self._writer.writerows(rows)
        self.rows_written += len(rows)
        return len(rows)

    def _close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._writer = None

    def finalize(self, compress: bool = False) -> ExportArtifact:
        """
        Close the file and move it to its final name.

        Args:
            compress: Gzip the whole file into ``<path>.gz`` instead of renaming

        Returns:
            The final artifact with its on-disk size
        """
        if self._file is None:
            raise RuntimeError("CSV sink is not open")
        self._close()

        if compress:
            final_path = f"{self.path}{GZIP_SUFFIX}"
            with open(self.temp_path, "rb") as f:
                data = f.read()
            try:
                with open(final_path, "wb") as f:
                    f.write(gzip.compress(data))
            except OSError:
                if os.path.exists(final_path):
                    os.remove(final_path)
                raise
            os.remove(self.temp_path)
        else:
            final_path = self.path
            os.replace(self.temp_path, final_path)

        size_bytes = os.path.getsize(final_path)
        self.artifact = ExportArtifact(
            path=final_path,
            size_bytes=size_bytes,
            size_human=format_file_size(size_bytes),
        )
        return self.artifact

    def discard(self) -> None:
        """Close and delete the temporary file, if any."""
        self._close()
        if os.path.exists(self.temp_path):
            try:
                os.remove(self.temp_path)
            except OSError as e:
                logger.warning("Could not remove temporary export file %s: %s", self.temp_path, e)
            else:
                logger.info("Removed temporary export file %s", self.temp_path)
