"""
CSV export type definitions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class CsvFormat:
    """Delimited-text formatting options."""
    delimiter: str = ","
    quote: str = '"'
    escape: Optional[str] = None
    header: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CsvFormat":
        data = data or {}
        return cls(
            delimiter=data.get("delimiter") or ",",
            quote=data.get("quote") or '"',
            escape=data.get("escape") or None,
            header=data.get("header", True) is not False,
        )


@dataclass
class ExportRequest:
    """Arguments of one export_to_csv call."""
    index: str
    query: Optional[Dict[str, Any]] = None
    fields: Optional[List[str]] = None
    filename: Optional[str] = None
    format: CsvFormat = field(default_factory=CsvFormat)
    max_rows: Optional[int] = None
    compress: bool = False


@dataclass
class ExportArtifact:
    """The finalized file on disk."""
    path: str
    size_bytes: int
    size_human: str


@dataclass
class ExportResult:
    """Summary returned to the caller."""
    filename: str
    rows_exported: int
    file_size: str
    download_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "filename": self.filename,
            "rowsExported": self.rows_exported,
            "fileSize": self.file_size,
        }
        if self.download_url:
            result["downloadUrl"] = self.download_url
        return result
