"""
Write operation type definitions.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class WriteResult:
    """Outcome of an index or update call."""
    _id: str
    _index: str
    _version: int
    result: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WriteResult":
        return cls(
            _id=data.get("_id", ""),
            _index=data.get("_index", ""),
            _version=data.get("_version", 0),
            result=data.get("result", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DeleteResult:
    """Outcome of a delete by id or delete by query."""
    deleted: int
    took_ms: int = 0
    timed_out: bool = False
    version_conflicts: Optional[int] = None
    noops: Optional[int] = None
    retries: Optional[Dict[str, int]] = None

    @classmethod
    def from_delete_by_query(cls, data: Dict[str, Any]) -> "DeleteResult":
        retries = data.get("retries") or {}
        return cls(
            deleted=data.get("deleted") or 0,
            took_ms=data.get("took") or 0,
            timed_out=data.get("timed_out") or False,
            version_conflicts=data.get("version_conflicts") or 0,
            noops=data.get("noops") or 0,
            retries={
                "bulk": retries.get("bulk") or 0,
                "search": retries.get("search") or 0,
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "deleted": self.deleted,
            "tookMs": self.took_ms,
            "timedOut": self.timed_out,
        }
        if self.version_conflicts is not None:
            result["versionConflicts"] = self.version_conflicts
        if self.noops is not None:
            result["noops"] = self.noops
        if self.retries is not None:
            result["retries"] = self.retries
        return result
