"""
Primitive layer type definitions.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from enum import Enum


class IndexSortBy(str, Enum):
    """Sort key for index listings."""
    NAME = "name"
    SIZE = "size"
    DOCS = "docs"

    @property
    def cat_parameter(self) -> str:
        return {
            IndexSortBy.NAME: "index:asc",
            IndexSortBy.SIZE: "store.size:desc",
            IndexSortBy.DOCS: "docs.count:desc",
        }[self]


@dataclass
class ElasticQuery:
    """Base query structure for Elasticsearch."""
    index_pattern: str
    query: Dict[str, Any] = field(default_factory=lambda: {"match_all": {}})
    size: Optional[int] = None
    from_: Optional[int] = None
    sort: Optional[List[Dict[str, Any]]] = None
    aggregations: Optional[Dict[str, Any]] = None
    highlight: Optional[Dict[str, Any]] = None
    _source: Union[None, bool, List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to Elasticsearch query dict."""
        body: Dict[str, Any] = {"query": self.query}

        if self.size is not None:
            body["size"] = self.size
        if self.from_ is not None:
            body["from"] = self.from_
        if self.sort:
            body["sort"] = self.sort
        if self.aggregations:
            body["aggs"] = self.aggregations
        if self.highlight:
            body["highlight"] = self.highlight
        if self._source is not None:
            body["_source"] = self._source

        return body


@dataclass
class ElasticResponse:
    """Elasticsearch search response."""
    took: int
    timed_out: bool
    total: int
    hits: List[Dict[str, Any]]
    total_relation: str = "eq"
    aggregations: Optional[Dict[str, Any]] = None
    scroll_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElasticResponse":
        """Create from Elasticsearch response dict."""
        hits_data = data.get("hits", {})
        total = hits_data.get("total", 0)
        relation = "eq"
        if isinstance(total, dict):
            relation = total.get("relation", "eq")
            total = total.get("value", 0)

        return cls(
            took=data.get("took", 0),
            timed_out=data.get("timed_out", False),
            total=total or 0,
            hits=[hit for hit in hits_data.get("hits", [])],
            total_relation=relation,
            aggregations=data.get("aggregations"),
            scroll_id=data.get("_scroll_id"),
        )

    @property
    def sources(self) -> List[Dict[str, Any]]:
        """The ``_source`` of every hit, in hit order."""
        return [hit.get("_source") or {} for hit in self.hits]

    def to_result(self) -> Dict[str, Any]:
        """Shape returned by the search tool."""
        hits = []
        for hit in self.hits:
            formatted = {
                "_id": hit.get("_id"),
                "_source": hit.get("_source") or {},
                "_score": hit.get("_score") or 0,
            }
            if hit.get("highlight"):
                formatted["highlight"] = hit["highlight"]
            hits.append(formatted)

        result: Dict[str, Any] = {
            "hits": {
                "total": {"value": self.total, "relation": self.total_relation},
                "hits": hits,
            },
            "took": self.took,
        }
        if self.aggregations:
            result["aggregations"] = self.aggregations
        return result


@dataclass
class IndexInfo:
    """One row of the index listing."""
    name: str
    health: str
    status: str
    docs: int
    size: str
    created: str
    uuid: str

    @classmethod
    def from_cat(cls, data: Dict[str, Any]) -> "IndexInfo":
        """Create from a ``_cat/indices?format=json`` row."""
        return cls(
            name=data.get("index", ""),
            health=data.get("health") or "unknown",
            status=data.get("status") or "unknown",
            docs=int(data.get("docs.count") or 0),
            size=data.get("store.size") or "0b",
            created=format_creation_date(data.get("creation.date")),
            uuid=data.get("uuid") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def format_creation_date(timestamp: Optional[str]) -> str:
    """Epoch milliseconds to YYYY-MM-DD, or 'unknown'."""
    if not timestamp:
        return "unknown"
    try:
        created = datetime.fromtimestamp(int(timestamp) / 1000, tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError):
        return "unknown"
    return created.date().isoformat()
