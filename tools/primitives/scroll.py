"""
Scroll-cursor reader for large result sets.

A ``ScrollReader`` owns one server-side scroll context for the duration of a
single traversal:

    IDLE -> OPEN -> (EXHAUSTED | CAP_REACHED | ERRORED) -> CLOSED

The scroll context is cleared exactly once when the reader leaves OPEN,
whatever the reason. A failed clear is logged and never replaces the result
or the error of the traversal.
"""

import logging
import threading
from enum import Enum
from typing import Dict, Any, Iterator, List, Optional
from elasticsearch import Elasticsearch

from tools.primitives.search import clear_scroll, scroll_elastic, search_elastic
from utils.connection import get_elasticsearch_client
from utils.errors import ElasticMCPError, ExportCancelledError
from utils.query_sanitizer import match_all_query

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000
DEFAULT_KEEP_ALIVE = "5m"
DEFAULT_MAX_ROWS = 1_000_000


class ScrollState(str, Enum):
    """Lifecycle of a scroll reader."""
    IDLE = "idle"
    OPEN = "open"
    EXHAUSTED = "exhausted"
    CAP_REACHED = "cap_reached"
    ERRORED = "errored"
    CLOSED = "closed"


class ScrollReader:
    """
    Lazily reads batches of ``_source`` documents through the scroll API.

    The reader truncates exactly at ``max_rows``: a batch that would cross the
    cap is cut short and no further batch is requested.

    Usage::

        with ScrollReader("products", query, fields, max_rows=5000) as reader:
            for batch in reader.batches():
                ...
    """

    def __init__(
        self,
        index: str,
        query: Optional[Dict[str, Any]] = None,
        fields: Optional[List[str]] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_rows: int = DEFAULT_MAX_ROWS,
        keep_alive: str = DEFAULT_KEEP_ALIVE,
        es: Optional[Elasticsearch] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        if max_rows < 1:
            raise ValueError("max_rows must be positive")

        self.index = index
        self.query = query or match_all_query()
        self.fields = list(fields) if fields else None
        self.batch_size = min(batch_size, max_rows)
        self.max_rows = max_rows
        self.keep_alive = keep_alive
        self.es = es or get_elasticsearch_client()
        self.cancel_event = cancel_event

        self.state = ScrollState.IDLE
        self.stop_reason: Optional[ScrollState] = None
        self.scroll_id: Optional[str] = None
        self.rows_read = 0
        self.batches_read = 0
        self.release_attempts = 0

    def __enter__(self) -> "ScrollReader":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self.state == ScrollState.OPEN:
            self._stop(ScrollState.ERRORED if exc_type else ScrollState.EXHAUSTED)
        self.release()

    def open(self) -> List[Dict[str, Any]]:
        """
        Issue the initial search and return the first batch.

        Raises:
            ElasticsearchError: If the search fails
        """
        if self.state != ScrollState.IDLE:
            raise RuntimeError("ScrollReader cannot be reused for a new traversal")

        logger.debug(
            "Opening scroll",
            extra={"context": {"index": self.index, "batch_size": self.batch_size, "keep_alive": self.keep_alive}},
        )

        try:
            response = search_elastic(
                index_pattern=self.index,
                query=self.query,
                size=self.batch_size,
                _source=self.fields,
                scroll=self.keep_alive,
                es=self.es,
            )
        except ElasticMCPError:
            self._stop(ScrollState.ERRORED)
            self.release()
            raise

        self.state = ScrollState.OPEN
        self.scroll_id = response.scroll_id
        return response.sources

    def advance(self) -> List[Dict[str, Any]]:
        """
        Fetch the next batch. An empty list means the results are exhausted.

        Raises:
            ElasticsearchError: If the scroll fails or the context expired
        """
        if self.state != ScrollState.OPEN:
            raise RuntimeError(f"Cannot advance a scroll in state '{self.state.value}'")

        if not self.scroll_id:
            return []

        response = scroll_elastic(self.scroll_id, scroll=self.keep_alive, es=self.es)
        if response.scroll_id:
            self.scroll_id = response.scroll_id
        return response.sources

    def release(self) -> None:
        """
        Clear the scroll context once. Later calls are no-ops.
        """
        if self.state == ScrollState.CLOSED:
            return

        if self.scroll_id:
            self.release_attempts += 1
            if not clear_scroll(self.scroll_id, es=self.es):
                logger.warning(
                    "Scroll context could not be released",
                    extra={"context": {"index": self.index, "stop_reason": self.stop_reason}},
                )
            self.scroll_id = None

        if self.stop_reason is None:
            self.stop_reason = self.state
        self.state = ScrollState.CLOSED

    def _stop(self, reason: ScrollState) -> None:
        self.state = reason
        self.stop_reason = reason

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ExportCancelledError(
                "Export cancelled",
                {"index": self.index, "rows_read": self.rows_read},
            )

    def batches(self) -> Iterator[List[Dict[str, Any]]]:
        """
        Yield batches of documents until exhaustion, the row cap, or an error.

        The scroll context is released before this generator finishes, also
        when the consumer stops early or an error propagates.
        """
        batch = self.open()
        try:
            while True:
                if not batch:
                    self._stop(ScrollState.EXHAUSTED)
                    return

                remaining = self.max_rows - self.rows_read
                if len(batch) > remaining:
                    batch = batch[:remaining]

                self.rows_read += len(batch)
                self.batches_read += 1
                yield batch

                if self.rows_read >= self.max_rows:
                    self._stop(ScrollState.CAP_REACHED)
                    return

                self._check_cancelled()
                batch = self.advance()
        except BaseException:
            if self.state == ScrollState.OPEN:
                self._stop(ScrollState.ERRORED)
            raise
        finally:
            self.release()

