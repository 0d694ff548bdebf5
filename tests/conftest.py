"""
Pytest configuration and fixtures for MCP Elasticsearch tests.
"""

import pytest
import os
import sys
from unittest.mock import Mock
from typing import Any, Dict, List, Optional

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(__file__))
sys.path.insert(0, project_root)


def make_hits(sources: List[Dict[str, Any]], start: int = 0) -> List[Dict[str, Any]]:
    return [
        {"_index": "products", "_id": str(start + i), "_score": 1.0, "_source": source}
        for i, source in enumerate(sources)
    ]


def build_scroll_cluster(
    documents: List[Dict[str, Any]],
    properties: Optional[Dict[str, Any]] = None,
    index_exists: bool = True,
) -> Mock:
    """
    Mock client that pages ``documents`` through search/scroll.

    Each scroll request returns the next ``size`` documents of the initial
    search body; an exhausted cursor returns an empty page.
    """
    es = Mock()
    es.indices.exists.return_value = index_exists
    es.indices.get_mapping.return_value = {
        "products": {"mappings": {"properties": properties or {}}}
    }
    es.clear_scroll.return_value = {"succeeded": True, "num_freed": 1}

    cursor = {"position": 0, "size": 10}

    def page() -> Dict[str, Any]:
        start = cursor["position"]
        chunk = documents[start:start + cursor["size"]]
        cursor["position"] = start + len(chunk)
        return {
            "_scroll_id": "scroll-1",
            "took": 1,
            "timed_out": False,
            "hits": {
                "total": {"value": len(documents), "relation": "eq"},
                "hits": make_hits(chunk, start),
            },
        }

    def search(index, body, scroll=None, timeout=None):
        cursor["size"] = body.get("size", 10)
        cursor["position"] = 0
        response = page()
        if scroll is None:
            response.pop("_scroll_id")
        return response

    def scroll(scroll_id, scroll):
        return page()

    es.search.side_effect = search
    es.scroll.side_effect = scroll
    return es


@pytest.fixture
def mock_elasticsearch():
    """Mock Elasticsearch client for testing."""
    mock_es = Mock()

    # Mock search response
    mock_es.search.return_value = {
        "took": 5,
        "timed_out": False,
        "hits": {
            "total": {"value": 100, "relation": "eq"},
            "hits": [
                {
                    "_index": "products",
                    "_id": "1",
                    "_score": 1.2,
                    "_source": {
                        "title": "Laptop",
                        "price": 999.5,
                        "tags": ["electronics", "sale"],
                    },
                }
            ],
        },
    }

    mock_es.indices.exists.return_value = True
    mock_es.info.return_value = {
        "cluster_name": "test-cluster",
        "version": {"number": "8.15.0"},
    }

    return mock_es


@pytest.fixture
def mock_es_client(mock_elasticsearch, monkeypatch):
    """Install the mock as the shared client returned by get_elasticsearch_client."""
    monkeypatch.setattr("utils.connection._es_client", mock_elasticsearch)
    yield mock_elasticsearch


@pytest.fixture
def export_dir(tmp_path, monkeypatch):
    """Write exports into a temporary directory."""
    from config.environments import DEFAULT_CONFIG

    monkeypatch.setitem(
        DEFAULT_CONFIG["export"],
        "directory",
        str(tmp_path),
    )
    return tmp_path


@pytest.fixture
def sample_query():
    """Sample Elasticsearch query for testing."""
    return {
        "bool": {
            "must": [
                {"match": {"title": "laptop"}},
                {"range": {"price": {"gte": 100}}},
            ]
        }
    }


@pytest.fixture
def sample_aggregation():
    """Sample aggregation query for testing."""
    return {
        "categories": {
            "terms": {
                "field": "category.keyword",
                "size": 10
            }
        }
    }


@pytest.fixture
def product_documents():
    """Ten product documents."""
    return [
        {"title": f"Product {i}", "price": 10 * i, "in_stock": i % 2 == 0}
        for i in range(1, 11)
    ]


@pytest.fixture
def scroll_cluster():
    """Factory for mock clients that page documents through the scroll API."""
    return build_scroll_cluster
