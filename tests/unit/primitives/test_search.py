"""
Unit tests for primitive search operations.
"""

import pytest
from unittest.mock import Mock

from tools.primitives.search import (
    clear_scroll,
    scroll_elastic,
    search_elastic,
    search_elasticsearch,
)
from es_types.primitives import ElasticResponse
from utils.errors import ElasticsearchError, NotFoundError, ValidationError


class TestSearchElastic:
    """Test cases for search_elastic function."""

    def test_search_basic_query(self, mock_es_client, sample_query):
        """Test basic search functionality."""
        result = search_elastic(
            index_pattern="products",
            query=sample_query,
            size=10
        )

        assert isinstance(result, ElasticResponse)
        assert result.took == 5
        assert result.timed_out is False
        assert result.total == 100
        assert len(result.hits) == 1

        # Verify the mock was called correctly
        mock_es_client.search.assert_called_once()
        call_args = mock_es_client.search.call_args
        assert call_args[1]["index"] == "products"
        assert call_args[1]["body"]["query"] == sample_query

    def test_search_defaults_to_match_all(self, mock_es_client):
        search_elastic(index_pattern="products")

        body = mock_es_client.search.call_args[1]["body"]
        assert body == {"query": {"match_all": {}}}

    def test_search_with_pagination(self, mock_es_client, sample_query):
        """Test search with pagination parameters."""
        search_elastic(
            index_pattern="logs-*",
            query=sample_query,
            size=50,
            from_=20
        )

        body = mock_es_client.search.call_args[1]["body"]
        assert body["size"] == 50
        assert body["from"] == 20

    def test_search_with_sort_aggs_and_source(self, mock_es_client, sample_query, sample_aggregation):
        sort_criteria = [{"price": {"order": "desc"}}]

        search_elastic(
            index_pattern="products",
            query=sample_query,
            sort=sort_criteria,
            aggregations=sample_aggregation,
            _source=["title"],
        )

        body = mock_es_client.search.call_args[1]["body"]
        assert body["sort"] == sort_criteria
        assert body["aggs"] == sample_aggregation
        assert body["_source"] == ["title"]

    def test_search_size_validation(self, mock_es_client, sample_query):
        """Test that size parameter is clamped."""
        search_elastic(index_pattern="products", query=sample_query, size=50000)
        assert mock_es_client.search.call_args[1]["body"]["size"] == 10000

        search_elastic(index_pattern="products", query=sample_query, size=0)
        assert mock_es_client.search.call_args[1]["body"]["size"] == 1

    def test_search_with_scroll(self, mock_es_client):
        mock_es_client.search.return_value = {
            "_scroll_id": "abc",
            "hits": {"total": {"value": 0}, "hits": []},
        }

        result = search_elastic(index_pattern="products", scroll="5m")

        assert mock_es_client.search.call_args[1]["scroll"] == "5m"
        assert result.scroll_id == "abc"

    def test_invalid_index_pattern(self, mock_es_client):
        with pytest.raises(ValidationError):
            search_elastic(index_pattern="bad index")

        mock_es_client.search.assert_not_called()

    def test_elasticsearch_error(self, mock_es_client):
        """Test handling of Elasticsearch errors."""
        mock_es_client.search.side_effect = Exception("Connection failed")

        with pytest.raises(ElasticsearchError, match="Elasticsearch query failed") as exc_info:
            search_elastic(index_pattern="products")

        assert exc_info.value.context["original_error"]["message"] == "Connection failed"

    def test_explicit_client_is_used(self, mock_es_client):
        other = Mock()
        other.search.return_value = {"hits": {"total": {"value": 0}, "hits": []}}

        search_elastic(index_pattern="products", es=other)

        other.search.assert_called_once()
        mock_es_client.search.assert_not_called()


class TestScroll:
    """Test cases for scroll_elastic and clear_scroll."""

    def test_scroll_basic(self, mock_es_client):
        mock_es_client.scroll.return_value = {
            "_scroll_id": "next",
            "hits": {"total": {"value": 2}, "hits": [{"_source": {"a": 1}}]},
        }

        result = scroll_elastic(scroll_id="abc", scroll="1m")

        mock_es_client.scroll.assert_called_once_with(scroll_id="abc", scroll="1m")
        assert result.scroll_id == "next"
        assert result.sources == [{"a": 1}]

    def test_scroll_error(self, mock_es_client):
        mock_es_client.scroll.side_effect = Exception("search_context_missing_exception")

        with pytest.raises(ElasticsearchError, match="scroll failed"):
            scroll_elastic(scroll_id="expired")

    def test_clear_scroll(self, mock_es_client):
        assert clear_scroll("abc") is True
        mock_es_client.clear_scroll.assert_called_once_with(scroll_id="abc")

    def test_clear_scroll_failure_is_swallowed(self, mock_es_client, caplog):
        mock_es_client.clear_scroll.side_effect = Exception("gone")

        assert clear_scroll("abc") is False
        assert "Failed to clear scroll" in caplog.text


class TestSearchElasticsearch:
    """Test cases for the validated search operation."""

    def test_result_shape(self, mock_es_client):
        result = search_elasticsearch(index="products", query={"match": {"title": "laptop"}}, size=5)

        assert result["took"] == 5
        assert result["hits"]["total"] == {"value": 100, "relation": "eq"}
        assert result["hits"]["hits"][0] == {
            "_id": "1",
            "_source": {"title": "Laptop", "price": 999.5, "tags": ["electronics", "sale"]},
            "_score": 1.2,
        }
        assert "aggregations" not in result
        assert mock_es_client.search.call_args[1]["timeout"] == "30s"

    def test_script_query_rejected_before_cluster_call(self, mock_es_client):
        with pytest.raises(ValidationError, match="Script-based queries"):
            search_elasticsearch(index="products", query={"script_score": {"script": "1"}})

        mock_es_client.indices.exists.assert_not_called()
        mock_es_client.search.assert_not_called()

    def test_missing_index(self, mock_es_client):
        mock_es_client.indices.exists.return_value = False

        with pytest.raises(NotFoundError, match="Index 'missing' does not exist"):
            search_elasticsearch(index="missing")

        mock_es_client.search.assert_not_called()

    def test_aggregations_returned(self, mock_es_client, sample_aggregation):
        mock_es_client.search.return_value = {
            "took": 2,
            "hits": {"total": {"value": 0, "relation": "eq"}, "hits": []},
            "aggregations": {"categories": {"buckets": [{"key": "a", "doc_count": 3}]}},
        }

        result = search_elasticsearch(index="products", aggregations=sample_aggregation, size=1)

        assert result["aggregations"]["categories"]["buckets"][0]["doc_count"] == 3

    def test_script_sort_rejected(self, mock_es_client):
        with pytest.raises(ValidationError, match="Script-based sorting"):
            search_elasticsearch(index="products", sort=[{"_script": {}}])
