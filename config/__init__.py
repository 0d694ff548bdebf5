"""
Configuration management for the Elasticsearch MCP server.
"""

from .environments import (
    get_environment_config,
    get_current_environment,
    get_elasticsearch_config,
    get_logging_config,
    get_export_config,
    get_search_config,
    validate_elasticsearch_config,
)

__all__ = [
    "get_environment_config",
    "get_current_environment",
    "get_elasticsearch_config",
    "get_logging_config",
    "get_export_config",
    "get_search_config",
    "validate_elasticsearch_config",
]
