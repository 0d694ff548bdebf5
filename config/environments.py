"""
Environment configuration management.
"""

import os
from typing import Dict, Any, Optional


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Single environment configuration - reads directly from env vars
DEFAULT_CONFIG = {
    "name": "elastic-mcp",
    "version": "0.1.0",
    "elasticsearch": {
        "url": os.getenv("ELASTIC_NODE", os.getenv("ELASTIC_URL", os.getenv("ELASTICSEARCH_URL", "http://localhost:9200"))),
        "cloud_id": os.getenv("ELASTIC_CLOUD_ID"),
        "username": os.getenv("ELASTIC_USERNAME", os.getenv("ELASTICSEARCH_USERNAME")),
        "password": os.getenv("ELASTIC_PASSWORD", os.getenv("ELASTICSEARCH_PASSWORD")),
        "api_key": os.getenv("ELASTIC_API_KEY", os.getenv("ELASTICSEARCH_API_KEY")),
        "timeout_ms": int(os.getenv("ELASTIC_REQUEST_TIMEOUT", os.getenv("ELASTIC_TIMEOUT", "30000"))),
        "max_retries": int(os.getenv("ELASTIC_MAX_RETRIES", "3")),
        "verify_certs": _env_flag("ELASTIC_VERIFY_CERTS", True),
        "ca_certs": os.getenv("ELASTIC_CA_CERTS"),
    },
    "logging": {
        "level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "format": os.getenv("LOG_FORMAT", "text").lower(),
    },
    "export": {
        "directory": os.getenv("EXPORT_DIR", "."),
        "batch_size": 1000,
        "scroll_keep_alive": "5m",
        "default_max_rows": 1_000_000,
        "max_rows_ceiling": 1_000_000,
    },
    "search": {
        "max_size": 10000,
        "default_size": 10,
        "timeout": "30s",
    },
}


def get_current_environment() -> str:
    """
    Get the current environment name.

    Returns:
        Always returns 'default' since we use a single environment
    """
    return "default"


def get_environment_config(environment: Optional[str] = None) -> Dict[str, Any]:
    """
    Get configuration for the environment.

    Args:
        environment: Ignored (kept for compatibility)

    Returns:
        Environment configuration dictionary
    """
    return DEFAULT_CONFIG


def get_elasticsearch_config(environment: Optional[str] = None) -> Dict[str, Any]:
    """
    Get Elasticsearch configuration.

    Args:
        environment: Ignored (kept for compatibility)

    Returns:
        Elasticsearch configuration dictionary
    """
    return DEFAULT_CONFIG["elasticsearch"]


def get_logging_config() -> Dict[str, Any]:
    """Get logging level and format."""
    return DEFAULT_CONFIG["logging"]


def get_export_config() -> Dict[str, Any]:
    """
    Get CSV export settings.

    Returns:
        Export configuration (output directory, batch size, scroll keep-alive
        and row limits)
    """
    return DEFAULT_CONFIG["export"]


def get_search_config() -> Dict[str, Any]:
    """Get search size limits and request timeout."""
    return DEFAULT_CONFIG["search"]


def validate_elasticsearch_config(config: Optional[Dict[str, Any]] = None) -> None:
    """
    Validate Elasticsearch connection settings.

    Args:
        config: Elasticsearch configuration (uses the current one if not given)

    Raises:
        ValueError: If the configuration cannot produce a working client
    """
    if config is None:
        config = get_elasticsearch_config()

    if not config.get("cloud_id") and not config.get("url"):
        raise ValueError("Either ELASTIC_CLOUD_ID or ELASTIC_NODE must be provided")

    if config.get("cloud_id") and not config.get("api_key"):
        raise ValueError("ELASTIC_API_KEY is required when using Elastic Cloud")

    max_retries = config.get("max_retries", 3)
    if not 0 <= max_retries <= 10:
        raise ValueError("ELASTIC_MAX_RETRIES must be between 0 and 10")

    timeout_ms = config.get("timeout_ms", 30000)
    if not 1000 <= timeout_ms <= 300000:
        raise ValueError("ELASTIC_REQUEST_TIMEOUT must be between 1000 and 300000 ms")
