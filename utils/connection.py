"""
Elasticsearch connection management.
"""

import logging
from typing import Any, Dict, Optional
from elasticsearch import Elasticsearch

from config.environments import get_elasticsearch_config, validate_elasticsearch_config
from utils.response_parser import response_body

logger = logging.getLogger(__name__)

_es_client: Optional[Elasticsearch] = None


def build_client_params(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Translate the Elasticsearch config into client constructor arguments.

    Args:
        config: Elasticsearch configuration section

    Returns:
        Keyword arguments for ``Elasticsearch(...)``
    """
    params: Dict[str, Any] = {
        "request_timeout": config["timeout_ms"] / 1000.0,
        "max_retries": config.get("max_retries", 3),
        "retry_on_timeout": True,
        "verify_certs": config.get("verify_certs", True),
    }

    if config.get("cloud_id"):
        params["cloud_id"] = config["cloud_id"]
    else:
        params["hosts"] = [config["url"]]

    # Add CA certificates if provided
    if config.get("ca_certs"):
        params["ca_certs"] = config["ca_certs"]

    # Add authentication
    if config.get("api_key"):
        params["api_key"] = config["api_key"]
    elif config.get("username") and config.get("password"):
        params["basic_auth"] = (config["username"], config["password"])

    return params


def get_elasticsearch_client(environment: Optional[str] = None) -> Elasticsearch:
    """
    Get the shared Elasticsearch client, creating it on first use.

    Args:
        environment: Environment name (uses current if not specified)

    Returns:
        Configured Elasticsearch client
    """
    global _es_client

    if _es_client is None:
        config = get_elasticsearch_config(environment)
        validate_elasticsearch_config(config)

        logger.info(
            "Initializing Elasticsearch client",
            extra={"context": {
                "node": None if config.get("cloud_id") else config.get("url"),
                "cloud": bool(config.get("cloud_id")),
                "has_api_key": bool(config.get("api_key")),
                "has_basic_auth": bool(config.get("username")),
            }},
        )
        _es_client = Elasticsearch(**build_client_params(config))

    return _es_client


def get_cluster_info(environment: Optional[str] = None) -> Dict[str, Any]:
    """
    Check connectivity and read cluster name and version.

    Returns:
        {"connected": bool, "cluster_name", "version"} or {"connected": False, "error"}
    """
    try:
        es = get_elasticsearch_client(environment)
        info = response_body(es.info())
        return {
            "connected": True,
            "cluster_name": info.get("cluster_name"),
            "version": (info.get("version") or {}).get("number"),
        }
    except Exception as e:
        logger.warning("Health check failed: %s", e)
        return {"connected": False, "error": str(e)}

