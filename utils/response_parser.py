"""
Response parsing utilities for Elasticsearch.
"""

from typing import Dict, Any


def response_body(response: Any) -> Any:
    """
    Unwrap a client response into plain data.

    The client returns ``ObjectApiResponse``/``ListApiResponse`` wrappers; the
    raw JSON lives in ``.body``. Plain dicts and lists pass through unchanged.
    """
    if isinstance(response, (dict, list)):
        return response
    return getattr(response, "body", response)


def parse_mapping_properties(response: Any) -> Dict[str, Any]:
    """
    Extract the top-level mapping properties of the first index in a
    get-mapping response.

    Args:
        response: Response of ``indices.get_mapping``

    Returns:
        The ``mappings.properties`` object, or an empty dict
    """
    body = response_body(response) or {}
    for index_mapping in body.values():
        mappings = (index_mapping or {}).get("mappings") or {}
        return mappings.get("properties") or {}
    return {}
