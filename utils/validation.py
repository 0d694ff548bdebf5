"""
Input validation utilities.
"""

import re
from typing import Any, Optional, Union

from utils.errors import ValidationError

INVALID_INDEX_NAME_CHARS = set('\\/*?"<>| ,#:')
MAX_INDEX_NAME_BYTES = 255


def validate_index_pattern(pattern: str) -> None:
    """
    Validate an Elasticsearch index pattern.

    Args:
        pattern: Index pattern to validate

    Raises:
        ValidationError: If pattern is invalid
    """
    if not pattern or not isinstance(pattern, str):
        raise ValidationError("Index pattern cannot be empty")

    if pattern.startswith("_"):
        raise ValidationError("Index pattern cannot start with underscore")

    # Check for invalid characters
    invalid_chars = re.findall(r'[^a-zA-Z0-9\-_.*,]', pattern)
    if invalid_chars:
        raise ValidationError(
            f"Invalid characters in index pattern: {invalid_chars}",
            {"pattern": pattern},
        )


def validate_index_name(name: str) -> None:
    """
    Validate a concrete index name for index creation.

    Follows the cluster's naming rules: lowercase, no wildcard or path
    characters, may not start with '-', '_' or '+', and is not '.' or '..'.

    Raises:
        ValidationError: If the name would be rejected by the cluster
    """
    if not name or not isinstance(name, str):
        raise ValidationError("Index name cannot be empty")

    if name != name.lower():
        raise ValidationError(f"Index name '{name}' must be lowercase")

    if name in (".", ".."):
        raise ValidationError(f"Index name '{name}' is not allowed")

    if name[0] in "-_+":
        raise ValidationError(f"Index name '{name}' cannot start with '-', '_' or '+'")

    bad = sorted(INVALID_INDEX_NAME_CHARS.intersection(name))
    if bad:
        raise ValidationError(f"Index name '{name}' contains invalid characters: {bad}")

    if len(name.encode("utf-8")) > MAX_INDEX_NAME_BYTES:
        raise ValidationError(f"Index name exceeds {MAX_INDEX_NAME_BYTES} bytes")


def validate_size(size: int, max_size: int = 10000) -> int:
    """
    Validate and clamp size parameter.

    Args:
        size: Requested size
        max_size: Maximum allowed size

    Returns:
        Valid size value
    """
    return clamp_value(size, min_value=1, max_value=max_size)


def validate_max_rows(max_rows: Optional[int], default: int = 1_000_000, ceiling: int = 1_000_000) -> int:
    """
    Validate the row cap of an export.

    Unlike search sizes the cap is not clamped: a value outside 1..ceiling is
    rejected so the caller learns the export would not do what they asked.

    Raises:
        ValidationError: If the cap is not an integer in range
    """
    if max_rows is None:
        return default

    if isinstance(max_rows, bool) or not isinstance(max_rows, int):
        raise ValidationError("maxRows must be an integer", {"max_rows": max_rows})

    if not 1 <= max_rows <= ceiling:
        raise ValidationError(
            f"maxRows must be between 1 and {ceiling}",
            {"max_rows": max_rows},
        )
    return max_rows


def normalize_refresh(refresh: Optional[Union[bool, str]]) -> Union[bool, str]:
    """
    Normalize the refresh policy of a write operation.

    Returns:
        True, False or "wait_for"
    """
    if refresh is True or refresh == "true":
        return True
    if refresh == "wait_for":
        return "wait_for"
    return False


def clamp_value(value: Any, min_value: Any, max_value: Any) -> Any:
    """
    Clamp a value between min and max.

    Args:
        value: Value to clamp
        min_value: Minimum allowed value
        max_value: Maximum allowed value

    Returns:
        Clamped value
    """
    return max(min_value, min(value, max_value))
