"""
Validation of documents and scripts sent to write operations.
"""

import json
import re
from typing import Any, Dict, Optional

from utils.errors import ValidationError

MAX_NESTING_DEPTH = 20
MAX_FIELD_NAME_LENGTH = 256
MAX_ARRAY_ELEMENTS = 10_000
MAX_STRING_LENGTH = 1024 * 1024
MAX_DOCUMENT_BYTES = 100 * 1024 * 1024

MAX_SCRIPT_PARAMS = 50
MAX_PARAM_NAME_LENGTH = 128
MAX_PARAM_VALUE_BYTES = 1024 * 1024
PARAM_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Painless identifiers that reach outside the document context.
DANGEROUS_SCRIPT_TOKENS = (
    "System.exit",
    "Runtime",
    "ProcessBuilder",
    "Process",
    "Class.forName",
    "java.lang.reflect",
    "java.io",
    "Thread",
    "exec(",
)


def is_valid_dotted_field(field_name: str) -> bool:
    """No leading, trailing or consecutive dots."""
    return not (field_name.startswith(".") or field_name.endswith(".") or ".." in field_name)


def _validate_field_name(key: Any) -> None:
    if not isinstance(key, str):
        raise ValidationError(f"Field name '{key}' must be a string")

    if key.startswith("_"):
        raise ValidationError(f"Field name '{key}' cannot start with underscore (reserved)")

    if "." in key and not is_valid_dotted_field(key):
        raise ValidationError(f"Invalid field name '{key}': improper dot notation")

    if len(key) > MAX_FIELD_NAME_LENGTH:
        raise ValidationError(
            f"Field name '{key[:50]}...' exceeds maximum length of {MAX_FIELD_NAME_LENGTH} characters"
        )


def validate_document(document: Dict[str, Any], label: str = "Document") -> None:
    """
    Validate a document before it is indexed or merged.

    Checks run in a fixed order and stop at the first violation: emptiness,
    top-level field names, total serialized size, then a recursive walk over
    nested objects.

    Args:
        document: Document body
        label: Noun used in error messages ("Document", "Update document")

    Raises:
        ValidationError: On the first violation found
    """
    if not isinstance(document, dict):
        raise ValidationError(f"{label} must be a JSON object")

    if not document:
        raise ValidationError(f"{label} cannot be empty")

    for key in document:
        _validate_field_name(key)

    document_size = len(json.dumps(document, default=str, ensure_ascii=False))
    if document_size > MAX_DOCUMENT_BYTES:
        raise ValidationError(f"{label} size exceeds 100MB limit")

    validate_nested_object(document, 0)


def validate_nested_object(obj: Dict[str, Any], depth: int) -> None:
    """
    Walk a document checking nesting depth, field names, arrays and strings.

    Raises:
        ValidationError: On the first violation found
    """
    if depth > MAX_NESTING_DEPTH:
        raise ValidationError(f"Document nesting exceeds maximum depth of {MAX_NESTING_DEPTH}")

    for key, value in obj.items():
        if depth > 0:
            _validate_field_name(key)
        _validate_value(key, value, depth)


def _validate_value(key: str, value: Any, depth: int) -> None:
    if isinstance(value, dict):
        validate_nested_object(value, depth + 1)

    elif isinstance(value, list):
        if len(value) > MAX_ARRAY_ELEMENTS:
            raise ValidationError(
                f"Array field '{key}' contains too many elements (max {MAX_ARRAY_ELEMENTS:,})"
            )
        for item in value:
            if isinstance(item, (dict, str)):
                _validate_value(key, item, depth)

    elif isinstance(value, str) and len(value) > MAX_STRING_LENGTH:
        raise ValidationError(f"String field '{key}' exceeds maximum length of 1MB")


def validate_script_source(source: Optional[str]) -> str:
    """
    Reject empty scripts and scripts that reference denylisted identifiers.

    Returns:
        The source with surrounding whitespace removed
    """
    if not isinstance(source, str) or not source.strip():
        raise ValidationError("Script source cannot be empty")

    for token in DANGEROUS_SCRIPT_TOKENS:
        if token in source:
            raise ValidationError(
                f"Script source contains forbidden identifier '{token}'",
                {"token": token},
            )

    return source.strip()


def validate_script_params(params: Dict[str, Any]) -> None:
    if not isinstance(params, dict):
        raise ValidationError("Script params must be an object")

    if len(params) > MAX_SCRIPT_PARAMS:
        raise ValidationError(f"Too many script parameters (max {MAX_SCRIPT_PARAMS})")

    for name, value in params.items():
        if len(name) > MAX_PARAM_NAME_LENGTH:
            raise ValidationError(
                f"Parameter name '{name[:50]}...' too long (max {MAX_PARAM_NAME_LENGTH} characters)"
            )

        if not PARAM_NAME_PATTERN.fullmatch(name):
            raise ValidationError(f"Invalid parameter name '{name}': must be a valid identifier")

        if len(json.dumps(value, default=str, ensure_ascii=False)) > MAX_PARAM_VALUE_BYTES:
            raise ValidationError(f"Parameter '{name}' value exceeds 1MB limit")


def validate_script(script: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a script update and build the request body's ``script`` entry.

    Args:
        script: {"source": str, "params": dict (optional)}

    Returns:
        {"source", "params" (if given), "lang": "painless"}

    Raises:
        ValidationError: On an empty or unsafe source, or invalid params
    """
    if not isinstance(script, dict):
        raise ValidationError("Script must be an object with a 'source' string")

    source = validate_script_source(script.get("source"))
    params = script.get("params")

    prepared: Dict[str, Any] = {"source": source, "lang": "painless"}
    if params is not None:
        validate_script_params(params)
        prepared["params"] = params

    return prepared
