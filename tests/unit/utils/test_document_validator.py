"""
Unit tests for document and script validation.
"""

import pytest

import utils.document_validator as document_validator
from utils.document_validator import (
    is_valid_dotted_field,
    validate_document,
    validate_script,
)
from utils.errors import ValidationError


def nested_document(hops):
    node = {"leaf": 1}
    for _ in range(hops):
        node = {"child": node}
    return node


class TestValidateDocument:
    """Test cases for validate_document."""

    def test_valid_document(self):
        validate_document({
            "title": "Laptop",
            "specs.cpu": "M3",
            "tags": ["a", "b"],
            "owner": {"name": "Ann", "roles": [{"name": "admin"}]},
        })

    def test_empty_document(self):
        with pytest.raises(ValidationError, match="Document cannot be empty"):
            validate_document({})

    def test_label_used_in_messages(self):
        with pytest.raises(ValidationError, match="Update document cannot be empty"):
            validate_document({}, label="Update document")

    def test_not_an_object(self):
        with pytest.raises(ValidationError, match="must be a JSON object"):
            validate_document(["title"])

    def test_reserved_top_level_key(self):
        with pytest.raises(ValidationError, match="cannot start with underscore"):
            validate_document({"_id": "1", "title": "x"})

    def test_reserved_nested_key(self):
        with pytest.raises(ValidationError, match="'_meta' cannot start with underscore"):
            validate_document({"owner": {"_meta": 1}})

    def test_reserved_key_inside_array_of_objects(self):
        with pytest.raises(ValidationError, match="'_secret'"):
            validate_document({"items": [{"ok": 1}, {"_secret": 2}]})

    @pytest.mark.parametrize("key", [".a", "a.", "a..b"])
    def test_bad_dot_notation(self, key):
        with pytest.raises(ValidationError, match="improper dot notation"):
            validate_document({key: 1})

    def test_field_name_length(self):
        validate_document({"a" * 256: 1})

        with pytest.raises(ValidationError, match="maximum length of 256"):
            validate_document({"a" * 257: 1})

    def test_depth_limit(self):
        validate_document(nested_document(20))

        with pytest.raises(ValidationError, match="Document nesting exceeds maximum depth of 20"):
            validate_document(nested_document(21))

    def test_array_limit(self):
        validate_document({"values": list(range(10_000))})

        with pytest.raises(ValidationError, match="Array field 'values' contains too many elements"):
            validate_document({"values": list(range(10_001))})

    def test_string_limit(self):
        validate_document({"body": "x" * (1024 * 1024)})

        with pytest.raises(ValidationError, match="String field 'body' exceeds maximum length of 1MB"):
            validate_document({"body": "x" * (1024 * 1024 + 1)})

    def test_string_limit_inside_array(self):
        with pytest.raises(ValidationError, match="String field 'notes'"):
            validate_document({"notes": ["short", "x" * (1024 * 1024 + 1)]})

    def test_document_size_limit(self, monkeypatch):
        monkeypatch.setattr(document_validator, "MAX_DOCUMENT_BYTES", 50)

        with pytest.raises(ValidationError, match="size exceeds 100MB limit"):
            validate_document({"body": "x" * 60})

    def test_document_size_counts_characters(self, monkeypatch):
        monkeypatch.setattr(document_validator, "MAX_DOCUMENT_BYTES", 100)

        validate_document({"body": "é" * 80})

    def test_dotted_field_helper(self):
        assert is_valid_dotted_field("user.name")
        assert not is_valid_dotted_field("user..name")
        assert not is_valid_dotted_field(".user")


class TestValidateScript:
    """Test cases for validate_script."""

    def test_valid_script(self):
        script = validate_script({
            "source": "  ctx._source.count += params.amount  ",
            "params": {"amount": 2},
        })

        assert script == {
            "source": "ctx._source.count += params.amount",
            "lang": "painless",
            "params": {"amount": 2},
        }

    def test_params_optional(self):
        assert "params" not in validate_script({"source": "ctx._source.flag = true"})

    @pytest.mark.parametrize("source", ["", "   ", None])
    def test_empty_source(self, source):
        with pytest.raises(ValidationError, match="Script source cannot be empty"):
            validate_script({"source": source})

    @pytest.mark.parametrize("source", [
        "System.exit(0)",
        "Runtime.getRuntime()",
        "new ProcessBuilder('ls')",
        "Class.forName('x')",
        "java.io.File f",
        "Thread.sleep(10)",
        "exec('rm')",
    ])
    def test_forbidden_identifiers(self, source):
        with pytest.raises(ValidationError, match="forbidden identifier"):
            validate_script({"source": source})

    def test_too_many_params(self):
        params = {f"p{i}": i for i in range(51)}

        with pytest.raises(ValidationError, match="Too many script parameters"):
            validate_script({"source": "ctx._source.a = 1", "params": params})

    def test_param_name_rules(self):
        with pytest.raises(ValidationError, match="must be a valid identifier"):
            validate_script({"source": "ctx._source.a = 1", "params": {"1abc": 1}})

        with pytest.raises(ValidationError, match="too long"):
            validate_script({"source": "ctx._source.a = 1", "params": {"a" * 129: 1}})

    def test_param_value_size(self):
        with pytest.raises(ValidationError, match="Parameter 'blob' value exceeds 1MB limit"):
            validate_script({"source": "ctx._source.a = params.blob", "params": {"blob": "x" * (1024 * 1024)}})

    def test_param_name_with_trailing_newline(self):
        with pytest.raises(ValidationError, match="must be a valid identifier"):
            validate_script({"source": "ctx._source.a = params.x", "params": {"x\n": 1}})

    def test_param_value_size_counts_characters(self):
        # 200k two-byte characters stay well under the limit
        result = validate_script(
            {"source": "ctx._source.a = params.x", "params": {"x": "é" * 200_000}}
        )

        assert len(result["params"]["x"]) == 200_000
