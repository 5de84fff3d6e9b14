"""Validation tests."""

import pytest
from returns.result import Failure, Success

from genui.core.validate import ValidationError, require_arguments, validate_arguments

SCHEMA = {
    "type": "object",
    "properties": {
        "surfaceId": {"type": "string"},
        "components": {"type": "array", "items": {"type": "object", "required": ["id"]}},
    },
    "required": ["surfaceId"],
}


def test_valid_arguments():
    assert validate_arguments(SCHEMA, {"surfaceId": "s1", "components": [{"id": "a"}]}) == Success(None)


def test_empty_schema_accepts_anything():
    assert validate_arguments({}, {"anything": 1}) == Success(None)


def test_missing_required():
    result = validate_arguments(SCHEMA, {})
    assert isinstance(result, Failure)
    assert "surfaceId" in result.failure().message
    assert result.failure().field is None


def test_nested_field_path():
    result = validate_arguments(SCHEMA, {"surfaceId": "s1", "components": [{"id": "a"}, {}]})
    assert result.failure().field == "components.1"


def test_wrong_type_reports_value():
    result = validate_arguments(SCHEMA, {"surfaceId": 42})
    assert result.failure().field == "surfaceId"
    assert result.failure().value == 42


def test_invalid_schema():
    result = validate_arguments({"type": "not-a-type"}, {})
    assert result.failure().message.startswith("Invalid schema")


def test_require_arguments():
    require_arguments(SCHEMA, {"surfaceId": "s1"})
    with pytest.raises(ValidationError, match="at 'surfaceId'"):
        require_arguments(SCHEMA, {"surfaceId": 1})
