"""Input validation with strong typing and multiple backends."""

from dataclasses import dataclass
from typing import Any

import jsonschema
from returns.result import Result, Success, Failure


class ValidationError(Exception):
    """Validation failed."""

    pass


@dataclass(frozen=True)
class ValidationResult:
    """Validation error with details (for Result pattern)."""

    message: str
    field: str | None = None
    value: Any | None = None


def validate_arguments(schema: dict[str, Any], args: dict[str, Any]) -> Result[None, ValidationResult]:
    """
    Validate call arguments against a JSON Schema (Result pattern).

    Args:
        schema: JSON Schema describing the arguments object
        args: Arguments to check

    Returns:
        Success(None), or Failure with the first violation found
    """
    if not schema:
        return Success(None)

    validator_cls = jsonschema.validators.validator_for(schema)
    try:
        validator_cls.check_schema(schema)
    except jsonschema.SchemaError as e:
        return Failure(ValidationResult(f"Invalid schema: {e.message}"))

    error = jsonschema.exceptions.best_match(validator_cls(schema).iter_errors(args))
    if error is None:
        return Success(None)

    field = ".".join(str(part) for part in error.absolute_path) or None
    return Failure(ValidationResult(error.message, field=field, value=error.instance))


def require_arguments(schema: dict[str, Any], args: dict[str, Any]) -> None:
    """
    Validate call arguments, raising on the first violation.

    Raises:
        ValidationError: If the arguments do not satisfy the schema
    """
    result = validate_arguments(schema, args)
    if isinstance(result, Failure):
        failure = result.failure()
        where = f" at '{failure.field}'" if failure.field else ""
        raise ValidationError(f"{failure.message}{where}")
