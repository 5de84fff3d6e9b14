"""
Basic client functions.

Boolean combinators, validators and formatters available to every surface.
"""

import re
import webbrowser
from typing import Any, Callable
from urllib.parse import urlparse

from ..core.json import safe_json_dumps
from ..core.stream import Stream, combine_latest
from ..models.data_path import DataPath
from .base import ClientFunction, ReturnType, SynchronousClientFunction
from .context import ExecutionContext, as_bool
from .formatting import format_currency, format_date, format_number, parse_date

EMAIL_PATTERN = re.compile(r"^[^@]+@[^@]+\.[^@]+$")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _schema(**properties: dict[str, Any]) -> dict[str, Any]:
    return {"type": "object", "properties": properties}


ANY: dict[str, Any] = {}
STRING = {"type": "string"}
NUMBER = {"type": "number"}
INTEGER = {"type": "integer"}
BOOLEAN = {"type": "boolean"}


# ============================================================================
# Boolean Combinators
# ============================================================================


class AndFunction(SynchronousClientFunction):
    name = "and"
    description = "Performs a logical AND operation on a list of boolean values."
    argument_schema = _schema(values={"type": "array"})
    return_type = ReturnType.BOOLEAN

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> bool:
        values = args.get("values")
        if not isinstance(values, list):
            return False
        # Vacuous truth: and([]) is True
        return all(as_bool(value) for value in values)


class OrFunction(SynchronousClientFunction):
    name = "or"
    description = "Performs a logical OR operation on a list of boolean values."
    argument_schema = _schema(values={"type": "array"})
    return_type = ReturnType.BOOLEAN

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> bool:
        values = args.get("values")
        if not isinstance(values, list):
            return False
        return any(as_bool(value) for value in values)


class NotFunction(SynchronousClientFunction):
    name = "not"
    description = "Performs a logical NOT operation on a boolean value."
    argument_schema = _schema(value=ANY)
    return_type = ReturnType.BOOLEAN

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> bool:
        if "value" not in args:
            return False
        return not as_bool(args["value"])


# ============================================================================
# Validators
# ============================================================================


class RequiredFunction(SynchronousClientFunction):
    name = "required"
    description = "Checks that the value is not null, undefined, or empty."
    argument_schema = _schema(value=ANY)
    return_type = ReturnType.BOOLEAN

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> bool:
        value = args.get("value")
        if value is None:
            return False
        if isinstance(value, (str, list, dict)):
            return len(value) > 0
        return True


class RegexFunction(SynchronousClientFunction):
    name = "regex"
    description = "Checks that the value matches a regular expression string."
    argument_schema = _schema(value=STRING, pattern=STRING)
    return_type = ReturnType.BOOLEAN

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> bool:
        value = args.get("value")
        pattern = args.get("pattern")
        if not isinstance(value, str) or not isinstance(pattern, str):
            return False
        try:
            return re.search(pattern, value) is not None
        except re.error as e:
            raise ValueError(f"Invalid regex pattern: {pattern}. {e}") from e


class LengthFunction(SynchronousClientFunction):
    """Length of a string, list or object; a bool when min or max is given."""

    name = "length"
    description = "Checks string length constraints."
    argument_schema = _schema(value=ANY, min=INTEGER, max=INTEGER)
    return_type = ReturnType.ANY

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> int | bool:
        value = args.get("value")
        length = len(value) if isinstance(value, (str, list, dict)) else 0

        if "min" not in args and "max" not in args:
            return length

        minimum, maximum = args.get("min"), args.get("max")
        if _is_number(minimum) and length < minimum:
            return False
        if _is_number(maximum) and length > maximum:
            return False
        return True


class NumericFunction(SynchronousClientFunction):
    name = "numeric"
    description = "Checks numeric range constraints."
    argument_schema = _schema(value=NUMBER, min=NUMBER, max=NUMBER)
    return_type = ReturnType.BOOLEAN

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> bool:
        value = args.get("value")
        if not _is_number(value):
            return False
        minimum, maximum = args.get("min"), args.get("max")
        if _is_number(minimum) and value < minimum:
            return False
        if _is_number(maximum) and value > maximum:
            return False
        return True


class EmailFunction(SynchronousClientFunction):
    name = "email"
    description = "Checks that the value is a valid email address."
    argument_schema = _schema(value=STRING)
    return_type = ReturnType.BOOLEAN

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> bool:
        value = args.get("value")
        return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


# ============================================================================
# Formatters
# ============================================================================


# "${path}" placeholders; a preceding backslash keeps the placeholder literal
_PLACEHOLDER = re.compile(r"(\\?)\$\{([^}]*)\}")


def _display(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return safe_json_dumps(value)
    return str(value)


class FormatStringFunction(ClientFunction):
    """
    Interpolate data into a template, live.

    Each ${path} is resolved against the calling context and watched, so
    the result re-renders whenever any referenced value changes.
    """

    name = "formatString"
    description = (
        "Formats a string by replacing ${path} placeholders with values from the data model. "
        "Use \\${ for a literal ${."
    )
    argument_schema = _schema(value=STRING)
    return_type = ReturnType.STRING

    def execute(self, args: dict[str, Any], context: ExecutionContext) -> Stream[Any]:
        template = args.get("value")
        if not isinstance(template, str):
            return Stream.value(_display(template))

        pieces: list[str | DataPath] = []
        position = 0
        for match in _PLACEHOLDER.finditer(template):
            pieces.append(template[position : match.start()])
            escaped, expression = match.groups()
            if escaped:
                pieces.append(match.group(0)[1:])
            else:
                pieces.append(context.resolve_path(expression.strip()))
            position = match.end()
        pieces.append(template[position:])

        paths = {piece for piece in pieces if isinstance(piece, DataPath)}
        sources = {path: context.subscribe_stream(path) for path in paths}

        def render(values: dict[DataPath, Any]) -> str:
            return "".join(
                _display(values[piece]) if isinstance(piece, DataPath) else piece
                for piece in pieces
            )

        return combine_latest(sources).map(render)


class FormatNumberFunction(SynchronousClientFunction):
    name = "formatNumber"
    description = "Formats a number with the specified grouping and decimal precision."
    argument_schema = _schema(value=NUMBER, decimalPlaces=INTEGER, useGrouping=BOOLEAN)
    return_type = ReturnType.STRING

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> str:
        value = args.get("value")
        if not _is_number(value):
            return _display(value)

        places = args.get("decimalPlaces")
        grouping = args.get("useGrouping")
        return format_number(
            value,
            decimal_places=int(places) if _is_number(places) else None,
            use_grouping=grouping if isinstance(grouping, bool) else True,
        )


class FormatCurrencyFunction(SynchronousClientFunction):
    name = "formatCurrency"
    description = "Formats a number as a currency string."
    argument_schema = _schema(value=NUMBER, currencyCode=STRING)
    return_type = ReturnType.STRING

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> str:
        value = args.get("value")
        code = args.get("currencyCode")
        if not _is_number(value) or not isinstance(code, str):
            return _display(value)
        return format_currency(value, code)


class FormatDateFunction(SynchronousClientFunction):
    name = "formatDate"
    description = "Formats a timestamp into a string using a pattern."
    argument_schema = _schema(value=ANY, pattern=STRING)
    return_type = ReturnType.STRING

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> str | None:
        value = args.get("value")
        pattern = args.get("pattern")
        date = parse_date(value)
        if date is None or not isinstance(pattern, str):
            return None if value is None else str(value)
        return format_date(date, pattern)


class PluralizeFunction(SynchronousClientFunction):
    name = "pluralize"
    description = (
        "Returns a string based on the plural category of the count (zero, one, other). "
        "Requires an 'other' fallback."
    )
    argument_schema = _schema(count=NUMBER, zero=STRING, one=STRING, other=STRING)
    return_type = ReturnType.STRING

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> Any:
        count = args.get("count")
        if not _is_number(count):
            return ""
        if count == 0 and "zero" in args:
            return args["zero"]
        if count == 1 and "one" in args:
            return args["one"]
        return args.get("other") or ""


class OpenUrlFunction(SynchronousClientFunction):
    """Open a URL; returns whether the URL was handed to the opener."""

    name = "openUrl"
    description = "Opens the specified URL in a browser or handler. This function has no return value."
    argument_schema = _schema(url=STRING)
    return_type = ReturnType.VOID

    def __init__(self, opener: Callable[[str], Any] | None = None) -> None:
        self.opener = opener or webbrowser.open

    def execute_sync(self, args: dict[str, Any], context: ExecutionContext) -> bool:
        url = args.get("url")
        if not isinstance(url, str) or not urlparse(url).scheme:
            return False
        self.opener(url)
        return True


def basic_functions(opener: Callable[[str], Any] | None = None) -> list[ClientFunction]:
    """All basic functions, fresh instances."""
    return [
        RequiredFunction(),
        RegexFunction(),
        LengthFunction(),
        NumericFunction(),
        EmailFunction(),
        FormatStringFunction(),
        OpenUrlFunction(opener),
        FormatNumberFunction(),
        FormatCurrencyFunction(),
        FormatDateFunction(),
        PluralizeFunction(),
        AndFunction(),
        OrFunction(),
        NotFunction(),
    ]
