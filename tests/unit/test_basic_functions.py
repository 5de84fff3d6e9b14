"""Tests for the basic client functions."""

import pytest

from genui.functions import FunctionRegistry, ReturnType, UnknownFunctionError, basic_functions


def call(context, name, **args):
    """Run a function with literal arguments and return its first value."""
    values, errors = [], []
    context.resolve({"function": name, "args": args}).listen(values.append, errors.append)
    if errors:
        raise errors[0]
    return values[0]


# ============================================================================
# Registry
# ============================================================================

@pytest.mark.unit
def test_registry_has_basic_functions():
    registry = FunctionRegistry()
    assert len(registry) == 14
    assert registry.names() == sorted(
        [
            "required", "regex", "length", "numeric", "email", "formatString", "openUrl",
            "formatNumber", "formatCurrency", "formatDate", "pluralize", "and", "or", "not",
        ]
    )
    assert "formatString" in registry


@pytest.mark.unit
def test_registry_require():
    registry = FunctionRegistry([])
    assert len(registry) == 0
    with pytest.raises(UnknownFunctionError):
        registry.require("and")


@pytest.mark.unit
def test_registry_replace():
    functions = basic_functions()
    registry = FunctionRegistry(functions)
    replacement = basic_functions()[0]
    registry.register(replacement)
    assert registry.get(replacement.name) is replacement
    assert len(registry) == 14


@pytest.mark.unit
def test_describe_all():
    descriptions = FunctionRegistry().describe_all()
    by_name = {d["name"]: d for d in descriptions}

    assert by_name["and"]["returnType"] == ReturnType.BOOLEAN.value
    assert by_name["openUrl"]["returnType"] == "void"
    assert by_name["formatNumber"]["parameters"]["properties"]["decimalPlaces"] == {"type": "integer"}
    assert [d["name"] for d in descriptions] == sorted(by_name)


# ============================================================================
# Boolean Combinators
# ============================================================================

@pytest.mark.unit
def test_and(context):
    assert call(context, "and", values=[True, True]) is True
    assert call(context, "and", values=[True, False]) is False
    assert call(context, "and", values=[]) is True
    assert call(context, "and", values=[True, None]) is False
    assert call(context, "and", values=[1, "x"]) is True
    assert call(context, "and") is False
    assert call(context, "and", values="nope") is False


@pytest.mark.unit
def test_or(context):
    assert call(context, "or", values=[False, True]) is True
    assert call(context, "or", values=[False, None]) is False
    assert call(context, "or", values=[]) is False
    assert call(context, "or") is False


@pytest.mark.unit
def test_not(context):
    assert call(context, "not", value=True) is False
    assert call(context, "not", value=False) is True
    assert call(context, "not", value=None) is True
    assert call(context, "not") is False


@pytest.mark.unit
def test_and_over_bound_values(context, data_model):
    values = []
    context.resolve(
        {"function": "and", "args": {"values": [{"path": "/a"}, {"path": "/b"}]}}
    ).listen(values.append)

    data_model.update("/a", True)
    data_model.update("/b", True)

    assert values == [False, False, True]


# ============================================================================
# Validators
# ============================================================================

@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [("x", True), ("", False), (None, False), ([], False), ([1], True), ({}, False), (0, True), (False, True)],
)
def test_required(context, value, expected):
    assert call(context, "required", value=value) is expected


@pytest.mark.unit
def test_regex(context):
    assert call(context, "regex", value="abc123", pattern=r"\d+") is True
    assert call(context, "regex", value="abc", pattern=r"^\d+$") is False
    assert call(context, "regex", value=5, pattern=r"\d") is False


@pytest.mark.unit
def test_regex_invalid_pattern(context):
    with pytest.raises(ValueError, match="Invalid regex pattern"):
        call(context, "regex", value="a", pattern="[")


@pytest.mark.unit
def test_length(context):
    assert call(context, "length", value="hello") == 5
    assert call(context, "length", value=[1, 2]) == 2
    assert call(context, "length", value=None) == 0
    assert call(context, "length", value="hello", min=3) is True
    assert call(context, "length", value="hello", max=3) is False
    assert call(context, "length", value="hi", min=3, max=10) is False
    assert call(context, "length", value="", max=3) is True


@pytest.mark.unit
def test_numeric(context):
    assert call(context, "numeric", value=5, min=1, max=10) is True
    assert call(context, "numeric", value=0, min=1) is False
    assert call(context, "numeric", value=11.5, max=10) is False
    assert call(context, "numeric", value=True) is False
    assert call(context, "numeric", value="5") is False


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [
        ("ada@example.com", True),
        ("a.b@sub.example.org", True),
        ("missing-at.example.com", False),
        ("no@tld", False),
        ("two@@example.com", False),
        (42, False),
    ],
)
def test_email(context, value, expected):
    assert call(context, "email", value=value) is expected


# ============================================================================
# Formatters
# ============================================================================

@pytest.mark.unit
def test_format_string_interpolates_live(context, data_model):
    values = []
    context.resolve(
        {"function": "formatString", "args": {"value": "Hello ${/user/name}, age ${user/age}"}}
    ).listen(values.append)

    data_model.update("/user/name", "Grace")

    assert values == ["Hello Ada, age 36", "Hello Grace, age 36"]


@pytest.mark.unit
def test_format_string_relative_to_context(context):
    row = context.nested("/items[0]")
    values = []
    row.resolve({"function": "formatString", "args": {"value": "Title: ${title}"}}).listen(values.append)
    assert values == ["Title: first"]


@pytest.mark.unit
def test_format_string_escape_and_display(context):
    assert call(context, "formatString", value=r"Cost: \${price}") == "Cost: ${price}"
    assert call(context, "formatString", value="[${/missing}]") == "[]"
    assert call(context, "formatString", value="${/user/tags}") == '["math","engines"]'
    assert call(context, "formatString", value="plain") == "plain"


@pytest.mark.unit
def test_format_string_booleans(context, data_model):
    data_model.update("/flag", True)
    assert call(context, "formatString", value="flag=${/flag}") == "flag=true"


@pytest.mark.unit
def test_format_number(context):
    assert call(context, "formatNumber", value=1234567.891) == "1,234,567.891"
    assert call(context, "formatNumber", value=1234.5, decimalPlaces=2) == "1,234.50"
    assert call(context, "formatNumber", value=1234.5, useGrouping=False) == "1234.5"
    assert call(context, "formatNumber", value="n/a") == "n/a"


@pytest.mark.unit
def test_format_currency(context):
    assert call(context, "formatCurrency", value=1234.5, currencyCode="USD") == "$1,234.50"
    assert call(context, "formatCurrency", value=1234.5, currencyCode="jpy") == "¥1,234"
    assert call(context, "formatCurrency", value=5, currencyCode="XYZ") == "XYZ5.00"


@pytest.mark.unit
def test_format_date(context):
    assert call(context, "formatDate", value="2024-03-05T14:07:09Z", pattern="yyyy-MM-dd HH:mm") == "2024-03-05 14:07"
    assert call(context, "formatDate", value=0, pattern="MMM d, yyyy") == "Jan 1, 1970"
    assert call(context, "formatDate", value="not a date", pattern="yyyy") == "not a date"
    assert call(context, "formatDate", value=None, pattern="yyyy") is None


@pytest.mark.unit
def test_pluralize(context):
    forms = {"zero": "no items", "one": "one item", "other": "many items"}
    assert call(context, "pluralize", count=0, **forms) == "no items"
    assert call(context, "pluralize", count=1, **forms) == "one item"
    assert call(context, "pluralize", count=7, **forms) == "many items"
    assert call(context, "pluralize", count=0, other="items") == "items"
    assert call(context, "pluralize", count="x", other="items") == ""


@pytest.mark.unit
def test_open_url(context, function_registry):
    assert call(context, "openUrl", url="https://example.com") is True
    assert call(context, "openUrl", url="not a url") is False
    assert call(context, "openUrl") is False
    assert function_registry.opened == ["https://example.com"]
