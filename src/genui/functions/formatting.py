"""
Number, currency and date formatting for the built-in functions.

Output follows en-US conventions: "," groups thousands, "." separates
decimals, month and weekday names are English.
"""

import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_EVEN, Decimal, localcontext

DEFAULT_MAX_FRACTION_DIGITS = 3

# Symbol and fraction digits per ISO 4217 code
CURRENCIES: dict[str, tuple[str, int]] = {
    "USD": ("$", 2),
    "EUR": ("€", 2),
    "GBP": ("£", 2),
    "JPY": ("¥", 0),
    "CNY": ("CN¥", 2),
    "INR": ("₹", 2),
    "KRW": ("₩", 0),
    "CAD": ("CA$", 2),
    "AUD": ("A$", 2),
    "NZD": ("NZ$", 2),
    "MXN": ("MX$", 2),
    "BRL": ("R$", 2),
    "CHF": ("CHF", 2),
    "SEK": ("SEK", 2),
    "ILS": ("₪", 2),
    "VND": ("₫", 0),
}

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Runs of one pattern letter, quoted literals, or any other single character
_PATTERN_TOKEN = re.compile(r"'(?:[^']|'')*'|([A-Za-z])\1*|.", re.DOTALL)


# ============================================================================
# Numbers
# ============================================================================


def format_number(
    value: int | float,
    decimal_places: int | None = None,
    use_grouping: bool = True,
) -> str:
    """
    Format a number.

    Args:
        value: Number to format
        decimal_places: Exact number of fraction digits; when None, up to
            three digits are kept and trailing zeros dropped
        use_grouping: Group thousands with ","

    Returns:
        Formatted number
    """
    if decimal_places is not None:
        text = _fixed(value, max(decimal_places, 0))
    else:
        text = _fixed(value, DEFAULT_MAX_FRACTION_DIGITS)
        if "." in text:
            text = text.rstrip("0").rstrip(".")

    if text in ("-0", "-0." + "0" * (decimal_places or 0)):
        text = text[1:]

    if use_grouping:
        text = _group(text)
    return text


def _fixed(value: int | float, places: int) -> str:
    number = Decimal(str(value))
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # Room for every integer digit plus the requested fraction
        ctx.prec = max(number.adjusted(), 0) + places + 2
        rounded = number.quantize(quantum, rounding=ROUND_HALF_EVEN)
    return f"{rounded:f}"


def _group(text: str) -> str:
    sign = ""
    if text.startswith("-"):
        sign, text = "-", text[1:]
    whole, dot, fraction = text.partition(".")
    grouped = f"{int(whole):,}"
    return f"{sign}{grouped}{dot}{fraction}"


def format_currency(value: int | float, currency_code: str) -> str:
    """
    Format an amount in a currency ("$1,234.50", "¥1,235").

    Unknown codes use the code itself as the symbol.
    """
    code = currency_code.upper()
    symbol, digits = CURRENCIES.get(code, (code, 2))
    amount = format_number(abs(value), decimal_places=digits)
    sign = "-" if value < 0 and amount.strip("0.,") else ""
    return f"{sign}{symbol}{amount}"


# ============================================================================
# Dates
# ============================================================================


def parse_date(value: object) -> datetime | None:
    """
    Interpret a date value.

    Strings are parsed as ISO-8601; integers are milliseconds since the
    epoch, in UTC. Anything else gives None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def format_date(date: datetime, pattern: str) -> str:
    """
    Render a date with an ICU-style pattern ("yyyy-MM-dd", "EEE, MMM d").

    Supported letters: y M d E H h m s S a. Text in single quotes is copied
    as is ('' is a quote); other letters are copied unchanged.
    """
    output: list[str] = []
    for match in _PATTERN_TOKEN.finditer(pattern):
        token = match.group(0)
        if token.startswith("'"):
            output.append("'" if token == "''" else token[1:-1].replace("''", "'"))
        elif match.group(1):
            output.append(_render_field(date, token[0], len(token)))
        else:
            output.append(token)
    return "".join(output)


def _render_field(date: datetime, letter: str, count: int) -> str:
    if letter == "y":
        if count == 2:
            return f"{date.year % 100:02d}"
        return str(date.year).zfill(count)
    if letter == "M":
        if count >= 4:
            return MONTHS[date.month - 1]
        if count == 3:
            return MONTHS[date.month - 1][:3]
        return str(date.month).zfill(count)
    if letter == "d":
        return str(date.day).zfill(count)
    if letter == "E":
        name = WEEKDAYS[date.weekday()]
        return name if count >= 4 else name[:3]
    if letter == "H":
        return str(date.hour).zfill(count)
    if letter == "h":
        return str(date.hour % 12 or 12).zfill(count)
    if letter == "m":
        return str(date.minute).zfill(count)
    if letter == "s":
        return str(date.second).zfill(count)
    if letter == "S":
        return f"{date.microsecond:06d}"[:count].ljust(count, "0")
    if letter == "a":
        return "AM" if date.hour < 12 else "PM"
    return letter * count
