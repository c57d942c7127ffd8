"""Modifier implementations and the modifier registry.

A modifier is called as ``modifier(value, argument, locale, tzinfo)`` and
returns a string. The first modifier of a chain sees the resolved scalar
itself; each later one sees the string produced by the previous step.
"""

import re
from collections.abc import Callable, Iterable
from datetime import date, datetime, time, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any
from urllib.parse import quote_plus

from babel import Locale
from babel.dates import format_date, format_datetime, format_time
from babel.numbers import (
    format_currency,
    format_decimal,
    format_percent,
    get_territory_currencies,
)

from templet.errors import create_error

from .types import ModifierCall
from .values import to_text

Modifier = Callable[[Any, str | None, Locale, tzinfo], str]

DEFAULT_CURRENCY = "USD"

# e.g. "shortDate", "mediumTime", "fullDateTime"
DATE_KEYWORD_PATTERN = re.compile(r"^(short|medium|long|full)(Date|Time|DateTime)$")

# A printf conversion anywhere in the argument selects printf formatting
PRINTF_PATTERN = re.compile(r"%[-#0 +]*\d*(?:\.\d+)?[sdifeEgGxXoc]")

# Exceptions raised by Babel, the ISO parsers and the platform clock on
# inapplicable input
FORMAT_ERRORS = (ValueError, TypeError, ArithmeticError, LookupError, OSError)


def _to_number(value: Any) -> int | float | Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return value
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            return None
    return None


def _to_temporal(value: Any, tz: tzinfo) -> date | time | None:
    """Coerce a value to a date, time or aware datetime.

    Numbers are epoch milliseconds. Strings are parsed as ISO 8601.
    Naive datetimes are taken to be in the render's time zone.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            return datetime.fromtimestamp(float(value) / 1000, tz=tz)
        except (OverflowError, OSError, ValueError):
            # Outside the platform's timestamp range
            return None
    if isinstance(value, str):
        text = value.strip()
        for parser in (date.fromisoformat, datetime.fromisoformat, time.fromisoformat):
            try:
                value = parser(text)
                break
            except ValueError:
                continue
        else:
            return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=tz)
    if isinstance(value, (date, time)):
        return value
    return None


def _format_number_keyword(value: Any, keyword: str, locale: Locale) -> str | None:
    number = _to_number(value)
    if number is None:
        return None
    if keyword == "percent":
        return format_percent(number, locale=locale)
    currencies = get_territory_currencies(locale.territory) if locale.territory else []
    currency = currencies[0] if currencies else DEFAULT_CURRENCY
    return format_currency(number, currency, locale=locale)


def _format_date_keyword(
    value: Any, style: str, kind: str, locale: Locale, tz: tzinfo
) -> str | None:
    temporal = _to_temporal(value, tz)

    if kind == "Date":
        if isinstance(temporal, datetime):
            return format_date(temporal.astimezone(tz).date(), format=style, locale=locale)
        if isinstance(temporal, date):
            return format_date(temporal, format=style, locale=locale)
        return None

    if kind == "Time":
        if isinstance(temporal, datetime):
            return format_time(temporal, format=style, tzinfo=tz, locale=locale)
        if isinstance(temporal, time):
            return format_time(temporal, format=style, locale=locale)
        return None

    if isinstance(temporal, datetime):
        return format_datetime(temporal, format=style, tzinfo=tz, locale=locale)
    return None


def _format_printf(value: Any, pattern: str) -> str:
    try:
        return pattern % (value,)
    except TypeError:
        number = _to_number(value)
        if number is None:
            raise
        return pattern % (float(number),)


def _format_pattern(value: Any, pattern: str, locale: Locale, tz: tzinfo) -> str | None:
    """Apply a number pattern (``#,##0.00``) or an LDML date pattern (``yyyy-MM-dd``)."""
    number = _to_number(value)
    if number is not None:
        return format_decimal(number, format=pattern, locale=locale)

    temporal = _to_temporal(value, tz)
    if isinstance(temporal, datetime):
        return format_datetime(temporal, format=pattern, tzinfo=tz, locale=locale)
    if isinstance(temporal, date):
        return format_date(temporal, format=pattern, locale=locale)
    if isinstance(temporal, time):
        return format_time(temporal, format=pattern, locale=locale)
    return None


def format_value(value: Any, argument: str | None, locale: Locale, tz: tzinfo) -> str:
    """Format a number or date.

    Arguments:
    - currency, percent: locale-aware number styles
    - shortDate ... fullDateTime: locale-aware date/time styles
    - anything containing a printf conversion: printf-style, e.g. %.2f
    - anything else: a number pattern (0.00) or a date pattern (yyyy-MM-dd)

    Falls back to the unformatted value when the argument does not apply.
    """
    if argument is None:
        return to_text(value)

    try:
        result: str | None
        if argument in ("currency", "percent"):
            result = _format_number_keyword(value, argument, locale)
        elif match := DATE_KEYWORD_PATTERN.match(argument):
            result = _format_date_keyword(value, match.group(1), match.group(2), locale, tz)
        elif PRINTF_PATTERN.search(argument):
            result = _format_printf(value, argument)
        else:
            result = _format_pattern(value, argument, locale, tz)
    except FORMAT_ERRORS:
        result = None

    return to_text(value) if result is None else result


def escape_url(value: Any, argument: str | None, locale: Locale, tz: tzinfo) -> str:
    """Form URL encoding, e.g. "abc:def&xyz" → "abc%3Adef%26xyz".

    Unreserved characters are letters, digits and ".-*_"; "~" is encoded.
    """
    return quote_plus(to_text(value), safe="*", encoding="utf-8").replace("~", "%7E")


JSON_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape_json(value: Any, argument: str | None, locale: Locale, tz: tzinfo) -> str:
    """Escape for inclusion in a JSON string literal.

    Control characters without a short escape become \\u00XX.
    """
    return "".join(_escape_json_char(c) for c in to_text(value))


def _escape_json_char(char: str) -> str:
    escaped = JSON_ESCAPES.get(char)
    if escaped is not None:
        return escaped
    if char < " ":
        return f"\\u{ord(char):04x}"
    return char


def escape_csv(value: Any, argument: str | None, locale: Locale, tz: tzinfo) -> str:
    """Escape for inclusion in a quoted CSV field."""
    return to_text(value).replace('"', '""')


MARKUP_ESCAPES = {
    "<": "&lt;",
    ">": "&gt;",
    "&": "&amp;",
    '"': "&quot;",
    "'": "&#39;",
}


def escape_markup(value: Any, argument: str | None, locale: Locale, tz: tzinfo) -> str:
    """Escape XML/HTML special characters."""
    return "".join(MARKUP_ESCAPES.get(c, c) for c in to_text(value))


def change_case(value: Any, argument: str | None, locale: Locale, tz: tzinfo) -> str:
    """Convert to upper, lower or title case (``case=upper``)."""
    text = to_text(value)
    if argument == "upper":
        return text.upper()
    if argument == "lower":
        return text.lower()
    if argument == "title":
        return text.title()
    return text


# Registry of built-in modifiers
BUILTIN_MODIFIERS: dict[str, Modifier] = {
    "format": format_value,
    "^url": escape_url,
    "^json": escape_json,
    "^csv": escape_csv,
    "^xml": escape_markup,
    "^html": escape_markup,
    "case": change_case,
}


class ModifierRegistry:
    """Named, chainable modifiers.

    Register custom modifiers before rendering starts; lookups during
    concurrent renders are safe, registration is not.
    """

    def __init__(self, modifiers: dict[str, Modifier] | None = None):
        """Initialize registry.

        Args:
            modifiers: Initial modifiers (defaults to the built-ins)
        """
        self._modifiers: dict[str, Modifier] = dict(
            BUILTIN_MODIFIERS if modifiers is None else modifiers
        )

    def register(self, name: str, modifier: Modifier) -> None:
        """Register a modifier. The last registration for a name wins.

        Args:
            name: Name used in templates, e.g. "^sql"
            modifier: Callable (value, argument, locale, tzinfo) -> str
        """
        self._modifiers[name] = modifier

    def unregister(self, name: str) -> None:
        """Remove a modifier if present."""
        self._modifiers.pop(name, None)

    def get(self, name: str) -> Modifier | None:
        """Get modifier by name."""
        return self._modifiers.get(name)

    def names(self) -> list[str]:
        """List registered modifier names."""
        return sorted(self._modifiers)

    def copy(self) -> "ModifierRegistry":
        """Independent registry with the same modifiers."""
        return ModifierRegistry(self._modifiers)

    def __contains__(self, name: object) -> bool:
        return name in self._modifiers

    def check(self, chain: Iterable[ModifierCall]) -> None:
        """Verify every modifier in a chain is registered.

        Raises:
            ResolutionFailure: UNKNOWN_MODIFIER
        """
        for call in chain:
            if call.name not in self._modifiers:
                raise create_error(
                    "UNKNOWN_MODIFIER",
                    modifier=call.name,
                    supported_modifiers=", ".join(self.names()),
                )

    def apply(
        self,
        value: Any,
        chain: Iterable[ModifierCall],
        locale: Locale,
        tz: tzinfo,
    ) -> str:
        """Apply a modifier chain left to right.

        Args:
            value: Resolved scalar
            chain: Modifier calls in template order
            locale: Render locale
            tz: Render time zone

        Returns:
            Final string

        Raises:
            ResolutionFailure: UNKNOWN_MODIFIER
        """
        chain = tuple(chain)
        self.check(chain)

        result = value
        for call in chain:
            result = self._modifiers[call.name](result, call.argument, locale, tz)
            if not isinstance(result, str):
                result = to_text(result)

        return result if isinstance(result, str) else to_text(result)


# Module-level default registry
default_registry = ModifierRegistry()
