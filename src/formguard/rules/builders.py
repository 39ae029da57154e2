"""Typed catalog of builtin rules.

Each declared field type has a builder exposing the primitive rules that
make sense for its values:
- string: required, length bounds, character classes, formats (email, url, phone)
- number: is, oneOf, bigger/lesser bounds, between
- date: is, oneOf, after/before bounds, between
- boolean: true, false, is

Every builder also carries the generic primitives (custom, pick, all,
equalTo, is, oneOf) and the async escape hatch ``from_async``.

Primitives are total: a missing value never raises. Strings read ``None``
as ``""``, booleans read it as ``False``, and number/date comparisons fail
with ``given=None``.
"""

import operator
import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Mapping

from formguard.errors import UnknownFieldTypeError
from formguard.results import PASSED, Result, failed
from formguard.rules.algebra import AsyncPredicate, AsyncRule, Rule, SyncRule, all_of


# =============================================================================
# Formats
# =============================================================================

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)

URL_PATTERN = re.compile(
    r"^https?://[^\s/$.?#].[^\s]*$",
    re.IGNORECASE
)

PHONE_PATTERN = re.compile(
    r"^[+]*[(]{0,1}[0-9]{1,4}[)]{0,1}[-\s\./0-9]*$"
)

ALPHA_PATTERN = re.compile(r"^[a-zA-Z]+$")
NUMERIC_PATTERN = re.compile(r"^[0-9]+$")
ALPHA_NUMERIC_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")


# =============================================================================
# Helpers
# =============================================================================


def _check(name: str, ok: bool, **data: Any) -> Result:
    return PASSED if ok else failed(name, **data)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _read(root: Any, key: str) -> Any:
    """Read a sibling field from the record being validated."""
    if isinstance(root, Mapping):
        return root.get(key)
    return getattr(root, key, None)


def _compare(op: Callable[[Any, Any], bool], value: Any, bound: Any) -> bool:
    """Compare without raising; incomparable values fail the comparison."""
    if value is None:
        return False
    # datetime and date are not comparable with each other
    if isinstance(value, datetime) and not isinstance(bound, datetime) and isinstance(bound, date):
        value = value.date()
    elif isinstance(bound, datetime) and not isinstance(value, datetime) and isinstance(value, date):
        bound = bound.date()
    try:
        return bool(op(value, bound))
    except TypeError:
        return False


# =============================================================================
# Field Types
# =============================================================================


class FieldType(Enum):
    """Declared type of a field's value; selects the rule builder."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


# =============================================================================
# Builders
# =============================================================================


class RuleBuilder:
    """Primitives shared by every field type."""

    field_type: FieldType
    # Failure names produced by this builder, used for message coverage checks
    RULES: tuple[str, ...] = ("is", "one_of", "equal_to")

    def custom(self, predicate: Callable[[Any, Any], Result]) -> SyncRule:
        """Validate with a custom ``(value, root) -> Result`` function."""
        return SyncRule(predicate)

    def pick(self, chooser: Callable[[Any, Any], SyncRule]) -> SyncRule:
        """Validate with a rule chosen per run from the value and the record.

        This is how a rule depends on other fields, e.g. a field that is only
        required when a checkbox is ticked.
        """

        def run_picked(value: Any, root: Any) -> Result:
            return chooser(value, root).run(value, root)

        return SyncRule(run_picked)

    def all(self, first: Rule, *rest: Rule) -> Rule:
        """All rules must pass, checked left to right."""
        return all_of(first, *rest)

    def from_async(self, predicate: AsyncPredicate) -> AsyncRule:
        """Validate with an async ``(value, root) -> Result`` function."""
        return AsyncRule(predicate)

    def equal_to(self, key: str) -> SyncRule:
        """The value must equal another field of the record."""

        def equals_other(value: Any, root: Any) -> Result:
            other = _read(root, key)
            return _check("equal_to", value == other, given=value, key=key, other=other)

        return SyncRule(equals_other)

    def is_(self, expected: Any) -> SyncRule:
        """The value must equal ``expected``."""
        return SyncRule(
            lambda value, root: _check("is", value == expected, expected=expected, given=value)
        )

    def one_of(self, first: Any, *rest: Any) -> SyncRule:
        """The value must equal one of the given values."""
        options = (first, *rest)
        return SyncRule(
            lambda value, root: _check(
                "one_of",
                value in options,
                given=value,
                expected=", ".join(str(o) for o in options),
            )
        )

    def _bound(self, name: str, op: Callable[[Any, Any], bool], bound: Any) -> SyncRule:
        return SyncRule(
            lambda value, root: _check(name, _compare(op, value, bound), given=value, expected=bound)
        )

    def _range(self, name: str, lower: Any, upper: Any, inclusive: bool) -> SyncRule:
        low_op = operator.ge if inclusive else operator.gt
        high_op = operator.le if inclusive else operator.lt

        def within(value: Any, root: Any) -> Result:
            ok = _compare(low_op, value, lower) and _compare(high_op, value, upper)
            return _check(name, ok, given=value, lower=lower, upper=upper)

        return SyncRule(within)


class StringRuleBuilder(RuleBuilder):
    """Rules for text values."""

    field_type = FieldType.STRING
    RULES = RuleBuilder.RULES + (
        "required", "empty", "min", "max", "length", "contains", "contains_not",
        "has_number", "has_letter", "has_capital", "starts_with", "starts_not_with",
        "ends_with", "ends_not_with", "email", "url", "alpha", "numeric",
        "alpha_numeric", "regex", "phone",
    )

    @property
    def required(self) -> SyncRule:
        return SyncRule(lambda value, root: _check("required", len(_text(value)) > 0))

    @property
    def empty(self) -> SyncRule:
        return SyncRule(lambda value, root: _check("empty", len(_text(value)) == 0, given=value))

    def min(self, n: int) -> SyncRule:
        """At least ``n`` characters."""

        def at_least(value: Any, root: Any) -> Result:
            text = _text(value)
            return _check("min", len(text) >= n, expected=n, given=text, length=len(text))

        return SyncRule(at_least)

    def max(self, n: int) -> SyncRule:
        """At most ``n`` characters."""

        def at_most(value: Any, root: Any) -> Result:
            text = _text(value)
            return _check("max", len(text) <= n, expected=n, given=text, length=len(text))

        return SyncRule(at_most)

    def length(self, n: int) -> SyncRule:
        """Exactly ``n`` characters."""

        def exactly(value: Any, root: Any) -> Result:
            text = _text(value)
            return _check("length", len(text) == n, expected=n, given=text, length=len(text))

        return SyncRule(exactly)

    def contains(self, fragment: str, case_sensitive: bool = True) -> SyncRule:
        def has_fragment(value: Any, root: Any) -> Result:
            text = _text(value)
            if case_sensitive:
                ok = fragment in text
            else:
                ok = fragment.casefold() in text.casefold()
            return _check("contains", ok, expected=fragment, given=text)

        return SyncRule(has_fragment)

    def contains_not(self, fragment: str, case_sensitive: bool = True) -> SyncRule:
        def lacks_fragment(value: Any, root: Any) -> Result:
            text = _text(value)
            if case_sensitive:
                ok = fragment not in text
            else:
                ok = fragment.casefold() not in text.casefold()
            return _check("contains_not", ok, expected=fragment, given=text)

        return SyncRule(lacks_fragment)

    @property
    def has_number(self) -> SyncRule:
        return self._search("has_number", re.compile(r"[0-9]"))

    @property
    def has_letter(self) -> SyncRule:
        return self._search("has_letter", re.compile(r"[a-zA-Z]"))

    @property
    def has_capital(self) -> SyncRule:
        return SyncRule(
            lambda value, root: _check(
                "has_capital", _text(value).lower() != _text(value), given=_text(value)
            )
        )

    def starts_with(self, prefix: str) -> SyncRule:
        return SyncRule(
            lambda value, root: _check(
                "starts_with", _text(value).startswith(prefix), expected=prefix, given=_text(value)
            )
        )

    def starts_not_with(self, prefix: str) -> SyncRule:
        return SyncRule(
            lambda value, root: _check(
                "starts_not_with",
                not _text(value).startswith(prefix),
                expected=prefix,
                given=_text(value),
            )
        )

    def ends_with(self, suffix: str) -> SyncRule:
        return SyncRule(
            lambda value, root: _check(
                "ends_with", _text(value).endswith(suffix), expected=suffix, given=_text(value)
            )
        )

    def ends_not_with(self, suffix: str) -> SyncRule:
        return SyncRule(
            lambda value, root: _check(
                "ends_not_with",
                not _text(value).endswith(suffix),
                expected=suffix,
                given=_text(value),
            )
        )

    @property
    def email(self) -> SyncRule:
        return self._match("email", EMAIL_PATTERN)

    @property
    def url(self) -> SyncRule:
        return self._match("url", URL_PATTERN)

    @property
    def alpha(self) -> SyncRule:
        return self._match("alpha", ALPHA_PATTERN)

    @property
    def numeric(self) -> SyncRule:
        return self._match("numeric", NUMERIC_PATTERN)

    @property
    def alpha_numeric(self) -> SyncRule:
        return self._match("alpha_numeric", ALPHA_NUMERIC_PATTERN)

    @property
    def phone(self) -> SyncRule:
        return self._match("phone", PHONE_PATTERN)

    def regex(self, pattern: "str | re.Pattern[str]") -> SyncRule:
        """The value must contain a match for ``pattern`` (``re.search``)."""
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self._search("regex", compiled)

    def _match(self, name: str, pattern: "re.Pattern[str]") -> SyncRule:
        return SyncRule(
            lambda value, root: _check(
                name, pattern.fullmatch(_text(value)) is not None, given=_text(value)
            )
        )

    def _search(self, name: str, pattern: "re.Pattern[str]") -> SyncRule:
        return SyncRule(
            lambda value, root: _check(
                name, pattern.search(_text(value)) is not None, given=_text(value)
            )
        )


class NumberRuleBuilder(RuleBuilder):
    """Rules for numeric values."""

    field_type = FieldType.NUMBER
    RULES = RuleBuilder.RULES + (
        "bigger", "bigger_or", "lesser", "lesser_or", "between", "between_including",
    )

    def bigger(self, n: Any) -> SyncRule:
        return self._bound("bigger", operator.gt, n)

    def bigger_or(self, n: Any) -> SyncRule:
        return self._bound("bigger_or", operator.ge, n)

    def lesser(self, n: Any) -> SyncRule:
        return self._bound("lesser", operator.lt, n)

    def lesser_or(self, n: Any) -> SyncRule:
        return self._bound("lesser_or", operator.le, n)

    def between(self, lower: Any, upper: Any) -> SyncRule:
        return self._range("between", lower, upper, inclusive=False)

    def between_including(self, lower: Any, upper: Any) -> SyncRule:
        return self._range("between_including", lower, upper, inclusive=True)


class DateRuleBuilder(RuleBuilder):
    """Rules for ``date``/``datetime`` values."""

    field_type = FieldType.DATE
    RULES = RuleBuilder.RULES + (
        "after", "after_or", "before", "before_or", "between", "between_including",
    )

    def after(self, d: date) -> SyncRule:
        return self._bound("after", operator.gt, d)

    def after_or(self, d: date) -> SyncRule:
        return self._bound("after_or", operator.ge, d)

    def before(self, d: date) -> SyncRule:
        return self._bound("before", operator.lt, d)

    def before_or(self, d: date) -> SyncRule:
        return self._bound("before_or", operator.le, d)

    def between(self, start: date, end: date) -> SyncRule:
        return self._range("between", start, end, inclusive=False)

    def between_including(self, start: date, end: date) -> SyncRule:
        return self._range("between_including", start, end, inclusive=True)


class BoolRuleBuilder(RuleBuilder):
    """Rules for checkbox-style values."""

    field_type = FieldType.BOOLEAN
    RULES = RuleBuilder.RULES + ("true", "false")

    @property
    def true(self) -> SyncRule:
        return SyncRule(lambda value, root: _check("true", value is True, given=bool(value)))

    @property
    def false(self) -> SyncRule:
        return SyncRule(lambda value, root: _check("false", not value, given=bool(value)))


# =============================================================================
# Lookup
# =============================================================================

_BUILDERS: dict[FieldType, RuleBuilder] = {
    FieldType.STRING: StringRuleBuilder(),
    FieldType.NUMBER: NumberRuleBuilder(),
    FieldType.DATE: DateRuleBuilder(),
    FieldType.BOOLEAN: BoolRuleBuilder(),
}

# bool before int: bool is a subclass of int
_PYTHON_TYPES: list[tuple[type, FieldType]] = [
    (bool, FieldType.BOOLEAN),
    (str, FieldType.STRING),
    (int, FieldType.NUMBER),
    (float, FieldType.NUMBER),
    (Decimal, FieldType.NUMBER),
    (date, FieldType.DATE),
]


def resolve_field_type(tag: Any) -> FieldType:
    """Resolve a ``FieldType``, its string value, or a Python type.

    Raises:
        UnknownFieldTypeError: If the tag names no known field type
    """
    if isinstance(tag, FieldType):
        return tag
    if isinstance(tag, str):
        try:
            return FieldType(tag.lower())
        except ValueError:
            pass
    elif isinstance(tag, type):
        for python_type, field_type in _PYTHON_TYPES:
            if issubclass(tag, python_type):
                return field_type

    raise UnknownFieldTypeError(
        f"No rule builder for field type {tag!r}. "
        "Available types: " + ", ".join(t.value for t in FieldType)
    )


def builder_for(tag: Any) -> RuleBuilder:
    """Get the rule builder for a declared field type."""
    return _BUILDERS[resolve_field_type(tag)]


def list_rule_names(field_type: FieldType) -> list[str]:
    """List the failure names a field type's builder can produce."""
    return sorted(_BUILDERS[field_type].RULES)
