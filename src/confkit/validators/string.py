"""String-specific validators gated on field attributes."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .core import ValidatorResult

if TYPE_CHECKING:  # pragma: no cover
    from ..fields import Field


def _string_value(field: Field) -> str | None:
    value = field.value
    return value if isinstance(value, str) else None


def maxlen_validator(field: Field) -> ValidatorResult:
    """Fail when the string is longer than ``attributes["maxlen"]``."""
    maxlen = (field.attributes or {}).get("maxlen")
    value = _string_value(field)
    if maxlen is None or value is None:
        return True, None
    if len(value) > maxlen:
        return False, f"string length must be lower than {maxlen}"
    return True, None


def pattern_validator(field: Field) -> ValidatorResult:
    """Fail when ``attributes["pattern"]`` is not found in the string."""
    pattern = (field.attributes or {}).get("pattern")
    value = _string_value(field)
    if pattern is None or value is None:
        return True, None
    if re.search(pattern, value) is None:
        return False, f"string must match pattern '{pattern}'"
    return True, None


def check_string_attributes(attributes: Mapping[str, Any]) -> list[str]:
    """
    Return one message per malformed string attribute.

    ``maxlen`` must be a non-negative integer and ``pattern`` a string that
    compiles as a regular expression.

    Examples
    --------
        >>> check_string_attributes({"maxlen": 3, "pattern": "^a"})
        []
        >>> len(check_string_attributes({"maxlen": -1, "pattern": "("}))
        2
    """
    errors: list[str] = []
    maxlen = attributes.get("maxlen")
    if maxlen is not None and (
        isinstance(maxlen, bool) or not isinstance(maxlen, int) or maxlen < 0
    ):
        errors.append("field attribute 'maxlen' must be a non-negative integer")

    pattern = attributes.get("pattern")
    if pattern is not None:
        if not isinstance(pattern, str):
            errors.append("field attribute 'pattern' must be a string")
        else:
            try:
                re.compile(pattern)
            except re.error as exc:
                errors.append(
                    f"field attribute 'pattern' is not a valid regular expression: {exc}"
                )
    return errors


STRING_VALIDATORS = (maxlen_validator, pattern_validator)
STRING_ATTRIBUTES = frozenset({"maxlen", "pattern"})
