"""Core validator primitives: type checks, chain execution, error formatting."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Iterable

from loguru import logger

if TYPE_CHECKING:  # pragma: no cover
    from ..fields import Field

ValidatorResult = tuple[bool, "str | None"]
ValidatorFn = Callable[["Field"], ValidatorResult]


def type_id_of(value: Any) -> str:
    """
    Infer a registry type id from a Python value.

    ``bool`` is checked before ``int`` since it is an ``int`` subclass.

    Parameters
    ----------
    value : Any
        Any Python value.

    Returns
    -------
    str
        One of ``string``, ``number``, ``boolean``, ``table`` or, for any
        other value, the Python type name.

    Examples
    --------
        >>> type_id_of(True)
        'boolean'
        >>> type_id_of(1.5)
        'number'
        >>> type_id_of({"a": 1})
        'table'
    """
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (Mapping, list, tuple)):
        return "table"
    return type(value).__name__


def type_validator(wanted_type: str) -> ValidatorFn:
    """
    Build a validator accepting values whose inferred type id is `wanted_type`.

    ``None`` is accepted: it stands for an unset optional field.
    """

    def validator(field: Field) -> ValidatorResult:
        value = field.value
        if value is None:
            return True, None
        got_type = type_id_of(value)
        if got_type == wanted_type:
            return True, None
        return False, f"type error, want '{wanted_type}' but got '{got_type}'"

    validator.__name__ = f"{wanted_type}_type_validator"
    validator.__qualname__ = validator.__name__
    return validator


def run_chain(
    field: Field, validators: Iterable[ValidatorFn]
) -> tuple[bool, list[str]]:
    """
    Run every validator against `field`, collecting all failure messages.

    The chain does not stop at the first failure. A validator that raises
    (directly, or through the field's hook when it reads ``field.value``)
    counts as a failure whose message names the exception.

    Returns
    -------
    tuple[bool, list[str]]
        Overall success and the list of messages from failing validators,
        in registration order.
    """
    messages: list[str] = []
    for validator in validators:
        name = getattr(validator, "__name__", "validator")
        try:
            ok, message = validator(field)
        except Exception as exc:
            logger.debug(f"validators.run_chain: {name} raised {exc!r} for field '{field.name}'")
            messages.append(f"{name} raised {exc!r}")
            continue
        if not ok:
            messages.append(message or f"{name} failed")
    if messages:
        logger.debug(f"validators.run_chain: field '{field.name}' failed {len(messages)} rule(s)")
    return not messages, messages


def validation_error(name: Any, value: Any, messages: Iterable[str]) -> str:
    """Format the aggregated message ``Field '<name>' errors: ... [value=<value>]``."""
    lines = "\n".join(messages)
    return f"Field '{name}' errors: {lines} [value={value}]"
