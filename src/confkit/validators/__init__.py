"""Validator functions and chain helpers for the confkit package."""

from .core import (
    ValidatorFn,
    ValidatorResult,
    run_chain,
    type_id_of,
    type_validator,
    validation_error,
)
from .string import (
    STRING_ATTRIBUTES,
    STRING_VALIDATORS,
    check_string_attributes,
    maxlen_validator,
    pattern_validator,
)

__all__ = [
    "ValidatorFn",
    "ValidatorResult",
    "run_chain",
    "type_id_of",
    "type_validator",
    "validation_error",
    "maxlen_validator",
    "pattern_validator",
    "STRING_ATTRIBUTES",
    "STRING_VALIDATORS",
    "check_string_attributes",
]
