"""
confkit: Declarative Configuration Schemas

Describe your configuration once. Validate on every write. Fall back live.
"""

from . import types
from .constants import UNSET, Behaviour, KeyType
from .errors import (
    ConfkitError,
    ConstructionError,
    DuplicateTypeError,
    FallbackResolutionError,
    ReadOnlyFieldError,
    UnknownTypeError,
    ValidationError,
)
from .fields import FallbackContext, Field, has_flag, set_fallback, set_flag
from .schema import Schema, SchemaClass
from .traversal import NodePath
from .types import FieldType, TypeRegistry

__version__ = "0.1.0"

__all__ = [
    # Core
    "Field",
    "Schema",
    "SchemaClass",
    "Behaviour",
    "KeyType",
    "UNSET",
    # Types
    "types",
    "FieldType",
    "TypeRegistry",
    # Flags and fallback
    "has_flag",
    "set_flag",
    "set_fallback",
    "FallbackContext",
    "NodePath",
    # Errors
    "ConfkitError",
    "ConstructionError",
    "FallbackResolutionError",
    "ValidationError",
    "ReadOnlyFieldError",
    "UnknownTypeError",
    "DuplicateTypeError",
]
