"""
Parsing of declarative field-spec literals.

A field spec is a plain tuple of one or two positional elements, optionally
followed by a dict of keyed options:

    ("debug", "Severity level")                       # default + description
    ("An optional tag", {"type": "string"})           # description only
    ("info", "Severity", {"hook": to_number, "type": "number"})

Parsing goes through these steps:

1. `is_field_spec` decides whether a literal describes a field at all;
   anything else is raw data and `parse` returns None.
2. `parse` turns the literal into an options dict for the `Field`
   constructor.
3. The constructor applies defaults, validates and returns the live field.
"""

import textwrap
from collections.abc import Mapping
from typing import Any

from loguru import logger

from .constants import Behaviour
from .types import TypeRegistry
from .types import registry as default_registry
from .validators import type_id_of

# Keys copied verbatim from the keyed options into the field options
_PASSTHROUGH_KEYS = ("value", "hook", "context", "fallback")


def split_spec(spec: tuple) -> tuple[tuple, dict[str, Any]]:
    """Split a spec literal into its positional part and its keyed options."""
    if spec and type(spec[-1]) is dict:
        return spec[:-1], spec[-1]
    return spec, {}


def is_field_spec(candidate: Any) -> bool:
    """
    Return True if `candidate` is a field-spec literal.

    The candidate must be a plain tuple (not a subclass), hold one or two
    positional elements with a string description last, and, when only the
    description is given, carry either a ``type`` or a ``value`` key.

    Examples
    --------
        >>> is_field_spec(("value", "description"))
        True
        >>> is_field_spec(("description", {"type": "string"}))
        True
        >>> is_field_spec(("description",))
        False
        >>> is_field_spec(["value", "description"])
        False
    """
    if type(candidate) is not tuple:
        return False

    positional, keyed = split_spec(candidate)
    if len(positional) not in (1, 2):
        return False
    if not isinstance(positional[-1], str):
        return False
    if len(positional) == 1:
        if keyed.get("type") is None and keyed.get("value") is None:
            return False
    return True


def normalize_description(text: Any) -> Any:
    """Dedent a (multi-line) description and trim every line."""
    if not isinstance(text, str):
        return text
    lines = [line.strip() for line in textwrap.dedent(text).splitlines()]
    return "\n".join(lines).strip()


def parse_attributes(
    field_type_id: Any, keyed: Mapping[str, Any], registry: TypeRegistry
) -> dict[str, Any]:
    """Collect the keyed options that the field type declares as attributes."""
    attributes: dict[str, Any] = dict(keyed.get("attributes") or {})
    if not registry.is_valid_type(field_type_id):
        return attributes

    field_type = registry.get(field_type_id)
    for key, value in keyed.items():
        if key in field_type.attributes:
            attributes[key] = value
    return attributes


def parse(
    name: str, spec: Any, registry: TypeRegistry | None = None
) -> dict[str, Any] | None:
    """
    Parse a field-spec literal into constructor options.

    Parameters
    ----------
    name : str
        Key of the field in its schema.
    spec : Any
        The candidate literal.
    registry : TypeRegistry, optional
        Registry used to resolve type attributes. Defaults to the module-level
        registry.

    Returns
    -------
    dict[str, Any] | None
        Options for `Field`, or None when `spec` is not a field spec. None is
        a classification result, not an error.

    Examples
    --------
        >>> options = parse("severity", ("debug", "severity level"))
        >>> options["default"], options["description"], options["type"]
        ('debug', 'severity level', 'string')
    """
    if not is_field_spec(spec):
        logger.debug(f"spec.parse: key='{name}' is not a field spec")
        return None

    registry = registry or default_registry
    positional, keyed = split_spec(spec)

    options: dict[str, Any] = {"name": name, "behaviour": Behaviour.DEFAULT}
    for key in _PASSTHROUGH_KEYS:
        options[key] = keyed.get(key)

    if len(positional) == 1:
        options["default"] = None
        options["behaviour"] = Behaviour.OPTIONAL
        options["description"] = positional[0]
    else:
        options["default"] = positional[0]
        if positional[0] is None:
            options["behaviour"] = Behaviour.OPTIONAL
        options["description"] = positional[1]

    if keyed.get("readonly"):
        options["behaviour"] |= Behaviour.READONLY

    type_from = options["value"] if options["value"] is not None else options["default"]
    if keyed.get("type") is not None:
        options["type"] = keyed["type"]
    elif type_from is not None:
        options["type"] = type_id_of(type_from)
    else:
        options["type"] = None

    options["attributes"] = parse_attributes(options["type"], keyed, registry)
    options["description"] = normalize_description(options["description"])

    logger.debug(
        f"spec.parse: name='{name}' positional={len(positional)} "
        f"behaviour={options['behaviour']!r} default={options['default']!r} "
        f"value={options['value']!r} type='{options['type']}'"
    )
    return options
