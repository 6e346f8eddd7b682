"""Field type definitions and the type registry."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from .errors import DuplicateTypeError, UnknownTypeError
from .validators import (
    STRING_ATTRIBUTES,
    STRING_VALIDATORS,
    ValidatorFn,
    type_id_of,
    type_validator,
)


@dataclass(frozen=True)
class FieldType:
    """
    A named validation contract for fields.

    Parameters
    ----------
    id : str
        Unique identifier within a registry, e.g. ``"string"``.
    description : str
        Human-readable description, used by documentation consumers.
    validators : tuple[ValidatorFn, ...]
        Validators run in order against every value written to a field.
    attributes : frozenset[str]
        Names of extra spec keys this type understands (e.g. ``maxlen``).

    Examples
    --------
        >>> from confkit.types import get
        >>> get("string").attributes == frozenset({"maxlen", "pattern"})
        True
    """

    id: str
    description: str
    validators: tuple[ValidatorFn, ...] = ()
    attributes: frozenset[str] = field(default_factory=frozenset)


class TypeRegistry:
    """
    Registry mapping type ids to `FieldType` definitions.

    A new registry is always seeded with the base types ``string``,
    ``number``, ``boolean`` and ``table``. Types can be added with
    `register` but never removed or replaced.

    Examples
    --------
        >>> from confkit.types import TypeRegistry
        >>> registry = TypeRegistry()
        >>> registry.register(
        ...     "port",
        ...     "a TCP port number",
        ...     [lambda field: (0 < field.value < 65536, "port out of range")],
        ... )
        >>> registry.is_valid_type("port")
        True
    """

    BASE_TYPES = ("string", "number", "boolean", "table")

    def __init__(self) -> None:
        self._types: dict[str, FieldType] = {}
        for type_id in self.BASE_TYPES:
            validators: list[ValidatorFn] = [type_validator(type_id)]
            attributes: Iterable[str] = ()
            if type_id == "string":
                validators.extend(STRING_VALIDATORS)
                attributes = STRING_ATTRIBUTES
            self.register(
                type_id,
                f"basic {type_id} type",
                validators,
                {"attributes": attributes},
            )

    def register(
        self,
        id: str,
        description: str,
        validators: Iterable[ValidatorFn],
        options: Mapping[str, Any] | None = None,
    ) -> FieldType:
        """
        Register a new field type.

        Parameters
        ----------
        id : str
            The unique type id.
        description : str
            Description of the type.
        validators : Iterable[ValidatorFn]
            Validator chain run for fields of this type.
        options : Mapping, optional
            ``{"attributes": [...]}`` lists the field-spec keys forwarded to the
            field's attributes.

        Returns
        -------
        FieldType
            The registered type.

        Raises
        ------
        DuplicateTypeError
            If `id` is already registered.
        """
        if id in self._types:
            raise DuplicateTypeError(f"Field type '{id}': already registered")

        options = options or {}
        field_type = FieldType(
            id=id,
            description=description,
            validators=tuple(validators),
            attributes=frozenset(options.get("attributes") or ()),
        )
        self._types[id] = field_type
        logger.debug(f"types.register: registered field type '{id}'")
        return field_type

    def get(self, id: str) -> FieldType:
        """Return the `FieldType` for `id`, raising `UnknownTypeError` if absent."""
        try:
            return self._types[id]
        except (KeyError, TypeError) as e:
            raise UnknownTypeError(f"Field type '{id}': invalid field id") from e

    def is_valid_type(self, id: Any) -> bool:
        """Return True if `id` names a registered type. Never raises."""
        try:
            return id in self._types
        except TypeError:
            return False

    def ids(self) -> list[str]:
        """Return registered type ids in registration order."""
        return list(self._types)

    def __iter__(self) -> Iterator[FieldType]:
        return iter(list(self._types.values()))

    def __contains__(self, id: object) -> bool:
        return self.is_valid_type(id)

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"TypeRegistry({self.ids()!r})"

    # Registries are shared, never copied, when schemas are instanced
    def __copy__(self) -> "TypeRegistry":
        return self

    def __deepcopy__(self, memo: dict) -> "TypeRegistry":
        return self


# Default registry used when no explicit registry is passed
registry = TypeRegistry()


def register(
    id: str,
    description: str,
    validators: Iterable[ValidatorFn],
    options: Mapping[str, Any] | None = None,
) -> FieldType:
    """Register a type on the default registry. See `TypeRegistry.register`."""
    return registry.register(id, description, validators, options)


def get(id: str) -> FieldType:
    """Look up a type on the default registry."""
    return registry.get(id)


def is_valid_type(id: Any) -> bool:
    """Check a type id against the default registry."""
    return registry.is_valid_type(id)


__all__ = [
    "FieldType",
    "TypeRegistry",
    "registry",
    "register",
    "get",
    "is_valid_type",
    "type_id_of",
]
