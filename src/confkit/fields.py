"""The `Field` value container with default, override, hook and fallback semantics."""

import copy
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from .constants import UNSET, Behaviour
from .errors import ConstructionError, ReadOnlyFieldError, ValidationError
from .spec import parse as parse_spec
from .types import TypeRegistry
from .types import registry as default_registry
from .validators import check_string_attributes, run_chain, type_id_of, validation_error

HookFn = Callable[[Any], Any]


@dataclass
class FallbackContext:
    """Holds the field a FALLBACK field reads its default from."""

    target: "Field"


def validate_base(options: Mapping[str, Any], registry: TypeRegistry) -> list[str]:
    """
    Check the structural rules every field must satisfy.

    Rules are evaluated in a fixed order (name, description, type, hook,
    context, fallback path, attributes) so aggregated messages are stable.

    Returns
    -------
    list[str]
        One message per violated rule; empty when the options are valid.
    """
    field_type = options.get("type")
    hook = options.get("hook")
    context = options.get("context")
    fallback = options.get("fallback")
    behaviour = options.get("behaviour", Behaviour.DEFAULT)

    if context is None:
        context_valid = not behaviour & Behaviour.FALLBACK
    else:
        context_valid = isinstance(context, FallbackContext) and isinstance(
            context.target, Field
        )

    checks = [
        (isinstance(options.get("name"), str), "field name must be a string"),
        (
            isinstance(options.get("description"), str),
            "field description must be a string",
        ),
        (
            registry.is_valid_type(field_type),
            f"field type '{field_type}' is invalid",
        ),
        (hook is None or callable(hook), "field hook must be callable"),
        (context_valid, "field context.target must be a Field"),
        (
            fallback is None or isinstance(fallback, str),
            "field fallback must be a dotted path string",
        ),
    ]
    errors = [message for valid, message in checks if not valid]

    attributes = options.get("attributes")
    if attributes is not None and not isinstance(attributes, Mapping):
        errors.append("field attributes must be a mapping")
    elif attributes:
        errors.extend(check_string_attributes(attributes))
    return errors


class Field:
    """
    A named, typed and validated configuration value.

    A field resolves its value from an explicit override, its default, or,
    when flagged FALLBACK, the current value of another field. An optional
    hook transforms the resolved value on read.

    Parameters
    ----------
    options : Mapping[str, Any], optional
        Constructor options: ``name``, ``description`` (both required),
        ``type``, ``default``, ``value``, ``behaviour``, ``hook``,
        ``attributes``, ``context`` and ``fallback``.
    registry : TypeRegistry, optional
        Registry used to resolve ``type``. Defaults to the module registry.
    **kwargs
        Merged over `options`.

    Raises
    ------
    ConstructionError
        If `options` is not a mapping.
    ValidationError
        If a base rule or a type validator fails.

    Examples
    --------
        >>> from confkit import Field
        >>> field = Field({"name": "retries", "description": "Retry count", "default": 3})
        >>> field.value
        3
        >>> field.value = 5
        >>> field.value
        5
        >>> field.value = None
        >>> field.value
        3
    """

    FIELD_BEHAVIOUR = Behaviour
    UNSET = UNSET

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        registry: TypeRegistry | None = None,
        **kwargs: Any,
    ):
        if options is None:
            options = {}
        if not isinstance(options, Mapping):
            raise ConstructionError(
                "Field options must be a mapping with "
                f"{{name, description, type, default, value}}. got={options!r}"
            )

        self._registry = registry or default_registry
        self._lock = threading.RLock()

        opts = self.apply_defaults({**options, **kwargs})

        errors = validate_base(opts, self._registry)
        if errors:
            raise ValidationError(
                validation_error(opts.get("name"), opts.get("value"), errors),
                field_name=opts.get("name"),
                value=opts.get("value"),
                errors=errors,
            )

        self.name: str = opts["name"]
        self.description: str = opts["description"]
        self.type: str = opts["type"]
        self.behaviour = Behaviour(opts["behaviour"])
        self.hook: HookFn | None = opts.get("hook")
        self.attributes: dict[str, Any] = dict(opts.get("attributes") or {})
        self.context: FallbackContext | None = opts.get("context")
        self.fallback: str | None = opts.get("fallback")

        self._default = opts.get("default")
        value = opts.get("value")
        self._value = UNSET if value is None else value

        self.validate()

    @staticmethod
    def apply_defaults(options: dict[str, Any]) -> dict[str, Any]:
        """Fill in behaviour, type, optional flag and context before validation."""
        behaviour = options.get("behaviour")
        if not isinstance(behaviour, int) or isinstance(behaviour, bool):
            behaviour = Behaviour.DEFAULT
        behaviour = Behaviour(behaviour)

        value = options.get("value")
        default = options.get("default")
        if value is None and default is None:
            behaviour |= Behaviour.OPTIONAL
        options["behaviour"] = behaviour

        if options.get("type") is None:
            type_from = value if value is not None else default
            if type_from is not None:
                options["type"] = type_id_of(type_from)

        context = options.get("context")
        if isinstance(context, Mapping):
            options["context"] = FallbackContext(target=context.get("target"))  # type: ignore[arg-type]

        return options

    @classmethod
    def parse(
        cls, name: str, spec: Any, registry: TypeRegistry | None = None
    ) -> "Field | None":
        """
        Build a field from a spec literal, or return None if it is not one.

        Examples
        --------
            >>> field = Field.parse("severity", ("debug", "severity level"))
            >>> field.default, field.description
            ('debug', 'severity level')
            >>> Field.parse("x", ("desc only",)) is None
            True
        """
        options = parse_spec(name, spec, registry)
        if options is None:
            return None
        return cls(options, registry=registry)

    @property
    def default(self) -> Any:
        """The default value, or the fallback target's current value."""
        if self.has_flag(Behaviour.FALLBACK):
            assert self.context is not None  # Checked by validate_base
            return self.context.target.value
        return self._default

    @default.setter
    def default(self, default: Any) -> None:
        self._ensure_writable()
        with self._lock:
            previous = self._default
            self._default = default
            try:
                self.validate()
            except Exception:
                self._default = previous
                raise

    @property
    def value(self) -> Any:
        """The effective value: override, else default or fallback, then hooked."""
        unset = self._value is UNSET
        raw = self.default if unset else self._value

        if self.hook is not None:
            # The fallback target already applied its own hook
            if not (self.has_flag(Behaviour.FALLBACK) and unset):
                return self.hook(raw)
        return raw

    @value.setter
    def value(self, value: Any) -> None:
        self._ensure_writable()
        with self._lock:
            previous = self._value
            self._value = UNSET if value is None else value
            try:
                self.validate()
            except Exception:
                self._value = previous
                raise
        logger.debug(f"Field.value: '{self.name}' set to {self._value!r}")

    @value.deleter
    def value(self) -> None:
        self.value = None

    @property
    def is_set(self) -> bool:
        """True if an explicit override is stored."""
        return self._value is not UNSET

    @property
    def is_optional(self) -> bool:
        return self.has_flag(Behaviour.OPTIONAL)

    def reset(self) -> None:
        """Drop the override so the value reverts to default or fallback."""
        self.value = None

    def validate(self) -> bool:
        """
        Run the type's validator chain against the current value.

        Raises
        ------
        ValidationError
            Listing every violated rule, including validators or hooks that
            raised.
        """
        field_type = self._registry.get(self.type)
        ok, messages = run_chain(self, field_type.validators)
        if not ok:
            try:
                value = self.value
            except Exception:
                # The hook failure is already in messages; report the raw value
                value = self.default if self._value is UNSET else self._value
            raise ValidationError(
                validation_error(self.name, value, messages),
                field_name=self.name,
                value=value,
                errors=messages,
            )
        return True

    def has_flag(self, flag: Behaviour | int) -> bool:
        """
        Return True if `flag` is set. ``DEFAULT`` matches only when no flag is set.

        Examples
        --------
            >>> field = Field.parse("tag", ("A tag", {"type": "string"}))
            >>> field.has_flag(Behaviour.OPTIONAL)
            True
        """
        if flag == Behaviour.DEFAULT:
            return self.behaviour == Behaviour.DEFAULT
        return (self.behaviour & flag) == flag

    def set_flag(self, flag: Behaviour | int) -> None:
        self.behaviour = Behaviour(self.behaviour | flag)

    def clear_flag(self, flag: Behaviour | int) -> None:
        self.behaviour = Behaviour(int(self.behaviour) & ~int(flag))

    def set_fallback(self, target: "Field") -> None:
        """
        Delegate this field's default to the live value of `target`.

        Raises
        ------
        ValidationError
            If `target` is not a field, is this field, would create a fallback
            cycle, or its value does not satisfy this field's type.
        """
        errors: list[str] = []
        if not isinstance(target, Field):
            errors.append("field context.target must be a Field")
        elif target is self or self in _fallback_chain(target):
            errors.append(f"fallback to '{target.name}' would create a cycle")
        if errors:
            raise ValidationError(
                validation_error(self.name, self._value, errors),
                field_name=self.name,
                value=self._value,
                errors=errors,
            )

        with self._lock:
            previous = (self.behaviour, self.context)
            self.set_flag(Behaviour.FALLBACK)
            self.context = FallbackContext(target=target)
            try:
                self.validate()
            except Exception:
                self.behaviour, self.context = previous
                raise
        logger.debug(
            f"Field.set_fallback: routed '{self.name}' to '{target.name}' "
            f"behaviour={self.behaviour!r}"
        )

    def clone(self, memo: dict | None = None) -> "Field":
        """
        Copy this field with independent default, override and attributes.

        The fallback context still points at the original target; callers
        copying whole trees re-link it.
        """
        new = object.__new__(type(self))
        new.__dict__.update(self.__dict__)
        new._lock = threading.RLock()
        new._default = copy.deepcopy(self._default, memo)
        new._value = copy.deepcopy(self._value, memo)
        new.attributes = copy.deepcopy(self.attributes, memo)
        if self.context is not None:
            new.context = FallbackContext(target=self.context.target)
        return new

    def __deepcopy__(self, memo: dict) -> "Field":
        new = self.clone(memo)
        memo[id(self)] = new
        return new

    def _ensure_writable(self) -> None:
        if self.has_flag(Behaviour.READONLY):
            message = validation_error(self.name, self.value, ["field is readonly"])
            raise ReadOnlyFieldError(
                message, field_name=self.name, value=self.value, errors=["field is readonly"]
            )

    def __repr__(self) -> str:
        return (
            f"Field(name={self.name!r}, type={self.type!r}, "
            f"behaviour={self.behaviour!r}, value={self.value!r})"
        )


def _fallback_chain(field: Field) -> list[Field]:
    """Return the fields `field` reads through via FALLBACK links."""
    chain: list[Field] = []
    current = field
    while current.has_flag(Behaviour.FALLBACK) and current.context is not None:
        current = current.context.target
        if current in chain:
            break
        chain.append(current)
    return chain


def has_flag(field: Field, flag: Behaviour | int) -> bool:
    """Function form of `Field.has_flag`."""
    return field.has_flag(flag)


def set_flag(field: Field, flag: Behaviour | int) -> None:
    """Function form of `Field.set_flag`."""
    field.set_flag(flag)


def set_fallback(field: Field, target: Field) -> None:
    """Function form of `Field.set_fallback`."""
    field.set_fallback(target)
