"""Ordered, nestable schemas of fields, with fallback routing and class instancing."""

import copy
from collections.abc import Iterator, Mapping
from typing import Any

from loguru import logger

from .constants import Behaviour, KeyType
from .errors import ConstructionError, FallbackResolutionError
from .fields import FallbackContext, Field
from .traversal import WALK_ORDERS, NodePath, Visitor, ordered_fields
from .types import TypeRegistry
from .types import registry as default_registry


class Schema:
    """
    An ordered mapping of keys to fields, nested schemas or raw values.

    Every entry is classified on assignment: a field-spec literal becomes a
    `Field`, a `Schema` is nested as-is, and anything else is kept verbatim as
    raw (non-field) data.

    Parameters
    ----------
    entries : Mapping[str, Any], optional
        Keys and their spec literals, nested schemas or raw values.
    options : str | Mapping[str, Any], optional
        Either a description string, or a mapping with:

        - ``description``: description of this schema;
        - ``order``: explicit key order, used verbatim instead of sorting;
        - ``fallback``: ``{source_path: target_path}`` links to route once all
          entries are assigned;
        - ``strict``: raise `FallbackResolutionError` instead of skipping
          fallback links that do not resolve (default False).
    registry : TypeRegistry, optional
        Registry used to parse field types.

    Examples
    --------
    Nested schemas with a fallback link:

        >>> from confkit import Schema
        >>> levels = {"debug": 1, "info": 2}
        >>> config = Schema(
        ...     {
        ...         "version": ("1.0.0", "Schema version"),
        ...         "tag": ("An optional tag", {"type": "string"}),
        ...         "global": Schema(
        ...             {"severity": ("info", "Global severity", {"hook": levels.get, "type": "number"})},
        ...             "Global settings",
        ...         ),
        ...         "logger": Schema(
        ...             {"severity": ("Logger severity", {"hook": levels.get, "type": "number"})},
        ...         ),
        ...     },
        ...     {"fallback": {"logger.severity": "global.severity"}},
        ... )
        >>> config.get("logger.severity").value
        2
        >>> config({"version": "1.1.0"})
        >>> config.version.value
        '1.1.0'
    """

    KEY_TYPE = KeyType

    def __init__(
        self,
        entries: Mapping[str, Any] | None = None,
        options: str | Mapping[str, Any] | None = None,
        *,
        registry: TypeRegistry | None = None,
    ):
        if options is None:
            options = {}
        elif isinstance(options, str):
            options = {"description": options}
        if not isinstance(options, Mapping):
            raise ConstructionError(
                f"Schema options must be a description string or a mapping. got={options!r}"
            )
        if entries is not None and not isinstance(entries, Mapping):
            raise ConstructionError(f"Schema entries must be a mapping. got={entries!r}")

        order = options.get("order")
        self._registry = registry or default_registry
        self._keys: dict[str, KeyType] = {}
        self._values: dict[str, Any] = {}
        self._fixed_order = order is not None
        self._order: list[str] = list(order) if order is not None else []
        self.description: str | None = options.get("description")
        self.strict = bool(options.get("strict", False))

        for key, value in (entries or {}).items():
            self[key] = value

        if self._fixed_order:
            missing = [key for key in self._order if key not in self._values]
            if missing:
                raise ConstructionError(f"Schema order names unknown keys: {missing}")

        self.route_fallback_values(options.get("fallback") or {})

    # -- entry access -------------------------------------------------------

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise ConstructionError(f"Schema keys must be strings. got={key!r}")

        if key not in self._order:
            self._order.append(key)
            if not self._fixed_order:
                self._order.sort()

        field = Field.parse(key, value, registry=self._registry)
        if field is not None:
            self._keys[key] = KeyType.FIELD
            self._values[key] = field
        elif isinstance(value, Schema):
            self._keys[key] = KeyType.SCHEMA
            self._values[key] = value
        else:
            self._keys[key] = KeyType.NON_FIELD
            self._values[key] = value
        logger.debug(f"Schema.__setitem__: key='{key}' classified as {self._keys[key].name}")

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __getattr__(self, name: str) -> Any:
        # Only called when normal lookup fails; private names never map to entries
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' has no entry or attribute '{name}'"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self.__dict__.get("_values", {}) and name not in self.__dict__:
            raise AttributeError(
                f"cannot assign to schema entry '{name}' as an attribute; "
                f"use schema[{name!r}] = ... or schema.update(...)"
            )
        super().__setattr__(name, value)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._order))

    def __len__(self) -> int:
        return len(self._values)

    def keys(self) -> list[str]:
        """Keys in iteration order."""
        return list(self._order)

    def key_type(self, key: str) -> KeyType | None:
        """Classification of `key`, or None if absent."""
        return self._keys.get(key)

    def get(self, path: str) -> Any:
        """
        Look up an entry by dotted path.

        Descends through nested schemas and raw mappings. Returns None when a
        segment is missing or the path continues past a field.

        Examples
        --------
            >>> schema = Schema({"logger": Schema({"level": ("info", "Level")})})
            >>> schema.get("logger.level").value
            'info'
            >>> schema.get("logger.missing") is None
            True
        """
        if not isinstance(path, str) or not path:
            return None

        node: Any = self
        for segment in path.split("."):
            if isinstance(node, Schema):
                node = node._values.get(segment)
            elif isinstance(node, Mapping):
                node = node.get(segment)
            else:
                return None
            if node is None:
                return None
        return node

    # -- mutation -----------------------------------------------------------

    def update(self, data: Mapping[str, Any]) -> None:
        """
        Set the values of several fields at once.

        Nested schemas accept a nested mapping. Unknown keys and raw entries
        are logged and ignored; field validation errors propagate.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"Schema.update expects a mapping. got={data!r}")

        for key, value in data.items():
            kind = self._keys.get(key)
            if kind is KeyType.FIELD:
                logger.debug(f"Schema.update: setting value {value!r} for field '{key}'")
                self._values[key].value = value
            elif kind is KeyType.SCHEMA and isinstance(value, Mapping):
                self._values[key].update(value)
            else:
                logger.warning(f"Schema.update: no such field '{key}' to update")

    def __call__(self, data: Mapping[str, Any]) -> None:
        self.update(data)

    def route_fallback_values(self, fallback_map: Mapping[str, str]) -> None:
        """
        Wire FALLBACK links between fields of this tree.

        Fields declaring a ``fallback`` path in their spec are linked first,
        then every ``source_path -> target_path`` pair of `fallback_map`.
        Unresolvable pairs are skipped unless the schema is strict.
        """
        pending: list[tuple[NodePath, Field]] = []

        def collect(path: NodePath, field: Field) -> None:
            if field.fallback and not field.has_flag(Behaviour.FALLBACK):
                pending.append((path, field))

        self.walk(collect)
        for path, field in pending:
            target = self.get(field.fallback)  # type: ignore[arg-type]
            if isinstance(target, Field):
                field.set_fallback(target)
            else:
                # An enclosing schema may still resolve it
                logger.debug(
                    f"Schema.route_fallback_values: declared fallback '{field.fallback}' "
                    f"of '{path}' not resolved here"
                )

        for source_path, target_path in fallback_map.items():
            source = self.get(source_path)
            target = self.get(target_path)
            if not isinstance(source, Field) or not isinstance(target, Field):
                message = (
                    f"cannot route fallback '{source_path}' -> '{target_path}': "
                    "path does not resolve to a field"
                )
                if self.strict:
                    raise FallbackResolutionError(message)
                logger.debug(f"Schema.route_fallback_values: {message}, skipping")
                continue
            source.set_fallback(target)

    # -- traversal ----------------------------------------------------------

    def fields(self, order: list[str] | None = None) -> list[Field]:
        """
        Return the direct-child fields in key order.

        Nested schemas and raw entries are skipped. `order` overrides the
        schema's order; keys in it that are not fields are ignored.
        """
        return ordered_fields(self, self._order if order is None else order)

    def walk(self, visitor: Visitor, order: str = "post_order") -> None:
        """
        Call ``visitor(path, field)`` for every field in the tree.

        Parameters
        ----------
        visitor : Callable[[NodePath, Field], None]
            Receives the node path (``str(path)`` is the dotted path) and field.
        order : str, default "post_order"
            ``"post_order"`` visits nested schemas before a node's own fields;
            ``"pre_order"`` visits a node's own fields first.

        Raises
        ------
        ValueError
            If `order` is unknown.
        """
        try:
            walk_fn = WALK_ORDERS[order]
        except KeyError:
            raise ValueError(
                f"Unknown walk order '{order}'. Expected one of {sorted(WALK_ORDERS)}"
            ) from None
        walk_fn(self, "", visitor)

    # -- copying and instancing ---------------------------------------------

    def copy(self) -> "Schema":
        """
        Deep-copy the tree, including all field state.

        Fallback links between fields of this tree point into the copy;
        links to fields outside the tree keep their original target.
        """
        field_map: dict[int, Field] = {}
        new = self._clone(field_map, {})

        def relink(_path: NodePath, field: Field) -> None:
            if field.context is not None:
                target = field_map.get(id(field.context.target))
                if target is not None:
                    field.context = FallbackContext(target=target)

        new.walk(relink)
        return new

    def _clone(self, field_map: dict[int, Field], memo: dict) -> "Schema":
        new = object.__new__(type(self))
        new.__dict__.update(self.__dict__)
        new.__dict__["_keys"] = dict(self._keys)
        new.__dict__["_order"] = list(self._order)

        values: dict[str, Any] = {}
        for key, entry in self._values.items():
            kind = self._keys[key]
            if kind is KeyType.FIELD:
                values[key] = entry.clone(memo)
                field_map[id(entry)] = values[key]
            elif kind is KeyType.SCHEMA:
                values[key] = entry._clone(field_map, memo)
            else:
                values[key] = copy.deepcopy(entry, memo)
        new.__dict__["_values"] = values
        return new

    def __deepcopy__(self, memo: dict) -> "Schema":
        return self.copy()

    def create_class(self) -> "SchemaClass":
        """Return a factory producing independent copies of this schema."""
        return SchemaClass(self)

    # -- export -------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the effective values of the tree as nested dicts."""
        result: dict[str, Any] = {}
        for key in self._order:
            kind = self._keys[key]
            entry = self._values[key]
            if kind is KeyType.FIELD:
                result[key] = entry.value
            elif kind is KeyType.SCHEMA:
                result[key] = entry.to_dict()
            else:
                result[key] = entry
        return result

    def to_pydantic(self, model_name: str | None = None) -> type:
        """
        Generate a Pydantic BaseModel mirroring this schema.

        Returns
        -------
        type
            A dynamically created Pydantic BaseModel class.

        Examples
        --------
            >>> from confkit import Schema
            >>> schema = Schema({"port": (8080, "Listen port")})
            >>> Model = schema.to_pydantic("ServerConfig")
            >>> Model().port
            8080
        """
        from .generators.pydantic import create_pydantic_model

        return create_pydantic_model(self, model_name=model_name)

    def to_frame(self):
        """
        Generate a Polars DataFrame listing every field of the tree.

        Returns
        -------
        pl.DataFrame
            One row per field, in post-order walk order.
        """
        from .generators.polars import schema_to_frame

        return schema_to_frame(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={self._order!r}, description={self.description!r})"


class SchemaClass:
    """
    Factory creating independent instances of a schema.

    The schema is snapshotted when the class is created, so later changes to
    the source schema do not leak into new instances.

    Examples
    --------
        >>> from confkit import Schema
        >>> Config = Schema({"retries": (3, "Retry count")}).create_class()
        >>> first, second = Config.new(), Config.new()
        >>> first.retries.value = 10
        >>> second.retries.value
        3
    """

    def __init__(self, schema: Schema):
        self._template = schema.copy()
        self.description = schema.description

    def new(self, data: Mapping[str, Any] | None = None) -> Schema:
        """Return a fresh copy of the schema, optionally updated with `data`."""
        instance = self._template.copy()
        if data:
            instance.update(data)
        logger.debug(f"SchemaClass.new: created instance with keys {instance.keys()}")
        return instance

    def __call__(self, data: Mapping[str, Any] | None = None) -> Schema:
        return self.new(data)

    def __repr__(self) -> str:
        return f"SchemaClass(keys={self._template.keys()!r})"
