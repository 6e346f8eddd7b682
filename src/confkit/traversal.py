"""Ordered iteration helpers over schema trees."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable

from .constants import KeyType

if TYPE_CHECKING:  # pragma: no cover
    from .fields import Field
    from .schema import Schema


@dataclass(frozen=True)
class NodePath:
    """
    Location of a node: the dotted path of its parent plus its own key.

    Examples
    --------
        >>> str(NodePath("logger.default", "severity"))
        'logger.default.severity'
        >>> str(NodePath("", "version"))
        'version'
    """

    parent: str
    node_name: str

    def __str__(self) -> str:
        if not self.parent:
            return self.node_name
        return f"{self.parent}.{self.node_name}"


Visitor = Callable[[NodePath, "Field"], None]


def _join(parent: str, key: str) -> str:
    return f"{parent}.{key}" if parent else key


def walk_post_order(node: Schema, parent: str, fn: Visitor) -> None:
    """Visit nested schemas first, then the node's own fields, each in key order."""
    for key in node._order:
        if node._keys.get(key) is KeyType.SCHEMA:
            walk_post_order(node._values[key], _join(parent, key), fn)
    for key in node._order:
        if node._keys.get(key) is KeyType.FIELD:
            fn(NodePath(parent, key), node._values[key])


def walk_pre_order(node: Schema, parent: str, fn: Visitor) -> None:
    """Visit the node's own fields first, then descend into nested schemas."""
    for key in node._order:
        if node._keys.get(key) is KeyType.FIELD:
            fn(NodePath(parent, key), node._values[key])
    for key in node._order:
        if node._keys.get(key) is KeyType.SCHEMA:
            walk_pre_order(node._values[key], _join(parent, key), fn)


WALK_ORDERS: dict[str, Callable[[Schema, str, Visitor], None]] = {
    "post_order": walk_post_order,
    "pre_order": walk_pre_order,
}


def ordered_fields(node: Schema, keys: Iterable[str]) -> list[Field]:
    """Return the direct-child fields of `node` named by `keys`, in that order."""
    fields: list[Field] = []
    for key in keys:
        if node._keys.get(key) is KeyType.FIELD:
            fields.append(node._values[key])
    return fields
