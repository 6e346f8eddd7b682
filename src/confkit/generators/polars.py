"""Polars field listing for documentation and dump-style consumers."""

from typing import TYPE_CHECKING, Any

import polars as pl

from ..constants import Behaviour

if TYPE_CHECKING:  # pragma: no cover
    from ..fields import Field
    from ..schema import Schema
    from ..traversal import NodePath

FRAME_SCHEMA: dict[str, Any] = {
    "path": pl.Utf8,
    "name": pl.Utf8,
    "type": pl.Utf8,
    "description": pl.Utf8,
    "behaviour": pl.Int64,
    "optional": pl.Boolean,
    "fallback": pl.Boolean,
    "readonly": pl.Boolean,
    "value": pl.Utf8,
}


def schema_to_frame(schema: "Schema") -> pl.DataFrame:
    """
    List every field of a schema tree as a Polars DataFrame.

    Rows follow the schema's post-order walk. The ``value`` column holds the
    ``repr`` of each effective value since field values are heterogeneous.

    Parameters
    ----------
    schema : Schema
        The schema to list.

    Returns
    -------
    pl.DataFrame
        Columns as in `FRAME_SCHEMA`.

    Examples
    --------
        >>> from confkit import Schema
        >>> frame = Schema({"port": (8080, "Listen port")}).to_frame()
        >>> frame["path"].to_list()
        ['port']
    """
    rows: list[dict[str, Any]] = []

    def collect(path: "NodePath", field: "Field") -> None:
        rows.append(
            {
                "path": str(path),
                "name": field.name,
                "type": field.type,
                "description": field.description,
                "behaviour": int(field.behaviour),
                "optional": field.has_flag(Behaviour.OPTIONAL),
                "fallback": field.has_flag(Behaviour.FALLBACK),
                "readonly": field.has_flag(Behaviour.READONLY),
                "value": repr(field.value),
            }
        )

    schema.walk(collect)
    return pl.DataFrame(rows, schema=FRAME_SCHEMA)
