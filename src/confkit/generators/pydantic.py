"""Pydantic model generator mirroring a schema tree."""

from typing import TYPE_CHECKING, Any, Optional, Union

from loguru import logger
from pydantic import BaseModel, create_model
from pydantic import Field as PydanticField

from ..constants import Behaviour, KeyType

if TYPE_CHECKING:  # pragma: no cover
    from ..fields import Field
    from ..schema import Schema

_TYPE_MAP: dict[str, Any] = {
    "string": str,
    "number": Union[int, float],
    "boolean": bool,
    "table": Any,
}


def _is_reserved(key: str) -> bool:
    """True for keys pydantic cannot use as field names on a BaseModel."""
    return key.startswith("model_") or hasattr(BaseModel, key)


def _nested_model_name(key: str) -> str:
    return "".join(part.capitalize() for part in key.split("_") if part) + "Model"


def _field_definition(field: "Field") -> tuple[Any, Any]:
    """Return the ``(type, FieldInfo)`` pair for one confkit field."""
    python_type = _TYPE_MAP.get(field.type, Any)
    if field.is_optional and python_type is not Any:
        python_type = Optional[python_type]

    field_kwargs: dict[str, Any] = {
        "default": field.value,
        "description": field.description,
    }
    if field.has_flag(Behaviour.READONLY):
        field_kwargs["frozen"] = True

    # String attributes map onto Pydantic's own constraints
    if field.type == "string":
        if field.attributes.get("maxlen") is not None:
            field_kwargs["max_length"] = field.attributes["maxlen"]
        if field.attributes.get("pattern") is not None:
            field_kwargs["pattern"] = field.attributes["pattern"]

    return python_type, PydanticField(**field_kwargs)


def create_pydantic_model(
    schema: "Schema", model_name: str | None = None
) -> type[BaseModel]:
    """
    Generate a Pydantic BaseModel from a schema.

    Fields become model fields whose defaults are the fields' current
    effective values; nested schemas become nested models. Raw entries,
    private (underscore) keys and keys that clash with pydantic's own names
    (``model_*`` or any `BaseModel` attribute such as ``copy``) are skipped.

    Parameters
    ----------
    schema : Schema
        The schema to mirror.
    model_name : str, optional
        Name of the generated class. Defaults to ``"ConfigModel"``.

    Returns
    -------
    type[BaseModel]
        A dynamically created Pydantic BaseModel class.
    """
    model_name = model_name or "ConfigModel"
    pydantic_fields: dict[str, Any] = {}

    for key in schema.keys():
        if key.startswith("_"):
            logger.debug(f"create_pydantic_model: skipping private key '{key}'")
            continue
        if _is_reserved(key):
            logger.debug(f"create_pydantic_model: skipping key '{key}' reserved by pydantic")
            continue

        kind = schema.key_type(key)
        entry = schema[key]
        if kind is KeyType.FIELD:
            pydantic_fields[key] = _field_definition(entry)
        elif kind is KeyType.SCHEMA:
            nested = create_pydantic_model(entry, model_name=_nested_model_name(key))
            pydantic_fields[key] = (
                nested,
                PydanticField(default_factory=nested, description=entry.description),
            )
        else:
            logger.debug(f"create_pydantic_model: skipping raw entry '{key}'")

    # create_model is dynamically typed - returns type[BaseModel] at runtime
    model: type[BaseModel] = create_model(model_name, **pydantic_fields)  # type: ignore[call-overload]
    if schema.description:
        model.__doc__ = schema.description
    return model
