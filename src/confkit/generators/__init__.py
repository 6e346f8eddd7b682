"""Generators exporting schemas to other frameworks."""

from .polars import schema_to_frame
from .pydantic import create_pydantic_model

__all__ = [
    "create_pydantic_model",
    "schema_to_frame",
]
