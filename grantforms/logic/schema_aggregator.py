"""Composite schema aggregation.

The composite schema covers every field in the catalog, visible or not.
Hidden fields are kept because their own conditional schemas are what strip
or relax their data.
"""

from __future__ import annotations

from typing import Any, Mapping

from grantforms.logic.rules import ObjectSchema, Schema, object_of
from grantforms.models.form_definition import FieldDefinition, MessageSpec


def resolve_field_schema(field: FieldDefinition, answers: Mapping[str, Any]) -> Schema:
    """Return the field's schema, calling it with `answers` when it is a factory."""
    schema = field.field_schema
    if not isinstance(schema, Schema) and callable(schema):
        schema = schema(answers)
    if not isinstance(schema, Schema):
        raise TypeError(f"field_schema_invalid field={field.name} got={type(schema).__name__}")
    return schema


def build_composite_schema(all_fields: Mapping[str, FieldDefinition], answers: Mapping[str, Any]) -> ObjectSchema:
    return object_of({name: resolve_field_schema(field, answers) for name, field in all_fields.items()})


def messages_by_field(all_fields: Mapping[str, FieldDefinition]) -> dict[str, tuple[MessageSpec, ...]]:
    return {name: tuple(field.messages) for name, field in all_fields.items()}


__all__ = ["resolve_field_schema", "build_composite_schema", "messages_by_field"]
