"""Startup-time validation of static form definitions.

Two layers run on every definition before it is served:

- a JSON Schema (Draft 2020-12) check of the definition's skeleton, covering
  required attributes, the closed set of field types and message shapes;
- structural checks the schema cannot express: unique field names, steps
  referencing only catalog fields, unique section slugs, multipart steps
  holding only flat-valued fields, and a featured-errors allow-list naming
  known fields.

Any problem raises `FormDefinitionError`; callers must refuse to serve the
form.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from grantforms.errors import FormDefinitionError
from grantforms.models.field_types import NON_FLAT_FIELD_TYPES
from grantforms.models.form_definition import FieldDefinition, FormDefinition, LocaleText

logger = logging.getLogger(__name__)

META_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "form_definition.schema.json"

# Stand-in for text computed from answers; it cannot be checked statically
CONDITIONAL_TEXT = "<conditional>"


@lru_cache(maxsize=1)
def load_meta_schema() -> dict:
    with META_SCHEMA_PATH.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def _text(value: LocaleText | None) -> Any:
    if callable(value):
        return CONDITIONAL_TEXT
    return value


def _field_skeleton(field: FieldDefinition) -> dict:
    return {
        "name": field.name,
        "type": field.type,
        "label": _text(field.label),
        "has_schema": field.field_schema is not None,
        "messages": [{"type": m.type, "key": m.key, "message": m.message} for m in field.messages],
    }


def definition_skeleton(definition: FormDefinition) -> dict:
    """Plain-data view of a definition for meta-schema validation."""
    return {
        "id": definition.id,
        "title": _text(definition.title),
        "schema_version": definition.schema_version,
        "before_start": definition.before_start,
        "sections": [
            {
                "slug": section.slug,
                "title": _text(section.title),
                "has_introduction": section.introduction is not None,
                "steps": [
                    {
                        "title": _text(step.title),
                        "is_multipart": step.is_multipart,
                        "has_pre_flight_check": step.pre_flight_check is not None,
                        "fieldsets": [{"fields": [f.name for f in fs.fields]} for fs in step.fieldsets],
                    }
                    for step in section.steps
                ],
            }
            for section in definition.sections
        ],
        "all_fields": [_field_skeleton(f) for f in definition.all_fields.values()],
        "terms_fields": [_field_skeleton(f) for f in definition.terms_fields],
        "featured_errors_allow_list": [
            {"field_name": item.field_name, "include_base": item.include_base}
            for item in definition.featured_errors_allow_list
        ],
    }


def _schema_problems(skeleton: dict) -> list[str]:
    validator = Draft202012Validator(load_meta_schema())
    problems = []
    for error in sorted(validator.iter_errors(skeleton), key=lambda e: list(e.absolute_path)):
        location = "/".join(str(p) for p in error.absolute_path) or "<root>"
        problems.append(f"{location}: {error.message}")
    return problems


def _structural_problems(definition: FormDefinition) -> list[str]:
    problems: list[str] = []
    catalog = definition.all_fields

    for key, field in catalog.items():
        if key != field.name:
            problems.append(f"catalog key '{key}' does not match field name '{field.name}'")

    slug_counts = Counter(section.slug for section in definition.sections)
    for slug, count in slug_counts.items():
        if count > 1:
            problems.append(f"duplicate section slug '{slug}'")

    placements: Counter[str] = Counter()
    for section in definition.sections:
        for number, step in enumerate(section.steps, start=1):
            where = f"{section.slug}/{number}"
            for fieldset in step.fieldsets:
                for field in fieldset.fields:
                    placements[field.name] += 1
                    if catalog.get(field.name) is not field:
                        problems.append(f"step {where} references field '{field.name}' missing from the catalog")
                    if step.is_multipart and field.type in NON_FLAT_FIELD_TYPES:
                        problems.append(
                            f"multipart step {where} contains field '{field.name}' of non-flat type '{field.type}'"
                        )
    for name, count in placements.items():
        if count > 1:
            problems.append(f"duplicate field name '{name}' used in {count} places")

    term_names = Counter(f.name for f in definition.terms_fields)
    for name, count in term_names.items():
        if count > 1:
            problems.append(f"duplicate terms field '{name}'")
        if name in catalog:
            problems.append(f"terms field '{name}' also appears in the field catalog")

    for item in definition.featured_errors_allow_list:
        if item.field_name not in catalog:
            problems.append(f"featured error field '{item.field_name}' missing from the catalog")
    return problems


def definition_smells(definition: FormDefinition) -> list[str]:
    """Fields whose requiredness predicate is the very same callable as their visibility predicate."""
    smells = []
    for field in definition.all_fields.values():
        if field.should_show is not None and callable(field.is_required) and field.is_required is field.should_show:
            smells.append(field.name)
    return smells


def validate_form_definition(definition: FormDefinition) -> None:
    """Raise FormDefinitionError if `definition` must not be served."""
    problems = _schema_problems(definition_skeleton(definition)) + _structural_problems(definition)
    if problems:
        logger.error("form_definition_invalid form_id=%s problems=%s", definition.id, len(problems))
        raise FormDefinitionError(definition.id, problems)
    for name in definition_smells(definition):
        logger.warning("form_definition_smell form_id=%s field=%s reason=visibility_is_requiredness", definition.id, name)
    logger.info("form_definition_valid form_id=%s fields=%s", definition.id, len(definition.all_fields))


__all__ = [
    "META_SCHEMA_PATH",
    "CONDITIONAL_TEXT",
    "load_meta_schema",
    "definition_skeleton",
    "definition_smells",
    "validate_form_definition",
]
