"""Validate an answer set against the composite schema."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from grantforms.logic.error_normaliser import normalise_errors, select_featured
from grantforms.logic.rules import MISSING, ObjectSchema
from grantforms.logic.schema_aggregator import build_composite_schema
from grantforms.logic.shape_resolver import freeze_answers
from grantforms.models.form_definition import FeaturedError, FieldDefinition
from grantforms.models.validation import ValidationResult

logger = logging.getLogger(__name__)


def validate_answers(
    all_fields: Mapping[str, FieldDefinition],
    answers: Mapping[str, Any] | None,
    locale: str = "en",
    featured_allow_list: Sequence[FeaturedError] = (),
    schema: ObjectSchema | None = None,
) -> ValidationResult:
    """Collect every failure, strip unknown keys, and normalise the failures into messages.

    `value` only ever contains catalog fields. `is_valid` requires both no raw
    failures and no messages.
    """
    frozen = freeze_answers(answers)
    composite = schema if schema is not None else build_composite_schema(all_fields, frozen)
    outcome = composite.validate(dict(frozen), frozen, ())
    value = outcome.value if outcome.value is not MISSING else {}
    errors = outcome.errors or None
    messages = normalise_errors(errors, all_fields, locale, frozen)
    if errors:
        logger.debug("answers_invalid failures=%s messages=%s", len(errors), len(messages))
    return ValidationResult(
        value=value,
        error=errors,
        is_valid=errors is None and not messages,
        messages=messages,
        featured_messages=select_featured(messages, featured_allow_list),
    )


__all__ = ["validate_answers"]
