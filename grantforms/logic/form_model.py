"""FormModel facade.

`build_form_model()` resolves the active shape, builds the composite schema,
validates, computes progress and exposes navigation, all from one answer set.
A FormModel is a snapshot: build a new one whenever the answers change.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from grantforms.errors import UnknownPositionError
from grantforms.logic.formatters import display_value
from grantforms.logic.localisation import normalise_locale, resolve_text
from grantforms.logic.pagination import (
    next_position,
    page_link,
    position_for,
    previous_position,
)
from grantforms.logic.progress import calculate_progress
from grantforms.logic.schema_aggregator import build_composite_schema
from grantforms.logic.shape_resolver import freeze_answers, resolve_active_shape
from grantforms.logic.validator import validate_answers
from grantforms.models.active_shape import ActiveField, ActiveSection, ActiveStep
from grantforms.models.form_definition import FormContext, FormDefinition
from grantforms.models.navigation import PageLink, Position
from grantforms.models.validation import FieldMessage, ValidationResult

logger = logging.getLogger(__name__)


class FormModel:
    """Read-only view of one form for one answer set."""

    def __init__(
        self,
        definition: FormDefinition,
        locale: str | None,
        answers: Mapping[str, Any] | None,
        context: FormContext | None = None,
    ) -> None:
        self.definition = definition
        self.locale = normalise_locale(locale)
        self.context = context or FormContext()
        self.answers = freeze_answers(answers)
        self.title = resolve_text(definition.title, self.answers, self.locale) or definition.id

        shape = resolve_active_shape(definition, self.answers, self.locale)
        self.schema = build_composite_schema(definition.all_fields, self.answers)
        self.validation: ValidationResult = validate_answers(
            definition.all_fields,
            self.answers,
            self.locale,
            definition.featured_errors_allow_list,
            schema=self.schema,
        )
        sections, self.progress = calculate_progress(shape, self.validation, self.locale)
        featured_fields = {m.field_name for m in self.validation.featured_messages}
        self.active_sections: tuple[ActiveSection, ...] = tuple(
            s.model_copy(update={"has_featured_errors": bool(featured_fields & set(s.field_names))})
            for s in sections
        )

    @property
    def sections(self) -> tuple[ActiveSection, ...]:
        return self.active_sections

    @property
    def summary(self) -> dict[str, Any]:
        if self.definition.summary is None:
            return {}
        return self.definition.summary(self.validation.value, self.locale)

    # -- lookups -----------------------------------------------------------

    def get_section(self, slug: str) -> ActiveSection:
        for section in self.active_sections:
            if section.slug == slug:
                return section
        raise UnknownPositionError(f"unknown_section slug={slug}")

    def get_step(self, slug: str, step_number: int) -> ActiveStep:
        """Return a step by its 1-based number within the section."""
        section = self.get_section(slug)
        if not 1 <= step_number <= len(section.steps):
            raise UnknownPositionError(f"unknown_step slug={slug} number={step_number}")
        return section.steps[step_number - 1]

    def fields_for_step(self, slug: str, step_number: int) -> tuple[ActiveField, ...]:
        return self.get_step(slug, step_number).fields

    def errors_for_step(self, slug: str, step_number: int) -> tuple[FieldMessage, ...]:
        names = {f.name for f in self.fields_for_step(slug, step_number)}
        return tuple(m for m in self.validation.messages if m.field_name in names)

    def errors_by_step(self) -> list[dict[str, Any]]:
        grouped: list[dict[str, Any]] = []
        for section in self.active_sections:
            for step in section.steps:
                names = {f.name for f in step.fields}
                errors = [m for m in self.validation.messages if m.field_name in names]
                if errors:
                    grouped.append(
                        {"section": section.slug, "step": step.title, "slug": step.slug, "errors": errors}
                    )
        return grouped

    def full_summary(self) -> list[dict[str, Any]]:
        """Label and display value of every active field that has a sanitised value."""
        value = self.validation.value
        out: list[dict[str, Any]] = []
        for section in self.active_sections:
            rows = []
            for field in section.fields:
                shown = display_value(field, value.get(field.name), self.locale)
                if shown is not None:
                    rows.append({"name": field.name, "label": field.label, "value": shown})
            out.append({"slug": section.slug, "title": section.title, "rows": rows})
        return out

    # -- navigation --------------------------------------------------------

    def position_for(self, slug: str, step_number: int | None = None) -> Position:
        return position_for(self.active_sections, slug, step_number)

    def next_position(self, position: Position) -> Position:
        return next_position(self.active_sections, position)

    def previous_position(self, position: Position) -> Position:
        return previous_position(self.active_sections, position, self.definition.before_start)

    def page_link(self, position: Position, base_url: str) -> PageLink:
        return page_link(self.active_sections, position, base_url, self.locale)

    def pagination(self, position: Position, base_url: str) -> dict[str, PageLink]:
        return {
            "previous": self.page_link(self.previous_position(position), base_url),
            "next": self.page_link(self.next_position(position), base_url),
        }

    # -- submission --------------------------------------------------------

    def for_submission(self) -> dict[str, Any]:
        """Reshape the sanitised answers for the downstream submission collaborator."""
        value = dict(self.validation.value)
        if self.definition.for_submission is None:
            return value
        return self.definition.for_submission(value)

    def validate_terms(self, answers: Mapping[str, Any] | None) -> ValidationResult:
        terms = {f.name: f for f in self.definition.terms_fields}
        return validate_answers(terms, answers, self.locale)


def build_form_model(
    definition: FormDefinition,
    locale: str | None,
    answers: Mapping[str, Any] | None,
    context: FormContext | None = None,
) -> FormModel:
    return FormModel(definition, locale, answers, context)


__all__ = ["FormModel", "build_form_model"]
