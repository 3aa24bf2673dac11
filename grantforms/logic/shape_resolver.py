"""Conditional shape resolution.

Turns a static `FormDefinition` plus the current answer set into the active
shape: fields failing `should_show` are dropped, fieldsets left empty are
dropped, and each step's `is_required` becomes "has at least one active
fieldset". Steps themselves are always kept so that step numbers in URLs
stay stable while answers change.

Resolution is a pure function of its inputs. Predicates receive a read-only
view of the answers, so absent keys read as None and nothing can be written
back.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from grantforms.logic.localisation import resolve_text
from grantforms.models.active_shape import (
    ActiveField,
    ActiveFieldset,
    ActiveOption,
    ActiveSection,
    ActiveStep,
)
from grantforms.models.form_definition import (
    AnswerPredicate,
    FieldDefinition,
    Fieldset,
    FormDefinition,
    Section,
    Step,
)

logger = logging.getLogger(__name__)


def freeze_answers(answers: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(answers or {}))


# ---------------------------------------------------------------------------
# Predicate helpers for field catalogs
# ---------------------------------------------------------------------------


def show_if_answer_in(field_name: str, values: Iterable[Any]) -> AnswerPredicate:
    """Visible only when the answer is one of `values`; an absent answer hides."""
    allowed = tuple(values)

    def _predicate(answers: Mapping[str, Any]) -> bool:
        value = answers.get(field_name)
        return value is not None and value in allowed

    return _predicate


def show_unless_answer_in(field_name: str, values: Iterable[Any]) -> AnswerPredicate:
    """Visible unless the answer is one of `values`; an absent answer shows."""
    excluded = tuple(values)

    def _predicate(answers: Mapping[str, Any]) -> bool:
        value = answers.get(field_name)
        return value is None or value not in excluded

    return _predicate


def answer_includes(field_name: str, value: Any) -> AnswerPredicate:
    """True when a multi-value (checkbox) answer contains `value`."""

    def _predicate(answers: Mapping[str, Any]) -> bool:
        current = answers.get(field_name)
        if current is None:
            return False
        if isinstance(current, (list, tuple, set, frozenset)):
            return value in current
        return current == value

    return _predicate


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def field_is_shown(field: FieldDefinition, answers: Mapping[str, Any]) -> bool:
    if field.should_show is None:
        return True
    return bool(field.should_show(answers))


def field_is_required(field: FieldDefinition, answers: Mapping[str, Any]) -> bool:
    if callable(field.is_required):
        return bool(field.is_required(answers))
    return bool(field.is_required)


def resolve_options(field: FieldDefinition, answers: Mapping[str, Any], locale: str) -> tuple[ActiveOption, ...]:
    raw = field.options(answers) if callable(field.options) else field.options
    active: list[ActiveOption] = []
    for option in raw or ():
        if option.show_when is not None and not option.show_when(answers):
            continue
        active.append(
            ActiveOption(
                value=option.value,
                label=resolve_text(option.label, answers, locale) or option.value,
                explanation=resolve_text(option.explanation, answers, locale),
            )
        )
    return tuple(active)


def resolve_field(field: FieldDefinition, answers: Mapping[str, Any], locale: str) -> ActiveField | None:
    if not field_is_shown(field, answers):
        return None
    return ActiveField(
        name=field.name,
        type=field.type,
        label=resolve_text(field.label, answers, locale) or field.name,
        explanation=resolve_text(field.explanation, answers, locale),
        options=resolve_options(field, answers, locale),
        is_required=field_is_required(field, answers),
        attributes=dict(field.attributes),
        value=answers.get(field.name),
    )


def resolve_fieldset(fieldset: Fieldset, answers: Mapping[str, Any], locale: str) -> ActiveFieldset | None:
    fields = tuple(f for f in (resolve_field(fd, answers, locale) for fd in fieldset.fields) if f is not None)
    if not fields:
        return None
    return ActiveFieldset(
        legend=resolve_text(fieldset.legend, answers, locale),
        introduction=resolve_text(fieldset.introduction, answers, locale),
        footer=resolve_text(fieldset.footer, answers, locale),
        fields=fields,
    )


def resolve_step(section: Section, step: Step, index: int, answers: Mapping[str, Any], locale: str) -> ActiveStep:
    title = resolve_text(step.title, answers, locale) or ""
    fieldsets = [fs for fs in (resolve_fieldset(f, answers, locale) for f in step.fieldsets) if fs is not None]
    # A lone untitled fieldset borrows the step title as its legend
    if len(fieldsets) == 1 and not fieldsets[0].legend:
        fieldsets[0] = fieldsets[0].model_copy(update={"legend": title})
    return ActiveStep(
        title=title,
        slug=f"{section.slug}/{index + 1}",
        index=index,
        fieldsets=tuple(fieldsets),
        is_required=len(fieldsets) > 0,
        is_multipart=step.is_multipart,
        message=resolve_text(step.message, answers, locale),
        pre_flight_check=step.pre_flight_check,
    )


def resolve_section(section: Section, answers: Mapping[str, Any], locale: str) -> ActiveSection:
    return ActiveSection(
        slug=section.slug,
        title=resolve_text(section.title, answers, locale) or section.slug,
        short_title=resolve_text(section.short_title, answers, locale),
        introduction=resolve_text(section.introduction, answers, locale),
        summary=resolve_text(section.summary, answers, locale),
        steps=tuple(resolve_step(section, step, i, answers, locale) for i, step in enumerate(section.steps)),
    )


def resolve_active_shape(
    definition: FormDefinition, answers: Mapping[str, Any] | None, locale: str = "en"
) -> tuple[ActiveSection, ...]:
    """Compute the active shape for `answers`. Pure and deterministic."""
    frozen = freeze_answers(answers)
    return tuple(resolve_section(section, frozen, locale) for section in definition.sections)


__all__ = [
    "freeze_answers",
    "show_if_answer_in",
    "show_unless_answer_in",
    "answer_includes",
    "field_is_shown",
    "field_is_required",
    "resolve_options",
    "resolve_field",
    "resolve_fieldset",
    "resolve_step",
    "resolve_section",
    "resolve_active_shape",
]
