"""Progress calculation for the whole form and for each active section."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from grantforms.logic.localisation import copy_for
from grantforms.models.active_shape import ActiveSection
from grantforms.models.progress import FormProgress, ProgressStatus, SectionProgress
from grantforms.models.validation import FieldMessage, ValidationResult


def status_for(value: Mapping[str, Any], messages: Sequence[FieldMessage]) -> str:
    # A blank answer is still an answer; only an empty answer set is empty
    if not value:
        return ProgressStatus.EMPTY
    if not messages:
        return ProgressStatus.COMPLETE
    return ProgressStatus.INCOMPLETE


def section_status(section: ActiveSection, value: Mapping[str, Any], messages: Iterable[FieldMessage]) -> str:
    names = set(section.field_names)
    # Nothing to fill in must never read as finished
    if not names:
        return ProgressStatus.EMPTY
    scoped_value = {k: v for k, v in value.items() if k in names}
    scoped_messages = [m for m in messages if m.field_name in names]
    return status_for(scoped_value, scoped_messages)


def section_progress(section: ActiveSection, validation: ValidationResult, locale: str) -> SectionProgress:
    status = section_status(section, validation.value, validation.messages)
    return SectionProgress(
        slug=section.slug,
        label=section.short_title or section.title,
        status=status,
        status_label=copy_for(f"status.{status}", locale),
    )


def calculate_progress(
    sections: Sequence[ActiveSection], validation: ValidationResult, locale: str = "en"
) -> tuple[tuple[ActiveSection, ...], FormProgress]:
    """Attach progress to each section and compute the whole-form progress."""
    with_progress = tuple(
        s.model_copy(update={"progress": section_progress(s, validation, locale)}) for s in sections
    )
    overall = status_for(validation.value, validation.messages)
    section_items = tuple(s.progress for s in with_progress if s.progress is not None)
    return with_progress, FormProgress(
        all=overall,
        is_complete=overall == ProgressStatus.COMPLETE,
        is_pristine=overall == ProgressStatus.EMPTY,
        sections_complete=sum(1 for p in section_items if p.status == ProgressStatus.COMPLETE),
        sections=section_items,
    )


__all__ = ["status_for", "section_status", "section_progress", "calculate_progress"]
