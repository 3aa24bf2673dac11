"""Progress status constants and models."""

from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, ConfigDict


class ProgressStatus:
    EMPTY = "empty"
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"


class SectionProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    slug: str
    label: str
    status: str
    status_label: str


class FormProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    all: str
    is_complete: bool
    is_pristine: bool
    sections_complete: int
    sections: Tuple[SectionProgress, ...] = ()


__all__ = ["ProgressStatus", "SectionProgress", "FormProgress"]
