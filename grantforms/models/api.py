"""Request and response bodies for the HTTP adapter."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from grantforms.models.active_shape import ActiveSection, ActiveStep
from grantforms.models.navigation import PageLink
from grantforms.models.progress import FormProgress
from grantforms.models.validation import FieldMessage


class FormSummary(BaseModel):
    id: str
    title: str
    schema_version: str


class FormList(BaseModel):
    forms: List[FormSummary]


class ApplicationCreated(BaseModel):
    application_id: str
    form_id: str
    status: str
    start: PageLink


class SectionLink(BaseModel):
    slug: str
    title: str
    status: Optional[str] = None
    status_label: Optional[str] = None
    has_featured_errors: bool = False
    link: PageLink


class ApplicationOverview(BaseModel):
    application_id: str
    form_id: str
    title: str
    status: str
    progress: FormProgress
    sections: List[SectionLink]
    summary: Dict[str, Any] = Field(default_factory=dict)
    featured_errors: Tuple[FieldMessage, ...] = ()
    started_at: datetime
    updated_at: datetime


class SectionIntroduction(BaseModel):
    section: ActiveSection
    previous: PageLink
    next: PageLink


class StepView(BaseModel):
    application_id: str
    section: str
    step_number: int
    step: ActiveStep
    errors: Tuple[FieldMessage, ...] = ()
    previous: PageLink
    next: PageLink


class StepAnswers(BaseModel):
    """JSON body for non-multipart steps."""

    answers: Dict[str, Any] = Field(default_factory=dict)


class StepResult(BaseModel):
    application_id: str
    is_valid: bool
    status: str
    errors: Tuple[FieldMessage, ...] = ()
    # None while the step has errors
    next: Optional[PageLink] = None


class ApplicationSummary(BaseModel):
    application_id: str
    title: str
    progress: FormProgress
    sections: List[Dict[str, Any]]
    errors_by_step: List[Dict[str, Any]]


class SubmitRequest(BaseModel):
    terms: Dict[str, Any] = Field(default_factory=dict)


class SubmissionReceipt(BaseModel):
    application_id: str
    form_id: str
    status: str
    metadata: Dict[str, Any]
    payload: Dict[str, Any]


__all__ = [
    "FormSummary",
    "FormList",
    "ApplicationCreated",
    "SectionLink",
    "ApplicationOverview",
    "SectionIntroduction",
    "StepView",
    "StepAnswers",
    "StepResult",
    "ApplicationSummary",
    "SubmitRequest",
    "SubmissionReceipt",
]
