"""Static form definition models.

A `FormDefinition` is built once per process and never mutated. Anything
that depends on the applicant's answers (labels, options, visibility,
requiredness, conditional schemas) is expressed as a plain function of the
answer set and evaluated by the shape resolver on every read.

Localised text is either a plain string (same in every locale), a mapping of
locale code to string, or a callable taking the answer set and returning
either of those.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

LocaleText = Union[str, Dict[str, str], Callable[[Mapping[str, Any]], Any]]
AnswerPredicate = Callable[[Mapping[str, Any]], bool]


class MessageSpec(BaseModel):
    """One entry of a field's message catalog."""

    model_config = ConfigDict(frozen=True)

    type: str
    key: Optional[str] = None
    message: Union[str, Dict[str, str]]


class FieldOption(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: str
    label: LocaleText
    explanation: Optional[LocaleText] = None
    show_when: Optional[AnswerPredicate] = None


class FieldDefinition(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    type: str
    label: LocaleText
    explanation: Optional[LocaleText] = None
    # A rules.Schema, or a callable of the answer set returning one
    field_schema: Any
    messages: Tuple[MessageSpec, ...] = ()
    options: Union[Tuple[FieldOption, ...], Callable[[Mapping[str, Any]], Any]] = ()
    # Display requiredness; data requiredness lives in field_schema
    is_required: Union[bool, AnswerPredicate] = True
    # None means always shown
    should_show: Optional[AnswerPredicate] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)


class Fieldset(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    legend: Optional[LocaleText] = None
    introduction: Optional[LocaleText] = None
    footer: Optional[LocaleText] = None
    fields: Tuple[FieldDefinition, ...] = ()


class Step(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    title: LocaleText
    fieldsets: Tuple[Fieldset, ...] = ()
    is_multipart: bool = False
    # async callable(answers, context) -> list[FieldMessage]; may raise
    pre_flight_check: Optional[Callable[..., Any]] = None
    message: Optional[LocaleText] = None


class Section(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    slug: str
    title: LocaleText
    short_title: Optional[LocaleText] = None
    introduction: Optional[LocaleText] = None
    summary: Optional[LocaleText] = None
    steps: Tuple[Step, ...] = ()


class FeaturedError(BaseModel):
    model_config = ConfigDict(frozen=True)

    field_name: str
    include_base: bool = False


class FormDefinition(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    title: LocaleText
    sections: Tuple[Section, ...]
    all_fields: Dict[str, FieldDefinition]
    terms_fields: Tuple[FieldDefinition, ...] = ()
    featured_errors_allow_list: Tuple[FeaturedError, ...] = ()
    # callable(sanitized_value, locale) -> dict
    summary: Optional[Callable[..., Dict[str, Any]]] = None
    # callable(sanitized_value) -> dict
    for_submission: Optional[Callable[[Mapping[str, Any]], Dict[str, Any]]] = None
    # Terminal state reached by navigating back past the first step
    before_start: Literal["summary", "start"] = "summary"
    schema_version: str = "v1"


class FormContext(BaseModel):
    """Per-request context threaded explicitly through the engine."""

    model_config = ConfigDict(frozen=True)

    application_id: Optional[str] = None
    environment: str = "development"
    started_at: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "LocaleText",
    "AnswerPredicate",
    "MessageSpec",
    "FieldOption",
    "FieldDefinition",
    "Fieldset",
    "Step",
    "Section",
    "FeaturedError",
    "FormDefinition",
    "FormContext",
]
