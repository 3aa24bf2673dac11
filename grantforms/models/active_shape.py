"""Active shape: the sections, steps, fieldsets and fields visible for one answer set.

All text is already localised. Instances are rebuilt from scratch on every
read and never mutated.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.json_schema import SkipJsonSchema

from grantforms.models.progress import SectionProgress


class ActiveOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    explanation: Optional[str] = None


class ActiveField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    label: str
    explanation: Optional[str] = None
    options: Tuple[ActiveOption, ...] = ()
    is_required: bool = True
    attributes: dict = Field(default_factory=dict)
    value: Any = None


class ActiveFieldset(BaseModel):
    model_config = ConfigDict(frozen=True)

    legend: Optional[str] = None
    introduction: Optional[str] = None
    footer: Optional[str] = None
    fields: Tuple[ActiveField, ...]


class ActiveStep(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    title: str
    slug: str
    index: int
    fieldsets: Tuple[ActiveFieldset, ...]
    is_required: bool
    is_multipart: bool = False
    message: Optional[str] = None
    pre_flight_check: SkipJsonSchema[Optional[Callable[..., Any]]] = Field(default=None, exclude=True)

    @property
    def fields(self) -> Tuple[ActiveField, ...]:
        return tuple(f for fs in self.fieldsets for f in fs.fields)


class ActiveSection(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    slug: str
    title: str
    short_title: Optional[str] = None
    introduction: Optional[str] = None
    summary: Optional[str] = None
    steps: Tuple[ActiveStep, ...]
    progress: Optional[SectionProgress] = None
    has_featured_errors: bool = False

    @property
    def fields(self) -> Tuple[ActiveField, ...]:
        return tuple(f for step in self.steps for f in step.fields)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)


__all__ = ["ActiveOption", "ActiveField", "ActiveFieldset", "ActiveStep", "ActiveSection"]
