"""Navigation positions and page links."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

PositionKind = Literal["start", "introduction", "step", "summary"]


class Position(BaseModel):
    """A place in the wizard.

    `introduction` and `step` positions carry a section index; `step` also
    carries a zero-based step index. `start` and `summary` are the terminal
    states either side of the sections.
    """

    model_config = ConfigDict(frozen=True)

    kind: PositionKind
    section_index: Optional[int] = None
    step_index: Optional[int] = None

    @classmethod
    def start(cls) -> "Position":
        return cls(kind="start")

    @classmethod
    def summary(cls) -> "Position":
        return cls(kind="summary")

    @classmethod
    def introduction(cls, section_index: int) -> "Position":
        return cls(kind="introduction", section_index=section_index)

    @classmethod
    def step(cls, section_index: int, step_index: int) -> "Position":
        return cls(kind="step", section_index=section_index, step_index=step_index)


class PageLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    url: str


__all__ = ["Position", "PositionKind", "PageLink"]
