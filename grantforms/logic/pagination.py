"""Forward and backward navigation over the active shape.

Positions are `start`, a section `introduction`, a `step` or the `summary`.
Moving forward skips steps whose `is_required` is false, except that leaving
an introduction always lands on the section's first step. Decisions are
always made against the shape passed in, so a step that stopped being
required after an earlier answer changed is skipped straight away.
"""

from __future__ import annotations

import logging
from typing import Sequence

from grantforms.errors import UnknownPositionError
from grantforms.logic.localisation import copy_for
from grantforms.models.active_shape import ActiveSection, ActiveStep
from grantforms.models.navigation import PageLink, Position

logger = logging.getLogger(__name__)


def _first_required(steps: Sequence[ActiveStep], start: int) -> int | None:
    for index in range(max(start, 0), len(steps)):
        if steps[index].is_required:
            return index
    return None


def _last_required(steps: Sequence[ActiveStep], end: int) -> int | None:
    for index in range(min(end, len(steps) - 1), -1, -1):
        if steps[index].is_required:
            return index
    return None


def terminal_before_start(before_start: str) -> Position:
    return Position.start() if before_start == "start" else Position.summary()


def check_position(sections: Sequence[ActiveSection], position: Position) -> None:
    """Raise UnknownPositionError when `position` does not exist in `sections`."""
    if position.kind in ("start", "summary"):
        return
    index = position.section_index
    if index is None or not 0 <= index < len(sections):
        raise UnknownPositionError(f"unknown_section index={index}")
    section = sections[index]
    if position.kind == "introduction":
        if not section.introduction:
            raise UnknownPositionError(f"section_has_no_introduction slug={section.slug}")
        return
    step_index = position.step_index
    if step_index is None or not 0 <= step_index < len(section.steps):
        raise UnknownPositionError(f"unknown_step slug={section.slug} index={step_index}")


def _enter_forward(sections: Sequence[ActiveSection], section_index: int) -> Position:
    for index in range(section_index, len(sections)):
        section = sections[index]
        if section.introduction:
            return Position.introduction(index)
        found = _first_required(section.steps, 0)
        if found is not None:
            return Position.step(index, found)
        logger.debug("section_skipped slug=%s reason=no_required_steps", section.slug)
    return Position.summary()


def _enter_backward(sections: Sequence[ActiveSection], section_index: int, before_start: str) -> Position:
    for index in range(section_index, -1, -1):
        section = sections[index]
        found = _last_required(section.steps, len(section.steps) - 1)
        if found is not None:
            return Position.step(index, found)
        if section.introduction:
            return Position.introduction(index)
    return terminal_before_start(before_start)


def next_position(sections: Sequence[ActiveSection], position: Position) -> Position:
    check_position(sections, position)
    if position.kind == "start":
        return _enter_forward(sections, 0)
    if position.kind == "summary":
        return position
    index = position.section_index or 0
    section = sections[index]
    if position.kind == "introduction":
        if section.steps:
            return Position.step(index, 0)
        return _enter_forward(sections, index + 1)
    found = _first_required(section.steps, (position.step_index or 0) + 1)
    if found is not None:
        return Position.step(index, found)
    return _enter_forward(sections, index + 1)


def previous_position(sections: Sequence[ActiveSection], position: Position, before_start: str = "summary") -> Position:
    check_position(sections, position)
    if position.kind == "start":
        return position
    if position.kind == "summary":
        return _enter_backward(sections, len(sections) - 1, before_start)
    index = position.section_index or 0
    section = sections[index]
    if position.kind == "introduction":
        return _enter_backward(sections, index - 1, before_start)
    found = _last_required(section.steps, (position.step_index or 0) - 1)
    if found is not None:
        return Position.step(index, found)
    if section.introduction:
        return Position.introduction(index)
    return _enter_backward(sections, index - 1, before_start)


def position_for(sections: Sequence[ActiveSection], slug: str, step_number: int | None = None) -> Position:
    """Translate a URL-style address (section slug, 1-based step number) into a Position."""
    for index, section in enumerate(sections):
        if section.slug != slug:
            continue
        position = Position.introduction(index) if step_number is None else Position.step(index, step_number - 1)
        check_position(sections, position)
        return position
    raise UnknownPositionError(f"unknown_section slug={slug}")


def page_url(sections: Sequence[ActiveSection], position: Position, base_url: str) -> str:
    base = base_url.rstrip("/")
    if position.kind == "start":
        return base or "/"
    if position.kind == "summary":
        return f"{base}/summary"
    section = sections[position.section_index or 0]
    if position.kind == "introduction":
        return f"{base}/{section.slug}"
    return f"{base}/{section.slug}/{(position.step_index or 0) + 1}"


def page_link(sections: Sequence[ActiveSection], position: Position, base_url: str, locale: str = "en") -> PageLink:
    check_position(sections, position)
    if position.kind == "start":
        label = copy_for("nav.start", locale)
    elif position.kind == "summary":
        label = copy_for("nav.summary", locale)
    else:
        section = sections[position.section_index or 0]
        label = section.short_title or section.title
        if position.kind == "step":
            label = f"{label}: {section.steps[position.step_index or 0].title}"
    return PageLink(label=label, url=page_url(sections, position, base_url))


__all__ = [
    "check_position",
    "terminal_before_start",
    "next_position",
    "previous_position",
    "position_for",
    "page_url",
    "page_link",
]
