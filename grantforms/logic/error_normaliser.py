"""Map raw rule failures onto user-facing field messages.

Only the first failure per field is considered. Its messages are chosen from
the field's catalog by the first tier that matches:

1. entries whose `key` equals the failing sub-key and whose `type` matches;
2. entries without a key whose `type` matches;
3. entries without a key of type `base`.

Every entry in the winning tier is emitted; tiers are never combined.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from grantforms.logic.localisation import localise, resolve_text
from grantforms.models.form_definition import FeaturedError, FieldDefinition, MessageSpec
from grantforms.models.validation import ErrorDetail, FieldMessage

logger = logging.getLogger(__name__)

BASE_TYPE = "base"


def first_error_per_field(errors: Iterable[ErrorDetail]) -> list[ErrorDetail]:
    seen: set[str] = set()
    firsts: list[ErrorDetail] = []
    for detail in errors:
        name = detail.field_name
        if name is None or name in seen:
            continue
        seen.add(name)
        firsts.append(detail)
    return firsts


def _sub_key(detail: ErrorDetail) -> str | None:
    """Last named path segment below the field itself (None for the field root)."""
    for segment in reversed(detail.path[1:]):
        if isinstance(segment, str):
            return segment
    return None


def match_messages(detail: ErrorDetail, catalog: Sequence[MessageSpec]) -> list[MessageSpec]:
    sub_key = _sub_key(detail)
    if sub_key is not None:
        keyed = [m for m in catalog if m.key == sub_key and m.type == detail.type]
        if keyed:
            return keyed
    typed = [m for m in catalog if m.key is None and m.type == detail.type]
    if typed:
        return typed
    return [m for m in catalog if m.key is None and m.type == BASE_TYPE]


def normalise_errors(
    errors: Iterable[ErrorDetail] | None,
    fields: Mapping[str, FieldDefinition],
    locale: str,
    answers: Mapping[str, Any] | None = None,
) -> tuple[FieldMessage, ...]:
    """Return localised messages for `errors`, ordered as the failures were reported."""
    if not errors:
        return ()
    answers = answers or {}
    text = localise(locale)
    messages: list[FieldMessage] = []
    for detail in first_error_per_field(errors):
        field = fields.get(detail.field_name or "")
        if field is None:
            logger.warning("error_for_unknown_field field=%s type=%s", detail.field_name, detail.type)
            continue
        matched = match_messages(detail, field.messages)
        if not matched:
            logger.warning("error_message_missing field=%s type=%s", field.name, detail.type)
            continue
        label = resolve_text(field.label, answers, locale)
        for spec in matched:
            messages.append(
                FieldMessage(
                    field_name=field.name,
                    message=text(spec.message) or "",
                    label=label,
                    type=spec.type,
                    raw_type=detail.type,
                )
            )
    return tuple(messages)


def select_featured(messages: Iterable[FieldMessage], allow_list: Sequence[FeaturedError]) -> tuple[FieldMessage, ...]:
    """Messages promoted for prominent display.

    A message qualifies when its field is on the allow-list and it is not the
    generic `base` message, unless that allow-list entry opts in with
    `include_base`.
    """
    entries = {item.field_name: item for item in allow_list}
    featured: list[FieldMessage] = []
    for message in messages:
        entry = entries.get(message.field_name)
        if entry is None:
            continue
        if message.type == BASE_TYPE and not entry.include_base:
            continue
        featured.append(message)
    return tuple(featured)


__all__ = ["BASE_TYPE", "first_error_per_field", "match_messages", "normalise_errors", "select_featured"]
