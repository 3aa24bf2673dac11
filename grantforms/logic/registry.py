"""Registry of the form definitions served by this process.

Definitions are validated when registered; an invalid definition raises and
must stop startup.
"""

from __future__ import annotations

import logging
from typing import Iterable

from grantforms.logic.definition_validator import validate_form_definition
from grantforms.models.form_definition import FormDefinition

logger = logging.getLogger(__name__)


class FormRegistry:
    def __init__(self) -> None:
        self._forms: dict[str, FormDefinition] = {}

    def register(self, definition: FormDefinition) -> FormDefinition:
        validate_form_definition(definition)
        if definition.id in self._forms:
            logger.warning("form_definition_replaced form_id=%s", definition.id)
        self._forms[definition.id] = definition
        logger.info("form_definition_registered form_id=%s", definition.id)
        return definition

    def get(self, form_id: str) -> FormDefinition | None:
        return self._forms.get(form_id)

    def ids(self) -> list[str]:
        return sorted(self._forms)

    def __contains__(self, form_id: object) -> bool:
        return form_id in self._forms

    def __len__(self) -> int:
        return len(self._forms)


def build_registry(definitions: Iterable[FormDefinition], enabled: Iterable[str] | None = None) -> FormRegistry:
    """Register `definitions`, keeping only ids in `enabled` when it is given."""
    allowed = set(enabled) if enabled is not None else None
    registry = FormRegistry()
    for definition in definitions:
        if allowed is not None and definition.id not in allowed:
            logger.info("form_definition_disabled form_id=%s", definition.id)
            continue
        registry.register(definition)
    return registry


__all__ = ["FormRegistry", "build_registry"]
