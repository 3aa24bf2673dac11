"""Exception types raised by the form engine and its collaborators.

Field validation failures are deliberately absent: they are returned as data
on `ValidationResult.messages` and never raised.
"""

from __future__ import annotations

from typing import Iterable, Sequence


class FormDefinitionError(ValueError):
    """A static form definition is malformed and must not be served."""

    def __init__(self, form_id: str | None, problems: Iterable[str]) -> None:
        self.form_id = form_id
        self.problems: list[str] = list(problems)
        summary = "; ".join(self.problems) or "invalid form definition"
        super().__init__(f"form_definition_invalid form_id={form_id} problems={summary}")


class UnknownPositionError(LookupError):
    """A section slug or step index does not exist in the active shape."""


class ExternalCheckDegraded(RuntimeError):
    """An external verification service errored, timed out or gave an unknown answer."""


class ExternalCheckRejected(Exception):
    """An external verification service explicitly reported the answers as invalid.

    Carries field-scoped messages (`FieldMessage`) to surface on the step.
    """

    def __init__(self, messages: Sequence) -> None:
        self.messages = list(messages)
        super().__init__(f"external_check_rejected fields={[m.field_name for m in self.messages]}")


class ApplicationNotFoundError(LookupError):
    """No stored application exists for the requested id."""


class UploadError(RuntimeError):
    """A file passed validation but could not be persisted by file storage."""

    def __init__(self, field_name: str, reason: str | None = None) -> None:
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"upload_failed field={field_name} reason={reason}")


__all__ = [
    "FormDefinitionError",
    "UnknownPositionError",
    "ExternalCheckDegraded",
    "ExternalCheckRejected",
    "UploadError",
    "ApplicationNotFoundError",
]
