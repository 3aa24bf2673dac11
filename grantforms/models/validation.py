"""Pydantic models for validation outcomes."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """A single raw rule failure reported by the rule combinators."""

    model_config = ConfigDict(frozen=True)

    path: Tuple[Union[str, int], ...]
    type: str
    context: Dict[str, Any] = Field(default_factory=dict)

    @property
    def field_name(self) -> Optional[str]:
        return str(self.path[0]) if self.path else None

    @property
    def key(self) -> Optional[str]:
        """Last named segment of the path (list indexes are skipped)."""
        for segment in reversed(self.path):
            if isinstance(segment, str):
                return segment
        return None


class FieldMessage(BaseModel):
    """A user-facing, localised message scoped to one field."""

    model_config = ConfigDict(frozen=True)

    field_name: str
    message: str
    label: Optional[str] = None
    # Message catalog type that matched ('base' for the generic fallback)
    type: str = "base"
    # Raw failure type that triggered the message
    raw_type: Optional[str] = None


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: Dict[str, Any]
    error: Optional[Tuple[ErrorDetail, ...]] = None
    is_valid: bool
    messages: Tuple[FieldMessage, ...] = ()
    featured_messages: Tuple[FieldMessage, ...] = ()

    def messages_for(self, field_name: str) -> Tuple[FieldMessage, ...]:
        return tuple(m for m in self.messages if m.field_name == field_name)


__all__ = ["ErrorDetail", "FieldMessage", "ValidationResult"]
