"""Locale-keyed copy resolution.

The engine treats copy as opaque strings. A piece of text is either a plain
string, a `{locale: string}` mapping, or (for conditional text) a callable of
the answer set returning either of those.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES: tuple[str, ...] = ("en", "cy")

# Shared copy used by the engine itself (status labels, synthetic messages)
COPY: dict[str, dict[str, str]] = {
    "status.empty": {"en": "Not started", "cy": "Heb ddechrau"},
    "status.incomplete": {"en": "In progress", "cy": "Ar ei ganol"},
    "status.complete": {"en": "Complete", "cy": "Cyflawn"},
    "upload.failed": {
        "en": "There was a problem uploading your file, please try again",
        "cy": "Roedd problem wrth uwchlwytho eich ffeil, ceisiwch eto",
    },
    "nav.summary": {"en": "Summary", "cy": "Crynodeb"},
    "nav.start": {"en": "Start", "cy": "Dechrau"},
}


def normalise_locale(locale: str | None) -> str:
    if locale in SUPPORTED_LOCALES:
        return str(locale)
    return DEFAULT_LOCALE


def localise(locale: str | None) -> Callable[[Any], str | None]:
    """Return a resolver turning a locale-keyed value into a string for `locale`.

    Missing translations fall back to English; None stays None.
    """
    resolved = normalise_locale(locale)

    def _resolve(value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, str):
            return value
        if isinstance(value, Mapping):
            text = value.get(resolved)
            if text is None:
                text = value.get(DEFAULT_LOCALE)
            return None if text is None else str(text)
        return str(value)

    return _resolve


def resolve_text(value: Any, answers: Mapping[str, Any], locale: str | None) -> str | None:
    """Localise `value`, calling it with the answer set first if it is conditional."""
    if callable(value):
        value = value(answers)
    return localise(locale)(value)


def copy_for(key: str, locale: str | None) -> str:
    entry = COPY.get(key)
    if entry is None:
        logger.warning("copy_missing key=%s", key)
        return key
    return localise(locale)(entry) or key


__all__ = [
    "DEFAULT_LOCALE",
    "SUPPORTED_LOCALES",
    "COPY",
    "normalise_locale",
    "localise",
    "resolve_text",
    "copy_for",
]
