"""Human-readable display values for answers, keyed by field type."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from grantforms.logic.rules import budget_total, from_date_parts
from grantforms.models.active_shape import ActiveField
from grantforms.models.field_types import FieldType

MONTHS = {
    "en": (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
    "cy": (
        "Ionawr", "Chwefror", "Mawrth", "Ebrill", "Mai", "Mehefin",
        "Gorffennaf", "Awst", "Medi", "Hydref", "Tachwedd", "Rhagfyr",
    ),
}

_RANGE_JOINER = {"en": "to", "cy": "i"}
_TOTAL_LABEL = {"en": "Total", "cy": "Cyfanswm"}


def _month(number: int, locale: str) -> str:
    names = MONTHS.get(locale, MONTHS["en"])
    return names[number - 1] if 1 <= number <= 12 else str(number)


def format_currency(value: Any) -> str:
    try:
        return f"£{int(value):,}"
    except (TypeError, ValueError):
        return str(value)


def format_date(value: Any, locale: str) -> str | None:
    dt = from_date_parts(value)
    if dt is None:
        return None
    return f"{dt.day} {_month(dt.month, locale)} {dt.year}"


def format_bytes(size: Any) -> str:
    try:
        size = float(size)
    except (TypeError, ValueError):
        return str(size)
    for unit in ("B", "KB", "MB"):
        if size < 1024 or unit == "MB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} MB"


def _format_options(field: ActiveField, value: Any, _locale: str) -> str:
    labels = {o.value: o.label for o in field.options}
    values = value if isinstance(value, (list, tuple)) else [value]
    return ", ".join(labels.get(str(v), str(v)) for v in values)


def _format_date_range(_field: ActiveField, value: Any, locale: str) -> str | None:
    start = format_date(value.get("start_date"), locale)
    end = format_date(value.get("end_date"), locale)
    if start is None or end is None:
        return None
    return f"{start} {_RANGE_JOINER.get(locale, 'to')} {end}"


def _format_day_month(_field: ActiveField, value: Any, locale: str) -> str:
    return f"{value.get('day')} {_month(int(value.get('month') or 0), locale)}"


def _format_month_year(_field: ActiveField, value: Any, locale: str) -> str:
    return f"{_month(int(value.get('month') or 0), locale)} {value.get('year')}"


def _format_address(_field: ActiveField, value: Any, _locale: str) -> str:
    parts = [value.get(k) for k in ("line1", "line2", "town_city", "county", "postcode")]
    return ", ".join(str(p) for p in parts if p)


def _format_address_history(field: ActiveField, value: Any, locale: str) -> str | None:
    previous = value.get("previous_address")
    return _format_address(field, previous, locale) if previous else None


def _format_budget(_field: ActiveField, value: Any, locale: str) -> str:
    lines = [f"{row.get('item')} - {format_currency(row.get('cost'))}" for row in value]
    lines.append(f"{_TOTAL_LABEL.get(locale, 'Total')}: {format_currency(budget_total(value))}")
    return "\n".join(lines)


def _format_name(_field: ActiveField, value: Any, _locale: str) -> str:
    return " ".join(str(p) for p in (value.get("first_name"), value.get("last_name")) if p)


def _format_file(_field: ActiveField, value: Any, _locale: str) -> str:
    return f"{value.get('filename')} ({value.get('type')}, {format_bytes(value.get('size'))})"


_FORMATTERS: dict[str, Callable[[ActiveField, Any, str], str | None]] = {
    FieldType.RADIO: _format_options,
    FieldType.SELECT: _format_options,
    FieldType.CHECKBOX: _format_options,
    FieldType.DATE: lambda _f, v, loc: format_date(v, loc),
    FieldType.DATE_RANGE: _format_date_range,
    FieldType.DAY_MONTH: _format_day_month,
    FieldType.MONTH_YEAR: _format_month_year,
    FieldType.CURRENCY: lambda _f, v, _loc: format_currency(v),
    FieldType.BUDGET: _format_budget,
    FieldType.ADDRESS: _format_address,
    FieldType.ADDRESS_HISTORY: _format_address_history,
    FieldType.FULL_NAME: _format_name,
    FieldType.FILE: _format_file,
}

_MAPPING_TYPES = {
    FieldType.DATE, FieldType.DATE_RANGE, FieldType.DAY_MONTH, FieldType.MONTH_YEAR,
    FieldType.ADDRESS, FieldType.ADDRESS_HISTORY, FieldType.FULL_NAME, FieldType.FILE,
}


def display_value(field: ActiveField, value: Any, locale: str = "en") -> str | None:
    """Format `value` for a summary screen; None when there is nothing to show."""
    if value in (None, "", [], {}):
        return None
    if field.type in _MAPPING_TYPES and not isinstance(value, Mapping):
        return str(value)
    if field.type == FieldType.BUDGET and not isinstance(value, (list, tuple)):
        return str(value)
    formatter = _FORMATTERS.get(field.type)
    if formatter is None:
        return str(value)
    return formatter(field, value, locale)


__all__ = ["MONTHS", "format_currency", "format_date", "format_bytes", "display_value"]
