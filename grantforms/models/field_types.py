"""FieldType constants for the closed set of supported field types.

Provides a simple constants container instead of an Enum to keep imports
lightweight in architectural tests.
"""

from __future__ import annotations


class FieldType:
    TEXT = "text"
    TEXTAREA = "textarea"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    SELECT = "select"
    DATE = "date"
    DATE_RANGE = "date-range"
    DAY_MONTH = "day-month"
    MONTH_YEAR = "month-year"
    CURRENCY = "currency"
    BUDGET = "budget"
    ADDRESS = "address"
    ADDRESS_HISTORY = "address-history"
    FULL_NAME = "full-name"
    FILE = "file"
    EMAIL = "email"
    TEL = "tel"
    NUMBER = "number"


ALL_FIELD_TYPES: tuple[str, ...] = (
    FieldType.TEXT,
    FieldType.TEXTAREA,
    FieldType.RADIO,
    FieldType.CHECKBOX,
    FieldType.SELECT,
    FieldType.DATE,
    FieldType.DATE_RANGE,
    FieldType.DAY_MONTH,
    FieldType.MONTH_YEAR,
    FieldType.CURRENCY,
    FieldType.BUDGET,
    FieldType.ADDRESS,
    FieldType.ADDRESS_HISTORY,
    FieldType.FULL_NAME,
    FieldType.FILE,
    FieldType.EMAIL,
    FieldType.TEL,
    FieldType.NUMBER,
)

# Types whose submitted value is a list or nested object. The multipart body
# parser used for upload steps only understands flat string values.
NON_FLAT_FIELD_TYPES: frozenset[str] = frozenset(
    {
        FieldType.BUDGET,
        FieldType.CHECKBOX,
        FieldType.DATE,
        FieldType.DATE_RANGE,
        FieldType.DAY_MONTH,
        FieldType.MONTH_YEAR,
        FieldType.ADDRESS,
        FieldType.ADDRESS_HISTORY,
        FieldType.FULL_NAME,
    }
)

OPTION_FIELD_TYPES: frozenset[str] = frozenset({FieldType.RADIO, FieldType.CHECKBOX, FieldType.SELECT})


__all__ = ["FieldType", "ALL_FIELD_TYPES", "NON_FLAT_FIELD_TYPES", "OPTION_FIELD_TYPES"]
