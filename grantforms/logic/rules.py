"""Validation rule combinators for field schemas.

A small combinator library in the spirit of declarative object validators:
schemas are immutable, every builder method returns a modified copy, and
`Schema.validate()` never raises for bad input. It returns an `Outcome`
carrying the converted value and every failure found (error collection, not
fail-fast).

Conventions:
- Absent values (missing key, None, and blank strings for non-string types)
  fail with `any.required` only when the schema is required.
- Object schemas drop keys they do not declare, at every depth.
- Custom rules are pure functions `(value, answers) -> RuleFailure | None`
  where `answers` is the full answer set being validated; they only run when
  the value's own children validated cleanly.
"""

from __future__ import annotations

import calendar
import copy
import re
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from grantforms.models.validation import ErrorDetail


class _Missing:
    """Sentinel for an absent or stripped value."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class RuleFailure:
    __slots__ = ("type", "params", "path")

    def __init__(self, type: str, params: Optional[Dict[str, Any]] = None, path: Tuple[Any, ...] = ()) -> None:
        self.type = type
        self.params = dict(params or {})
        self.path = tuple(path)

    def __repr__(self) -> str:
        return f"RuleFailure(type={self.type!r}, params={self.params!r}, path={self.path!r})"


def failure(type_: str, *, path: Tuple[Any, ...] = (), **params: Any) -> RuleFailure:
    return RuleFailure(type_, params, path)


Rule = Callable[[Any, Mapping[str, Any]], Optional[RuleFailure]]


class Ref:
    """Reference to another answer, resolved against the answer set at validation time."""

    def __init__(self, name: str) -> None:
        self.name = name

    def resolve(self, answers: Mapping[str, Any]) -> Any:
        return answers.get(self.name)

    def __repr__(self) -> str:
        return f"ref({self.name!r})"


def ref(name: str) -> Ref:
    return Ref(name)


def _resolve(value: Any, answers: Mapping[str, Any]) -> Any:
    return value.resolve(answers) if isinstance(value, Ref) else value


class Outcome:
    __slots__ = ("value", "errors")

    def __init__(self, value: Any, errors: Iterable[ErrorDetail] = ()) -> None:
        self.value = value
        self.errors: Tuple[ErrorDetail, ...] = tuple(errors)

    @property
    def ok(self) -> bool:
        return not self.errors


def _detail(path: Tuple[Any, ...], type_: str, params: Optional[Mapping[str, Any]] = None) -> ErrorDetail:
    context = dict(params or {})
    context.setdefault("key", next((s for s in reversed(path) if isinstance(s, str)), None))
    return ErrorDetail(path=tuple(path), type=type_, context=context)


class Schema:
    type_name = "any"
    # Blank strings count as "not provided" for every type except strings
    empty_is_absent = True

    def __init__(self) -> None:
        self._required = False
        self._strip = False
        self._valids: Optional[Tuple[Any, ...]] = None
        self._invalids: Tuple[Any, ...] = ()
        self._rules: Tuple[Rule, ...] = ()

    def _clone(self, **changes: Any) -> "Schema":
        new = copy.copy(self)
        for name, value in changes.items():
            setattr(new, name, value)
        return new

    def required(self) -> "Schema":
        return self._clone(_required=True)

    def optional(self) -> "Schema":
        return self._clone(_required=False)

    def strip(self) -> "Schema":
        """Validate as usual but always remove the value from the output."""
        return self._clone(_strip=True)

    def valid(self, *values: Any) -> "Schema":
        return self._clone(_valids=tuple(values))

    def invalid(self, *values: Any) -> "Schema":
        return self._clone(_invalids=self._invalids + tuple(values))

    def rule(self, fn: Rule) -> "Schema":
        return self._clone(_rules=self._rules + (fn,))

    @property
    def is_required(self) -> bool:
        return self._required

    @property
    def is_stripped(self) -> bool:
        return self._strip

    def _is_absent(self, value: Any) -> bool:
        if value is MISSING or value is None:
            return True
        return self.empty_is_absent and isinstance(value, str) and value.strip() == ""

    def _coerce(self, value: Any) -> Tuple[Any, Optional[RuleFailure]]:
        return value, None

    def _children(self, value: Any, answers: Mapping[str, Any], path: Tuple[Any, ...]) -> Tuple[Any, List[ErrorDetail]]:
        return value, []

    def _output(self, value: Any) -> Any:
        return MISSING if self._strip else value

    def validate(self, value: Any = MISSING, answers: Optional[Mapping[str, Any]] = None, path: Iterable[Any] = ()) -> Outcome:
        answers = answers if answers is not None else {}
        path = tuple(path)
        if self._is_absent(value):
            if self._required:
                return Outcome(MISSING, (_detail(path, "any.required"),))
            return Outcome(MISSING)

        converted, problem = self._coerce(value)
        if problem is not None:
            return Outcome(self._output(value), (_detail(path + problem.path, problem.type, problem.params),))

        if self._valids is not None:
            allowed = [_resolve(v, answers) for v in self._valids]
            if converted not in allowed:
                return Outcome(self._output(converted), (_detail(path, "any.allowOnly", {"valids": allowed}),))

        errors: List[ErrorDetail] = []
        disallowed = [_resolve(v, answers) for v in self._invalids]
        if any(d is not None and d == converted for d in disallowed):
            errors.append(_detail(path, "any.invalid"))

        converted, child_errors = self._children(converted, answers, path)
        errors.extend(child_errors)
        if not child_errors:
            for rule in self._rules:
                problem = rule(converted, answers)
                if problem is not None:
                    errors.append(_detail(path + problem.path, problem.type, problem.params))
        return Outcome(self._output(converted), errors)


class StringSchema(Schema):
    type_name = "string"
    empty_is_absent = False

    def __init__(self) -> None:
        super().__init__()
        self._allow_empty = False

    def allow_empty(self) -> "StringSchema":
        return self._clone(_allow_empty=True)  # type: ignore[return-value]

    def validate(self, value: Any = MISSING, answers: Optional[Mapping[str, Any]] = None, path: Iterable[Any] = ()) -> Outcome:
        if isinstance(value, str) and value.strip() == "":
            if self._allow_empty:
                return Outcome(self._output(""))
            return Outcome(self._output(value), (_detail(tuple(path), "any.empty"),))
        return super().validate(value, answers, path)

    def _coerce(self, value: Any) -> Tuple[Any, Optional[RuleFailure]]:
        if not isinstance(value, str):
            return value, failure("string.base")
        return value.strip(), None

    def min(self, limit: int) -> "StringSchema":
        return self.rule(lambda v, _a: failure("string.min", limit=limit) if len(v) < limit else None)  # type: ignore[return-value]

    def max(self, limit: int) -> "StringSchema":
        return self.rule(lambda v, _a: failure("string.max", limit=limit) if len(v) > limit else None)  # type: ignore[return-value]

    def pattern(self, regex: str, *, type_: str = "string.regex", flags: int = 0) -> "StringSchema":
        compiled = re.compile(regex, flags)
        return self.rule(  # type: ignore[return-value]
            lambda v, _a: None if compiled.fullmatch(v) else failure(type_, pattern=regex)
        )

    def email(self) -> "StringSchema":
        return self.pattern(EMAIL_RE, type_="string.email")

    def phone_number(self) -> "StringSchema":
        def _check(value: str, _answers: Mapping[str, Any]) -> Optional[RuleFailure]:
            digits = re.sub(r"\D", "", value)
            if not PHONE_CHARS_RE.fullmatch(value) or not 10 <= len(digits) <= 13:
                return failure("string.phonenumber")
            return None

        return self.rule(_check)  # type: ignore[return-value]

    def min_words(self, limit: int) -> "StringSchema":
        return self.rule(  # type: ignore[return-value]
            lambda v, _a: failure("string.minWords", limit=limit) if count_words(v) < limit else None
        )

    def max_words(self, limit: int) -> "StringSchema":
        return self.rule(  # type: ignore[return-value]
            lambda v, _a: failure("string.maxWords", limit=limit) if count_words(v) > limit else None
        )


# ASCII digits, optional leading minus and decimal fraction
NUMBER_TEXT_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")


class NumberSchema(Schema):
    type_name = "number"

    def __init__(self) -> None:
        super().__init__()
        self._friendly = False

    def friendly(self) -> "NumberSchema":
        """Accept currency-style input such as '£1,250'."""
        return self._clone(_friendly=True)  # type: ignore[return-value]

    def _coerce(self, value: Any) -> Tuple[Any, Optional[RuleFailure]]:
        if isinstance(value, bool):
            return value, failure("number.base")
        if isinstance(value, (int, float)):
            return value, None
        if isinstance(value, str):
            text = value.strip()
            if self._friendly:
                text = text.replace(",", "").replace("£", "").strip()
            if not NUMBER_TEXT_RE.fullmatch(text):
                return value, failure("number.base")
            if "." in text:
                return float(text), None
            return int(text), None
        return value, failure("number.base")

    def integer(self) -> "NumberSchema":
        return self.rule(  # type: ignore[return-value]
            lambda v, _a: None if float(v).is_integer() else failure("number.integer")
        )

    def min(self, limit: Any) -> "NumberSchema":
        def _check(value: Any, answers: Mapping[str, Any]) -> Optional[RuleFailure]:
            resolved = _resolve(limit, answers)
            if resolved is not None and value < resolved:
                return failure("number.min", limit=resolved)
            return None

        return self.rule(_check)  # type: ignore[return-value]

    def max(self, limit: Any) -> "NumberSchema":
        def _check(value: Any, answers: Mapping[str, Any]) -> Optional[RuleFailure]:
            resolved = _resolve(limit, answers)
            if resolved is not None and value > resolved:
                return failure("number.max", limit=resolved)
            return None

        return self.rule(_check)  # type: ignore[return-value]


class BooleanSchema(Schema):
    type_name = "boolean"

    def _coerce(self, value: Any) -> Tuple[Any, Optional[RuleFailure]]:
        if isinstance(value, bool):
            return value, None
        if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
            return value.strip().lower() == "true", None
        return value, failure("boolean.base")


class ArraySchema(Schema):
    type_name = "array"

    def __init__(self, items: Optional[Schema] = None) -> None:
        super().__init__()
        self._items = items
        self._single = False
        self._min: Optional[int] = None
        self._max: Optional[int] = None

    def single(self) -> "ArraySchema":
        """Accept a lone scalar as a one-item list (single checkbox ticks)."""
        return self._clone(_single=True)  # type: ignore[return-value]

    def min(self, limit: int) -> "ArraySchema":
        return self._clone(_min=limit)  # type: ignore[return-value]

    def max(self, limit: int) -> "ArraySchema":
        return self._clone(_max=limit)  # type: ignore[return-value]

    def _coerce(self, value: Any) -> Tuple[Any, Optional[RuleFailure]]:
        if isinstance(value, (list, tuple)):
            return list(value), None
        if self._single and not isinstance(value, Mapping):
            return [value], None
        return value, failure("array.base")

    def _children(self, value: Any, answers: Mapping[str, Any], path: Tuple[Any, ...]) -> Tuple[Any, List[ErrorDetail]]:
        out: List[Any] = []
        errors: List[ErrorDetail] = []
        for index, item in enumerate(value):
            if self._items is None:
                out.append(item)
                continue
            outcome = self._items.validate(item, answers, path + (index,))
            errors.extend(outcome.errors)
            if outcome.value is not MISSING:
                out.append(outcome.value)
        if self._min is not None and len(value) < self._min:
            errors.append(_detail(path, "array.min", {"limit": self._min}))
        if self._max is not None and len(value) > self._max:
            errors.append(_detail(path, "array.max", {"limit": self._max}))
        return out, errors


class ObjectSchema(Schema):
    type_name = "object"

    def __init__(self, keys: Optional[Mapping[str, Schema]] = None) -> None:
        super().__init__()
        self._keys: Optional[Dict[str, Schema]] = dict(keys) if keys is not None else None

    @property
    def keys(self) -> Dict[str, Schema]:
        return dict(self._keys or {})

    def _coerce(self, value: Any) -> Tuple[Any, Optional[RuleFailure]]:
        if isinstance(value, Mapping):
            return dict(value), None
        return value, failure("object.base")

    def _children(self, value: Any, answers: Mapping[str, Any], path: Tuple[Any, ...]) -> Tuple[Any, List[ErrorDetail]]:
        if self._keys is None:
            return value, []
        out: Dict[str, Any] = {}
        errors: List[ErrorDetail] = []
        for name, schema in self._keys.items():
            outcome = schema.validate(value.get(name, MISSING), answers, path + (name,))
            errors.extend(outcome.errors)
            if outcome.value is not MISSING:
                out[name] = outcome.value
        return out, errors


class ConditionalSchema(Schema):
    """Chooses between two schemas using a predicate over the answer set."""

    def __init__(self, predicate: Callable[[Mapping[str, Any]], bool], then: Schema, otherwise: Schema) -> None:
        super().__init__()
        self.predicate = predicate
        self.then = then
        self.otherwise = otherwise

    def resolve(self, answers: Mapping[str, Any]) -> Schema:
        chosen = self.then if self.predicate(answers) else self.otherwise
        if isinstance(chosen, ConditionalSchema):
            return chosen.resolve(answers)
        return chosen

    def validate(self, value: Any = MISSING, answers: Optional[Mapping[str, Any]] = None, path: Iterable[Any] = ()) -> Outcome:
        answers = answers if answers is not None else {}
        return self.resolve(answers).validate(value, answers, path)


def any_value() -> Schema:
    return Schema()


def string() -> StringSchema:
    return StringSchema()


def number() -> NumberSchema:
    return NumberSchema()


def boolean() -> BooleanSchema:
    return BooleanSchema()


def array_of(items: Optional[Schema] = None) -> ArraySchema:
    return ArraySchema(items)


def object_of(keys: Optional[Mapping[str, Schema]] = None) -> ObjectSchema:
    return ObjectSchema(keys)


def when(predicate: Callable[[Mapping[str, Any]], bool], *, then: Schema, otherwise: Optional[Schema] = None) -> ConditionalSchema:
    return ConditionalSchema(predicate, then, otherwise if otherwise is not None else any_value())


# ---------------------------------------------------------------------------
# Compound types
# ---------------------------------------------------------------------------

EMAIL_RE = r"[^@\s]+@[^@\s]+\.[A-Za-z]{2,}"
PHONE_CHARS_RE = re.compile(r"[0-9+()\-\s]+")
POSTCODE_RE = r"[A-Za-z]{1,2}[0-9][A-Za-z0-9]? ?[0-9][A-Za-z]{2}"


def count_words(text: str) -> int:
    return len(text.split())


def from_date_parts(value: Any) -> Optional[date]:
    """Return a `date` for a {day, month, year} mapping, or None when not a real date."""
    if not isinstance(value, Mapping):
        return None
    try:
        return date(int(value["year"]), int(value["month"]), int(value["day"]))
    except (KeyError, TypeError, ValueError):
        return None


def add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _date_parts_keys() -> Dict[str, Schema]:
    return {
        "day": number().integer().required(),
        "month": number().integer().required(),
        "year": number().integer().required(),
    }


class DatePartsSchema(ObjectSchema):
    def __init__(self) -> None:
        super().__init__(_date_parts_keys())
        self._rules = (lambda v, _a: None if from_date_parts(v) else failure("any.invalid"),)

    def min_date(self, minimum: Any) -> "DatePartsSchema":
        limit = _as_date(minimum)

        def _check(value: Any, _answers: Mapping[str, Any]) -> Optional[RuleFailure]:
            dt = from_date_parts(value)
            if dt is not None and dt < limit:
                return failure("dateParts.minDate", min=limit.isoformat())
            return None

        return self.rule(_check)  # type: ignore[return-value]

    def max_date(self, maximum: Any) -> "DatePartsSchema":
        limit = _as_date(maximum)

        def _check(value: Any, _answers: Mapping[str, Any]) -> Optional[RuleFailure]:
            dt = from_date_parts(value)
            if dt is not None and dt > limit:
                return failure("dateParts.maxDate", max=limit.isoformat())
            return None

        return self.rule(_check)  # type: ignore[return-value]


def _check_date_range(value: Any, _answers: Mapping[str, Any]) -> Optional[RuleFailure]:
    start = from_date_parts(value.get("start_date"))
    end = from_date_parts(value.get("end_date"))
    if start is None and end is None:
        return failure("dateRange.both.invalid")
    if start is None:
        return failure("dateRange.startDate.invalid")
    if end is None:
        return failure("dateRange.endDate.invalid")
    if end < start:
        return failure("dateRange.endDate.beforeStartDate")
    return None


class DateRangeSchema(ObjectSchema):
    def __init__(self) -> None:
        super().__init__(
            {
                "start_date": object_of(_date_parts_keys()).required(),
                "end_date": object_of(_date_parts_keys()).required(),
            }
        )
        self._rules = (_check_date_range,)

    def min_date(self, minimum: Any) -> "DateRangeSchema":
        limit = _as_date(minimum)

        def _check(value: Any, _answers: Mapping[str, Any]) -> Optional[RuleFailure]:
            start = from_date_parts(value.get("start_date"))
            end = from_date_parts(value.get("end_date"))
            if start is None or end is None:
                return None
            if start < limit or end < limit:
                return failure("dateRange.minDate.invalid", min=limit.isoformat())
            return None

        return self.rule(_check)  # type: ignore[return-value]

    def end_date_limit(self, amount: int, unit: str) -> "DateRangeSchema":
        def _check(value: Any, _answers: Mapping[str, Any]) -> Optional[RuleFailure]:
            start = from_date_parts(value.get("start_date"))
            end = from_date_parts(value.get("end_date"))
            if start is None or end is None:
                return None
            if unit == "months":
                latest = add_months(start, amount)
            elif unit == "years":
                latest = add_months(start, amount * 12)
            else:
                latest = date.fromordinal(start.toordinal() + amount)
            if end > latest:
                return failure("dateRange.endDate.outsideLimit", amount=amount, unit=unit)
            return None

        return self.rule(_check)  # type: ignore[return-value]


def date_parts() -> DatePartsSchema:
    return DatePartsSchema()


def date_range() -> DateRangeSchema:
    return DateRangeSchema()


def day_month() -> ObjectSchema:
    def _check(value: Any, _answers: Mapping[str, Any]) -> Optional[RuleFailure]:
        # Leap year so 29 February is accepted
        return None if from_date_parts({**value, "year": 2000}) else failure("any.invalid")

    return object_of(
        {
            "day": number().integer().required(),
            "month": number().integer().required(),
        }
    ).rule(_check)  # type: ignore[return-value]


def month_year(*, not_in_future: bool = False, today: Callable[[], date] = date.today) -> ObjectSchema:
    def _valid(value: Any, _answers: Mapping[str, Any]) -> Optional[RuleFailure]:
        if not 1 <= value["month"] <= 12 or value["year"] < 1000:
            return failure("any.invalid")
        return None

    def _past(value: Any, _answers: Mapping[str, Any]) -> Optional[RuleFailure]:
        current = today()
        if (value["year"], value["month"]) > (current.year, current.month):
            return failure("monthYear.future")
        return None

    schema = object_of(
        {
            "month": number().integer().required(),
            "year": number().integer().required(),
        }
    ).rule(_valid)
    return schema.rule(_past) if not_in_future else schema  # type: ignore[return-value]


def full_name() -> ObjectSchema:
    return object_of(
        {
            "first_name": string().max(40).required(),
            "last_name": string().max(80).required(),
        }
    )


def uk_address() -> ObjectSchema:
    return object_of(
        {
            "line1": string().max(255).required(),
            "line2": string().allow_empty().max(255).optional(),
            "town_city": string().max(40).required(),
            "county": string().allow_empty().max(80).optional(),
            "postcode": string().pattern(POSTCODE_RE).required(),
        }
    )


def address_history() -> ObjectSchema:
    """Current address duration plus a previous address when under three years."""

    def _previous_required(value: Any, _answers: Mapping[str, Any]) -> Optional[RuleFailure]:
        if value.get("current_address_meets_minimum") == "no" and "previous_address" not in value:
            return failure("any.required", path=("previous_address",))
        return None

    return object_of(
        {
            "current_address_meets_minimum": string().valid("yes", "no").required(),
            "previous_address": uk_address().optional(),
        }
    ).rule(_previous_required)  # type: ignore[return-value]


class BankNumberSchema(StringSchema):
    """Digits-only strings; separators such as '-' and spaces are removed."""

    def _coerce(self, value: Any) -> Tuple[Any, Optional[RuleFailure]]:
        if not isinstance(value, str):
            return value, failure("string.base")
        return re.sub(r"\D", "", value), None

    def _length_rule(self, type_: str, length: int) -> "BankNumberSchema":
        return self.rule(  # type: ignore[return-value]
            lambda v, _a: None if len(v) == length else failure(type_, length=length)
        )

    def sort_code(self, length: int = 6) -> "BankNumberSchema":
        return self._length_rule("sortCode.wrongSize", length)

    def account_number(self, length: int = 8) -> "BankNumberSchema":
        return self._length_rule("accountNumber.wrongSize", length)


def bank_numbers() -> BankNumberSchema:
    return BankNumberSchema()


class BudgetSchema(ArraySchema):
    def _coerce(self, value: Any) -> Tuple[Any, Optional[RuleFailure]]:
        rows, problem = super()._coerce(value)
        if problem is not None:
            return rows, problem
        # Blank rows are left over from the fixed-size input table
        return [r for r in rows if not (isinstance(r, Mapping) and not r.get("item") and not r.get("cost"))], None

    def valid_budget_range(self, minimum: int, maximum: int) -> "BudgetSchema":
        def _check(value: Any, _answers: Mapping[str, Any]) -> Optional[RuleFailure]:
            total = budget_total(value)
            if total > maximum:
                return failure("budgetItems.overBudget", max=maximum)
            if total < minimum:
                return failure("budgetItems.underBudget", min=minimum)
            return None

        return self.rule(_check)  # type: ignore[return-value]


def budget_total(rows: Any) -> int:
    total = 0
    for row in rows or []:
        cost = row.get("cost") if isinstance(row, Mapping) else None
        if isinstance(cost, (int, float)) and not isinstance(cost, bool):
            total += int(cost)
        elif isinstance(cost, str):
            try:
                total += int(cost.replace(",", "").replace("£", ""))
            except ValueError:
                continue
    return total


def budget_items(*, max_item_length: int = 255) -> BudgetSchema:
    schema = BudgetSchema(
        object_of(
            {
                "item": string().max(max_item_length).required(),
                "cost": number().friendly().integer().min(1).required(),
            }
        )
    )
    return schema.min(1)  # type: ignore[return-value]


def file_metadata(*, max_bytes: int, mime_types: Iterable[str]) -> ObjectSchema:
    return object_of(
        {
            "filename": string().required(),
            "size": number().max(max_bytes).required(),
            "type": string().valid(*mime_types).required(),
        }
    )


__all__ = [
    "MISSING",
    "Outcome",
    "Ref",
    "Rule",
    "RuleFailure",
    "Schema",
    "StringSchema",
    "NumberSchema",
    "BooleanSchema",
    "ArraySchema",
    "ObjectSchema",
    "ConditionalSchema",
    "DatePartsSchema",
    "DateRangeSchema",
    "BudgetSchema",
    "BankNumberSchema",
    "any_value",
    "string",
    "number",
    "boolean",
    "array_of",
    "object_of",
    "when",
    "ref",
    "failure",
    "date_parts",
    "date_range",
    "day_month",
    "month_year",
    "full_name",
    "uk_address",
    "address_history",
    "budget_items",
    "bank_numbers",
    "budget_total",
    "file_metadata",
    "from_date_parts",
    "add_months",
    "count_words",
    "POSTCODE_RE",
]
