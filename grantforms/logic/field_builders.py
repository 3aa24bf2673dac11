"""Field builders with a default schema and message catalog per field type.

Each builder returns a `FieldDefinition`. Callers can pass `messages` to add
catalog entries or to replace a default entry with the same (type, key), and
`field_schema` to replace the default schema (for conditional typing).
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from grantforms.logic import rules
from grantforms.models.field_types import FieldType
from grantforms.models.form_definition import (
    AnswerPredicate,
    FieldDefinition,
    FieldOption,
    LocaleText,
    MessageSpec,
)

MAX_FILE_BYTES = 12 * 1024 * 1024
FILE_MIME_TYPES: tuple[str, ...] = ("image/png", "image/jpeg", "application/pdf")


def msg(type_: str, en: str, cy: str | None = None, *, key: str | None = None) -> MessageSpec:
    return MessageSpec(type=type_, key=key, message={"en": en, "cy": cy or en})


def option(value: str, label: LocaleText, *, explanation: LocaleText | None = None, show_when: AnswerPredicate | None = None) -> FieldOption:
    return FieldOption(value=value, label=label, explanation=explanation, show_when=show_when)


def merge_messages(defaults: Iterable[MessageSpec], overrides: Iterable[MessageSpec]) -> tuple[MessageSpec, ...]:
    overrides = tuple(overrides)
    replaced = {(m.type, m.key) for m in overrides}
    return tuple(m for m in defaults if (m.type, m.key) not in replaced) + overrides


def _base(en: str, cy: str) -> MessageSpec:
    return msg("base", en, cy)


def _string(required: bool) -> rules.StringSchema:
    schema = rules.string()
    return schema.required() if required else schema.allow_empty().optional()  # type: ignore[return-value]


def _presence(schema: rules.Schema, required: bool) -> rules.Schema:
    return schema.required() if required else schema.optional()


def only_when(field: FieldDefinition, predicate: AnswerPredicate) -> FieldDefinition:
    """Show `field` only when `predicate` holds, stripping its answer otherwise."""
    then = field.field_schema
    if callable(then) and not isinstance(then, rules.Schema):
        def _factory(answers: Mapping[str, Any]) -> rules.Schema:
            return then(answers) if predicate(answers) else rules.any_value().strip()

        schema: Any = _factory
    else:
        schema = rules.when(predicate, then=then, otherwise=rules.any_value().strip())
    return field.model_copy(update={"field_schema": schema, "should_show": predicate})


def make_field(
    name: str,
    type_: str,
    label: LocaleText,
    schema: Any,
    default_messages: Sequence[MessageSpec],
    *,
    required: bool = True,
    explanation: LocaleText | None = None,
    messages: Sequence[MessageSpec] = (),
    options: Any = (),
    is_required: Any = None,
    should_show: AnswerPredicate | None = None,
    field_schema: Any = None,
    attributes: Mapping[str, Any] | None = None,
) -> FieldDefinition:
    return FieldDefinition(
        name=name,
        type=type_,
        label=label,
        explanation=explanation,
        field_schema=field_schema if field_schema is not None else schema,
        messages=merge_messages(default_messages, messages),
        options=options,
        is_required=required if is_required is None else is_required,
        should_show=should_show,
        attributes=dict(attributes or {}),
    )


def text_field(name: str, label: LocaleText, *, required: bool = True, max_length: int = 255, **kwargs: Any) -> FieldDefinition:
    return make_field(
        name,
        FieldType.TEXT,
        label,
        _string(required).max(max_length),
        (
            _base("Enter an answer", "Rhowch ateb"),
            msg("string.max", f"Answer must be {max_length} characters or less",
                f"Rhaid i'r ateb fod yn {max_length} nod neu lai"),
        ),
        required=required,
        attributes={"maxLength": max_length, **kwargs.pop("attributes", {})},
        **kwargs,
    )


def textarea_field(
    name: str, label: LocaleText, *, min_words: int = 0, max_words: int = 500, required: bool = True, **kwargs: Any
) -> FieldDefinition:
    schema = _string(required).max_words(max_words)
    if min_words:
        schema = schema.min_words(min_words)
    return make_field(
        name,
        FieldType.TEXTAREA,
        label,
        schema,
        (
            _base("Enter an answer", "Rhowch ateb"),
            msg("string.minWords", f"Answer must be at least {min_words} words",
                f"Rhaid i'r ateb fod yn o leiaf {min_words} gair"),
            msg("string.maxWords", f"Answer must be no more than {max_words} words",
                f"Rhaid i'r ateb fod yn ddim mwy na {max_words} gair"),
        ),
        required=required,
        attributes={"minWords": min_words, "maxWords": max_words, **kwargs.pop("attributes", {})},
        **kwargs,
    )


def email_field(name: str, label: LocaleText, *, required: bool = True, **kwargs: Any) -> FieldDefinition:
    return make_field(
        name,
        FieldType.EMAIL,
        label,
        _string(required).email(),
        (
            _base("Enter an email address", "Rhowch gyfeiriad e-bost"),
            msg("string.email", "Email address must be in the correct format, like name@example.com",
                "Rhaid i'r cyfeiriad e-bost fod yn y fformat cywir, e.e. enw@example.com"),
        ),
        required=required,
        **kwargs,
    )


def phone_field(name: str, label: LocaleText, *, required: bool = True, **kwargs: Any) -> FieldDefinition:
    return make_field(
        name,
        FieldType.TEL,
        label,
        _string(required).phone_number(),
        (
            _base("Enter a UK telephone number", "Rhowch rif ffôn yn y DU"),
            msg("string.phonenumber", "Enter a real UK telephone number", "Rhowch rif ffôn go iawn yn y DU"),
        ),
        required=required,
        **kwargs,
    )


def _option_values(options: Any, values: Sequence[str] | None) -> tuple[str, ...]:
    if values is not None:
        return tuple(values)
    if callable(options):
        raise ValueError("option fields with dynamic options must declare their allowed values")
    return tuple(o.value for o in options)


def radio_field(
    name: str,
    label: LocaleText,
    options: Any,
    *,
    required: bool = True,
    values: Sequence[str] | None = None,
    type_: str = FieldType.RADIO,
    **kwargs: Any,
) -> FieldDefinition:
    allowed = _option_values(options, values)
    return make_field(
        name,
        type_,
        label,
        _string(required).valid(*allowed),
        (_base("Select an option", "Dewiswch opsiwn"),),
        required=required,
        options=options,
        **kwargs,
    )


def select_field(name: str, label: LocaleText, options: Any, **kwargs: Any) -> FieldDefinition:
    return radio_field(name, label, options, type_=FieldType.SELECT, **kwargs)


def checkbox_field(
    name: str, label: LocaleText, options: Any, *, required: bool = True, values: Sequence[str] | None = None, **kwargs: Any
) -> FieldDefinition:
    allowed = _option_values(options, values)
    schema = rules.array_of(rules.string().valid(*allowed)).single()
    if required:
        schema = schema.min(1)
    return make_field(
        name,
        FieldType.CHECKBOX,
        label,
        _presence(schema, required),
        (_base("Select at least one option", "Dewiswch o leiaf un opsiwn"),),
        required=required,
        options=options,
        **kwargs,
    )


def currency_field(
    name: str, label: LocaleText, *, min_amount: int = 1, max_amount: int | None = None, required: bool = True, **kwargs: Any
) -> FieldDefinition:
    schema = rules.number().friendly().integer().min(min_amount)
    defaults = [
        _base("Enter an amount", "Rhowch swm"),
        msg("number.base", "Amount must be a number", "Rhaid i'r swm fod yn rhif"),
        msg("number.integer", "Amount must be a whole number", "Rhaid i'r swm fod yn rhif cyfan"),
        msg("number.min", f"Amount must be at least £{min_amount:,}", f"Rhaid i'r swm fod o leiaf £{min_amount:,}"),
    ]
    if max_amount is not None:
        schema = schema.max(max_amount)
        defaults.append(
            msg("number.max", f"Amount must be £{max_amount:,} or less", f"Rhaid i'r swm fod yn £{max_amount:,} neu lai")
        )
    return make_field(name, FieldType.CURRENCY, label, _presence(schema, required), defaults, required=required, **kwargs)


def number_field(
    name: str, label: LocaleText, *, min_value: int | None = None, max_value: int | None = None, required: bool = True, **kwargs: Any
) -> FieldDefinition:
    schema = rules.number().integer()
    defaults = [
        _base("Enter a number", "Rhowch rif"),
        msg("number.base", "Answer must be a number", "Rhaid i'r ateb fod yn rhif"),
    ]
    if min_value is not None:
        schema = schema.min(min_value)
        defaults.append(msg("number.min", f"Number must be at least {min_value}", f"Rhaid i'r rhif fod o leiaf {min_value}"))
    if max_value is not None:
        schema = schema.max(max_value)
        defaults.append(msg("number.max", f"Number must be {max_value} or less", f"Rhaid i'r rhif fod yn {max_value} neu lai"))
    return make_field(name, FieldType.NUMBER, label, _presence(schema, required), defaults, required=required, **kwargs)


def date_field(
    name: str, label: LocaleText, *, min_date: Any = None, max_date: Any = None, required: bool = True, **kwargs: Any
) -> FieldDefinition:
    schema = rules.date_parts()
    if min_date is not None:
        schema = schema.min_date(min_date)
    if max_date is not None:
        schema = schema.max_date(max_date)
    return make_field(
        name,
        FieldType.DATE,
        label,
        _presence(schema, required),
        (
            _base("Enter a date", "Rhowch ddyddiad"),
            msg("any.invalid", "Enter a real date", "Rhowch ddyddiad go iawn"),
            msg("dateParts.minDate", "Date is too far in the past", "Mae'r dyddiad yn rhy bell yn y gorffennol"),
            msg("dateParts.maxDate", "Date is too recent", "Mae'r dyddiad yn rhy ddiweddar"),
        ),
        required=required,
        **kwargs,
    )


def date_range_field(
    name: str,
    label: LocaleText,
    *,
    min_date: Any = None,
    end_date_limit: tuple[int, str] | None = None,
    required: bool = True,
    **kwargs: Any,
) -> FieldDefinition:
    schema = rules.date_range()
    if min_date is not None:
        schema = schema.min_date(min_date)
    if end_date_limit is not None:
        schema = schema.end_date_limit(*end_date_limit)
    return make_field(
        name,
        FieldType.DATE_RANGE,
        label,
        _presence(schema, required),
        (
            _base("Enter a start and end date", "Rhowch ddyddiad dechrau a gorffen"),
            msg("dateRange.both.invalid", "Enter a real start and end date", "Rhowch ddyddiad dechrau a gorffen go iawn"),
            msg("dateRange.startDate.invalid", "Enter a real start date", "Rhowch ddyddiad dechrau go iawn"),
            msg("dateRange.endDate.invalid", "Enter a real end date", "Rhowch ddyddiad gorffen go iawn"),
            msg("dateRange.endDate.beforeStartDate", "End date must be after the start date",
                "Rhaid i'r dyddiad gorffen fod ar ôl y dyddiad dechrau"),
            msg("dateRange.minDate.invalid", "Date you start the project must be in the future",
                "Rhaid i'r dyddiad dechrau fod yn y dyfodol"),
            msg("dateRange.endDate.outsideLimit", "Date you end the project must be within the allowed period",
                "Rhaid i'r dyddiad gorffen fod o fewn y cyfnod a ganiateir"),
        ),
        required=required,
        **kwargs,
    )


def day_month_field(name: str, label: LocaleText, *, required: bool = True, **kwargs: Any) -> FieldDefinition:
    return make_field(
        name,
        FieldType.DAY_MONTH,
        label,
        _presence(rules.day_month(), required),
        (
            _base("Enter a day and month", "Rhowch ddiwrnod a mis"),
            msg("any.invalid", "Enter a real day and month", "Rhowch ddiwrnod a mis go iawn"),
        ),
        required=required,
        **kwargs,
    )


def month_year_field(name: str, label: LocaleText, *, required: bool = True, not_in_future: bool = True, **kwargs: Any) -> FieldDefinition:
    return make_field(
        name,
        FieldType.MONTH_YEAR,
        label,
        _presence(rules.month_year(not_in_future=not_in_future), required),
        (
            _base("Enter a month and year", "Rhowch fis a blwyddyn"),
            msg("any.invalid", "Enter a real month and year", "Rhowch fis a blwyddyn go iawn"),
            msg("monthYear.future", "Date must be in the past", "Rhaid i'r dyddiad fod yn y gorffennol"),
        ),
        required=required,
        **kwargs,
    )


def _address_messages() -> tuple[MessageSpec, ...]:
    return (
        _base("Enter a full UK address", "Rhowch gyfeiriad llawn yn y DU"),
        msg("any.required", "Enter a building and street", "Rhowch adeilad a stryd", key="line1"),
        msg("any.empty", "Enter a building and street", "Rhowch adeilad a stryd", key="line1"),
        msg("string.max", "Building and street must be 255 characters or less",
            "Rhaid i'r adeilad a'r stryd fod yn 255 nod neu lai", key="line1"),
        msg("any.required", "Enter a town or city", "Rhowch dref neu ddinas", key="town_city"),
        msg("any.empty", "Enter a town or city", "Rhowch dref neu ddinas", key="town_city"),
        msg("string.max", "Town or city must be 40 characters or less",
            "Rhaid i'r dref neu ddinas fod yn 40 nod neu lai", key="town_city"),
        msg("any.required", "Enter a postcode", "Rhowch god post", key="postcode"),
        msg("any.empty", "Enter a postcode", "Rhowch god post", key="postcode"),
        msg("string.regex", "Enter a real postcode", "Rhowch god post go iawn", key="postcode"),
    )


def address_field(name: str, label: LocaleText, *, required: bool = True, **kwargs: Any) -> FieldDefinition:
    return make_field(
        name, FieldType.ADDRESS, label, _presence(rules.uk_address(), required), _address_messages(), required=required, **kwargs
    )


def address_history_field(name: str, label: LocaleText, *, required: bool = True, **kwargs: Any) -> FieldDefinition:
    return make_field(
        name,
        FieldType.ADDRESS_HISTORY,
        label,
        _presence(rules.address_history(), required),
        _address_messages()
        + (
            msg("any.required", "Enter a previous address", "Rhowch gyfeiriad blaenorol", key="previous_address"),
            msg("any.allowOnly", "Answer whether you have lived at this address for three years or more",
                "Atebwch a ydych wedi byw yn y cyfeiriad hwn am dair blynedd neu fwy",
                key="current_address_meets_minimum"),
        ),
        required=required,
        **kwargs,
    )


def full_name_field(name: str, label: LocaleText, *, required: bool = True, **kwargs: Any) -> FieldDefinition:
    return make_field(
        name,
        FieldType.FULL_NAME,
        label,
        _presence(rules.full_name(), required),
        (
            _base("Enter first and last name", "Rhowch enw cyntaf a chyfenw"),
            msg("any.required", "Enter first name", "Rhowch enw cyntaf", key="first_name"),
            msg("any.empty", "Enter first name", "Rhowch enw cyntaf", key="first_name"),
            msg("string.max", "First name must be 40 characters or less",
                "Rhaid i'r enw cyntaf fod yn 40 nod neu lai", key="first_name"),
            msg("any.required", "Enter last name", "Rhowch gyfenw", key="last_name"),
            msg("any.empty", "Enter last name", "Rhowch gyfenw", key="last_name"),
            msg("string.max", "Last name must be 80 characters or less",
                "Rhaid i'r cyfenw fod yn 80 nod neu lai", key="last_name"),
        ),
        required=required,
        **kwargs,
    )


def budget_field(
    name: str, label: LocaleText, *, min_total: int = 0, max_total: int, max_rows: int = 10, required: bool = True, **kwargs: Any
) -> FieldDefinition:
    schema = rules.budget_items().max(max_rows).valid_budget_range(min_total, max_total)
    return make_field(
        name,
        FieldType.BUDGET,
        label,
        _presence(schema, required),
        (
            _base("Enter a project budget", "Rhowch gyllideb prosiect"),
            msg("array.min", "Enter at least one budget item", "Rhowch o leiaf un eitem yn y gyllideb"),
            msg("array.max", f"Enter no more than {max_rows} budget items",
                f"Rhowch ddim mwy na {max_rows} eitem yn y gyllideb"),
            msg("any.required", "Enter an item or activity", "Rhowch eitem neu weithgaredd", key="item"),
            msg("any.empty", "Enter an item or activity", "Rhowch eitem neu weithgaredd", key="item"),
            msg("any.required", "Enter an amount", "Rhowch swm", key="cost"),
            msg("number.base", "Amount must be a number", "Rhaid i'r swm fod yn rhif", key="cost"),
            msg("budgetItems.overBudget", f"Costs you would like us to fund must be £{max_total:,} or less",
                f"Rhaid i'r costau yr hoffech i ni eu hariannu fod yn £{max_total:,} neu lai"),
            msg("budgetItems.underBudget", f"Costs you would like us to fund must be at least £{min_total:,}",
                f"Rhaid i'r costau yr hoffech i ni eu hariannu fod o leiaf £{min_total:,}"),
        ),
        required=required,
        attributes={"maxRows": max_rows, "maxBudget": max_total, **kwargs.pop("attributes", {})},
        **kwargs,
    )


def file_field(
    name: str,
    label: LocaleText,
    *,
    max_bytes: int = MAX_FILE_BYTES,
    mime_types: Sequence[str] = FILE_MIME_TYPES,
    required: bool = True,
    **kwargs: Any,
) -> FieldDefinition:
    max_mb = max_bytes // (1024 * 1024)
    return make_field(
        name,
        FieldType.FILE,
        label,
        _presence(rules.file_metadata(max_bytes=max_bytes, mime_types=mime_types), required),
        (
            _base("Provide a file", "Darparwch ffeil"),
            msg("any.allowOnly", "File must be a PNG, JPEG or PDF", "Rhaid i'r ffeil fod yn PNG, JPEG neu PDF", key="type"),
            msg("number.max", f"File must be less than {max_mb}MB", f"Rhaid i'r ffeil fod yn llai na {max_mb}MB", key="size"),
        ),
        required=required,
        attributes={"accept": ",".join(mime_types), "maxBytes": max_bytes, **kwargs.pop("attributes", {})},
        **kwargs,
    )


__all__ = [
    "MAX_FILE_BYTES",
    "FILE_MIME_TYPES",
    "msg",
    "option",
    "merge_messages",
    "make_field",
    "only_when",
    "text_field",
    "textarea_field",
    "email_field",
    "phone_field",
    "radio_field",
    "select_field",
    "checkbox_field",
    "currency_field",
    "number_field",
    "date_field",
    "date_range_field",
    "day_month_field",
    "month_year_field",
    "address_field",
    "address_history_field",
    "full_name_field",
    "budget_field",
    "file_field",
]
