"""Functional tests for answer validation and error normalisation.

Covers sanitisation of the answer set (unknown and hidden keys removed),
message selection by tier, first-error-per-field and featured errors.
"""

from __future__ import annotations

from grantforms.logic.error_normaliser import first_error_per_field, select_featured
from grantforms.logic.field_builders import address_field, currency_field, msg, text_field
from grantforms.logic.validator import validate_answers
from grantforms.models.form_definition import FeaturedError
from grantforms.models.validation import ErrorDetail, FieldMessage

VALID_ADDRESS = {"line1": "1 High Street", "town_city": "Cardiff", "postcode": "CF10 1AA"}


def _messages(result) -> list[tuple[str, str]]:
    return [(m.field_name, m.message) for m in result.messages]


def test_unknown_keys_are_removed_from_the_sanitised_value(demo_definition, complete_answers) -> None:
    result = validate_answers(demo_definition.all_fields, {**complete_answers, "rogue": "<script>"})
    assert "rogue" not in result.value
    assert result.is_valid


def test_hidden_fields_are_stripped_and_never_fail(demo_definition, complete_answers) -> None:
    answers = {**complete_answers, "has-partner": "no", "partner-name": "Ghost", "partner-years": "-4"}
    result = validate_answers(demo_definition.all_fields, answers)
    assert "partner-name" not in result.value
    assert "partner-years" not in result.value
    assert result.is_valid


def test_revealed_required_field_reports_base_message(demo_definition, complete_answers) -> None:
    result = validate_answers(demo_definition.all_fields, {**complete_answers, "has-partner": "yes"})
    assert not result.is_valid
    partner = result.messages_for("partner-name")
    assert [m.message for m in partner] == ["Enter an answer"]
    assert partner[0].type == "base"
    assert partner[0].raw_type == "any.required"
    assert partner[0].label == "Partner name"


def test_sanitised_values_are_coerced(demo_definition, complete_answers) -> None:
    result = validate_answers(demo_definition.all_fields, {**complete_answers, "applicant-name": "  Ada  "})
    assert result.value["applicant-name"] == "Ada"
    assert result.value["amount"] == 1200


def test_keyed_message_wins_over_type_and_base() -> None:
    field = address_field("home", "Home address", messages=(msg("string.regex", "Generic format problem"),))
    result = validate_answers({"home": field}, {"home": {**VALID_ADDRESS, "postcode": "not a postcode"}})
    assert _messages(result) == [("home", "Enter a real postcode")]
    assert result.messages[0].type == "string.regex"


def test_unkeyed_type_message_is_used_before_base() -> None:
    field = currency_field("amount", "Amount", max_amount=100)
    result = validate_answers({"amount": field}, {"amount": "lots"})
    assert _messages(result) == [("amount", "Amount must be a number")]
    result = validate_answers({"amount": field}, {"amount": "101"})
    assert _messages(result) == [("amount", "Amount must be £100 or less")]


def test_every_entry_in_the_winning_tier_is_emitted() -> None:
    field = text_field(
        "name",
        "Name",
        messages=(msg("any.required", "Enter your name"), msg("any.required", "We need this to contact you")),
    )
    result = validate_answers({"name": field}, {})
    assert [m.message for m in result.messages] == ["Enter your name", "We need this to contact you"]


def test_only_the_first_failure_per_field_is_reported() -> None:
    field = address_field("home", "Home address")
    result = validate_answers({"home": field}, {"home": {**VALID_ADDRESS, "line1": "", "postcode": "nope"}})
    assert len(result.error) == 2
    assert _messages(result) == [("home", "Enter a building and street")]


def test_first_error_per_field_keeps_report_order() -> None:
    errors = [
        ErrorDetail(path=("b",), type="any.required"),
        ErrorDetail(path=("a", "x"), type="string.max"),
        ErrorDetail(path=("b",), type="string.max"),
    ]
    assert [(e.field_name, e.type) for e in first_error_per_field(errors)] == [("b", "any.required"), ("a", "string.max")]


def test_messages_are_localised() -> None:
    field = text_field("name", "Name")
    result = validate_answers({"name": field}, {}, "cy")
    assert [m.message for m in result.messages] == ["Rhowch ateb"]


def test_featured_errors_respect_the_allow_list(demo_definition) -> None:
    result = validate_answers(
        demo_definition.all_fields,
        {"contact-email": "not-an-email"},
        featured_allow_list=demo_definition.featured_errors_allow_list,
    )
    featured = {m.field_name: m.type for m in result.featured_messages}
    # has-partner opts in to its generic message; applicant-name is not listed
    assert featured == {"contact-email": "string.email", "has-partner": "base"}


def test_base_messages_are_not_featured_without_opt_in() -> None:
    messages = [FieldMessage(field_name="email", message="Enter an email", type="base")]
    assert select_featured(messages, [FeaturedError(field_name="email")]) == ()
    assert len(select_featured(messages, [FeaturedError(field_name="email", include_base=True)])) == 1


def test_empty_answers_produce_required_messages(demo_definition) -> None:
    result = validate_answers(demo_definition.all_fields, None)
    assert result.value == {}
    assert {m.field_name for m in result.messages} == {"applicant-name", "has-partner", "contact-email", "amount", "evidence"}
    assert result.is_valid is False
