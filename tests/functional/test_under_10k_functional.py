"""Functional scenarios for the under £10,000 application form."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from grantforms.forms.constants import SCHEMA_VERSION
from grantforms.logic.form_model import build_form_model
from grantforms.logic.rules import add_months
from grantforms.logic.shape_resolver import resolve_active_shape

WORDS_60 = " ".join(["word"] * 60)
ADDRESS = {"line1": "1 High Street", "town_city": "Birmingham", "postcode": "B1 1AA"}


def _parts(value: date) -> dict:
    return {"day": value.day, "month": value.month, "year": value.year}


def _years_ago(years: int) -> date:
    return add_months(date.today(), -12 * years)


def complete_application(**overrides) -> dict:
    start = date.today() + timedelta(days=30)
    answers = {
        "project-name": "Community garden",
        "project-country": "england",
        "project-location-description": "Digbeth",
        "project-postcode": "B1 1AA",
        "project-date-range": {"start_date": _parts(start), "end_date": _parts(add_months(start, 6))},
        "your-idea-project": WORDS_60,
        "your-idea-priorities": WORDS_60,
        "your-idea-community": WORDS_60,
        "project-budget": [{"item": "Tools", "cost": "1,500"}, {"item": "Seeds", "cost": 500}],
        "project-total-costs": "2500",
        "beneficiaries-groups-check": "no",
        "organisation-legal-name": "Digbeth Gardeners",
        "organisation-address": ADDRESS,
        "organisation-type": "unregistered-vco",
        "accounting-year-date": {"day": 31, "month": 3},
        "total-income-year": "25,000",
        "senior-contact-role": "chair",
        "senior-contact-name": {"first_name": "Grace", "last_name": "Hopper"},
        "senior-contact-date-of-birth": _parts(_years_ago(50)),
        "senior-contact-address": ADDRESS,
        "senior-contact-address-history": {"current_address_meets_minimum": "yes"},
        "senior-contact-email": "grace@example.com",
        "senior-contact-phone": "0121 496 0000",
        "main-contact-name": {"first_name": "Ada", "last_name": "Lovelace"},
        "main-contact-date-of-birth": _parts(_years_ago(30)),
        "main-contact-address": ADDRESS,
        "main-contact-address-history": {"current_address_meets_minimum": "yes"},
        "main-contact-email": "ada@example.com",
        "main-contact-phone": "0121 496 0001",
        "bank-account-name": "Digbeth Gardeners",
        "bank-sort-code": "10-88-00",
        "bank-account-number": "00012345",
        "bank-statement": {"filename": "statement.pdf", "size": 2048, "type": "application/pdf"},
    }
    answers.update(overrides)
    return answers


def _messages(form) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for message in form.validation.messages:
        grouped.setdefault(message.field_name, []).append(message.message)
    return grouped


def _active_names(form, slug: str) -> list[str]:
    return list(form.get_section(slug).field_names)


def test_complete_application_is_valid(under_10k) -> None:
    form = build_form_model(under_10k, "en", complete_application())
    assert _messages(form) == {}
    assert form.progress.is_complete
    assert form.validation.value["bank-sort-code"] == "108800"
    assert form.validation.value["project-total-costs"] == 2500


def test_school_hides_and_strips_contact_personal_details(under_10k) -> None:
    answers = complete_application(
        **{"organisation-type": "school", "education-number": "123456", "senior-contact-role": "head-teacher"}
    )
    form = build_form_model(under_10k, "en", answers)
    assert _messages(form) == {}
    senior = _active_names(form, "senior-contact")
    assert "senior-contact-date-of-birth" not in senior
    assert "senior-contact-address" not in senior
    for key in ("senior-contact-date-of-birth", "senior-contact-address", "main-contact-address-history"):
        assert key not in form.validation.value


def test_role_must_fit_the_organisation_type(under_10k) -> None:
    answers = complete_application(**{"senior-contact-role": "head-teacher"})
    assert "senior-contact-role" not in _messages(build_form_model(under_10k, "en", answers))
    # Option visibility only affects display; any listed role validates
    bogus = complete_application(**{"senior-contact-role": "emperor"})
    assert _messages(build_form_model(under_10k, "en", bogus))["senior-contact-role"] == ["Choose a role"]


def test_welsh_projects_ask_about_the_welsh_language(under_10k) -> None:
    english = build_form_model(under_10k, "en", complete_application())
    assert "beneficiaries-welsh-language" not in _active_names(english, "beneficiaries")

    welsh = build_form_model(under_10k, "en", complete_application(**{"project-country": "wales"}))
    assert "beneficiaries-welsh-language" in _active_names(welsh, "beneficiaries")
    assert "main-contact-language-preference" in _active_names(welsh, "main-contact")
    assert set(_messages(welsh)) == {
        "beneficiaries-welsh-language",
        "senior-contact-language-preference",
        "main-contact-language-preference",
    }


def test_northern_ireland_community_question(under_10k) -> None:
    form = build_form_model(
        under_10k,
        "en",
        complete_application(
            **{"project-country": "northern-ireland", "beneficiaries-northern-ireland-community": "mainly-catholic"}
        ),
    )
    assert _messages(form) == {}
    assert form.validation.value["beneficiaries-northern-ireland-community"] == "mainly-catholic"


@pytest.mark.parametrize(
    "org_type, required",
    [
        ("charitable-incorporated-organisation", True),
        ("unincorporated-registered-charity", True),
        ("faith-group", False),
        ("not-for-profit-company", False),
    ],
)
def test_charity_number_requiredness(under_10k, org_type, required) -> None:
    overrides = {"organisation-type": org_type}
    if org_type == "not-for-profit-company":
        overrides.update({"company-number": "01234567", "senior-contact-role": "company-director"})
    form = build_form_model(under_10k, "en", complete_application(**overrides))
    assert ("charity-number" in _messages(form)) is required


def test_charity_number_is_stripped_when_not_asked(under_10k) -> None:
    form = build_form_model(under_10k, "en", complete_application(**{"charity-number": "1234567"}))
    assert "charity-number" not in form.validation.value


def test_specific_groups_reveal_follow_up_questions(under_10k) -> None:
    answers = complete_application(
        **{"beneficiaries-groups-check": "yes", "beneficiaries-groups": ["age", "gender"]}
    )
    form = build_form_model(under_10k, "en", answers)
    sections = resolve_active_shape(under_10k, answers)
    beneficiaries = next(s for s in sections if s.slug == "beneficiaries")
    required_steps = [step.title for step in beneficiaries.steps if step.is_required]
    assert required_steps == ["Specific groups of people", "Specific groups of people", "Gender", "Age"]
    assert set(_messages(form)) == {"beneficiaries-groups-gender", "beneficiaries-groups-age"}


def test_main_contact_must_differ_from_senior_contact(under_10k) -> None:
    answers = complete_application(
        **{
            "main-contact-name": {"first_name": "Grace", "last_name": "Hopper"},
            "main-contact-email": "grace@example.com",
        }
    )
    form = build_form_model(under_10k, "en", answers)
    messages = _messages(form)
    assert messages["main-contact-name"] == ["Main contact name must be different from the senior contact"]
    assert messages["main-contact-email"] == ["Main contact email address must be different from the senior contact"]
    featured = {m.field_name for m in form.validation.featured_messages}
    assert {"main-contact-name", "main-contact-email"} <= featured


def test_contacts_must_be_old_enough(under_10k) -> None:
    answers = complete_application(
        **{
            "senior-contact-date-of-birth": _parts(_years_ago(17)),
            "main-contact-date-of-birth": _parts(_years_ago(15)),
        }
    )
    messages = _messages(build_form_model(under_10k, "en", answers))
    assert messages["senior-contact-date-of-birth"] == ["Contact must be at least 18 years old"]
    assert messages["main-contact-date-of-birth"] == ["Contact must be at least 16 years old"]


def test_project_dates(under_10k) -> None:
    start = date.today() + timedelta(days=10)
    too_long = {"start_date": _parts(start), "end_date": _parts(add_months(start, 13))}
    messages = _messages(build_form_model(under_10k, "en", complete_application(**{"project-date-range": too_long})))
    assert messages["project-date-range"] == ["Date you end the project must be within 12 months of the start date"]

    past = date.today() - timedelta(days=10)
    in_past = {"start_date": _parts(past), "end_date": _parts(start)}
    messages = _messages(build_form_model(under_10k, "en", complete_application(**{"project-date-range": in_past})))
    assert messages["project-date-range"] == ["Date you start the project must be in the future"]


def test_budget_limits_and_total_costs(under_10k) -> None:
    over = complete_application(**{"project-budget": [{"item": "Minibus", "cost": 10001}], "project-total-costs": 20000})
    assert _messages(build_form_model(under_10k, "en", over))["project-budget"] == [
        "Costs you would like us to fund must be £10,000 or less"
    ]

    under_total = complete_application(**{"project-total-costs": "1000"})
    assert _messages(build_form_model(under_10k, "en", under_total))["project-total-costs"] == [
        "Total cost must be the same as or higher than the amount you're asking us to fund"
    ]


def test_bank_details_are_normalised_and_checked_for_length(under_10k) -> None:
    answers = complete_application(**{"bank-sort-code": "10 88", "bank-account-number": "123"})
    messages = _messages(build_form_model(under_10k, "en", answers))
    assert messages["bank-sort-code"] == ["Sort code must be six digits long"]
    assert messages["bank-account-number"] == ["Enter a valid length account number"]


def test_summary_headline(under_10k) -> None:
    start = date.today() + timedelta(days=30)
    summary = build_form_model(under_10k, "en", complete_application()).summary
    assert summary["title"] == "Community garden"
    assert summary["country"] == "england"
    overview = {row["label"]: row["value"] for row in summary["overview"]}
    assert overview["Organisation"] == "Digbeth Gardeners"
    assert overview["Requested amount"] == "£2,000"
    assert overview["Project dates"].startswith(f"{start.day} ")

    untitled = build_form_model(under_10k, "cy", {}).summary
    assert untitled["title"] == "Cais heb deitl"


def test_for_submission_flattens_dates_and_totals(under_10k) -> None:
    start = date.today() + timedelta(days=30)
    payload = build_form_model(under_10k, "en", complete_application()).for_submission()
    assert payload["project-start-date"] == start.isoformat()
    assert payload["project-date-range"]["end_date"] == add_months(start, 6).isoformat()
    assert payload["senior-contact-date-of-birth"] == _years_ago(50).isoformat()
    assert payload["project-budget-total"] == 2000
    assert payload["schema-version"] == SCHEMA_VERSION


def test_for_submission_leaves_absent_dates_out(under_10k) -> None:
    answers = complete_application()
    del answers["project-date-range"]
    payload = build_form_model(under_10k, "en", answers).for_submission()
    for key in ("project-date-range", "project-start-date", "project-end-date"):
        assert key not in payload
    assert payload["project-name"] == "Community garden"


def test_terms(under_10k) -> None:
    form = build_form_model(under_10k, "en", complete_application())
    assert not form.validate_terms({"terms-agreement-1": "yes"}).is_valid
    accepted = form.validate_terms(
        {
            "terms-agreement-1": "yes",
            "terms-agreement-2": "yes",
            "terms-person-name": "Grace Hopper",
            "terms-person-position": "Chair",
        }
    )
    assert accepted.is_valid
