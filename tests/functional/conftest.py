"""Fixtures for functional tests.

`demo_definition` is a small four-section form built with the same field
builders as the production forms:

- about (has an introduction): name, partner question, partner name (only
  when there is a partner), contact email;
- extras (no introduction): partnership length, only when there is a partner;
- money: amount requested, then a multipart step uploading evidence.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional

import pytest

from grantforms.forms.under_10k import build_under_10k
from grantforms.logic.field_builders import (
    checkbox_field,
    currency_field,
    email_field,
    file_field,
    msg,
    number_field,
    only_when,
    option,
    radio_field,
    text_field,
)
from grantforms.logic.shape_resolver import show_if_answer_in
from grantforms.models.form_definition import (
    FeaturedError,
    Fieldset,
    FormDefinition,
    Section,
    Step,
)

DEMO_FORM_ID = "demo-grant"


def catalog_for(sections: Iterable[Section]) -> dict:
    return {
        field.name: field
        for section in sections
        for step in section.steps
        for fieldset in step.fieldsets
        for field in fieldset.fields
    }


def build_demo_definition(
    pre_flight_check: Optional[Callable[..., Any]] = None, before_start: str = "summary"
) -> FormDefinition:
    has_partner = show_if_answer_in("has-partner", ("yes",))

    name = text_field("applicant-name", {"en": "Your name", "cy": "Eich enw"}, max_length=40)
    partner_question = radio_field(
        "has-partner",
        {"en": "Are you working with a partner?", "cy": "Ydych chi'n gweithio gyda phartner?"},
        (option("yes", {"en": "Yes", "cy": "Ydw"}), option("no", {"en": "No", "cy": "Nac ydw"})),
        messages=(msg("base", "Tell us if you have a partner", "Dywedwch wrthym os oes gennych bartner"),),
    )
    partner_name = only_when(text_field("partner-name", "Partner name"), has_partner)
    email = email_field("contact-email", {"en": "Email", "cy": "E-bost"})
    partner_years = only_when(
        number_field("partner-years", "How many years have you worked together?", min_value=0),
        has_partner,
    )
    amount = currency_field("amount", "How much would you like?", max_amount=5000)
    evidence = file_field("evidence", "Upload your evidence")

    sections = (
        Section(
            slug="about",
            title={"en": "About you", "cy": "Amdanoch chi"},
            short_title="About",
            introduction={"en": "Tell us about yourself", "cy": "Dywedwch wrthym amdanoch eich hun"},
            steps=(
                Step(title="Name", fieldsets=(Fieldset(fields=(name,)),)),
                Step(title="Partner", fieldsets=(Fieldset(fields=(partner_question,)),)),
                Step(title="Partner name", fieldsets=(Fieldset(fields=(partner_name,)),)),
                Step(title="Contact", fieldsets=(Fieldset(fields=(email,)),)),
            ),
        ),
        Section(
            slug="extras",
            title="Partnership",
            steps=(Step(title="Partnership length", fieldsets=(Fieldset(fields=(partner_years,)),)),),
        ),
        Section(
            slug="money",
            title="Money",
            steps=(
                Step(title="Amount", fieldsets=(Fieldset(fields=(amount,)),), pre_flight_check=pre_flight_check),
                Step(title="Evidence", fieldsets=(Fieldset(fields=(evidence,)),), is_multipart=True),
            ),
        ),
    )

    def _summary(value: Mapping[str, Any], locale: str) -> dict:
        return {"title": value.get("applicant-name") or "Untitled", "locale": locale}

    def _for_submission(value: Mapping[str, Any]) -> dict:
        return {**value, "amount-pence": int(value.get("amount", 0)) * 100}

    return FormDefinition(
        id=DEMO_FORM_ID,
        title={"en": "Demo grant", "cy": "Grant enghreifftiol"},
        sections=sections,
        all_fields=catalog_for(sections),
        terms_fields=(
            checkbox_field(
                "terms-agree",
                "I agree to the terms",
                (option("yes", "Yes"),),
                messages=(msg("base", "You must agree to the terms"),),
            ),
        ),
        featured_errors_allow_list=(
            FeaturedError(field_name="contact-email"),
            FeaturedError(field_name="has-partner", include_base=True),
        ),
        summary=_summary,
        for_submission=_for_submission,
        before_start=before_start,
    )


EVIDENCE = {"filename": "statement.pdf", "size": 1024, "type": "application/pdf"}


@pytest.fixture
def demo_definition() -> FormDefinition:
    return build_demo_definition()


@pytest.fixture
def complete_answers() -> dict:
    return {
        "applicant-name": "Ada Lovelace",
        "has-partner": "no",
        "contact-email": "ada@example.com",
        "amount": "£1,200",
        "evidence": dict(EVIDENCE),
    }


@pytest.fixture(scope="session")
def under_10k() -> FormDefinition:
    return build_under_10k()


@pytest.fixture
def make_demo_definition() -> Callable[..., FormDefinition]:
    """Factory for demo definitions with a custom pre-flight check or before-start terminal."""
    return build_demo_definition
