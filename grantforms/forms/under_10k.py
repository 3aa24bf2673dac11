"""Apply for funding under £10,000.

Field names are kebab-case and double as the keys of the stored answer set.
Conditional questions pair a `should_show` predicate (display) with a
conditional schema that strips the answer when hidden (data).
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Mapping, Optional

from grantforms.forms.constants import (
    CHARITY_NUMBER_OPTIONAL_TYPES,
    CHARITY_NUMBER_REQUIRED_TYPES,
    COMPANY_NUMBER_TYPES,
    CONTACT_EXCLUDED_TYPES,
    EDUCATION_NUMBER_TYPES,
    FORM_ID,
    FREE_TEXT_MAXLENGTH,
    MAX_BUDGET_TOTAL_GBP,
    MAX_CONTACT_AGE,
    MAX_PROJECT_LENGTH_MONTHS,
    MIN_AGE_MAIN_CONTACT,
    MIN_AGE_SENIOR_CONTACT,
    MIN_BUDGET_TOTAL_GBP,
    SCHEMA_VERSION,
    BeneficiaryGroup,
    Country,
    OrganisationType,
    StatutoryBodyType,
)
from grantforms.logic import rules
from grantforms.logic.bank_check import BankCheckClient, bank_account_pre_flight_check
from grantforms.logic.field_builders import (
    address_field,
    address_history_field,
    checkbox_field,
    currency_field,
    date_field,
    date_range_field,
    day_month_field,
    email_field,
    file_field,
    full_name_field,
    make_field,
    msg,
    only_when,
    option,
    phone_field,
    radio_field,
    text_field,
    textarea_field,
    budget_field,
)
from grantforms.logic.formatters import format_currency, format_date
from grantforms.logic.localisation import localise
from grantforms.logic.shape_resolver import answer_includes, show_if_answer_in, show_unless_answer_in
from grantforms.models.field_types import FieldType
from grantforms.models.form_definition import (
    AnswerPredicate,
    FeaturedError,
    FieldDefinition,
    Fieldset,
    FormDefinition,
    Section,
    Step,
)

BankClientFactory = Callable[[], Optional[BankCheckClient]]


def _years_ago(today: date, years: int) -> date:
    return rules.add_months(today, -12 * years)


# ---------------------------------------------------------------------------
# Your project
# ---------------------------------------------------------------------------


def _project_fields() -> dict[str, FieldDefinition]:
    countries = (
        option(Country.ENGLAND, {"en": "England", "cy": "Lloegr"}),
        option(Country.NORTHERN_IRELAND, {"en": "Northern Ireland", "cy": "Gogledd Iwerddon"}),
        option(Country.SCOTLAND, {"en": "Scotland", "cy": "Yr Alban"}),
        option(Country.WALES, {"en": "Wales", "cy": "Cymru"}),
    )

    def _date_range_schema(_answers: Mapping[str, Any]) -> rules.Schema:
        return (
            rules.date_range()
            .min_date(date.today())
            .end_date_limit(MAX_PROJECT_LENGTH_MONTHS, "months")
            .required()
        )

    def _total_covers_budget(value: Any, answers: Mapping[str, Any]) -> Optional[rules.RuleFailure]:
        if value < rules.budget_total(answers.get("project-budget")):
            return rules.failure("totalCosts.underBudget")
        return None

    total_costs = currency_field(
        "project-total-costs",
        {"en": "Tell us the total cost of your project", "cy": "Dywedwch wrthym gyfanswm cost eich prosiect"},
        messages=(
            msg("totalCosts.underBudget", "Total cost must be the same as or higher than the amount you're asking us to fund",
                "Rhaid i gyfanswm y gost fod yr un faint neu'n uwch na'r swm rydych yn gofyn i ni ei ariannu"),
        ),
    )
    total_costs = total_costs.model_copy(update={"field_schema": total_costs.field_schema.rule(_total_covers_budget)})

    fields = (
        text_field(
            "project-name",
            {"en": "What is the name of your project?", "cy": "Beth yw enw eich prosiect?"},
            max_length=FREE_TEXT_MAXLENGTH["medium"],
            explanation={"en": "The project name should be simple and to the point",
                         "cy": "Dylai enw'r prosiect fod yn syml ac i'r pwynt"},
        ),
        radio_field(
            "project-country",
            {"en": "What country will your project be based in?", "cy": "Ym mha wlad fydd eich prosiect wedi'i leoli?"},
            countries,
            messages=(msg("base", "Select a country", "Dewiswch wlad"),),
        ),
        text_field(
            "project-location-description",
            {"en": "Tell us the towns, villages or wards where your beneficiaries live",
             "cy": "Dywedwch wrthym y trefi, pentrefi neu wardiau lle mae eich buddiolwyr yn byw"},
        ),
        make_field(
            "project-postcode",
            FieldType.TEXT,
            {"en": "What is the postcode of where your project will take place?",
             "cy": "Beth yw cod post lleoliad eich prosiect?"},
            rules.string().pattern(rules.POSTCODE_RE).required(),
            (
                msg("base", "Enter a real postcode", "Rhowch god post go iawn"),
                msg("string.regex", "Enter a real postcode", "Rhowch god post go iawn"),
            ),
            attributes={"size": 10},
        ),
        date_range_field(
            "project-date-range",
            {"en": "When would you like to start and end your project?",
             "cy": "Pryd hoffech ddechrau a gorffen eich prosiect?"},
            field_schema=_date_range_schema,
            messages=(
                msg("dateRange.endDate.outsideLimit",
                    f"Date you end the project must be within {MAX_PROJECT_LENGTH_MONTHS} months of the start date",
                    f"Rhaid i ddyddiad gorffen y prosiect fod o fewn {MAX_PROJECT_LENGTH_MONTHS} mis i'r dyddiad dechrau"),
            ),
        ),
        textarea_field(
            "your-idea-project",
            {"en": "What would you like to do?", "cy": "Beth hoffech ei wneud?"},
            min_words=50,
            max_words=300,
        ),
        textarea_field(
            "your-idea-priorities",
            {"en": "How does your project meet at least one of our funding priorities?",
             "cy": "Sut mae eich prosiect yn bodloni o leiaf un o'n blaenoriaethau ariannu?"},
            min_words=50,
            max_words=150,
        ),
        textarea_field(
            "your-idea-community",
            {"en": "How does your project involve your community?",
             "cy": "Sut mae eich prosiect yn cynnwys eich cymuned?"},
            min_words=50,
            max_words=200,
        ),
        budget_field(
            "project-budget",
            {"en": "List the costs you would like us to fund", "cy": "Rhestrwch y costau yr hoffech i ni eu hariannu"},
            min_total=MIN_BUDGET_TOTAL_GBP,
            max_total=MAX_BUDGET_TOTAL_GBP,
        ),
        total_costs,
    )
    return {f.name: f for f in fields}


def _project_section(f: Mapping[str, FieldDefinition]) -> Section:
    return Section(
        slug="your-project",
        title={"en": "Your project", "cy": "Eich prosiect"},
        summary={"en": "Please tell us about your project in this section.",
                 "cy": "Dywedwch wrthym am eich prosiect yn yr adran hon."},
        steps=(
            Step(title={"en": "Project name", "cy": "Enw'r prosiect"},
                 fieldsets=(Fieldset(fields=(f["project-name"],)),)),
            Step(title={"en": "Project country", "cy": "Gwlad y prosiect"},
                 fieldsets=(Fieldset(fields=(f["project-country"],)),)),
            Step(title={"en": "Project location", "cy": "Lleoliad y prosiect"},
                 fieldsets=(Fieldset(fields=(f["project-location-description"], f["project-postcode"])),)),
            Step(title={"en": "Project length", "cy": "Hyd y prosiect"},
                 fieldsets=(Fieldset(fields=(f["project-date-range"],)),)),
            Step(title={"en": "Your idea", "cy": "Eich syniad"},
                 fieldsets=(Fieldset(fields=(f["your-idea-project"], f["your-idea-priorities"], f["your-idea-community"])),)),
            Step(title={"en": "Project costs", "cy": "Costau'r prosiect"},
                 fieldsets=(Fieldset(fields=(f["project-budget"], f["project-total-costs"])),)),
        ),
    )


# ---------------------------------------------------------------------------
# Who will benefit
# ---------------------------------------------------------------------------


def _beneficiary_fields() -> dict[str, FieldDefinition]:
    groups_check = show_if_answer_in("beneficiaries-groups-check", ("yes",))
    in_wales = show_if_answer_in("project-country", (Country.WALES,))
    in_northern_ireland = show_if_answer_in("project-country", (Country.NORTHERN_IRELAND,))

    def _group(value: str) -> AnswerPredicate:
        return answer_includes("beneficiaries-groups", value)

    fields = (
        radio_field(
            "beneficiaries-groups-check",
            {"en": "Is your project open to everyone or is it aimed at a specific group of people?",
             "cy": "A yw eich prosiect yn agored i bawb neu a yw wedi'i anelu at grŵp penodol o bobl?"},
            (
                option("no", {"en": "My project is open to everyone", "cy": "Mae fy mhrosiect yn agored i bawb"}),
                option("yes", {"en": "My project is aimed at a specific group of people",
                               "cy": "Mae fy mhrosiect wedi'i anelu at grŵp penodol o bobl"}),
            ),
        ),
        only_when(
            checkbox_field(
                "beneficiaries-groups",
                {"en": "What specific groups of people is your project aimed at?",
                 "cy": "Pa grwpiau penodol o bobl yw eich prosiect wedi'i anelu atynt?"},
                (
                    option(BeneficiaryGroup.ETHNIC_BACKGROUND, {"en": "People from a particular ethnic background",
                                                                "cy": "Pobl o gefndir ethnig penodol"}),
                    option(BeneficiaryGroup.GENDER, {"en": "People of a particular gender", "cy": "Pobl o ryw penodol"}),
                    option(BeneficiaryGroup.AGE, {"en": "People of a particular age", "cy": "Pobl o oedran penodol"}),
                    option(BeneficiaryGroup.DISABLED_PEOPLE, {"en": "Disabled people", "cy": "Pobl anabl"}),
                    option(BeneficiaryGroup.RELIGION, {"en": "People with a particular religious belief",
                                                       "cy": "Pobl â chred grefyddol benodol"}),
                    option(BeneficiaryGroup.LGBT, {"en": "Lesbian, gay, or bisexual people",
                                                   "cy": "Pobl lesbiaidd, hoyw neu ddeurywiol"}),
                    option(BeneficiaryGroup.CARING, {"en": "People with caring responsibilities",
                                                     "cy": "Pobl â chyfrifoldebau gofalu"}),
                ),
            ),
            groups_check,
        ),
        only_when(
            text_field("beneficiaries-groups-other", {"en": "Other", "cy": "Arall"}, required=False),
            groups_check,
        ),
        only_when(
            checkbox_field(
                "beneficiaries-ethnic-background",
                {"en": "Ethnic background", "cy": "Cefndir ethnig"},
                (
                    option("white", {"en": "White", "cy": "Gwyn"}),
                    option("mixed", {"en": "Mixed or multiple ethnic groups", "cy": "Grwpiau ethnig cymysg neu luosog"}),
                    option("asian", {"en": "Asian or Asian British", "cy": "Asiaidd neu Asiaidd Prydeinig"}),
                    option("black", {"en": "Black, African, Caribbean or Black British",
                                     "cy": "Du, Affricanaidd, Caribïaidd neu Ddu Prydeinig"}),
                    option("other", {"en": "Other ethnic group", "cy": "Grŵp ethnig arall"}),
                ),
            ),
            _group(BeneficiaryGroup.ETHNIC_BACKGROUND),
        ),
        only_when(
            checkbox_field(
                "beneficiaries-groups-gender",
                {"en": "Gender", "cy": "Rhyw"},
                (
                    option("male", {"en": "Male", "cy": "Gwryw"}),
                    option("female", {"en": "Female", "cy": "Benyw"}),
                    option("trans", {"en": "Trans", "cy": "Traws"}),
                    option("non-binary", {"en": "Non-binary", "cy": "Anneuaidd"}),
                    option("intersex", {"en": "Intersex", "cy": "Rhyngrywiol"}),
                ),
            ),
            _group(BeneficiaryGroup.GENDER),
        ),
        only_when(
            checkbox_field(
                "beneficiaries-groups-age",
                {"en": "Age", "cy": "Oedran"},
                (
                    option("0-12", "0-12"),
                    option("13-24", "13-24"),
                    option("25-64", "25-64"),
                    option("65+", "65+"),
                ),
            ),
            _group(BeneficiaryGroup.AGE),
        ),
        only_when(
            checkbox_field(
                "beneficiaries-groups-disabled-people",
                {"en": "Disabled people", "cy": "Pobl anabl"},
                (
                    option("sensory", {"en": "Disabled people with sensory impairments",
                                       "cy": "Pobl anabl â nam ar y synhwyrau"}),
                    option("physical", {"en": "Disabled people with physical impairments or long-term illness",
                                        "cy": "Pobl anabl â namau corfforol neu salwch hirdymor"}),
                    option("learning", {"en": "Disabled people with learning or mental difficulties",
                                        "cy": "Pobl anabl ag anawsterau dysgu neu feddyliol"}),
                ),
            ),
            _group(BeneficiaryGroup.DISABLED_PEOPLE),
        ),
        only_when(
            checkbox_field(
                "beneficiaries-groups-religion",
                {"en": "Religion or belief", "cy": "Crefydd neu gred"},
                (
                    option("buddhist", {"en": "Buddhist", "cy": "Bwdhydd"}),
                    option("christian", {"en": "Christian", "cy": "Cristion"}),
                    option("hindu", {"en": "Hindu", "cy": "Hindŵ"}),
                    option("jewish", {"en": "Jewish", "cy": "Iddew"}),
                    option("muslim", {"en": "Muslim", "cy": "Mwslim"}),
                    option("sikh", {"en": "Sikh", "cy": "Sikh"}),
                    option("no-religion", {"en": "No religion", "cy": "Dim crefydd"}),
                ),
            ),
            _group(BeneficiaryGroup.RELIGION),
        ),
        only_when(
            radio_field(
                "beneficiaries-welsh-language",
                {"en": "How many of the people who will benefit from your project speak Welsh?",
                 "cy": "Faint o'r bobl a fydd yn elwa o'ch prosiect sy'n siarad Cymraeg?"},
                (
                    option("all", {"en": "All", "cy": "Pob un"}),
                    option("more-than-half", {"en": "More than half", "cy": "Mwy na hanner"}),
                    option("less-than-half", {"en": "Less than half", "cy": "Llai na hanner"}),
                    option("none", {"en": "None", "cy": "Dim"}),
                ),
            ),
            in_wales,
        ),
        only_when(
            radio_field(
                "beneficiaries-northern-ireland-community",
                {"en": "Which community do the people who will benefit from your project belong to?",
                 "cy": "I ba gymuned mae'r bobl a fydd yn elwa o'ch prosiect yn perthyn?"},
                (
                    option("both-catholic-and-protestant", {"en": "Both Catholic and Protestant",
                                                            "cy": "Catholig a Phrotestannaidd"}),
                    option("mainly-protestant", {"en": "Mainly Protestant", "cy": "Protestannaidd yn bennaf"}),
                    option("mainly-catholic", {"en": "Mainly Catholic", "cy": "Catholig yn bennaf"}),
                    option("neither-catholic-or-protestant", {"en": "Neither Catholic or Protestant",
                                                              "cy": "Ddim yn Gatholig na Phrotestannaidd"}),
                ),
            ),
            in_northern_ireland,
        ),
    )
    return {f.name: f for f in fields}


def _beneficiaries_section(f: Mapping[str, FieldDefinition]) -> Section:
    def _single(title: dict[str, str], *names: str) -> Step:
        return Step(title=title, fieldsets=(Fieldset(fields=tuple(f[n] for n in names)),))

    return Section(
        slug="beneficiaries",
        title={"en": "Who will benefit from your project?", "cy": "Pwy fydd yn elwa o'ch prosiect?"},
        short_title={"en": "Who will benefit", "cy": "Pwy fydd yn elwa"},
        summary={"en": "We want to hear more about the people who will benefit from your project.",
                 "cy": "Rydym eisiau clywed mwy am y bobl a fydd yn elwa o'ch prosiect."},
        steps=(
            _single({"en": "Specific groups of people", "cy": "Grwpiau penodol o bobl"}, "beneficiaries-groups-check"),
            _single({"en": "Specific groups of people", "cy": "Grwpiau penodol o bobl"},
                    "beneficiaries-groups", "beneficiaries-groups-other"),
            _single({"en": "Ethnic background", "cy": "Cefndir ethnig"}, "beneficiaries-ethnic-background"),
            _single({"en": "Gender", "cy": "Rhyw"}, "beneficiaries-groups-gender"),
            _single({"en": "Age", "cy": "Oedran"}, "beneficiaries-groups-age"),
            _single({"en": "Disabled people", "cy": "Pobl anabl"}, "beneficiaries-groups-disabled-people"),
            _single({"en": "Religion or belief", "cy": "Crefydd neu gred"}, "beneficiaries-groups-religion"),
            _single({"en": "People who speak Welsh", "cy": "Pobl sy'n siarad Cymraeg"}, "beneficiaries-welsh-language"),
            _single({"en": "Community", "cy": "Cymuned"}, "beneficiaries-northern-ireland-community"),
        ),
    )


# ---------------------------------------------------------------------------
# Organisation
# ---------------------------------------------------------------------------

ORGANISATION_TYPE_LABELS = {
    OrganisationType.UNREGISTERED_VCO: {
        "en": "Unregistered voluntary or community organisation",
        "cy": "Sefydliad gwirfoddol neu gymunedol anghofrestredig",
    },
    OrganisationType.UNINCORPORATED_REGISTERED_CHARITY: {
        "en": "Registered charity (unincorporated)",
        "cy": "Elusen gofrestredig (anghorfforedig)",
    },
    OrganisationType.CIO: {
        "en": "Charitable incorporated organisation (CIO)",
        "cy": "Sefydliad corfforedig elusennol (CIO)",
    },
    OrganisationType.NOT_FOR_PROFIT_COMPANY: {
        "en": "Not-for-profit company",
        "cy": "Cwmni di-elw",
    },
    OrganisationType.CIC: {
        "en": "Community Interest Company (CIC)",
        "cy": "Cwmni Budd Cymunedol (CIC)",
    },
    OrganisationType.SCHOOL: {
        "en": "School",
        "cy": "Ysgol",
    },
    OrganisationType.COLLEGE_OR_UNIVERSITY: {
        "en": "College or University",
        "cy": "Coleg neu brifysgol",
    },
    OrganisationType.STATUTORY_BODY: {
        "en": "Statutory body",
        "cy": "Corff statudol",
    },
    OrganisationType.FAITH_GROUP: {
        "en": "Faith-based group",
        "cy": "Grŵp yn seiliedig ar ffydd",
    },
}

STATUTORY_BODY_LABELS = {
    StatutoryBodyType.PARISH_COUNCIL: {"en": "Parish council", "cy": "Cyngor plwyf"},
    StatutoryBodyType.TOWN_COUNCIL: {"en": "Town council", "cy": "Cyngor tref"},
    StatutoryBodyType.LOCAL_AUTHORITY: {"en": "Local authority", "cy": "Awdurdod lleol"},
    StatutoryBodyType.NHS_TRUST: {"en": "NHS Trust/Health Authority", "cy": "Ymddiriedolaeth GIG/Awdurdod Iechyd"},
    StatutoryBodyType.PRISON_SERVICE: {"en": "Prison service", "cy": "Gwasanaeth carchar"},
    StatutoryBodyType.FIRE_SERVICE: {"en": "Fire service", "cy": "Gwasanaeth tân"},
    StatutoryBodyType.POLICE_AUTHORITY: {"en": "Police authority", "cy": "Awdurdod heddlu"},
}


def _charity_number_schema(answers: Mapping[str, Any]) -> rules.Schema:
    if answers.get("organisation-type") in CHARITY_NUMBER_REQUIRED_TYPES:
        return rules.string().max(FREE_TEXT_MAXLENGTH["small"]).required()
    return rules.string().allow_empty().max(FREE_TEXT_MAXLENGTH["small"]).optional()


def _organisation_fields() -> dict[str, FieldDefinition]:
    is_statutory = show_if_answer_in("organisation-type", (OrganisationType.STATUTORY_BODY,))
    fields = (
        text_field(
            "organisation-legal-name",
            {"en": "What is the full legal name of your organisation?",
             "cy": "Beth yw enw cyfreithiol llawn eich sefydliad?"},
            messages=(msg("base", "Enter the full legal name of the organisation",
                          "Rhowch enw cyfreithiol llawn y sefydliad"),),
        ),
        text_field(
            "organisation-trading-name",
            {"en": "Does your organisation use a different name in your day-to-day work?",
             "cy": "A yw eich sefydliad yn defnyddio enw gwahanol yn eich gwaith dydd i ddydd?"},
            required=False,
        ),
        address_field(
            "organisation-address",
            {"en": "What is the main or registered address of your organisation?",
             "cy": "Beth yw prif gyfeiriad neu gyfeiriad cofrestredig eich sefydliad?"},
        ),
        radio_field(
            "organisation-type",
            {"en": "What type of organisation are you?", "cy": "Pa fath o sefydliad ydych chi?"},
            tuple(option(value, label) for value, label in ORGANISATION_TYPE_LABELS.items()),
            messages=(msg("base", "Select a type of organisation", "Dewiswch fath o sefydliad"),),
        ),
        only_when(
            radio_field(
                "organisation-sub-type",
                {"en": "Tell us what type of statutory body you are", "cy": "Dywedwch wrthym pa fath o gorff statudol ydych"},
                tuple(option(value, label) for value, label in STATUTORY_BODY_LABELS.items()),
                messages=(msg("base", "Tell us what type of statutory body you are",
                              "Dywedwch wrthym pa fath o gorff statudol ydych"),),
            ),
            is_statutory,
        ),
        only_when(
            text_field(
                "company-number",
                {"en": "Companies House number", "cy": "Rhif Tŷ'r Cwmnïau"},
                max_length=FREE_TEXT_MAXLENGTH["small"],
                messages=(msg("base", "Enter your organisation's Companies House number",
                              "Rhowch rif Tŷ'r Cwmnïau eich sefydliad"),),
            ),
            show_if_answer_in("organisation-type", COMPANY_NUMBER_TYPES),
        ),
        only_when(
            make_field(
                "charity-number",
                FieldType.TEXT,
                {"en": "Charity registration number", "cy": "Rhif cofrestru elusen"},
                _charity_number_schema,
                (msg("base", "Enter your organisation's charity number", "Rhowch rif elusen eich sefydliad"),),
                is_required=show_if_answer_in("organisation-type", CHARITY_NUMBER_REQUIRED_TYPES),
            ),
            show_if_answer_in("organisation-type", CHARITY_NUMBER_REQUIRED_TYPES + CHARITY_NUMBER_OPTIONAL_TYPES),
        ),
        only_when(
            text_field(
                "education-number",
                {"en": "Department for Education number", "cy": "Rhif yr Adran Addysg"},
                max_length=FREE_TEXT_MAXLENGTH["small"],
                messages=(msg("base", "Enter your organisation's Department for Education number",
                              "Rhowch rif Adran Addysg eich sefydliad"),),
            ),
            show_if_answer_in("organisation-type", EDUCATION_NUMBER_TYPES),
        ),
        day_month_field(
            "accounting-year-date",
            {"en": "What is your accounting year end date?", "cy": "Beth yw dyddiad diwedd eich blwyddyn ariannol?"},
        ),
        currency_field(
            "total-income-year",
            {"en": "What is your total income for the year?", "cy": "Beth yw cyfanswm eich incwm am y flwyddyn?"},
            min_amount=0,
        ),
    )
    return {f.name: f for f in fields}


def _organisation_section(f: Mapping[str, FieldDefinition]) -> Section:
    return Section(
        slug="organisation",
        title={"en": "Your organisation", "cy": "Eich sefydliad"},
        summary={"en": "Please tell us about your organisation, including legal name and registered address.",
                 "cy": "Dywedwch wrthym am eich sefydliad, gan gynnwys yr enw cyfreithiol a'r cyfeiriad cofrestredig."},
        steps=(
            Step(title={"en": "Organisation details", "cy": "Manylion y sefydliad"},
                 fieldsets=(Fieldset(fields=(f["organisation-legal-name"], f["organisation-trading-name"],
                                             f["organisation-address"])),)),
            Step(title={"en": "Organisation type", "cy": "Math o sefydliad"},
                 fieldsets=(Fieldset(fields=(f["organisation-type"],)),)),
            Step(title={"en": "Type of statutory body", "cy": "Math o gorff statudol"},
                 fieldsets=(Fieldset(fields=(f["organisation-sub-type"],)),)),
            Step(title={"en": "Registration numbers", "cy": "Rhifau cofrestru"},
                 fieldsets=(Fieldset(fields=(f["company-number"], f["charity-number"], f["education-number"])),)),
            Step(title={"en": "Organisation finances", "cy": "Cyllid y sefydliad"},
                 fieldsets=(Fieldset(fields=(f["accounting-year-date"], f["total-income-year"])),)),
        ),
    )


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------

SENIOR_CONTACT_ROLES = {
    "trustee": ({"en": "Trustee", "cy": "Ymddiriedolwr"}, None),
    "chair": ({"en": "Chair", "cy": "Cadeirydd"}, None),
    "vice-chair": ({"en": "Vice-chair", "cy": "Is-gadeirydd"}, None),
    "secretary": ({"en": "Secretary", "cy": "Ysgrifennydd"}, None),
    "treasurer": ({"en": "Treasurer", "cy": "Trysorydd"}, None),
    "company-director": ({"en": "Company Director", "cy": "Cyfarwyddwr y Cwmni"}, COMPANY_NUMBER_TYPES),
    "head-teacher": ({"en": "Head Teacher", "cy": "Pennaeth"}, EDUCATION_NUMBER_TYPES),
    "chancellor": ({"en": "Chancellor", "cy": "Canghellor"}, (OrganisationType.COLLEGE_OR_UNIVERSITY,)),
    "parish-clerk": ({"en": "Parish Clerk", "cy": "Clerc y Plwyf"}, (OrganisationType.STATUTORY_BODY,)),
    "chief-executive": ({"en": "Chief Executive", "cy": "Prif Weithredwr"}, (OrganisationType.STATUTORY_BODY,)),
    "religious-leader": ({"en": "Religious leader", "cy": "Arweinydd crefyddol"}, (OrganisationType.FAITH_GROUP,)),
}


def _contact_fields(prefix: str, min_age: int, *, other: str | None = None) -> dict[str, FieldDefinition]:
    """Fields shared by the senior and main contact sections.

    Address and date of birth are not collected for schools, colleges and
    statutory bodies. When `other` is given the name and email must differ
    from that contact's answers.
    """
    not_excluded = show_unless_answer_in("organisation-type", CONTACT_EXCLUDED_TYPES)
    in_wales = show_if_answer_in("project-country", (Country.WALES,))

    def _dob_schema(_answers: Mapping[str, Any]) -> rules.Schema:
        today = date.today()
        return (
            rules.date_parts()
            .min_date(_years_ago(today, MAX_CONTACT_AGE))
            .max_date(_years_ago(today, min_age))
            .required()
        )

    name = full_name_field(f"{prefix}-name", {"en": "Full name", "cy": "Enw llawn"})
    email = email_field(f"{prefix}-email", {"en": "Email", "cy": "E-bost"})
    if other is not None:
        name = name.model_copy(update={"field_schema": name.field_schema.invalid(rules.ref(f"{other}-name"))})
        email = email.model_copy(update={"field_schema": email.field_schema.invalid(rules.ref(f"{other}-email"))})
        name = name.model_copy(update={"messages": name.messages + (
            msg("any.invalid", "Main contact name must be different from the senior contact",
                "Rhaid i enw'r prif gyswllt fod yn wahanol i'r uwch gyswllt"),
        )})
        email = email.model_copy(update={"messages": email.messages + (
            msg("any.invalid", "Main contact email address must be different from the senior contact",
                "Rhaid i gyfeiriad e-bost y prif gyswllt fod yn wahanol i'r uwch gyswllt"),
        )})

    fields = [
        name,
        only_when(
            date_field(
                f"{prefix}-date-of-birth",
                {"en": "Date of birth", "cy": "Dyddiad geni"},
                field_schema=_dob_schema,
                messages=(
                    msg("dateParts.maxDate", f"Contact must be at least {min_age} years old",
                        f"Rhaid i'r cyswllt fod o leiaf {min_age} oed"),
                    msg("dateParts.minDate", "Enter a real date of birth", "Rhowch ddyddiad geni go iawn"),
                ),
            ),
            not_excluded,
        ),
        only_when(address_field(f"{prefix}-address", {"en": "Home address", "cy": "Cyfeiriad cartref"}), not_excluded),
        only_when(
            address_history_field(
                f"{prefix}-address-history",
                {"en": "Have they lived at their home address for the last three years?",
                 "cy": "A ydynt wedi byw yn eu cyfeiriad cartref am y tair blynedd diwethaf?"},
            ),
            not_excluded,
        ),
        email,
        phone_field(f"{prefix}-phone", {"en": "Telephone number", "cy": "Rhif ffôn"}),
        only_when(
            radio_field(
                f"{prefix}-language-preference",
                {"en": "What language should we use to contact this person?",
                 "cy": "Pa iaith ddylem ei defnyddio i gysylltu â'r person hwn?"},
                (option("english", {"en": "English", "cy": "Saesneg"}), option("welsh", {"en": "Welsh", "cy": "Cymraeg"})),
            ),
            in_wales,
        ),
        text_field(
            f"{prefix}-communication-needs",
            {"en": "Please tell us about any particular communication needs this contact has",
             "cy": "Dywedwch wrthym am unrhyw anghenion cyfathrebu penodol sydd gan y cyswllt hwn"},
            required=False,
        ),
    ]
    return {f.name: f for f in fields}


def _senior_role_field() -> FieldDefinition:
    def _role_option(value: str, label: dict[str, str], types: tuple[str, ...] | None):
        return option(value, label, show_when=show_if_answer_in("organisation-type", types) if types else None)

    return radio_field(
        "senior-contact-role",
        {"en": "Role", "cy": "Rôl"},
        tuple(_role_option(value, label, types) for value, (label, types) in SENIOR_CONTACT_ROLES.items()),
        explanation={"en": "This person must be a legally responsible contact for the organisation",
                     "cy": "Rhaid i'r person hwn fod yn gyswllt cyfreithiol gyfrifol ar gyfer y sefydliad"},
        messages=(msg("base", "Choose a role", "Dewiswch rôl"),),
    )


def _contact_section(
    slug: str, title: dict[str, str], f: Mapping[str, FieldDefinition], prefix: str, *, with_role: bool
) -> Section:
    leading = (f["senior-contact-role"],) if with_role else ()
    names = [
        "name", "date-of-birth", "address", "address-history", "email", "phone",
        "language-preference", "communication-needs",
    ]
    return Section(
        slug=slug,
        title=title,
        steps=(
            Step(
                title=title,
                fieldsets=(Fieldset(fields=leading + tuple(f[f"{prefix}-{n}"] for n in names)),),
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Bank details
# ---------------------------------------------------------------------------


def _bank_fields() -> dict[str, FieldDefinition]:
    fields = (
        text_field(
            "bank-account-name",
            {"en": "Tell us the name of your organisation - as it appears on the bank statement",
             "cy": "Dywedwch wrthym enw eich sefydliad - fel mae'n ymddangos ar eich cyfriflen banc"},
            messages=(msg("base", "Enter the name of your organisation, as it appears on your bank statement",
                          "Rhowch enw eich sefydliad, fel mae'n ymddangos ar eich cyfriflen banc"),),
        ),
        make_field(
            "bank-sort-code",
            FieldType.TEXT,
            {"en": "Sort code", "cy": "Cod didoli"},
            rules.bank_numbers().sort_code().required(),
            (
                msg("base", "Enter a sort code", "Rhowch god didoli"),
                msg("sortCode.wrongSize", "Sort code must be six digits long", "Rhaid i'r cod didoli fod yn chwe digid"),
            ),
            attributes={"size": 20},
        ),
        make_field(
            "bank-account-number",
            FieldType.TEXT,
            {"en": "Account number", "cy": "Rhif cyfrif"},
            rules.bank_numbers().account_number().required(),
            (
                msg("base", "Enter an account number", "Rhowch rif cyfrif"),
                msg("accountNumber.wrongSize", "Enter a valid length account number",
                    "Rhowch rif cyfrif o hyd dilys"),
            ),
            attributes={"size": 20},
        ),
        text_field(
            "building-society-number",
            {"en": "Building society number (if you have one)", "cy": "Rhif cymdeithas adeiladu (os oes gennych un)"},
            required=False,
            max_length=FREE_TEXT_MAXLENGTH["small"],
        ),
        file_field(
            "bank-statement",
            {"en": "Upload a bank statement", "cy": "Uwch lwytho cyfriflen banc"},
            messages=(msg("base", "Provide a bank statement", "Darparwch gyfriflen banc"),),
        ),
    )
    return {f.name: f for f in fields}


def _bank_section(f: Mapping[str, FieldDefinition], bank_client_factory: BankClientFactory) -> Section:
    return Section(
        slug="bank-details",
        title={"en": "Bank details", "cy": "Manylion banc"},
        summary={"en": "Please tell us about the bank account we will pay the grant into.",
                 "cy": "Dywedwch wrthym am y cyfrif banc y byddwn yn talu'r grant iddo."},
        steps=(
            Step(
                title={"en": "Bank account", "cy": "Cyfrif banc"},
                fieldsets=(
                    Fieldset(
                        fields=(
                            f["bank-account-name"],
                            f["bank-sort-code"],
                            f["bank-account-number"],
                            f["building-society-number"],
                        )
                    ),
                ),
                pre_flight_check=bank_account_pre_flight_check(
                    bank_client_factory,
                    sort_code_field="bank-sort-code",
                    account_number_field="bank-account-number",
                ),
            ),
            Step(
                title={"en": "Bank statement", "cy": "Cyfriflen banc"},
                fieldsets=(Fieldset(fields=(f["bank-statement"],)),),
                is_multipart=True,
            ),
        ),
    )


def _terms_fields() -> tuple[FieldDefinition, ...]:
    def _agreement(name: str, en: str, cy: str) -> FieldDefinition:
        return checkbox_field(
            name,
            {"en": en, "cy": cy},
            (option("yes", {"en": "I agree", "cy": "Rwy'n cytuno"}),),
            messages=(msg("base", "You must confirm that you're authorised to submit this application",
                          "Rhaid i chi gadarnhau eich bod wedi'ch awdurdodi i gyflwyno'r cais hwn"),),
        )

    return (
        _agreement("terms-agreement-1",
                   "You have been authorised by the governing body of your organisation to submit this application",
                   "Rydych wedi cael eich awdurdodi gan gorff llywodraethol eich sefydliad i gyflwyno'r cais hwn"),
        _agreement("terms-agreement-2",
                   "All the information you have provided in your application is accurate and complete",
                   "Mae'r holl wybodaeth rydych wedi ei darparu yn eich cais yn gywir ac yn gyflawn"),
        text_field("terms-person-name", {"en": "Full name of person completing this form",
                                         "cy": "Enw llawn y person sy'n cwblhau'r ffurflen"}),
        text_field("terms-person-position", {"en": "Position in organisation", "cy": "Safle yn y sefydliad"}),
    )


# ---------------------------------------------------------------------------
# Summary and submission
# ---------------------------------------------------------------------------


def summarise(value: Mapping[str, Any], locale: str) -> dict[str, Any]:
    """Headline details shown on the summary page and dashboard."""
    text = localise(locale)
    date_range = value.get("project-date-range") or {}
    start = format_date(date_range.get("start_date"), locale)
    end = format_date(date_range.get("end_date"), locale)
    budget = value.get("project-budget")

    overview = [
        {
            "label": text({"en": "Organisation", "cy": "Sefydliad"}),
            "value": value.get("organisation-trading-name") or value.get("organisation-legal-name"),
        },
        {
            "label": text({"en": "Project dates", "cy": "Dyddiadau'r prosiect"}),
            "value": f"{start} - {end}" if start and end else None,
        },
        {
            "label": text({"en": "Requested amount", "cy": "Swm y gofynnwyd amdano"}),
            "value": format_currency(rules.budget_total(budget)) if budget else None,
        },
    ]
    country = value.get("project-country")
    return {
        "title": value.get("project-name") or text({"en": "Untitled application", "cy": "Cais heb deitl"}),
        "country": country,
        "overview": overview,
    }


def _iso(parts: Any) -> str | None:
    dt = rules.from_date_parts(parts)
    return dt.isoformat() if dt else None


def for_submission(value: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten composite answers for the downstream grants system."""
    data = dict(value)
    if isinstance(data.get("project-date-range"), Mapping):
        date_range = data["project-date-range"]
        start = _iso(date_range.get("start_date"))
        end = _iso(date_range.get("end_date"))
        data["project-date-range"] = {"start_date": start, "end_date": end}
        data["project-start-date"] = start
        data["project-end-date"] = end
    for prefix in ("senior-contact", "main-contact"):
        key = f"{prefix}-date-of-birth"
        if key in data:
            data[key] = _iso(data[key])
    if "project-budget" in data:
        data["project-budget-total"] = rules.budget_total(data["project-budget"])
    data["schema-version"] = SCHEMA_VERSION
    return data


def build_under_10k(bank_client_factory: BankClientFactory = lambda: None) -> FormDefinition:
    """Assemble the form. `bank_client_factory` feeds the bank details pre-flight check."""
    project = _project_fields()
    beneficiaries = _beneficiary_fields()
    organisation = _organisation_fields()
    contacts = {
        "senior-contact-role": _senior_role_field(),
        **_contact_fields("senior-contact", MIN_AGE_SENIOR_CONTACT),
        **_contact_fields("main-contact", MIN_AGE_MAIN_CONTACT, other="senior-contact"),
    }
    bank = _bank_fields()

    sections = (
        _project_section(project),
        _beneficiaries_section(beneficiaries),
        _organisation_section(organisation),
        _contact_section("senior-contact", {"en": "Senior contact", "cy": "Uwch gyswllt"}, contacts, "senior-contact",
                         with_role=True),
        _contact_section("main-contact", {"en": "Main contact", "cy": "Prif gyswllt"}, contacts, "main-contact",
                         with_role=False),
        _bank_section(bank, bank_client_factory),
    )
    all_fields = {
        field.name: field
        for section in sections
        for step in section.steps
        for fieldset in step.fieldsets
        for field in fieldset.fields
    }
    return FormDefinition(
        id=FORM_ID,
        title={"en": "Apply for funding under £10,000", "cy": "Ymgeisio am arian grant dan £10,000"},
        sections=sections,
        all_fields=all_fields,
        terms_fields=_terms_fields(),
        featured_errors_allow_list=(
            FeaturedError(field_name="project-date-range"),
            FeaturedError(field_name="organisation-type", include_base=True),
            FeaturedError(field_name="senior-contact-role"),
            FeaturedError(field_name="main-contact-name"),
            FeaturedError(field_name="main-contact-email"),
            FeaturedError(field_name="main-contact-phone"),
        ),
        summary=summarise,
        for_submission=for_submission,
        schema_version=SCHEMA_VERSION,
    )


__all__ = ["FORM_ID", "build_under_10k", "for_submission", "summarise"]
