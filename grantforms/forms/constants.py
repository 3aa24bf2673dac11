"""Constants for the under £10,000 grant application."""

from __future__ import annotations

FORM_ID = "under-10k"
SCHEMA_VERSION = "v1.4"

MIN_AGE_MAIN_CONTACT = 16
MIN_AGE_SENIOR_CONTACT = 18
MAX_CONTACT_AGE = 120
MIN_BUDGET_TOTAL_GBP = 300
MAX_BUDGET_TOTAL_GBP = 10000
MAX_PROJECT_LENGTH_MONTHS = 12

FREE_TEXT_MAXLENGTH = {
    "small": 40,
    "medium": 80,
    "large": 255,
}


class OrganisationType:
    UNREGISTERED_VCO = "unregistered-vco"
    UNINCORPORATED_REGISTERED_CHARITY = "unincorporated-registered-charity"
    CIO = "charitable-incorporated-organisation"
    NOT_FOR_PROFIT_COMPANY = "not-for-profit-company"
    CIC = "community-interest-company"
    SCHOOL = "school"
    COLLEGE_OR_UNIVERSITY = "college-or-university"
    STATUTORY_BODY = "statutory-body"
    FAITH_GROUP = "faith-group"


# Contact address and date of birth are not collected for these types
CONTACT_EXCLUDED_TYPES: tuple[str, ...] = (
    OrganisationType.SCHOOL,
    OrganisationType.COLLEGE_OR_UNIVERSITY,
    OrganisationType.STATUTORY_BODY,
)

COMPANY_NUMBER_TYPES: tuple[str, ...] = (
    OrganisationType.NOT_FOR_PROFIT_COMPANY,
    OrganisationType.CIC,
)

EDUCATION_NUMBER_TYPES: tuple[str, ...] = (
    OrganisationType.SCHOOL,
    OrganisationType.COLLEGE_OR_UNIVERSITY,
)

CHARITY_NUMBER_REQUIRED_TYPES: tuple[str, ...] = (
    OrganisationType.UNINCORPORATED_REGISTERED_CHARITY,
    OrganisationType.CIO,
)

CHARITY_NUMBER_OPTIONAL_TYPES: tuple[str, ...] = (
    OrganisationType.NOT_FOR_PROFIT_COMPANY,
    OrganisationType.FAITH_GROUP,
)


class StatutoryBodyType:
    PARISH_COUNCIL = "parish-council"
    TOWN_COUNCIL = "town-council"
    LOCAL_AUTHORITY = "local-authority"
    NHS_TRUST = "nhs-trust-health-authority"
    PRISON_SERVICE = "prison-service"
    FIRE_SERVICE = "fire-service"
    POLICE_AUTHORITY = "police-authority"


class BeneficiaryGroup:
    ETHNIC_BACKGROUND = "ethnic-background"
    GENDER = "gender"
    AGE = "age"
    DISABLED_PEOPLE = "disabled-people"
    RELIGION = "religion"
    LGBT = "lgbt"
    CARING = "caring-responsibilities"


class Country:
    ENGLAND = "england"
    NORTHERN_IRELAND = "northern-ireland"
    SCOTLAND = "scotland"
    WALES = "wales"
