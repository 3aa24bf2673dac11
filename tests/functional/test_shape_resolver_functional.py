"""Functional tests for conditional shape resolution."""

from __future__ import annotations

import pytest

from grantforms.logic.shape_resolver import (
    answer_includes,
    freeze_answers,
    resolve_active_shape,
    show_if_answer_in,
    show_unless_answer_in,
)


def _step(sections, slug: str, number: int):
    section = next(s for s in sections if s.slug == slug)
    return section.steps[number - 1]


def test_steps_are_kept_even_when_all_their_fields_are_hidden(demo_definition) -> None:
    sections = resolve_active_shape(demo_definition, {"has-partner": "no"})
    about = sections[0]
    assert [s.slug for s in about.steps] == ["about/1", "about/2", "about/3", "about/4"]
    hidden = about.steps[2]
    assert hidden.fieldsets == ()
    assert hidden.is_required is False
    assert _step(sections, "extras", 1).is_required is False


def test_answer_reveals_conditional_fields(demo_definition) -> None:
    sections = resolve_active_shape(demo_definition, {"has-partner": "yes"})
    partner = _step(sections, "about", 3)
    assert partner.is_required is True
    assert [f.name for f in partner.fields] == ["partner-name"]
    assert "partner-years" in sections[1].field_names


def test_lone_fieldset_borrows_step_title_as_legend(demo_definition) -> None:
    step = _step(resolve_active_shape(demo_definition, {}), "about", 1)
    assert step.fieldsets[0].legend == "Name"


def test_text_is_localised(demo_definition) -> None:
    sections = resolve_active_shape(demo_definition, {}, "cy")
    assert sections[0].title == "Amdanoch chi"
    assert sections[0].introduction == "Dywedwch wrthym amdanoch eich hun"
    question = _step(sections, "about", 2).fields[0]
    assert [o.label for o in question.options] == ["Ydw", "Nac ydw"]


def test_unknown_locale_falls_back_to_english(demo_definition) -> None:
    sections = resolve_active_shape(demo_definition, {}, "fr")
    assert sections[0].title == "About you"


def test_current_value_is_attached_to_active_fields(demo_definition) -> None:
    step = _step(resolve_active_shape(demo_definition, {"applicant-name": "Ada"}), "about", 1)
    assert step.fields[0].value == "Ada"


def test_resolution_is_deterministic_and_leaves_answers_untouched(demo_definition) -> None:
    answers = {"has-partner": "yes", "partner-name": "Bo"}
    first = resolve_active_shape(demo_definition, answers)
    second = resolve_active_shape(demo_definition, answers)
    assert first == second
    assert answers == {"has-partner": "yes", "partner-name": "Bo"}


def test_predicates_see_a_read_only_view() -> None:
    frozen = freeze_answers({"a": 1})
    with pytest.raises(TypeError):
        frozen["a"] = 2  # type: ignore[index]
    assert frozen.get("missing") is None


def test_predicate_helpers() -> None:
    is_yes = show_if_answer_in("q", ("yes",))
    unless_school = show_unless_answer_in("type", ("school",))
    has_age = answer_includes("groups", "age")

    assert is_yes({"q": "yes"}) and not is_yes({"q": "no"}) and not is_yes({})
    assert unless_school({}) and unless_school({"type": "charity"}) and not unless_school({"type": "school"})
    assert has_age({"groups": ["age", "gender"]}) and has_age({"groups": "age"})
    assert not has_age({"groups": ["gender"]}) and not has_age({})


def test_option_visibility_follows_answers(under_10k) -> None:
    def _roles(org_type: str) -> list[str]:
        step = _step(resolve_active_shape(under_10k, {"organisation-type": org_type}), "senior-contact", 1)
        role = next(f for f in step.fields if f.name == "senior-contact-role")
        return [o.value for o in role.options]

    school_roles = _roles("school")
    assert "head-teacher" in school_roles
    assert "company-director" not in school_roles
    assert "company-director" in _roles("not-for-profit-company")
    assert "chair" in school_roles


def test_requiredness_can_depend_on_answers(under_10k) -> None:
    def _charity_field(org_type: str):
        sections = resolve_active_shape(under_10k, {"organisation-type": org_type})
        organisation = next(s for s in sections if s.slug == "organisation")
        return next((f for f in organisation.fields if f.name == "charity-number"), None)

    assert _charity_field("charitable-incorporated-organisation").is_required is True
    assert _charity_field("faith-group").is_required is False
    assert _charity_field("school") is None
