"""Functional tests for form and section progress."""

from __future__ import annotations

from grantforms.logic.form_model import build_form_model
from grantforms.logic.progress import status_for
from grantforms.models.progress import ProgressStatus
from grantforms.models.validation import FieldMessage


def _statuses(form) -> dict[str, str]:
    return {s.slug: s.progress.status for s in form.sections}


def test_status_for_boundaries() -> None:
    message = FieldMessage(field_name="a", message="Enter an answer")
    assert status_for({}, []) == ProgressStatus.EMPTY
    assert status_for({"a": "", "b": []}, [message]) == ProgressStatus.INCOMPLETE
    assert status_for({"a": "x"}, []) == ProgressStatus.COMPLETE
    assert status_for({"a": "x"}, [message]) == ProgressStatus.INCOMPLETE


def test_new_application_is_pristine(demo_definition) -> None:
    form = build_form_model(demo_definition, "en", {})
    assert form.progress.all == ProgressStatus.EMPTY
    assert form.progress.is_pristine is True
    assert form.progress.is_complete is False
    assert set(_statuses(form).values()) == {ProgressStatus.EMPTY}


def test_partial_answers_are_incomplete(demo_definition) -> None:
    form = build_form_model(demo_definition, "en", {"applicant-name": "Ada"})
    assert form.progress.all == ProgressStatus.INCOMPLETE
    assert _statuses(form) == {
        "about": ProgressStatus.INCOMPLETE,
        "extras": ProgressStatus.EMPTY,
        "money": ProgressStatus.EMPTY,
    }


def test_complete_answers(demo_definition, complete_answers) -> None:
    form = build_form_model(demo_definition, "en", complete_answers)
    assert form.progress.is_complete is True
    assert form.progress.sections_complete == 2
    # Nothing to answer in extras, so it must not read as complete
    assert _statuses(form)["extras"] == ProgressStatus.EMPTY


def test_revealed_section_tracks_its_own_fields(demo_definition, complete_answers) -> None:
    answers = {**complete_answers, "has-partner": "yes", "partner-name": "Bo"}
    form = build_form_model(demo_definition, "en", answers)
    assert _statuses(form)["extras"] == ProgressStatus.EMPTY
    assert form.progress.all == ProgressStatus.INCOMPLETE

    form = build_form_model(demo_definition, "en", {**answers, "partner-years": "3"})
    assert _statuses(form)["extras"] == ProgressStatus.COMPLETE
    assert form.progress.is_complete is True


def test_status_labels_are_localised(demo_definition) -> None:
    form = build_form_model(demo_definition, "cy", {"applicant-name": "Ada"})
    about = form.sections[0].progress
    assert about.status_label == "Ar ei ganol"
    assert about.label == "About"


def test_blank_answers_are_in_progress(demo_definition) -> None:
    form = build_form_model(demo_definition, "en", {"applicant-name": ""})
    assert form.validation.value == {"applicant-name": ""}
    assert form.progress.all == ProgressStatus.INCOMPLETE
    assert form.progress.is_pristine is False
    assert _statuses(form)["about"] == ProgressStatus.INCOMPLETE
    assert _statuses(form)["money"] == ProgressStatus.EMPTY
