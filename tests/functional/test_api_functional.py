"""Functional tests for the HTTP API.

The app is built with the demo definition, an in-memory application store
and in-memory file storage, and exercised through FastAPI's TestClient.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from grantforms.config import AppConfig, DatabaseConfig, UploadConfig
from grantforms.logic.repository_applications import ApplicationStatus, InMemoryApplicationStore
from grantforms.logic.uploads import InMemoryFileStorage
from grantforms.main import create_app


@pytest.fixture
def client(demo_definition):
    config = AppConfig(environment="test", database=DatabaseConfig(url="sqlite+pysqlite:///:memory:"))
    app = create_app(
        config,
        definitions=[demo_definition],
        store=InMemoryApplicationStore(),
        storage=InMemoryFileStorage(),
    )
    with TestClient(app) as test_client:
        yield test_client


def _start(client: TestClient) -> str:
    response = client.post("/forms/demo-grant/applications")
    assert response.status_code == 201
    return response.json()["application_id"]


def _url(app_id: str, suffix: str = "") -> str:
    return f"/forms/demo-grant/applications/{app_id}{suffix}"


def _answer(client: TestClient, app_id: str, step: str, answers: dict):
    return client.post(_url(app_id, f"/{step}"), json={"answers": answers})


def _complete(client: TestClient, app_id: str) -> None:
    assert _answer(client, app_id, "about/1", {"applicant-name": "Ada"}).json()["is_valid"]
    assert _answer(client, app_id, "about/2", {"has-partner": "no"}).json()["is_valid"]
    assert _answer(client, app_id, "about/4", {"contact-email": "ada@example.com"}).json()["is_valid"]
    assert _answer(client, app_id, "money/1", {"amount": "1,200"}).json()["is_valid"]
    response = client.post(
        _url(app_id, "/money/2"), files={"evidence": ("statement.pdf", b"%PDF-1.4", "application/pdf")}
    )
    assert response.json()["is_valid"]


def test_health(client) -> None:
    body = client.get("/health").json()
    assert body == {"status": "ok", "forms": ["demo-grant"], "environment": "test"}


def test_list_forms(client) -> None:
    assert client.get("/forms", params={"locale": "cy"}).json() == {
        "forms": [{"id": "demo-grant", "title": "Grant enghreifftiol", "schema_version": "v1"}]
    }


def test_start_application_links_to_the_first_page(client) -> None:
    body = client.post("/forms/demo-grant/applications").json()
    assert body["status"] == ApplicationStatus.PENDING
    assert body["start"]["url"] == _url(body["application_id"], "/about")


def test_unknown_form_and_application_are_problems(client) -> None:
    response = client.post("/forms/nope/applications")
    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["title"] == "Form Not Found"

    missing = client.get(_url("does-not-exist"))
    assert missing.status_code == 404
    assert missing.json()["title"] == "Application Not Found"


def test_unknown_pages_are_not_found(client) -> None:
    app_id = _start(client)
    assert client.get(_url(app_id, "/about/9")).json()["title"] == "Page Not Found"
    # money has no introduction page
    assert client.get(_url(app_id, "/money")).status_code == 404


def test_request_id_is_echoed_or_generated(client) -> None:
    assert client.get("/health", headers={"X-Request-Id": "abc-123"}).headers["x-request-id"] == "abc-123"
    assert client.get("/health").headers["x-request-id"]


def test_section_introduction(client) -> None:
    app_id = _start(client)
    body = client.get(_url(app_id, "/about")).json()
    assert body["section"]["introduction"] == "Tell us about yourself"
    assert body["previous"]["url"] == _url(app_id, "/summary")
    assert body["next"]["url"] == _url(app_id, "/about/1")


def test_step_view(client) -> None:
    app_id = _start(client)
    body = client.get(_url(app_id, "/about/2"), params={"locale": "cy"}).json()
    step = body["step"]
    assert step["slug"] == "about/2"
    assert "pre_flight_check" not in step
    assert [o["label"] for o in step["fieldsets"][0]["fields"][0]["options"]] == ["Ydw", "Nac ydw"]
    assert body["errors"] == []
    # partner-name is skipped until has-partner is answered yes
    assert body["next"]["url"] == _url(app_id, "/about/4")


def test_posting_a_step_saves_and_navigates(client) -> None:
    app_id = _start(client)
    body = _answer(client, app_id, "about/2", {"has-partner": "no"}).json()
    assert body["is_valid"] is True
    assert body["next"]["url"] == _url(app_id, "/about/4")


def test_posting_an_invalid_step_returns_errors(client) -> None:
    app_id = _start(client)
    body = _answer(client, app_id, "about/4", {"contact-email": "nope"}).json()
    assert body["is_valid"] is False
    assert body["next"] is None
    assert [(e["field_name"], e["type"]) for e in body["errors"]] == [("contact-email", "string.email")]


def test_malformed_body_is_rejected(client) -> None:
    app_id = _start(client)
    response = client.post(_url(app_id, "/about/1"), content=b"not json", headers={"content-type": "application/json"})
    assert response.status_code == 422
    assert response.json()["title"] == "Invalid Request"


def test_multipart_upload_is_stored(client) -> None:
    app_id = _start(client)
    response = client.post(
        _url(app_id, "/money/2"), files={"evidence": ("statement.pdf", b"%PDF-1.4", "application/pdf")}
    )
    assert response.json()["is_valid"] is True
    assert client.app.state.storage.files == {f"{app_id}/evidence/statement.pdf": b"%PDF-1.4"}


def test_overview_reports_progress_and_entry_links(client) -> None:
    app_id = _start(client)
    _answer(client, app_id, "about/1", {"applicant-name": "Ada"})
    _answer(client, app_id, "about/2", {"has-partner": "no"})
    body = client.get(_url(app_id)).json()
    assert body["progress"]["all"] == "incomplete"
    assert body["summary"] == {"title": "Ada", "locale": "en"}
    sections = {s["slug"]: s for s in body["sections"]}
    assert sections["about"]["status"] == "incomplete"
    assert sections["about"]["link"]["url"] == _url(app_id, "/about")
    assert sections["extras"]["status"] == "empty"
    assert sections["extras"]["link"]["url"] == _url(app_id, "/extras/1")
    assert sections["money"]["link"]["url"] == _url(app_id, "/money/1")


def test_summary_lists_answers_and_errors(client) -> None:
    app_id = _start(client)
    _answer(client, app_id, "about/1", {"applicant-name": "Ada"})
    body = client.get(_url(app_id, "/summary")).json()
    about = next(s for s in body["sections"] if s["slug"] == "about")
    assert about["rows"] == [{"name": "applicant-name", "label": "Your name", "value": "Ada"}]
    assert [group["slug"] for group in body["errors_by_step"]] == ["about/2", "about/4", "money/1", "money/2"]


def test_incomplete_application_cannot_be_submitted(client) -> None:
    app_id = _start(client)
    response = client.post(_url(app_id, "/submit"), json={"terms": {"terms-agree": "yes"}})
    assert response.status_code == 409
    assert response.json()["title"] == "Application Incomplete"
    assert response.json()["errors_by_step"]


def test_terms_must_be_accepted(client) -> None:
    app_id = _start(client)
    _complete(client, app_id)
    response = client.post(_url(app_id, "/submit"), json={"terms": {}})
    assert response.status_code == 422
    assert response.json()["title"] == "Terms Not Accepted"


def test_submission(client) -> None:
    app_id = _start(client)
    _complete(client, app_id)
    assert client.get(_url(app_id)).json()["status"] == ApplicationStatus.COMPLETE

    response = client.post(_url(app_id, "/submit"), json={"terms": {"terms-agree": "yes"}})
    assert response.status_code == 200
    receipt = response.json()
    assert receipt["status"] == ApplicationStatus.SUBMITTED
    assert receipt["metadata"]["environment"] == "test"
    assert receipt["metadata"]["schema_version"] == "v1"
    assert receipt["payload"]["amount"] == 1200
    assert receipt["payload"]["amount-pence"] == 120000
    assert receipt["payload"]["terms"] == {"terms-agree": ["yes"]}

    again = client.post(_url(app_id, "/submit"), json={"terms": {"terms-agree": "yes"}})
    assert again.status_code == 409
    assert again.json()["title"] == "Already Submitted"
    assert _answer(client, app_id, "about/1", {"applicant-name": "Changed"}).status_code == 409


def test_upload_larger_than_configured_limit_is_rejected(demo_definition) -> None:
    config = AppConfig(
        environment="test",
        database=DatabaseConfig(url="sqlite+pysqlite:///:memory:"),
        uploads=UploadConfig(max_bytes=4),
    )
    storage = InMemoryFileStorage()
    app = create_app(config, definitions=[demo_definition], store=InMemoryApplicationStore(), storage=storage)
    with TestClient(app) as small_client:
        app_id = _start(small_client)
        response = small_client.post(
            _url(app_id, "/money/2"), files={"evidence": ("statement.pdf", b"%PDF-1.4", "application/pdf")}
        )
        assert response.status_code == 413
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["field_name"] == "evidence"
        assert storage.files == {}

        within = small_client.post(_url(app_id, "/money/2"), files={"evidence": ("a.pdf", b"%PDF", "application/pdf")})
        assert within.status_code == 200
        assert within.json()["is_valid"] is True
