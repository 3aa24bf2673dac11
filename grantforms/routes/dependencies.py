"""Request-scoped lookups of the services held on `app.state`."""

from __future__ import annotations

from fastapi import Request

from grantforms.config import AppConfig
from grantforms.http.problem import raise_problem
from grantforms.logic.localisation import normalise_locale
from grantforms.logic.registry import FormRegistry
from grantforms.logic.repository_applications import ApplicationStore, StoredApplication
from grantforms.logic.uploads import FileStorage
from grantforms.models.form_definition import FormContext, FormDefinition


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_registry(request: Request) -> FormRegistry:
    return request.app.state.registry


def get_store(request: Request) -> ApplicationStore:
    return request.app.state.store


def get_storage(request: Request) -> FileStorage:
    return request.app.state.storage


def get_locale(locale: str | None = None) -> str:
    return normalise_locale(locale)


def get_definition(form_id: str, request: Request) -> FormDefinition:
    definition = get_registry(request).get(form_id)
    if definition is None:
        raise_problem(404, "Form Not Found", f"No form with id {form_id}")
    return definition  # type: ignore[return-value]


def get_application(form_id: str, application_id: str, request: Request) -> StoredApplication:
    application = get_store(request).load(application_id)
    if application.form_id != form_id:
        raise_problem(404, "Application Not Found", f"No application with id {application_id}")
    return application


def form_context(request: Request, application: StoredApplication, locale: str) -> FormContext:
    return FormContext(
        application_id=application.id,
        environment=get_config(request).environment,
        started_at=application.started_at,
        metadata={"locale": locale, "request_id": request.scope.get("state", {}).get("request_id")},
    )


def application_url(form_id: str, application_id: str) -> str:
    return f"/forms/{form_id}/applications/{application_id}"


__all__ = [
    "get_config",
    "get_registry",
    "get_store",
    "get_storage",
    "get_locale",
    "get_definition",
    "get_application",
    "form_context",
    "application_url",
]
