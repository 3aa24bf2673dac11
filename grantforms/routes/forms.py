"""Form catalog and application creation endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from grantforms.logic.form_model import build_form_model
from grantforms.logic.localisation import resolve_text
from grantforms.models.api import ApplicationCreated, FormList, FormSummary
from grantforms.models.form_definition import FormDefinition
from grantforms.models.navigation import Position
from grantforms.routes.dependencies import (
    application_url,
    get_definition,
    get_locale,
    get_registry,
    get_store,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/forms", summary="List the forms served by this instance", response_model=FormList)
def list_forms(request: Request, locale: str = Depends(get_locale)) -> FormList:
    registry = get_registry(request)
    forms = []
    for form_id in registry.ids():
        definition = registry.get(form_id)
        forms.append(
            FormSummary(
                id=form_id,
                title=resolve_text(definition.title, {}, locale) or form_id,
                schema_version=definition.schema_version,
            )
        )
    return FormList(forms=forms)


@router.post(
    "/forms/{form_id}/applications",
    summary="Start a new application",
    status_code=201,
    response_model=ApplicationCreated,
)
def create_application(
    form_id: str,
    request: Request,
    definition: FormDefinition = Depends(get_definition),
    locale: str = Depends(get_locale),
) -> ApplicationCreated:
    application = get_store(request).create(form_id)
    form = build_form_model(definition, locale, {})
    start = form.page_link(form.next_position(Position.start()), application_url(form_id, application.id))
    logger.info("application_started form_id=%s application_id=%s", form_id, application.id)
    return ApplicationCreated(application_id=application.id, form_id=form_id, status=application.status, start=start)


__all__ = ["router", "list_forms", "create_application"]
