"""Application endpoints: overview, section introductions, steps, summary and submission.

Every handler rebuilds a FormModel from the stored answers; nothing derived
from the answers is cached between requests.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from starlette.datastructures import UploadFile as StarletteUploadFile

from grantforms.http.problem import raise_problem
from grantforms.logic.form_model import FormModel, build_form_model
from grantforms.logic.repository_applications import ApplicationStatus, StoredApplication
from grantforms.logic.step_submission import submit_step
from grantforms.logic.uploads import UploadedFile
from grantforms.models.active_shape import ActiveSection
from grantforms.models.api import (
    ApplicationOverview,
    ApplicationSummary,
    SectionIntroduction,
    SectionLink,
    StepAnswers,
    StepResult,
    StepView,
    SubmissionReceipt,
    SubmitRequest,
)
from grantforms.models.form_definition import FormDefinition
from grantforms.models.navigation import Position
from grantforms.routes.dependencies import (
    application_url,
    form_context,
    get_application,
    get_config,
    get_definition,
    get_locale,
    get_storage,
    get_store,
)

router = APIRouter()
logger = logging.getLogger(__name__)

APPLICATION_PATH = "/forms/{form_id}/applications/{application_id}"


def _model(request: Request, definition: FormDefinition, application: StoredApplication, locale: str) -> FormModel:
    return build_form_model(definition, locale, application.answers, form_context(request, application, locale))


def _section_entry(form: FormModel, index: int, section: ActiveSection) -> Position:
    if section.introduction:
        return Position.introduction(index)
    for step in section.steps:
        if step.is_required:
            return Position.step(index, step.index)
    return Position.step(index, 0)


@router.get(APPLICATION_PATH, summary="Application overview and progress", response_model=ApplicationOverview)
def get_overview(
    request: Request,
    definition: FormDefinition = Depends(get_definition),
    application: StoredApplication = Depends(get_application),
    locale: str = Depends(get_locale),
) -> ApplicationOverview:
    form = _model(request, definition, application, locale)
    base = application_url(definition.id, application.id)
    sections = [
        SectionLink(
            slug=section.slug,
            title=section.title,
            status=section.progress.status if section.progress else None,
            status_label=section.progress.status_label if section.progress else None,
            has_featured_errors=section.has_featured_errors,
            link=form.page_link(_section_entry(form, index, section), base),
        )
        for index, section in enumerate(form.sections)
    ]
    return ApplicationOverview(
        application_id=application.id,
        form_id=definition.id,
        title=form.title,
        status=application.status,
        progress=form.progress,
        sections=sections,
        summary=form.summary,
        featured_errors=form.validation.featured_messages,
        started_at=application.started_at,
        updated_at=application.updated_at,
    )


@router.get(APPLICATION_PATH + "/summary", summary="Answers and outstanding errors", response_model=ApplicationSummary)
def get_summary(
    request: Request,
    definition: FormDefinition = Depends(get_definition),
    application: StoredApplication = Depends(get_application),
    locale: str = Depends(get_locale),
) -> ApplicationSummary:
    form = _model(request, definition, application, locale)
    return ApplicationSummary(
        application_id=application.id,
        title=form.title,
        progress=form.progress,
        sections=form.full_summary(),
        errors_by_step=jsonable_encoder(form.errors_by_step()),
    )


@router.post(APPLICATION_PATH + "/submit", summary="Submit a complete application", response_model=SubmissionReceipt)
def submit_application(
    payload: SubmitRequest,
    request: Request,
    definition: FormDefinition = Depends(get_definition),
    application: StoredApplication = Depends(get_application),
    locale: str = Depends(get_locale),
) -> SubmissionReceipt:
    if application.status == ApplicationStatus.SUBMITTED:
        raise_problem(409, "Already Submitted", f"Application {application.id} has already been submitted")
    form = _model(request, definition, application, locale)
    if not form.progress.is_complete:
        raise_problem(
            409,
            "Application Incomplete",
            "All sections must be complete before submitting",
            errors_by_step=jsonable_encoder(form.errors_by_step()),
        )
    terms = form.validate_terms(payload.terms)
    if not terms.is_valid:
        raise_problem(422, "Terms Not Accepted", "Terms must be accepted", errors=jsonable_encoder(terms.messages))

    get_store(request).set_status(application.id, ApplicationStatus.SUBMITTED)
    logger.info("application_submitted form_id=%s application_id=%s", definition.id, application.id)
    metadata: dict[str, Any] = {
        "form_id": definition.id,
        "application_id": application.id,
        "environment": form.context.environment,
        "started_at": application.started_at.isoformat(),
        "schema_version": definition.schema_version,
        "locale": locale,
    }
    return SubmissionReceipt(
        application_id=application.id,
        form_id=definition.id,
        status=ApplicationStatus.SUBMITTED,
        metadata=metadata,
        payload={**form.for_submission(), "terms": terms.value},
    )


@router.get(APPLICATION_PATH + "/{section_slug}", summary="Section introduction", response_model=SectionIntroduction)
def get_section_introduction(
    section_slug: str,
    request: Request,
    definition: FormDefinition = Depends(get_definition),
    application: StoredApplication = Depends(get_application),
    locale: str = Depends(get_locale),
) -> SectionIntroduction:
    form = _model(request, definition, application, locale)
    position = form.position_for(section_slug)
    links = form.pagination(position, application_url(definition.id, application.id))
    return SectionIntroduction(section=form.get_section(section_slug), previous=links["previous"], next=links["next"])


@router.get(APPLICATION_PATH + "/{section_slug}/{step_number}", summary="One step of a section", response_model=StepView)
def get_step(
    section_slug: str,
    step_number: int,
    request: Request,
    definition: FormDefinition = Depends(get_definition),
    application: StoredApplication = Depends(get_application),
    locale: str = Depends(get_locale),
) -> StepView:
    form = _model(request, definition, application, locale)
    position = form.position_for(section_slug, step_number)
    links = form.pagination(position, application_url(definition.id, application.id))
    return StepView(
        application_id=application.id,
        section=section_slug,
        step_number=step_number,
        step=form.get_step(section_slug, step_number),
        previous=links["previous"],
        next=links["next"],
    )


async def read_step_body(request: Request, max_bytes: int) -> tuple[dict[str, Any], list[UploadedFile]]:
    """Answers and uploaded files from a JSON or multipart/form-data body.

    Each file part is read up to `max_bytes`; a larger part is rejected with
    413 before anything reaches validation or storage.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        body: dict[str, Any] = {}
        files: list[UploadedFile] = []
        for name, value in form.multi_items():
            if isinstance(value, StarletteUploadFile):
                if value.filename:
                    content = await value.read(max_bytes + 1)
                    if len(content) > max_bytes:
                        logger.info("upload_rejected field=%s reason=too_large max_bytes=%s", name, max_bytes)
                        raise_problem(
                            413,
                            "Upload Too Large",
                            f"File for {name} is larger than {max_bytes} bytes",
                            field_name=name,
                            max_bytes=max_bytes,
                        )
                    files.append(
                        UploadedFile(
                            field_name=name,
                            filename=value.filename,
                            content_type=value.content_type or "application/octet-stream",
                            content=content,
                        )
                    )
            else:
                body[name] = value
        return body, files
    try:
        payload = StepAnswers.model_validate(await request.json())
    except ValueError:
        raise_problem(422, "Invalid Request", 'Body must be JSON like {"answers": {...}} or multipart/form-data')
    return payload.answers, []


@router.post(APPLICATION_PATH + "/{section_slug}/{step_number}", summary="Submit one step", response_model=StepResult)
async def post_step(
    section_slug: str,
    step_number: int,
    request: Request,
    definition: FormDefinition = Depends(get_definition),
    application: StoredApplication = Depends(get_application),
    locale: str = Depends(get_locale),
) -> StepResult:
    if application.status == ApplicationStatus.SUBMITTED:
        raise_problem(409, "Already Submitted", f"Application {application.id} has already been submitted")
    body, files = await read_step_body(request, get_config(request).uploads.max_bytes)
    result = await submit_step(
        definition,
        get_store(request),
        application.id,
        section_slug,
        step_number,
        body,
        files=files,
        storage=get_storage(request),
        locale=locale,
        context=form_context(request, application, locale),
        preflight_timeout_seconds=get_config(request).forms.preflight_timeout_seconds,
    )
    next_link = None
    if result.next_position is not None:
        next_link = result.form.page_link(result.next_position, application_url(definition.id, application.id))
    return StepResult(
        application_id=application.id,
        is_valid=result.is_valid,
        status=result.status,
        errors=result.errors,
        next=next_link,
    )


__all__ = [
    "router",
    "get_overview",
    "get_summary",
    "submit_application",
    "get_section_introduction",
    "get_step",
    "read_step_body",
    "post_step",
]
