"""Handling of one submitted step.

Order of work:

1. merge stored answers, the submitted body and metadata of files posted
   for file fields of this step (other file parts are ignored);
2. build a FormModel and keep only the errors belonging to this step;
3. if the step is clean, run its pre-flight check (fail-open);
4. if still clean, store the uploaded files, turning storage failures into
   field messages;
5. persist the sanitised value with COMPLETE or PENDING status.

File metadata is persisted only for files that were actually stored.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from pydantic import BaseModel, ConfigDict

from grantforms.errors import UploadError
from grantforms.logic.form_model import FormModel, build_form_model
from grantforms.logic.localisation import copy_for
from grantforms.logic.preflight import DEFAULT_TIMEOUT_SECONDS, run_preflight_check
from grantforms.logic.repository_applications import ApplicationStatus, ApplicationStore
from grantforms.logic.uploads import FileStorage, UploadedFile, prepare_files_for_upload, upload_file
from grantforms.models.field_types import FieldType
from grantforms.models.form_definition import FormContext, FormDefinition
from grantforms.models.navigation import Position
from grantforms.models.validation import FieldMessage

logger = logging.getLogger(__name__)

UPLOAD_FAILED_TYPE = "upload.failed"


class StepSubmissionResult(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    position: Position
    errors: tuple[FieldMessage, ...] = ()
    # Where to go next; None while the step has errors
    next_position: Position | None = None
    status: str
    form: FormModel

    @property
    def is_valid(self) -> bool:
        return not self.errors


def merge_answers(
    stored: Mapping[str, Any], body: Mapping[str, Any], file_metadata: Mapping[str, Any]
) -> dict[str, Any]:
    return {**stored, **body, **file_metadata}


def accepted_files(
    form: FormModel, section_slug: str, step_number: int, files: Sequence[UploadedFile]
) -> list[UploadedFile]:
    """Keep only files posted for file fields of the step being submitted."""
    names = {f.name for f in form.fields_for_step(section_slug, step_number) if f.type == FieldType.FILE}
    accepted = []
    for file in files:
        if file.field_name in names:
            accepted.append(file)
        else:
            logger.warning(
                "upload_ignored application_id=%s step=%s/%s field=%s reason=not_a_file_field",
                form.context.application_id,
                section_slug,
                step_number,
                file.field_name,
            )
    return accepted


async def submit_step(
    definition: FormDefinition,
    store: ApplicationStore,
    application_id: str,
    section_slug: str,
    step_number: int,
    body: Mapping[str, Any],
    *,
    files: Sequence[UploadedFile] = (),
    storage: FileStorage | None = None,
    locale: str = "en",
    context: FormContext | None = None,
    preflight_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> StepSubmissionResult:
    stored = store.load(application_id)
    base_context = context or FormContext(application_id=application_id, started_at=stored.started_at)
    ctx = base_context.model_copy(update={"metadata": {**base_context.metadata, "locale": locale}})

    if files:
        # File fields can depend on answers in this same body
        shape = build_form_model(definition, locale, merge_answers(stored.answers, body, {}), ctx)
        files = accepted_files(shape, section_slug, step_number, files)
    file_metadata = prepare_files_for_upload(files)
    form = build_form_model(definition, locale, merge_answers(stored.answers, body, file_metadata), ctx)
    position = form.position_for(section_slug, step_number)
    step = form.get_step(section_slug, step_number)

    errors: list[FieldMessage] = list(form.errors_for_step(section_slug, step_number))
    value = dict(form.validation.value)

    if not errors:
        errors.extend(await run_preflight_check(step.pre_flight_check, value, ctx, preflight_timeout_seconds))

    uploaded: set[str] = set()
    if not errors and files:
        if storage is None:
            raise RuntimeError("file_storage_not_configured")
        for file in files:
            try:
                await upload_file(storage, application_id, file)
                uploaded.add(file.field_name)
            except UploadError as exc:
                errors.append(
                    FieldMessage(
                        field_name=exc.field_name,
                        message=copy_for("upload.failed", locale),
                        type=UPLOAD_FAILED_TYPE,
                    )
                )

    # Never persist a reference to a file that was not stored
    for name in file_metadata:
        if name not in uploaded:
            value.pop(name, None)

    status = ApplicationStatus.COMPLETE if form.progress.is_complete and not errors else ApplicationStatus.PENDING
    store.save(application_id, value, status)
    logger.info(
        "step_submitted application_id=%s step=%s/%s errors=%s status=%s",
        application_id,
        section_slug,
        step_number,
        len(errors),
        status,
    )

    return StepSubmissionResult(
        position=position,
        errors=tuple(errors),
        next_position=None if errors else form.next_position(position),
        status=status,
        form=form,
    )


__all__ = ["StepSubmissionResult", "UPLOAD_FAILED_TYPE", "merge_answers", "accepted_files", "submit_step"]
