"""Run a step's pre-flight check with a fail-open policy.

A pre-flight check is an async callable `(answers, context)` that returns
normally when the answers pass and raises `ExternalCheckRejected` when the
external service says they are definitely invalid. Anything else it raises
(transport errors, `ExternalCheckDegraded`, a timeout) is logged and treated
as a pass so that a degraded third party never blocks the applicant.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping

import anyio

from grantforms.errors import ExternalCheckDegraded, ExternalCheckRejected
from grantforms.models.form_definition import FormContext
from grantforms.models.validation import FieldMessage

logger = logging.getLogger(__name__)

PreFlightCheck = Callable[[Mapping[str, Any], FormContext], Awaitable[Any]]

DEFAULT_TIMEOUT_SECONDS = 10.0


async def run_preflight_check(
    check: PreFlightCheck | None,
    answers: Mapping[str, Any],
    context: FormContext,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[FieldMessage]:
    """Return field messages for an explicit rejection, otherwise an empty list."""
    if check is None:
        return []
    try:
        with anyio.fail_after(timeout_seconds):
            await check(answers, context)
    except ExternalCheckRejected as exc:
        logger.info(
            "preflight_check_rejected application_id=%s fields=%s",
            context.application_id,
            [m.field_name for m in exc.messages],
        )
        return list(exc.messages)
    except TimeoutError:
        logger.warning(
            "preflight_check_degraded application_id=%s reason=timeout timeout_seconds=%s",
            context.application_id,
            timeout_seconds,
        )
        return []
    except ExternalCheckDegraded:
        logger.warning("preflight_check_degraded application_id=%s reason=unknown_result", context.application_id, exc_info=True)
        return []
    except Exception:
        logger.warning("preflight_check_degraded application_id=%s reason=error", context.application_id, exc_info=True)
        return []
    return []


__all__ = ["PreFlightCheck", "DEFAULT_TIMEOUT_SECONDS", "run_preflight_check"]
