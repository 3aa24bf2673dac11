"""Bank account verification client.

Talks to a sort code / account number validation API over HTTP and maps its
answers onto VALID / INVALID / UNKNOWN. `bank_account_pre_flight_check()`
wraps the client as a step pre-flight check that only rejects on a definite
INVALID result.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

import httpx
from pydantic import BaseModel, ConfigDict, Field

from grantforms.errors import ExternalCheckDegraded, ExternalCheckRejected
from grantforms.logic.localisation import localise
from grantforms.models.form_definition import FormContext
from grantforms.models.validation import FieldMessage

logger = logging.getLogger(__name__)


class BankCheckStatus:
    VALID = "VALID"
    INVALID = "INVALID"
    UNKNOWN = "UNKNOWN"


class BankCheckCode:
    VALID = "VALID"
    INVALID_ACCOUNT = "INVALID_ACCOUNT"
    INVALID_BACS = "INVALID_BACS"


class BankCheckResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    code: str | None = None
    attributes: dict = Field(default_factory=dict)


def normalize_response(payload: Mapping[str, Any]) -> BankCheckResult:
    """Map a raw API response onto a BankCheckResult.

    Result code '01' means the pair is valid; the account must also accept
    BACS credits. '02' means the pair is invalid. Anything else (bad
    credentials, service errors) is UNKNOWN.
    """
    result_code = str(payload.get("resultCode", ""))
    properties = payload.get("accountProperties") or {}
    if result_code == "01":
        if str(properties.get("bacs_credit", "")).lower() == "true":
            return BankCheckResult(status=BankCheckStatus.VALID, code=BankCheckCode.VALID, attributes=dict(properties))
        return BankCheckResult(status=BankCheckStatus.INVALID, code=BankCheckCode.INVALID_BACS, attributes=dict(properties))
    if result_code == "02":
        return BankCheckResult(status=BankCheckStatus.INVALID, code=BankCheckCode.INVALID_ACCOUNT)
    return BankCheckResult(
        status=BankCheckStatus.UNKNOWN,
        attributes={"resultCode": result_code, "resultDescription": payload.get("resultDescription")},
    )


class BankCheckClient:
    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def check(self, sort_code: str, account_number: str) -> BankCheckResult:
        """Verify a sort code / account number pair. Transport errors propagate."""
        params = {"sortcode": sort_code, "accountnumber": account_number}
        if self.api_key:
            params["key"] = self.api_key
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.get(self.base_url, params=params)
            response.raise_for_status()
            result = normalize_response(response.json())
        logger.info("bank_check_result status=%s code=%s", result.status, result.code)
        return result


INVALID_ACCOUNT_SORT_CODE = {
    "en": "This sort code is not valid with this account number",
    "cy": "Nid yw’r cod didoli’n ddilys â’r rhif cyfrif hwn",
}
INVALID_ACCOUNT_NUMBER = {
    "en": "This account number is not valid with this sort code",
    "cy": "Nid yw’r rhif cyfrif yn ddilys â’r cod didoli hwn",
}
INVALID_BACS = {
    "en": "This bank account cannot receive BACS payments, which is a requirement for funding",
    "cy": "Ni all y cyfrif banc hwn dderbyn taliadau BACS, sy’n ofynnol i gael eich ariannu.",
}


def messages_for_result(
    result: BankCheckResult, sort_code_field: str, account_number_field: str, locale: str
) -> list[FieldMessage]:
    text = localise(locale)
    if result.code == BankCheckCode.INVALID_ACCOUNT:
        return [
            FieldMessage(field_name=sort_code_field, message=text(INVALID_ACCOUNT_SORT_CODE) or "", type="bankCheck.invalidAccount"),
            FieldMessage(field_name=account_number_field, message=text(INVALID_ACCOUNT_NUMBER) or "", type="bankCheck.invalidAccount"),
        ]
    if result.code == BankCheckCode.INVALID_BACS:
        return [FieldMessage(field_name=account_number_field, message=text(INVALID_BACS) or "", type="bankCheck.invalidBacs")]
    return []


def bank_account_pre_flight_check(
    client_factory: Callable[[], BankCheckClient | None],
    *,
    sort_code_field: str,
    account_number_field: str,
) -> Callable[[Mapping[str, Any], FormContext], Any]:
    """Build a pre-flight check verifying the step's bank details.

    `client_factory` is called per check so configuration changes apply
    without rebuilding form definitions; returning None disables the check.
    """

    async def _check(answers: Mapping[str, Any], context: FormContext) -> None:
        client = client_factory()
        if client is None:
            logger.debug("bank_check_skipped application_id=%s reason=disabled", context.application_id)
            return
        result = await client.check(str(answers.get(sort_code_field, "")), str(answers.get(account_number_field, "")))
        if result.status == BankCheckStatus.UNKNOWN:
            raise ExternalCheckDegraded(f"bank_check_unknown attributes={result.attributes}")
        if result.status == BankCheckStatus.INVALID:
            locale = str(context.metadata.get("locale", "en"))
            raise ExternalCheckRejected(messages_for_result(result, sort_code_field, account_number_field, locale))

    return _check


__all__ = [
    "BankCheckStatus",
    "BankCheckCode",
    "BankCheckResult",
    "normalize_response",
    "BankCheckClient",
    "messages_for_result",
    "bank_account_pre_flight_check",
]
