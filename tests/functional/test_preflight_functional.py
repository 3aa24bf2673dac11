"""Functional tests for pre-flight checks and the bank account verification client.

External HTTP is replaced with `httpx.MockTransport`; nothing leaves the
process.
"""

from __future__ import annotations

import anyio
import httpx
import pytest

from grantforms.errors import ExternalCheckDegraded, ExternalCheckRejected
from grantforms.logic.bank_check import (
    BankCheckClient,
    BankCheckCode,
    BankCheckStatus,
    bank_account_pre_flight_check,
    normalize_response,
)
from grantforms.logic.preflight import run_preflight_check
from grantforms.models.form_definition import FormContext
from grantforms.models.validation import FieldMessage

CONTEXT = FormContext(application_id="app-1", metadata={"locale": "en"})
ANSWERS = {"bank-sort-code": "108800", "bank-account-number": "00012345"}


def _client(payload: dict | None = None, status_code: int = 200, seen: list | None = None) -> BankCheckClient:
    def _handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload or {})

    return BankCheckClient("https://bank-check.test/verify", api_key="secret", transport=httpx.MockTransport(_handler))


def _check_with(client: BankCheckClient | None):
    return bank_account_pre_flight_check(
        lambda: client, sort_code_field="bank-sort-code", account_number_field="bank-account-number"
    )


def test_normalize_response() -> None:
    valid = normalize_response({"resultCode": "01", "accountProperties": {"bacs_credit": "True"}})
    assert (valid.status, valid.code) == (BankCheckStatus.VALID, BankCheckCode.VALID)

    no_bacs = normalize_response({"resultCode": "01", "accountProperties": {"bacs_credit": "False"}})
    assert (no_bacs.status, no_bacs.code) == (BankCheckStatus.INVALID, BankCheckCode.INVALID_BACS)

    invalid = normalize_response({"resultCode": "02"})
    assert (invalid.status, invalid.code) == (BankCheckStatus.INVALID, BankCheckCode.INVALID_ACCOUNT)

    unknown = normalize_response({"resultCode": "99", "resultDescription": "Bad key"})
    assert unknown.status == BankCheckStatus.UNKNOWN
    assert unknown.attributes["resultDescription"] == "Bad key"


@pytest.mark.anyio
async def test_client_sends_sort_code_and_account_number() -> None:
    seen: list[httpx.Request] = []
    client = _client({"resultCode": "01", "accountProperties": {"bacs_credit": "true"}}, seen=seen)
    result = await client.check("108800", "00012345")
    assert result.status == BankCheckStatus.VALID
    params = seen[0].url.params
    assert (params["sortcode"], params["accountnumber"], params["key"]) == ("108800", "00012345", "secret")


@pytest.mark.anyio
async def test_invalid_account_rejects_both_fields() -> None:
    with pytest.raises(ExternalCheckRejected) as excinfo:
        await _check_with(_client({"resultCode": "02"}))(ANSWERS, CONTEXT)
    assert [m.field_name for m in excinfo.value.messages] == ["bank-sort-code", "bank-account-number"]


@pytest.mark.anyio
async def test_unknown_result_is_degraded() -> None:
    with pytest.raises(ExternalCheckDegraded):
        await _check_with(_client({"resultCode": "99"}))(ANSWERS, CONTEXT)


@pytest.mark.anyio
async def test_disabled_client_passes() -> None:
    assert await _check_with(None)(ANSWERS, CONTEXT) is None


@pytest.mark.anyio
async def test_rejection_becomes_field_messages() -> None:
    messages = await run_preflight_check(_check_with(_client({"resultCode": "01"})), ANSWERS, CONTEXT)
    assert [(m.field_name, m.type) for m in messages] == [("bank-account-number", "bankCheck.invalidBacs")]


@pytest.mark.anyio
async def test_welsh_rejection_messages() -> None:
    context = CONTEXT.model_copy(update={"metadata": {"locale": "cy"}})
    messages = await run_preflight_check(_check_with(_client({"resultCode": "02"})), ANSWERS, context)
    assert messages[0].message.startswith("Nid yw")


@pytest.mark.anyio
async def test_service_errors_fail_open() -> None:
    assert await run_preflight_check(_check_with(_client(status_code=503)), ANSWERS, CONTEXT) == []
    assert await run_preflight_check(_check_with(_client({"resultCode": "99"})), ANSWERS, CONTEXT) == []


@pytest.mark.anyio
async def test_transport_errors_fail_open() -> None:
    async def _unreachable(answers, context):
        raise httpx.ConnectError("connection refused")

    assert await run_preflight_check(_unreachable, ANSWERS, CONTEXT) == []


@pytest.mark.anyio
async def test_slow_checks_time_out_and_fail_open() -> None:
    async def _slow(answers, context):
        await anyio.sleep(5)

    assert await run_preflight_check(_slow, ANSWERS, CONTEXT, timeout_seconds=0.01) == []


@pytest.mark.anyio
async def test_missing_check_passes() -> None:
    assert await run_preflight_check(None, ANSWERS, CONTEXT) == []


@pytest.mark.anyio
async def test_custom_rejection_is_passed_through() -> None:
    message = FieldMessage(field_name="amount", message="Amount not allowed", type="custom.rejected")

    async def _reject(answers, context):
        raise ExternalCheckRejected([message])

    assert await run_preflight_check(_reject, ANSWERS, CONTEXT) == [message]
