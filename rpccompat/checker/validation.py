"""Checks applied to a whole JSON-RPC response, and fixture ordering rules."""

from __future__ import annotations

import dataclasses
import json
from datetime import timedelta
from http import HTTPStatus
from typing import Any, Callable, Iterable, Mapping

from rpccompat.checker.common import (
    ValidationError,
    expect_kind,
    is_i64,
    require_object,
    require_str,
)
from rpccompat.checker.signatures import (
    validate_signature_statuses,
    validate_signatures_for_address,
)
from rpccompat.checker.slots import (
    validate_slot,
    validate_slot_leader,
    validate_slot_leaders,
)
from rpccompat.checker.supply import validate_stake_minimum_delegation, validate_supply
from rpccompat.checker.tokens import (
    validate_token_account_balance,
    validate_token_accounts_by_owner,
)
from rpccompat.checker.transaction import validate_transaction
from rpccompat.config import Config
from rpccompat.fixture import JsonRpcErrorExpectation, MethodExpectation, RpcFixture

GET_BLOCK_MINIMUM_REQUEST_INTERVAL_MS = 3_000
TOO_MANY_REQUESTS = 429
HEALTH_METHOD = "getHealth"

MethodValidator = Callable[[MethodExpectation, Any], str]


@dataclasses.dataclass(frozen=True)
class HttpResponseData:
    """The parts of an HTTP response that validation looks at."""

    status: int
    content_type: str | None
    body_text: str

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    @property
    def status_text(self) -> str:
        try:
            return f"{self.status} {HTTPStatus(self.status).phrase}"
        except ValueError:
            return str(self.status)


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def require_attribute(document: Any, attribute_name: str) -> Any:
    """Return ``document[attribute_name]``, raising if it is absent."""
    if not isinstance(document, Mapping) or attribute_name not in document:
        raise ValidationError(f"response was missing required '{attribute_name}' field")
    return document[attribute_name]


def assert_envelope_attributes(document: Any, required_attributes: Iterable[str]) -> None:
    for attribute_name in required_attributes:
        require_attribute(document, attribute_name)


def validate_expected_error(
    error: Any, expected_error: JsonRpcErrorExpectation | None
) -> str:
    """Check a JSON-RPC error payload against the fixture's expected error."""
    if expected_error is None:
        raise ValidationError(
            "fixture allowed JSON-RPC errors but did not define expected_error"
        )
    error_object = require_object(error, "error field was not an object")

    actual_code = error_object.get("code")
    if not is_i64(actual_code):
        raise ValidationError("error.code field was not a signed integer")
    if actual_code != expected_error.code:
        raise ValidationError(
            f"expected error.code={expected_error.code}, received {actual_code}"
        )

    actual_message = require_str(
        error_object.get("message"), "error.message field was not a string"
    )
    if actual_message != expected_error.message:
        raise ValidationError(
            f"expected error.message='{expected_error.message}', received '{actual_message}'"
        )

    return f"error.code={actual_code} error.message='{actual_message}'"


def should_validate_charset(
    fixture: RpcFixture, content_type: str, allows_rate_limit_error: bool
) -> bool:
    if fixture.method == HEALTH_METHOD:
        return False
    return not (allows_rate_limit_error and "charset=" not in content_type.lower())


def validate_charset(content_type: str, expected_charset: str) -> None:
    """Check the ``charset`` parameter of a Content-Type header value."""
    expected = expected_charset.lower()
    actual = next(
        (
            segment.strip()[len("charset="):].strip().lower()
            for segment in content_type.lower().split(";")[1:]
            if segment.strip().startswith("charset=")
        ),
        None,
    )
    if actual is None:
        raise ValidationError(
            f"expected Content-Type charset='{expected}', but none was provided"
        )
    if actual != expected:
        raise ValidationError(f"expected charset '{expected}', received '{actual}'")


def _validate_string_result(expectation: MethodExpectation, result: Any) -> str:
    allowed_values = expect_kind(expectation, "stringResult", HEALTH_METHOD).field(
        "allowed_values"
    )
    value = require_str(
        result, "result field was not a string as required by the stringResult validator"
    )
    if value not in allowed_values:
        raise ValidationError(
            f"result '{value}' was not one of the allowed values {allowed_values}"
        )
    return f"result='{value}'"


_VALIDATORS: dict[str, MethodValidator] = {
    HEALTH_METHOD: _validate_string_result,
    "getSignatureStatuses": validate_signature_statuses,
    "getSignaturesForAddress": validate_signatures_for_address,
    "getSlot": validate_slot,
    "getSlotLeader": validate_slot_leader,
    "getSlotLeaders": validate_slot_leaders,
    "getStakeMinimumDelegation": validate_stake_minimum_delegation,
    "getSupply": validate_supply,
    "getTokenAccountBalance": validate_token_account_balance,
    "getTokenAccountsByOwner": validate_token_accounts_by_owner,
    "getTransaction": validate_transaction,
}


def validator_for_method(method: str) -> MethodValidator:
    try:
        return _VALIDATORS[method]
    except KeyError:
        raise ValidationError(f"no validator registered for RPC method '{method}'") from None


def validate_response(
    fixture: RpcFixture, request_id: str, response: HttpResponseData
) -> str:
    """Validate transport, envelope and result of a response; return a summary."""
    envelope = fixture.expectation.envelope
    transport = fixture.expectation.transport
    allows_rate_limit_error = envelope.allow_error and response.status == TOO_MANY_REQUESTS

    if not response.is_success and not allows_rate_limit_error:
        raise ValidationError(
            f"expected an HTTP success status, received {response.status_text}"
        )

    content_type = response.content_type
    if content_type is None:
        raise ValidationError("response did not include a Content-Type header")
    if not content_type.lower().startswith(transport.content_type_prefix.lower()):
        raise ValidationError(
            f"expected Content-Type starting with '{transport.content_type_prefix}', "
            f"received '{content_type}'"
        )

    if should_validate_charset(fixture, content_type, allows_rate_limit_error):
        validate_charset(content_type, transport.charset)

    try:
        document = json.loads(response.body_text)
    except ValueError as exc:
        raise ValidationError(f"response body was not valid JSON: {exc}") from exc

    assert_envelope_attributes(document, envelope.required_attributes)

    jsonrpc = require_str(require_attribute(document, "jsonrpc"), "jsonrpc field was not a string")
    response_id_value = require_attribute(document, "id")
    if jsonrpc != envelope.jsonrpc_version:
        raise ValidationError(
            f"expected jsonrpc='{envelope.jsonrpc_version}', received '{jsonrpc}'"
        )

    response_id = require_str(response_id_value, "id field was not a string")
    if response_id != request_id:
        raise ValidationError(f"expected id='{request_id}', received '{response_id}'")

    prefix = f"status={response.status_text} content-type='{content_type}'"

    if "error" in document:
        error = document["error"]
        if not envelope.allow_error:
            raise ValidationError(
                f"response contained JSON-RPC error payload: {_compact_json(error)}"
            )
        return f"{prefix} {validate_expected_error(error, envelope.expected_error)}"

    result = require_attribute(document, "result")
    validator = validator_for_method(fixture.method)
    return f"{prefix} {validator(fixture.expectation.validator, result)}"


def minimum_request_interval_for_fixture(config: Config, fixture: RpcFixture) -> timedelta:
    interval_ms = config.minimum_request_interval_ms
    if fixture.method == "getBlock":
        interval_ms = max(interval_ms, GET_BLOCK_MINIMUM_REQUEST_INTERVAL_MS)
    return timedelta(milliseconds=interval_ms)


def distinct_methods(fixtures: Iterable[RpcFixture]) -> set[str]:
    return {fixture.method for fixture in fixtures}


def requires_health_gate(fixtures: Iterable[RpcFixture]) -> bool:
    return len(distinct_methods(fixtures)) > 1


def validate_health_gate_requirements(fixtures: Iterable[RpcFixture]) -> None:
    methods = distinct_methods(fixtures)
    if len(methods) > 1 and HEALTH_METHOD not in methods:
        raise ValidationError(
            "multi-method runs must include a getHealth fixture so health can be checked first"
        )


def order_fixtures(fixtures: Iterable[RpcFixture]) -> list[RpcFixture]:
    """Health fixtures first, then by method, each group ordered by name."""

    def key(fixture: RpcFixture) -> tuple[bool, str, str]:
        is_other = fixture.method != HEALTH_METHOD
        return (is_other, fixture.method if is_other else "", fixture.name)

    return sorted(fixtures, key=key)