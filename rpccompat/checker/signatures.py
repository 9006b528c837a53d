"""Validators for getSignatureStatuses and getSignaturesForAddress."""

from __future__ import annotations

from typing import Any, Mapping

from rpccompat.checker.common import (
    ValidationError,
    assert_required_attributes,
    expect_kind,
    is_i64,
    require_array,
    require_object,
    require_str,
    require_u64,
)
from rpccompat.fixture import MethodExpectation


def _json_equal(left: Any, right: Any) -> bool:
    """Compare JSON values, keeping booleans, integers and floats apart."""
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        return left.keys() == right.keys() and all(
            _json_equal(left[key], right[key]) for key in left
        )
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(map(_json_equal, left, right))
    if type(left) is not type(right):
        return False
    return left == right


def validate_signature_statuses(expectation: MethodExpectation, result: Any) -> str:
    expect_kind(expectation, "signatureStatuses", "getSignatureStatuses")
    expected_api_version = expectation.field("expected_api_version")

    result_object = require_object(
        result,
        "result field was not an object as required by the getSignatureStatuses validator",
    )
    assert_required_attributes(
        result_object, expectation.field("required_result_attributes"), "result"
    )

    context_object = require_object(
        result_object.get("context"), "result.context was not an object"
    )
    assert_required_attributes(
        context_object, expectation.field("required_context_attributes"), "result.context"
    )

    actual_api_version = require_str(
        context_object.get("apiVersion"), "result.context.apiVersion was not a string"
    )
    if actual_api_version != expected_api_version:
        raise ValidationError(
            f"result.context.apiVersion expected '{expected_api_version}', "
            f"received '{actual_api_version}'"
        )

    context_slot = require_u64(
        context_object.get("slot"), "result.context.slot was not a u64"
    )
    if context_slot == 0:
        raise ValidationError("result.context.slot must be greater than 0")

    if "value" not in result_object:
        raise ValidationError("result was missing required 'value' field")
    actual_value = result_object["value"]
    if not _json_equal(actual_value, expectation.field("expected_value")):
        raise ValidationError(
            "result.value did not match the expected signature statuses snapshot"
        )

    statuses = require_array(actual_value, "result.value was not an array")
    return f"statuses={len(statuses)} contextSlot={context_slot}"


def _require_present(entry: Mapping[str, Any], name: str, index: int) -> Any:
    if name not in entry:
        raise ValidationError(f"result[{index}] was missing required '{name}' field")
    return entry[name]


def validate_signatures_for_address(expectation: MethodExpectation, result: Any) -> str:
    expect_kind(expectation, "signaturesForAddress", "getSignaturesForAddress")
    minimum_result_count = expectation.field("minimum_result_count")
    required_signature_attributes = expectation.field("required_signature_attributes")

    entries = require_array(
        result,
        "result field was not an array as required by the getSignaturesForAddress validator",
    )
    if len(entries) < minimum_result_count:
        raise ValidationError(
            f"result array length {len(entries)} was smaller than the required minimum "
            f"{minimum_result_count}"
        )

    for index, entry in enumerate(entries):
        entry_object = require_object(entry, f"result[{index}] was not an object")
        assert_required_attributes(
            entry_object, required_signature_attributes, f"result[{index}]"
        )

        require_str(entry_object.get("signature"), f"result[{index}].signature was not a string")
        require_u64(entry_object.get("slot"), f"result[{index}].slot was not a u64")

        block_time = _require_present(entry_object, "blockTime", index)
        if block_time is not None and not is_i64(block_time):
            raise ValidationError(f"result[{index}].blockTime was neither null nor an i64")

        memo = _require_present(entry_object, "memo", index)
        if memo is not None and not isinstance(memo, str):
            raise ValidationError(f"result[{index}].memo was neither null nor a string")

        confirmation_status = _require_present(entry_object, "confirmationStatus", index)
        if confirmation_status is not None and not isinstance(confirmation_status, str):
            raise ValidationError(
                f"result[{index}].confirmationStatus was neither null nor a string"
            )

        err = _require_present(entry_object, "err", index)
        if err is not None and not isinstance(err, Mapping):
            raise ValidationError(f"result[{index}].err was neither null nor an object")

    return f"signatures={len(entries)}"