import copy

import pytest

from rpccompat.checker.common import ValidationError
from rpccompat.checker.signatures import (
    validate_signature_statuses,
    validate_signatures_for_address,
)
from rpccompat.fixture import MethodExpectation


def expected_value():
    return [
        {
            "confirmationStatus": "finalized",
            "confirmations": None,
            "err": None,
            "slot": 2,
            "status": {"Ok": None},
        }
    ]


def statuses_expectation():
    return MethodExpectation(
        "signatureStatuses",
        {
            "required_result_attributes": ["context", "value"],
            "required_context_attributes": ["apiVersion", "slot"],
            "expected_value": expected_value(),
            "expected_api_version": "3.1.11",
        },
    )


def statuses_result(**context):
    ctx = {"apiVersion": "3.1.11", "slot": 123}
    ctx.update(context)
    return {"context": ctx, "value": expected_value()}


def test_validates_signature_statuses_shape_and_values():
    assert (
        validate_signature_statuses(statuses_expectation(), statuses_result())
        == "statuses=1 contextSlot=123"
    )


def test_rejects_signature_status_value_mismatch():
    result = statuses_result()
    result["value"][0]["confirmationStatus"] = "processed"
    with pytest.raises(ValidationError) as info:
        validate_signature_statuses(statuses_expectation(), result)
    assert "result.value did not match the expected signature statuses snapshot" in str(
        info.value
    )


def test_rejects_api_version_mismatch():
    with pytest.raises(ValidationError) as info:
        validate_signature_statuses(statuses_expectation(), statuses_result(apiVersion="2.0.0"))
    assert "result.context.apiVersion expected '3.1.11', received '2.0.0'" in str(info.value)


def test_rejects_zero_context_slot():
    with pytest.raises(ValidationError, match="result.context.slot must be greater than 0"):
        validate_signature_statuses(statuses_expectation(), statuses_result(slot=0))


def test_rejects_missing_context_attribute():
    result = {"context": {"slot": 5}, "value": expected_value()}
    with pytest.raises(ValidationError, match="result.context was missing required 'apiVersion'"):
        validate_signature_statuses(statuses_expectation(), result)


def test_float_slot_in_value_does_not_match_integer_snapshot():
    result = statuses_result()
    result["value"][0]["slot"] = 2.0
    with pytest.raises(ValidationError, match="did not match"):
        validate_signature_statuses(statuses_expectation(), result)


def test_statuses_rejects_wrong_validator_kind():
    with pytest.raises(ValidationError, match="expected a signatureStatuses validator"):
        validate_signature_statuses(MethodExpectation("slot"), statuses_result())


def signatures_expectation():
    return MethodExpectation(
        "signaturesForAddress",
        {
            "minimum_result_count": 1,
            "required_signature_attributes": [
                "blockTime",
                "confirmationStatus",
                "err",
                "memo",
                "signature",
                "slot",
            ],
        },
    )


def signature_entry():
    return {
        "blockTime": 1_775_432_481,
        "confirmationStatus": "finalized",
        "err": None,
        "memo": None,
        "signature": "abc",
        "slot": 123,
    }


def test_validates_signatures_for_address_shape():
    assert (
        validate_signatures_for_address(signatures_expectation(), [signature_entry()])
        == "signatures=1"
    )


def test_rejects_missing_signature_field():
    entry = signature_entry()
    del entry["signature"]
    with pytest.raises(ValidationError) as info:
        validate_signatures_for_address(signatures_expectation(), [entry])
    assert "result[0] was missing required 'signature' field" in str(info.value)


def test_rejects_too_few_signatures():
    with pytest.raises(ValidationError) as info:
        validate_signatures_for_address(signatures_expectation(), [])
    assert "result array length 0 was smaller than the required minimum 1" in str(info.value)


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("blockTime", "soon", "result[1].blockTime was neither null nor an i64"),
        ("memo", 3, "result[1].memo was neither null nor a string"),
        ("confirmationStatus", True, "result[1].confirmationStatus was neither null nor a string"),
        ("err", "bad", "result[1].err was neither null nor an object"),
        ("slot", -1, "result[1].slot was not a u64"),
    ],
)
def test_rejects_bad_entry_field_types(field, value, message):
    bad = signature_entry()
    bad[field] = value
    with pytest.raises(ValidationError) as info:
        validate_signatures_for_address(
            signatures_expectation(), [signature_entry(), copy.deepcopy(bad)]
        )
    assert message in str(info.value)


def test_accepts_object_error_and_memo_string():
    entry = signature_entry()
    entry["err"] = {"InstructionError": [0, "Custom"]}
    entry["memo"] = "hello"
    entry["blockTime"] = None
    assert (
        validate_signatures_for_address(signatures_expectation(), [entry, signature_entry()])
        == "signatures=2"
    )