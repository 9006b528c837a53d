"""Validator for getTransaction snapshots."""

from __future__ import annotations

from typing import Any, Mapping

from rpccompat.checker.common import (
    ValidationError,
    assert_required_attributes,
    expect_kind,
    require_object,
    require_u64,
)
from rpccompat.fixture import MethodExpectation


def describe_value_kind(value: Any) -> str:
    """Name the JSON type of ``value``."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


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


def validate_transaction(expectation: MethodExpectation, result: Any) -> str:
    expect_kind(expectation, "transactionSnapshot", "getTransaction")
    result_object = require_object(
        result, "result field was not an object as required by the getTransaction validator"
    )
    assert_required_attributes(
        result_object, expectation.field("required_result_attributes"), "result object"
    )

    if not _json_equal(result, expectation.field("expected_result")):
        raise ValidationError("result payload did not match the expected transaction snapshot")

    slot = require_u64(
        result_object.get("slot"), "result field 'slot' was not an unsigned integer"
    )

    if "transaction" not in result_object:
        return f"slot={slot} transaction=missing"
    transaction = result_object["transaction"]
    if isinstance(transaction, Mapping):
        return f"slot={slot} transaction=object"
    if isinstance(transaction, list) and len(transaction) == 2:
        encoding = transaction[1] if isinstance(transaction[1], str) else "unknown-encoding"
        return f"slot={slot} transaction=array encoding={encoding}"
    return f"slot={slot} transaction={describe_value_kind(transaction)}"