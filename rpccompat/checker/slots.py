"""Validators for getSlot, getSlotLeader and getSlotLeaders."""

from __future__ import annotations

from typing import Any

from rpccompat.checker.common import (
    ValidationError,
    expect_kind,
    require_array,
    require_str,
    require_u64,
)
from rpccompat.fixture import MethodExpectation


def validate_slot(expectation: MethodExpectation, result: Any) -> str:
    expect_kind(expectation, "slot", "getSlot")
    value = require_u64(
        result, "result field was not a u64 as required by the getSlot validator"
    )
    if value == 0:
        raise ValidationError("result must be greater than 0")
    return f"slot={value}"


def validate_slot_leader(expectation: MethodExpectation, result: Any) -> str:
    expect_kind(expectation, "slotLeader", "getSlotLeader")
    slot_leader = require_str(
        result, "result field was not a string as required by the getSlotLeader validator"
    )
    if not slot_leader:
        raise ValidationError("result string must not be empty")
    return f"slotLeader='{slot_leader}'"


def validate_slot_leaders(expectation: MethodExpectation, result: Any) -> str:
    expected_length = expect_kind(expectation, "slotLeaders", "getSlotLeaders").field(
        "expected_result_length"
    )
    leaders = require_array(
        result, "result field was not an array as required by the getSlotLeaders validator"
    )
    if len(leaders) != expected_length:
        raise ValidationError(
            f"result array length expected {expected_length}, received {len(leaders)}"
        )
    for index, leader in enumerate(leaders):
        if not require_str(leader, f"result[{index}] was not a string"):
            raise ValidationError(f"result[{index}] must not be empty")
    return f"slotLeaders={len(leaders)}"