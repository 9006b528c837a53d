"""Validators for getStakeMinimumDelegation and getSupply."""

from __future__ import annotations

from typing import Any, Mapping

from rpccompat.checker.common import (
    ValidationError,
    assert_required_attributes,
    expect_kind,
    require_array,
    require_object,
    require_str,
    require_u64,
)
from rpccompat.fixture import MethodExpectation


def _context(
    result_object: Mapping[str, Any], required_context_attributes: list[str]
) -> tuple[str, int]:
    context_object = require_object(
        result_object.get("context"), "result.context was not an object"
    )
    assert_required_attributes(context_object, required_context_attributes, "result.context")
    api_version = require_str(
        context_object.get("apiVersion"), "result.context.apiVersion was not a string"
    )
    slot = require_u64(context_object.get("slot"), "result.context.slot was not a u64")
    return api_version, slot


def validate_stake_minimum_delegation(expectation: MethodExpectation, result: Any) -> str:
    expect_kind(expectation, "stakeMinimumDelegation", "getStakeMinimumDelegation")
    result_object = require_object(
        result,
        "result field was not an object as required by the getStakeMinimumDelegation validator",
    )
    assert_required_attributes(
        result_object, expectation.field("required_result_attributes"), "result"
    )
    api_version, slot = _context(result_object, expectation.field("required_context_attributes"))

    value = require_u64(result_object.get("value"), "result.value was not a u64")
    if value == 0:
        raise ValidationError("result.value must be greater than 0")

    return f"slot={slot} apiVersion={api_version} stakeMinimumDelegation={value}"


def validate_supply(expectation: MethodExpectation, result: Any) -> str:
    expect_kind(expectation, "supply", "getSupply")
    result_object = require_object(
        result, "result field was not an object as required by the getSupply validator"
    )
    assert_required_attributes(
        result_object, expectation.field("required_result_attributes"), "result"
    )
    api_version, slot = _context(result_object, expectation.field("required_context_attributes"))

    value_object = require_object(result_object.get("value"), "result.value was not an object")
    assert_required_attributes(
        value_object, expectation.field("required_value_attributes"), "result.value"
    )

    def amount(name: str) -> int:
        return require_u64(value_object.get(name), f"result.value.{name} was not a u64")

    total = amount("total")
    circulating = amount("circulating")
    non_circulating = amount("nonCirculating")
    if total < circulating:
        raise ValidationError(
            "result.value.total must be greater than or equal to result.value.circulating"
        )
    if total < non_circulating:
        raise ValidationError(
            "result.value.total must be greater than or equal to result.value.nonCirculating"
        )

    accounts = require_array(
        value_object.get("nonCirculatingAccounts"),
        "result.value.nonCirculatingAccounts was not an array",
    )
    for index, account in enumerate(accounts):
        if not require_str(
            account, f"result.value.nonCirculatingAccounts[{index}] was not a string"
        ):
            raise ValidationError(
                f"result.value.nonCirculatingAccounts[{index}] must not be empty"
            )

    return (
        f"slot={slot} apiVersion={api_version} total={total} circulating={circulating} "
        f"nonCirculating={non_circulating} nonCirculatingAccounts={len(accounts)}"
    )