"""Validators for getTokenAccountBalance and getTokenAccountsByOwner."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from rpccompat.checker.common import (
    ValidationError,
    assert_required_attributes,
    expect_kind,
    require_array,
    require_bool,
    require_object,
    require_str,
    require_u64,
)
from rpccompat.fixture import MethodExpectation

_U64_MAX = 2**64 - 1


def _is_u64_string(text: str) -> bool:
    """True if ``text`` is a base-10 unsigned 64-bit integer, optionally prefixed by '+'."""
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        return False
    return int(digits) <= _U64_MAX


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _context(
    result_object: Mapping[str, Any], required_context_attributes: Iterable[str]
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


def validate_token_account_balance(expectation: MethodExpectation, result: Any) -> str:
    expect_kind(expectation, "tokenAccountBalance", "getTokenAccountBalance")
    result_object = require_object(
        result,
        "result field was not an object as required by the getTokenAccountBalance validator",
    )
    assert_required_attributes(
        result_object, expectation.field("required_result_attributes"), "result"
    )
    api_version, slot = _context(result_object, expectation.field("required_context_attributes"))

    value_object = require_object(result_object.get("value"), "result.value was not an object")
    assert_required_attributes(
        value_object, expectation.field("required_value_attributes"), "result.value"
    )

    amount = require_str(value_object.get("amount"), "result.value.amount was not a string")
    if not _is_u64_string(amount):
        raise ValidationError("result.value.amount was not a base-10 u64 string")

    decimals = require_u64(value_object.get("decimals"), "result.value.decimals was not a u64")

    if "uiAmount" not in value_object:
        raise ValidationError("result.value.uiAmount was missing")
    ui_amount = value_object["uiAmount"]
    if ui_amount is not None and not _is_number(ui_amount):
        raise ValidationError("result.value.uiAmount was neither null nor a number")

    ui_amount_string = require_str(
        value_object.get("uiAmountString"), "result.value.uiAmountString was not a string"
    )

    return (
        f"slot={slot} apiVersion={api_version} amount={amount} decimals={decimals} "
        f"uiAmountString={ui_amount_string}"
    )


def validate_token_accounts_by_owner(expectation: MethodExpectation, result: Any) -> str:
    expect_kind(expectation, "tokenAccountsByOwner", "getTokenAccountsByOwner")
    minimum_result_count = expectation.field("minimum_result_count")

    result_object = require_object(
        result,
        "result field was not an object as required by the getTokenAccountsByOwner validator",
    )
    assert_required_attributes(
        result_object, expectation.field("required_result_attributes"), "result"
    )
    _context(result_object, expectation.field("required_context_attributes"))

    entries = require_array(result_object.get("value"), "result.value was not an array")
    if len(entries) < minimum_result_count:
        raise ValidationError(
            f"result.value length {len(entries)} was smaller than the required minimum "
            f"{minimum_result_count}"
        )

    for index, entry in enumerate(entries):
        _validate_entry(index, entry, expectation)

    return f"tokenAccounts={len(entries)}"


def _validate_entry(index: int, entry: Any, expectation: MethodExpectation) -> None:
    location = f"result.value[{index}]"
    entry_object = require_object(entry, f"{location} was not an object")
    assert_required_attributes(
        entry_object, expectation.field("required_value_entry_attributes"), location
    )
    require_str(entry_object.get("pubkey"), f"{location}.pubkey was not a string")

    account_location = f"{location}.account"
    account_object = require_object(
        entry_object.get("account"), f"{account_location} was not an object"
    )
    assert_required_attributes(
        account_object, expectation.field("required_account_attributes"), account_location
    )

    require_bool(
        account_object.get("executable"), f"{account_location}.executable was not a boolean"
    )
    require_u64(account_object.get("lamports"), f"{account_location}.lamports was not a u64")
    require_u64(account_object.get("rentEpoch"), f"{account_location}.rentEpoch was not a u64")
    require_u64(account_object.get("space"), f"{account_location}.space was not a u64")

    expected_account_owner = expectation.field("expected_account_owner")
    account_owner = require_str(
        account_object.get("owner"), f"{account_location}.owner was not a string"
    )
    if account_owner != expected_account_owner:
        raise ValidationError(
            f"{account_location}.owner expected '{expected_account_owner}', "
            f"received '{account_owner}'"
        )

    if "data" not in account_object:
        raise ValidationError(f"{account_location}.data was missing")
    _validate_data(f"{account_location}.data", account_object["data"], expectation)


def _validate_data(location: str, data: Any, expectation: MethodExpectation) -> None:
    data_object = require_object(data, f"{location} was not an object")
    assert_required_attributes(data_object, ("parsed", "program", "space"), location)

    expected_data_program = expectation.field("expected_data_program")
    program = require_str(data_object.get("program"), f"{location}.program was not a string")
    if program != expected_data_program:
        raise ValidationError(
            f"{location}.program expected '{expected_data_program}', received '{program}'"
        )
    require_u64(data_object.get("space"), f"{location}.space was not a u64")

    parsed_location = f"{location}.parsed"
    parsed_object = require_object(
        data_object.get("parsed"), f"{parsed_location} was not an object"
    )
    assert_required_attributes(parsed_object, ("info", "type"), parsed_location)
    require_str(parsed_object.get("type"), f"{parsed_location}.type was not a string")

    info_location = f"{parsed_location}.info"
    info_object = require_object(parsed_object.get("info"), f"{info_location} was not an object")
    assert_required_attributes(
        info_object, ("isNative", "mint", "owner", "state", "tokenAmount"), info_location
    )
    require_bool(info_object.get("isNative"), f"{info_location}.isNative was not a boolean")
    require_str(info_object.get("state"), f"{info_location}.state was not a string")

    expected_mint = expectation.field("expected_mint")
    mint = require_str(info_object.get("mint"), f"{info_location}.mint was not a string")
    if mint != expected_mint:
        raise ValidationError(
            f"{info_location}.mint expected '{expected_mint}', received '{mint}'"
        )

    expected_token_owner = expectation.field("expected_token_owner")
    owner = require_str(info_object.get("owner"), f"{info_location}.owner was not a string")
    if owner != expected_token_owner:
        raise ValidationError(
            f"{info_location}.owner expected '{expected_token_owner}', received '{owner}'"
        )

    if "tokenAmount" not in info_object:
        raise ValidationError(f"{info_location}.tokenAmount was missing")
    _validate_token_amount(
        f"{info_location}.tokenAmount",
        info_object["tokenAmount"],
        expectation.field("required_token_amount_attributes"),
    )


def _validate_token_amount(
    location: str, token_amount: Any, required_attributes: Iterable[str]
) -> None:
    token_amount_object = require_object(token_amount, f"{location} was not an object")
    assert_required_attributes(token_amount_object, required_attributes, location)

    amount = require_str(token_amount_object.get("amount"), f"{location}.amount was not a string")
    if not _is_u64_string(amount):
        raise ValidationError(f"{location}.amount was not a base-10 u64 string")

    require_u64(token_amount_object.get("decimals"), f"{location}.decimals was not a u64")

    if "uiAmount" not in token_amount_object:
        raise ValidationError(f"{location}.uiAmount was missing")
    ui_amount = token_amount_object["uiAmount"]
    if ui_amount is not None and not _is_number(ui_amount):
        raise ValidationError(f"{location}.uiAmount was neither null nor a number")

    require_str(
        token_amount_object.get("uiAmountString"), f"{location}.uiAmountString was not a string"
    )