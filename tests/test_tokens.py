import copy

import pytest

from rpccompat.checker.common import ValidationError
from rpccompat.checker.tokens import (
    validate_token_account_balance,
    validate_token_accounts_by_owner,
)
from rpccompat.fixture import MethodExpectation

TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


def balance_expectation():
    return MethodExpectation(
        "tokenAccountBalance",
        {
            "required_result_attributes": ["context", "value"],
            "required_context_attributes": ["apiVersion", "slot"],
            "required_value_attributes": ["amount", "decimals", "uiAmount", "uiAmountString"],
        },
    )


def balance_result(**value_overrides):
    value = {
        "amount": "47209263",
        "decimals": 6,
        "uiAmount": 47.209263,
        "uiAmountString": "47.209263",
    }
    value.update(value_overrides)
    return {"context": {"apiVersion": "3.1.11", "slot": 411327097}, "value": value}


def owner_expectation(minimum_result_count=1):
    return MethodExpectation(
        "tokenAccountsByOwner",
        {
            "minimum_result_count": minimum_result_count,
            "required_result_attributes": ["context", "value"],
            "required_context_attributes": ["apiVersion", "slot"],
            "required_value_entry_attributes": ["account", "pubkey"],
            "required_account_attributes": [
                "data",
                "executable",
                "lamports",
                "owner",
                "rentEpoch",
                "space",
            ],
            "required_token_amount_attributes": [
                "amount",
                "decimals",
                "uiAmount",
                "uiAmountString",
            ],
            "expected_account_owner": TOKEN_PROGRAM,
            "expected_data_program": "spl-token",
            "expected_mint": "mint-1",
            "expected_token_owner": "owner-1",
        },
    )


VALID_OWNER_RESULT = {
    "context": {"apiVersion": "3.1.11", "slot": 411329792},
    "value": [
        {
            "account": {
                "data": {
                    "parsed": {
                        "info": {
                            "isNative": False,
                            "mint": "mint-1",
                            "owner": "owner-1",
                            "state": "initialized",
                            "tokenAmount": {
                                "amount": "47209263",
                                "decimals": 6,
                                "uiAmount": 47.209263,
                                "uiAmountString": "47.209263",
                            },
                        },
                        "type": "account",
                    },
                    "program": "spl-token",
                    "space": 165,
                },
                "executable": False,
                "lamports": 2039280,
                "owner": TOKEN_PROGRAM,
                "rentEpoch": 18446744073709551615,
                "space": 165,
            },
            "pubkey": "token-account-1",
        }
    ],
}


def owner_result():
    return copy.deepcopy(VALID_OWNER_RESULT)


def info_of(result):
    return result["value"][0]["account"]["data"]["parsed"]["info"]


def test_validates_token_account_balance_shape():
    assert (
        validate_token_account_balance(balance_expectation(), balance_result())
        == "slot=411327097 apiVersion=3.1.11 amount=47209263 decimals=6 uiAmountString=47.209263"
    )


def test_accepts_null_ui_amount():
    details = validate_token_account_balance(balance_expectation(), balance_result(uiAmount=None))
    assert "amount=47209263" in details


def test_accepts_integer_ui_amount():
    details = validate_token_account_balance(balance_expectation(), balance_result(uiAmount=47))
    assert "decimals=6" in details


def test_rejects_non_numeric_amount_string():
    with pytest.raises(ValidationError, match="result.value.amount was not a base-10 u64 string"):
        validate_token_account_balance(
            balance_expectation(), balance_result(amount="not-a-number")
        )


@pytest.mark.parametrize("amount", ["", "-1", "18446744073709551616", " 1", "1.5"])
def test_rejects_amounts_outside_u64(amount):
    with pytest.raises(ValidationError, match="base-10 u64 string"):
        validate_token_account_balance(balance_expectation(), balance_result(amount=amount))


def test_accepts_plus_prefixed_amount():
    details = validate_token_account_balance(balance_expectation(), balance_result(amount="+5"))
    assert "amount=+5" in details


def test_rejects_string_ui_amount():
    with pytest.raises(ValidationError, match="uiAmount was neither null nor a number"):
        validate_token_account_balance(balance_expectation(), balance_result(uiAmount="47"))


def test_rejects_missing_value_attribute():
    result = balance_result()
    del result["value"]["decimals"]
    with pytest.raises(ValidationError, match="result.value was missing required 'decimals' field"):
        validate_token_account_balance(balance_expectation(), result)


def test_balance_rejects_wrong_validator_kind():
    with pytest.raises(ValidationError, match="expected a tokenAccountBalance validator"):
        validate_token_account_balance(MethodExpectation("slot"), balance_result())


def test_validates_token_accounts_by_owner_shape():
    assert validate_token_accounts_by_owner(owner_expectation(), owner_result()) == "tokenAccounts=1"


def test_rejects_wrong_mint():
    result = owner_result()
    info_of(result)["mint"] = "other-mint"
    with pytest.raises(ValidationError) as excinfo:
        validate_token_accounts_by_owner(owner_expectation(), result)
    assert "account.data.parsed.info.mint expected 'mint-1'" in str(excinfo.value)


def test_rejects_wrong_token_owner():
    result = owner_result()
    info_of(result)["owner"] = "owner-2"
    with pytest.raises(ValidationError, match="info.owner expected 'owner-1', received 'owner-2'"):
        validate_token_accounts_by_owner(owner_expectation(), result)


def test_rejects_wrong_account_owner():
    result = owner_result()
    result["value"][0]["account"]["owner"] = "other-program"
    with pytest.raises(ValidationError, match=r"result.value\[0\].account.owner expected"):
        validate_token_accounts_by_owner(owner_expectation(), result)


def test_rejects_wrong_data_program():
    result = owner_result()
    result["value"][0]["account"]["data"]["program"] = "spl-token-2022"
    with pytest.raises(ValidationError, match="data.program expected 'spl-token'"):
        validate_token_accounts_by_owner(owner_expectation(), result)


def test_rejects_too_few_entries():
    with pytest.raises(
        ValidationError, match="result.value length 1 was smaller than the required minimum 2"
    ):
        validate_token_accounts_by_owner(owner_expectation(minimum_result_count=2), owner_result())


def test_rejects_missing_parsed_info_field():
    result = owner_result()
    del info_of(result)["state"]
    with pytest.raises(ValidationError, match="info was missing required 'state' field"):
        validate_token_accounts_by_owner(owner_expectation(), result)


def test_rejects_bad_token_amount_string():
    result = owner_result()
    info_of(result)["tokenAmount"]["amount"] = "abc"
    with pytest.raises(ValidationError, match="tokenAmount.amount was not a base-10 u64 string"):
        validate_token_accounts_by_owner(owner_expectation(), result)


def test_rejects_non_boolean_executable():
    result = owner_result()
    result["value"][0]["account"]["executable"] = 0
    with pytest.raises(ValidationError, match="account.executable was not a boolean"):
        validate_token_accounts_by_owner(owner_expectation(), result)


def test_empty_list_passes_with_zero_minimum():
    result = owner_result()
    result["value"] = []
    assert (
        validate_token_accounts_by_owner(owner_expectation(minimum_result_count=0), result)
        == "tokenAccounts=0"
    )