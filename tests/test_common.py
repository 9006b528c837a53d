import pytest

from rpccompat.checker.common import (
    ValidationError,
    assert_required_attributes,
    expect_kind,
    is_i64,
    is_u64,
    require_array,
    require_bool,
    require_object,
    require_str,
    require_u64,
)
from rpccompat.fixture import MethodExpectation


def test_expect_kind_returns_matching_expectation():
    expectation = MethodExpectation("slot")
    assert expect_kind(expectation, "slot", "getSlot") is expectation


def test_expect_kind_rejects_other_kind():
    with pytest.raises(ValidationError) as info:
        expect_kind(MethodExpectation("slotLeader"), "slot", "getSlot")
    assert "getSlot expected a slot validator, received" in str(info.value)


def test_assert_required_attributes_passes_when_present():
    obj = {"context": {}, "value": 1}
    assert assert_required_attributes(obj, ["context", "value"], "result") is None


def test_assert_required_attributes_names_missing_field():
    with pytest.raises(ValidationError) as info:
        assert_required_attributes({"context": {}}, ["context", "value"], "result")
    assert str(info.value) == "result was missing required 'value' field"


@pytest.mark.parametrize(
    "value, expected",
    [(0, True), (18446744073709551615, True), (2**64, False), (-1, False), (True, False), (1.0, False), ("1", False)],
)
def test_is_u64(value, expected):
    assert is_u64(value) is expected


@pytest.mark.parametrize(
    "value, expected",
    [(-(2**63), True), (2**63 - 1, True), (2**63, False), (False, False), (1.5, False), (None, False)],
)
def test_is_i64(value, expected):
    assert is_i64(value) is expected


def test_require_helpers_return_their_value():
    assert require_object({"a": 1}, "m") == {"a": 1}
    assert require_array([1, 2], "m") == [1, 2]
    assert require_str("abc", "m") == "abc"
    assert require_u64(123, "m") == 123
    assert require_bool(False, "m") is False


@pytest.mark.parametrize(
    "helper, value",
    [
        (require_object, [1]),
        (require_array, {"a": 1}),
        (require_str, None),
        (require_u64, -5),
        (require_u64, "5"),
        (require_bool, 0),
    ],
)
def test_require_helpers_raise_with_message(helper, value):
    with pytest.raises(ValidationError) as info:
        helper(value, "custom message")
    assert str(info.value) == "custom message"