"""Shared helpers for the method validators."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from rpccompat.fixture import MethodExpectation

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class ValidationError(ValueError):
    """Raised when an RPC response does not meet a fixture's expectation."""


def expect_kind(expectation: MethodExpectation, kind: str, method: str) -> MethodExpectation:
    """Return ``expectation`` if it is of ``kind``; raise otherwise."""
    if expectation.kind != kind:
        raise ValidationError(
            f"{method} expected a {kind} validator, received {expectation!r}"
        )
    return expectation


def assert_required_attributes(
    obj: Mapping[str, Any], required_attributes: Iterable[str], location: str
) -> None:
    """Raise if any of ``required_attributes`` is absent from ``obj``."""
    for field_name in required_attributes:
        if field_name not in obj:
            raise ValidationError(f"{location} was missing required '{field_name}' field")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_u64(value: Any) -> bool:
    """True for a JSON integer that fits in an unsigned 64-bit range."""
    return _is_int(value) and 0 <= value <= _U64_MAX


def is_i64(value: Any) -> bool:
    """True for a JSON integer that fits in a signed 64-bit range."""
    return _is_int(value) and _I64_MIN <= value <= _I64_MAX


def require_object(value: Any, message: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError(message)
    return value


def require_array(value: Any, message: str) -> list[Any]:
    if not isinstance(value, list):
        raise ValidationError(message)
    return value


def require_str(value: Any, message: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(message)
    return value


def require_u64(value: Any, message: str) -> int:
    if not is_u64(value):
        raise ValidationError(message)
    return value


def require_bool(value: Any, message: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(message)
    return value