"""Fixture files describing RPC requests and the responses expected for them."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class FixtureError(ValueError):
    """Raised when a fixture cannot be read or does not match the schema."""


def _describe(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "a boolean"
    if isinstance(value, (int, float)):
        return "a number"
    if isinstance(value, str):
        return "a string"
    if isinstance(value, list):
        return "an array"
    if isinstance(value, Mapping):
        return "an object"
    return type(value).__name__


def _invalid(location: str, expected: str, value: Any) -> FixtureError:
    return FixtureError(
        f"invalid type for '{location}': expected {expected}, received {_describe(value)}"
    )


def _as_string(value: Any, location: str) -> str:
    if not isinstance(value, str):
        raise _invalid(location, "a string", value)
    return value


def _as_strings(value: Any, location: str) -> list[str]:
    if not isinstance(value, list):
        raise _invalid(location, "an array of strings", value)
    return [_as_string(item, f"{location}[{index}]") for index, item in enumerate(value)]


def _as_uint(value: Any, location: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid(location, "an unsigned integer", value)
    if not 0 <= value <= _U64_MAX:
        raise FixtureError(f"'{location}' is out of range for an unsigned integer: {value}")
    return value


def _as_int(value: Any, location: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid(location, "a signed integer", value)
    if not _I64_MIN <= value <= _I64_MAX:
        raise FixtureError(f"'{location}' is out of range for a signed integer: {value}")
    return value


def _as_bool(value: Any, location: str) -> bool:
    if not isinstance(value, bool):
        raise _invalid(location, "a boolean", value)
    return value


def _as_json(value: Any, location: str) -> Any:
    return value


def _as_object(value: Any, location: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise _invalid(location, "an object", value)
    return value


def _as_array(value: Any, location: str) -> list[Any]:
    if not isinstance(value, list):
        raise _invalid(location, "an array", value)
    return list(value)


@dataclasses.dataclass(frozen=True)
class _FieldSpec:
    parse: Callable[[Any, str], Any]
    default: Callable[[], Any] | None = None

    def resolve(self, data: Mapping[str, Any], name: str, location: str) -> Any:
        if name in data:
            value = data[name]
            if value is None and self.default is not None and self.parse is not _as_strings:
                return self.default()
            return self.parse(value, f"{location}.{name}")
        if self.default is None:
            raise FixtureError(f"{location} is missing field '{name}'")
        return self.default()


def _required(parse: Callable[[Any, str], Any]) -> _FieldSpec:
    return _FieldSpec(parse)


def _optional(parse: Callable[[Any, str], Any]) -> _FieldSpec:
    return _FieldSpec(parse, lambda: None)


_STRINGS = _required(_as_strings)
_STRING = _required(_as_string)
_UINT = _required(_as_uint)
_JSON = _required(_as_json)
_OPT_UINT = _optional(_as_uint)
_OPT_STRING = _optional(_as_string)
_DEFAULT_STRINGS = _FieldSpec(_as_strings, list)


_VALIDATOR_SCHEMAS: dict[str, dict[str, _FieldSpec]] = {
    "stringResult": {"allowed_values": _STRINGS},
    "blockCommitment": {
        "required_result_attributes": _STRINGS,
        "expected_commitment": _JSON,
    },
    "blockTime": {"expected_value": _UINT},
    "blocksSnapshot": {"expected_result": _JSON},
    "blocksWithLimitSnapshot": {"expected_result": _JSON},
    "blockProduction": {
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
        "required_value_attributes": _STRINGS,
        "required_range_attributes": _STRINGS,
        "expected_identity": _STRING,
    },
    "clusterNodes": {
        "minimum_result_count": _UINT,
        "required_node_attributes": _STRINGS,
        "required_string_attributes": _STRINGS,
        "nullable_string_attributes": _STRINGS,
        "required_u64_attributes": _STRINGS,
    },
    "blockHeight": {},
    "epochInfo": {"required_result_attributes": _STRINGS},
    "epochSchedule": {"required_result_attributes": _STRINGS},
    "feeForMessage": {
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
    },
    "firstAvailableBlock": {"expected_value": _UINT},
    "genesisHash": {},
    "identity": {"required_result_attributes": _STRINGS},
    "inflationGovernor": {
        "required_result_attributes": _STRINGS,
        "expected_result": _JSON,
    },
    "inflationRate": {"required_result_attributes": _STRINGS},
    "inflationReward": {
        "expected_result_length": _UINT,
        "required_reward_attributes": _STRINGS,
    },
    "largestAccounts": {
        "minimum_result_count": _UINT,
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
        "required_value_attributes": _STRINGS,
    },
    "leaderSchedule": {"minimum_validator_count": _UINT},
    "highestSnapshotSlot": {"required_result_attributes": _STRINGS},
    "latestBlockhash": {
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
        "required_value_attributes": _STRINGS,
    },
    "slot": {},
    "slotLeader": {},
    "slotLeaders": {"expected_result_length": _UINT},
    "stakeMinimumDelegation": {
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
    },
    "supply": {
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
        "required_value_attributes": _STRINGS,
    },
    "tokenAccountBalance": {
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
        "required_value_attributes": _STRINGS,
    },
    "tokenAccountsByOwner": {
        "minimum_result_count": _UINT,
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
        "required_value_entry_attributes": _STRINGS,
        "required_account_attributes": _STRINGS,
        "required_token_amount_attributes": _STRINGS,
        "expected_account_owner": _STRING,
        "expected_data_program": _STRING,
        "expected_mint": _STRING,
        "expected_token_owner": _STRING,
    },
    "maxRetransmitSlot": {},
    "maxShredInsertSlot": {},
    "minimumBalanceForRentExemption": {"expected_value": _UINT},
    "balance": {
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
        "expected_value": _OPT_UINT,
    },
    "accountInfo": {
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
        "required_value_attributes": _STRINGS,
        "expected_value_attributes": _JSON,
        "expected_owner": _STRING,
        "expected_data_encoding": _STRING,
        "expected_parsed_program": _OPT_STRING,
        "required_parsed_attributes": _DEFAULT_STRINGS,
    },
    "multipleAccounts": {
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
        "required_value_attributes": _STRINGS,
        "expected_value_attributes": _JSON,
        "expected_data_encoding": _STRING,
        "expected_parsed_program": _OPT_STRING,
        "required_parsed_attributes": _DEFAULT_STRINGS,
    },
    "programAccounts": {
        "minimum_result_count": _UINT,
        "required_result_attributes": _STRINGS,
        "required_account_attributes": _STRINGS,
        "expected_owner": _STRING,
        "expected_data_encoding": _STRING,
        "expected_parsed_program": _OPT_STRING,
        "required_parsed_attributes": _DEFAULT_STRINGS,
    },
    "recentPerformanceSamples": {
        "minimum_result_count": _UINT,
        "required_sample_attributes": _STRINGS,
    },
    "recentPrioritizationFees": {
        "minimum_result_count": _UINT,
        "required_fee_attributes": _STRINGS,
    },
    "signaturesForAddress": {
        "minimum_result_count": _UINT,
        "required_signature_attributes": _STRINGS,
    },
    "signatureStatuses": {
        "required_result_attributes": _STRINGS,
        "required_context_attributes": _STRINGS,
        "expected_value": _JSON,
        "expected_api_version": _STRING,
    },
    "transactionSnapshot": {
        "required_result_attributes": _STRINGS,
        "expected_result": _JSON,
    },
    "blockSnapshot": {
        "required_result_attributes": _STRINGS,
        "expected_result": _JSON,
    },
}


def _default_required_response_attributes() -> list[str]:
    return ["jsonrpc", "result", "id"]


@dataclasses.dataclass(frozen=True)
class ProcessedSlot:
    """Replace ``params[index]`` with the current processed slot before sending."""

    index: int


@dataclasses.dataclass
class RequestFixture:
    params: list[Any] = dataclasses.field(default_factory=list)
    dynamic_params: list[ProcessedSlot] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class TransportExpectation:
    content_type_prefix: str
    charset: str


@dataclasses.dataclass
class JsonRpcErrorExpectation:
    code: int
    message: str


@dataclasses.dataclass
class JsonRpcEnvelopeExpectation:
    jsonrpc_version: str
    required_attributes: list[str] = dataclasses.field(
        default_factory=_default_required_response_attributes
    )
    allow_error: bool = False
    expected_error: JsonRpcErrorExpectation | None = None


@dataclasses.dataclass
class MethodExpectation:
    """A method-specific validator: a ``kind`` and the fields that kind defines.

    Fields are checked against the kind's schema; optional fields are filled
    with their defaults.
    """

    kind: str
    fields: dict[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.kind, str):
            raise _invalid("validator.kind", "a string", self.kind)
        schema = _VALIDATOR_SCHEMAS.get(self.kind)
        if schema is None:
            raise FixtureError(f"unknown validator kind '{self.kind}'")
        unknown = sorted(set(self.fields) - set(schema))
        if unknown:
            raise FixtureError(
                f"validator '{self.kind}' does not define field '{unknown[0]}'"
            )
        location = f"validator '{self.kind}'"
        self.fields = {
            name: spec.resolve(self.fields, name, location) for name, spec in schema.items()
        }

    @classmethod
    def from_dict(cls, data: Any) -> MethodExpectation:
        """Build an expectation from its JSON form, tagged by ``kind``."""
        obj = _as_object(data, "validator")
        if "kind" not in obj:
            raise FixtureError("validator is missing field 'kind'")
        kind = _as_string(obj["kind"], "validator.kind")
        schema = _VALIDATOR_SCHEMAS.get(kind)
        if schema is None:
            raise FixtureError(f"unknown validator kind '{kind}'")
        return cls(kind, {name: value for name, value in obj.items() if name in schema})

    def field(self, name: str) -> Any:
        """Return the named field; raises KeyError if this kind has no such field."""
        try:
            return self.fields[name]
        except KeyError:
            raise KeyError(f"validator '{self.kind}' has no field '{name}'") from None


@dataclasses.dataclass
class ResponseExpectation:
    transport: TransportExpectation
    envelope: JsonRpcEnvelopeExpectation
    validator: MethodExpectation


@dataclasses.dataclass
class RpcFixture:
    name: str
    method: str
    request: RequestFixture
    expectation: ResponseExpectation


def _require(obj: Mapping[str, Any], name: str, location: str) -> Any:
    if name not in obj:
        raise FixtureError(f"{location} is missing field '{name}'")
    return obj[name]


def _parse_dynamic_param(data: Any, location: str) -> ProcessedSlot:
    obj = _as_object(data, location)
    kind = _as_string(_require(obj, "kind", location), f"{location}.kind")
    if kind != "processedSlot":
        raise FixtureError(f"unknown dynamic parameter kind '{kind}'")
    return ProcessedSlot(index=_as_uint(_require(obj, "index", location), f"{location}.index"))


def _parse_request(data: Any) -> RequestFixture:
    obj = _as_object(data, "request")
    params = _as_array(obj["params"], "request.params") if "params" in obj else []
    dynamic = (
        _as_array(obj["dynamic_params"], "request.dynamic_params")
        if "dynamic_params" in obj
        else []
    )
    return RequestFixture(
        params=params,
        dynamic_params=[
            _parse_dynamic_param(item, f"request.dynamic_params[{index}]")
            for index, item in enumerate(dynamic)
        ],
    )


def _parse_transport(data: Any) -> TransportExpectation:
    location = "expectation.transport"
    obj = _as_object(data, location)
    return TransportExpectation(
        content_type_prefix=_as_string(
            _require(obj, "content_type_prefix", location), f"{location}.content_type_prefix"
        ),
        charset=_as_string(_require(obj, "charset", location), f"{location}.charset"),
    )


def _parse_expected_error(data: Any) -> JsonRpcErrorExpectation | None:
    if data is None:
        return None
    location = "expectation.envelope.expected_error"
    obj = _as_object(data, location)
    return JsonRpcErrorExpectation(
        code=_as_int(_require(obj, "code", location), f"{location}.code"),
        message=_as_string(_require(obj, "message", location), f"{location}.message"),
    )


def _parse_envelope(data: Any) -> JsonRpcEnvelopeExpectation:
    location = "expectation.envelope"
    obj = _as_object(data, location)
    return JsonRpcEnvelopeExpectation(
        jsonrpc_version=_as_string(
            _require(obj, "jsonrpc_version", location), f"{location}.jsonrpc_version"
        ),
        required_attributes=(
            _as_strings(obj["required_attributes"], f"{location}.required_attributes")
            if "required_attributes" in obj
            else _default_required_response_attributes()
        ),
        allow_error=(
            _as_bool(obj["allow_error"], f"{location}.allow_error")
            if "allow_error" in obj
            else False
        ),
        expected_error=_parse_expected_error(obj.get("expected_error")),
    )


def _parse_expectation(data: Any) -> ResponseExpectation:
    obj = _as_object(data, "expectation")
    return ResponseExpectation(
        transport=_parse_transport(_require(obj, "transport", "expectation")),
        envelope=_parse_envelope(_require(obj, "envelope", "expectation")),
        validator=MethodExpectation.from_dict(_require(obj, "validator", "expectation")),
    )


def parse_fixture(data: Any) -> RpcFixture:
    """Parse a fixture from a decoded JSON mapping or from JSON text."""
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise FixtureError(f"fixture is not valid JSON: {exc}") from exc
    obj = _as_object(data, "fixture")
    return RpcFixture(
        name=_as_string(_require(obj, "name", "fixture"), "name"),
        method=_as_string(_require(obj, "method", "fixture"), "method"),
        request=_parse_request(_require(obj, "request", "fixture")),
        expectation=_parse_expectation(_require(obj, "expectation", "fixture")),
    )


def _read_fixtures(directory: Path) -> Iterator[RpcFixture]:
    try:
        entries = sorted(directory.iterdir())
    except OSError as exc:
        raise FixtureError(f"failed to read fixture directory {directory}: {exc}") from exc

    for path in entries:
        if path.is_dir():
            yield from _read_fixtures(path)
            continue
        if not path.is_file() or path.suffix != ".json":
            continue
        try:
            contents = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise FixtureError(f"failed to read fixture {path}: {exc}") from exc
        try:
            yield parse_fixture(contents)
        except FixtureError as exc:
            raise FixtureError(f"failed to parse fixture {path}: {exc}") from exc


def load_rpc_fixtures(directory: str | Path) -> list[RpcFixture]:
    """Load every ``.json`` fixture below ``directory``, sorted by fixture name."""
    return sorted(_read_fixtures(Path(directory)), key=lambda fixture: fixture.name)