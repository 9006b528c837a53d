# rpccompat

`rpccompat` checks whether a Solana JSON-RPC endpoint answers the way a set of
recorded fixtures says it should. Each fixture describes one request, a method
and its params, and what the response must look like: the transport headers,
the JSON-RPC envelope and the shape or exact contents of the result.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Configuration

Set the endpoint to check in the environment, or in a `.env` file found in the
working directory or one of its parents. A variable already set in the
environment is not overridden by the `.env` file.

```
RPC_ENDPOINT=http://localhost:8899
```

If `RPC_ENDPOINT` is not set, `Config.from_env()` raises `ConfigError`.

Requests are spaced at least 2 seconds apart, and at least 3 seconds apart for
`getBlock`. A request answered with HTTP 429 is retried after a 10 second
pause, up to 5 attempts in all. A fixture with `allow_error` set is not
retried on HTTP 429; the 429 response is validated as it is.

## Running

Put fixture files (`*.json`, in any sub-directory) under `fixtures/rpc` in the
working directory, then run:

```
rpccompat
```

Options:

- `--method <rpc-method>` runs only the fixtures for one RPC method.
- `--show-failure-response` adds the full response body to each failure.
- `-h`, `--help` prints usage and exits.

When a run covers more than one method it must include a `getHealth` fixture.
`getHealth` fixtures run first; if one of them fails, every other check is
reported as skipped. The remaining fixtures run ordered by method, then by
name.

The command prints a `[PASS]`, `[FAIL]` or `[SKIP]` line for every fixture,
then a line `Summary: N passed, N failed, N skipped`. It exits with status 1,
printing `Error: ...` to standard error, if any check failed, if an argument
is not recognised, if the configuration is missing, if a fixture cannot be
read or parsed, or if no fixtures were selected. Colour and the progress
spinner appear only on a terminal, and are turned off when `NO_COLOR` is set.

## Supported methods

A validator is registered for these methods:

| Method | Validator `kind` |
| --- | --- |
| `getHealth` | `stringResult` |
| `getSignatureStatuses` | `signatureStatuses` |
| `getSignaturesForAddress` | `signaturesForAddress` |
| `getSlot` | `slot` |
| `getSlotLeader` | `slotLeader` |
| `getSlotLeaders` | `slotLeaders` |
| `getStakeMinimumDelegation` | `stakeMinimumDelegation` |
| `getSupply` | `supply` |
| `getTokenAccountBalance` | `tokenAccountBalance` |
| `getTokenAccountsByOwner` | `tokenAccountsByOwner` |
| `getTransaction` | `transactionSnapshot` |

A fixture whose validator `kind` does not match its method fails.

## What it does not do

The fixture loader accepts further validator kinds (for example
`accountInfo`, `balance`, `blockSnapshot`, `epochInfo`, `largestAccounts`,
`programAccounts`), but no validator is registered for their methods. A
successful response to a fixture for any method not in the table above fails
with `no validator registered for RPC method '...'`. Only a fixture that
expects a JSON-RPC error (`allow_error` with `expected_error`) can pass for
such a method, because the error payload is checked without a method
validator.

## Fixture format

```json
{
  "name": "getHealth returns ok",
  "method": "getHealth",
  "request": { "params": [] },
  "expectation": {
    "transport": { "content_type_prefix": "application/json", "charset": "utf-8" },
    "envelope": { "jsonrpc_version": "2.0" },
    "validator": { "kind": "stringResult", "allowed_values": ["ok"] }
  }
}
```

- The fixture `name` is also sent as the JSON-RPC request id, and the
  response must echo it.
- `request.params` defaults to `[]`. `request.dynamic_params` may contain
  entries such as `{"kind": "processedSlot", "index": 0}`; each replaces the
  param at that index with the endpoint's current slot at `processed`
  commitment, fetched just before the request.
- The Content-Type must start with `content_type_prefix`, and its `charset`
  must equal `charset`. The charset is not checked for `getHealth`, nor for an
  allowed HTTP 429 error response that carries no charset.
- `envelope.required_attributes` defaults to `["jsonrpc", "result", "id"]`.
  A response containing `error` fails unless `allow_error` is true; a fixture
  that sets `allow_error` must also give an `expected_error` with a `code` and
  a `message`, which the response must match exactly.

Fixtures are parsed with `rpccompat.fixture.parse_fixture`, which takes a
decoded mapping or JSON text and raises `FixtureError` on a schema mismatch.
`load_rpc_fixtures(directory)` loads every `.json` file below a directory,
sorted by fixture name.

## Library use

```python
from rpccompat.checker.runner import run_checks
from rpccompat.config import Config
from rpccompat.fixture import load_rpc_fixtures

report = run_checks(Config.from_env(), load_rpc_fixtures("fixtures/rpc"), False)
report.print_summary(None)
print(report.counts())
print(report.has_failures())
```

Single responses can be checked without a network with
`rpccompat.checker.validation.validate_response(fixture, request_id, response)`,
where `response` is an `HttpResponseData(status, content_type, body_text)`. It
returns a summary string or raises `ValidationError`.