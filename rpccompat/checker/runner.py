"""Sending fixture requests to an RPC endpoint and collecting the outcomes."""

from __future__ import annotations

import copy
import json
import threading
import time
from datetime import timedelta
from typing import Any, Callable, Mapping, Sequence

import requests

from rpccompat.checker.common import ValidationError, is_u64
from rpccompat.checker.report import CheckOutcome, CheckStatus, CompatibilityReport
from rpccompat.checker.validation import (
    HEALTH_METHOD,
    TOO_MANY_REQUESTS,
    HttpResponseData,
    minimum_request_interval_for_fixture,
    order_fixtures,
    requires_health_gate,
    validate_health_gate_requirements,
    validate_response,
)
from rpccompat.config import Config
from rpccompat.fixture import RpcFixture

MAX_ATTEMPTS = 5
TOO_MANY_REQUESTS_BACKOFF = timedelta(seconds=10)
USER_AGENT = "rpccompat/0.1.0"
PROCESSED_SLOT_REQUEST_ID = "dynamic-getSlot-processed"
HEALTH_SKIP_DETAILS = "skipped because getHealth did not return ok"


class RequestThrottler:
    """Keeps consecutive requests at least a minimum interval apart."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.clock = clock
        self.sleep = sleep
        self._last_started_at: float | None = None
        self._lock = threading.Lock()

    def wait_for_turn(self, minimum_interval: timedelta | float) -> None:
        """Block until ``minimum_interval`` has passed since the previous request."""
        seconds = (
            minimum_interval.total_seconds()
            if isinstance(minimum_interval, timedelta)
            else float(minimum_interval)
        )
        with self._lock:
            if self._last_started_at is not None:
                elapsed = self.clock() - self._last_started_at
                if elapsed < seconds:
                    self.sleep(seconds - elapsed)
            self._last_started_at = self.clock()

    def back_off(self) -> None:
        """Pause after the endpoint answered with too many requests."""
        self.sleep(TOO_MANY_REQUESTS_BACKOFF.total_seconds())


def _payload(request_id: str, method: str, params: Sequence[Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "method": method, "params": list(params)}


def _post(
    session: requests.Session, config: Config, payload: Mapping[str, Any], failure: str
) -> requests.Response:
    try:
        return session.post(
            config.rpc_endpoint,
            json=payload,
            headers={"Content-Type": "application/json"},
        )
    except requests.RequestException as exc:
        raise ValidationError(f"{failure}: {exc}") from exc


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def fetch_processed_slot(
    session: requests.Session, throttler: RequestThrottler, config: Config
) -> int:
    """Ask the endpoint for its current slot at ``processed`` commitment."""
    payload = _payload(PROCESSED_SLOT_REQUEST_ID, "getSlot", [{"commitment": "processed"}])
    interval = timedelta(milliseconds=config.minimum_request_interval_ms)

    for attempt in range(1, MAX_ATTEMPTS + 1):
        throttler.wait_for_turn(interval)
        response = _post(session, config, payload, "dynamic getSlot processed request failed")
        if response.status_code != TOO_MANY_REQUESTS or attempt == MAX_ATTEMPTS:
            break
        throttler.back_off()

    status = HttpResponseData(response.status_code, None, "")
    body_text = response.text
    if not status.is_success:
        raise ValidationError(
            "dynamic getSlot processed expected an HTTP success status, "
            f"received {status.status_text}"
        )

    try:
        document = json.loads(body_text)
    except ValueError as exc:
        raise ValidationError(
            f"dynamic getSlot processed response body was not valid JSON: {exc}"
        ) from exc

    if isinstance(document, Mapping) and "error" in document:
        raise ValidationError(
            "dynamic getSlot processed returned JSON-RPC error payload: "
            f"{_compact_json(document['error'])}"
        )

    result = document.get("result") if isinstance(document, Mapping) else None
    if not is_u64(result):
        raise ValidationError("dynamic getSlot processed result was not a u64")
    return result


def resolve_request_params(
    session: requests.Session,
    throttler: RequestThrottler,
    config: Config,
    fixture: RpcFixture,
) -> list[Any]:
    """Return the fixture's params with every dynamic parameter filled in."""
    params = copy.deepcopy(fixture.request.params)
    for dynamic_param in fixture.request.dynamic_params:
        slot = fetch_processed_slot(session, throttler, config)
        if dynamic_param.index >= len(params):
            raise ValidationError(
                f"dynamic processedSlot parameter index {dynamic_param.index} "
                f"was outside params length {len(params)}"
            )
        params[dynamic_param.index] = slot
    return params


def send_rpc_request_with_retry(
    session: requests.Session,
    throttler: RequestThrottler,
    config: Config,
    fixture: RpcFixture,
    payload: Mapping[str, Any],
) -> requests.Response:
    """Send ``payload``, retrying after rate limiting unless the fixture expects it."""
    interval = minimum_request_interval_for_fixture(config, fixture)
    allow_error = fixture.expectation.envelope.allow_error

    for attempt in range(1, MAX_ATTEMPTS + 1):
        throttler.wait_for_turn(interval)
        response = _post(
            session, config, payload, f"RPC request failed for method '{fixture.method}'"
        )
        if allow_error and response.status_code == TOO_MANY_REQUESTS:
            break
        if response.status_code != TOO_MANY_REQUESTS or attempt == MAX_ATTEMPTS:
            break
        throttler.back_off()

    return response


def run_single_check(
    session: requests.Session,
    throttler: RequestThrottler,
    config: Config,
    fixture: RpcFixture,
    show_failure_response: bool = False,
) -> str:
    """Run one fixture against the endpoint and return the validation summary."""
    request_id = fixture.name
    params = resolve_request_params(session, throttler, config, fixture)
    payload = _payload(request_id, fixture.method, params)
    response = send_rpc_request_with_retry(session, throttler, config, fixture, payload)

    response_data = HttpResponseData(
        status=response.status_code,
        content_type=response.headers.get("Content-Type"),
        body_text=response.text,
    )

    try:
        return validate_response(fixture, request_id, response_data)
    except ValidationError as exc:
        if show_failure_response:
            raise ValidationError(
                f"full RPC response body: {response_data.body_text}: {exc}"
            ) from exc
        raise


def run_checks(
    config: Config,
    fixtures: Sequence[RpcFixture],
    show_failure_response: bool = False,
) -> CompatibilityReport:
    """Run every fixture, health checks first, and collect the outcomes."""
    validate_health_gate_requirements(fixtures)

    throttler = RequestThrottler()
    health_gate = requires_health_gate(fixtures)
    health_failed = False
    checks: list[CheckOutcome] = []

    with requests.Session() as session:
        session.headers["User-Agent"] = USER_AGENT
        for fixture in order_fixtures(fixtures):
            if health_gate and health_failed and fixture.method != HEALTH_METHOD:
                checks.append(
                    CheckOutcome(fixture.name, CheckStatus.SKIPPED, HEALTH_SKIP_DETAILS)
                )
                continue

            try:
                details = run_single_check(
                    session, throttler, config, fixture, show_failure_response
                )
            except ValidationError as exc:
                if fixture.method == HEALTH_METHOD:
                    health_failed = True
                checks.append(
                    CheckOutcome(
                        fixture.name, CheckStatus.FAILED, f"fixture '{fixture.name}': {exc}"
                    )
                )
            else:
                checks.append(CheckOutcome(fixture.name, CheckStatus.PASSED, details))

    return CompatibilityReport(checks)