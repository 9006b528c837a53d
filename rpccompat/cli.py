"""Command line entry point: run the RPC fixtures against an endpoint."""

from __future__ import annotations

import dataclasses
import itertools
import os
import sys
import threading
from pathlib import Path
from typing import Iterable, Sequence, TextIO

from rpccompat.checker.common import ValidationError
from rpccompat.checker.runner import run_checks
from rpccompat.config import Config, ConfigError
from rpccompat.fixture import FixtureError, RpcFixture, load_rpc_fixtures

USAGE = "Usage: rpccompat [--method <rpc-method>] [--show-failure-response]"
FIXTURE_DIRECTORY = Path("fixtures") / "rpc"


class UsageError(Exception):
    """Raised for bad command line arguments or an empty fixture selection."""


@dataclasses.dataclass(frozen=True)
class CliArgs:
    method: str | None = None
    show_failure_response: bool = False


def parse_args(argv: Sequence[str] | None = None) -> CliArgs:
    """Parse command line arguments; ``--help`` prints usage and exits."""
    args = iter(sys.argv[1:] if argv is None else argv)
    method: str | None = None
    show_failure_response = False

    for arg in args:
        if arg == "--method":
            try:
                method = next(args)
            except StopIteration:
                raise UsageError("--method requires a value") from None
        elif arg == "--show-failure-response":
            show_failure_response = True
        elif arg in ("--help", "-h"):
            print(USAGE)
            raise SystemExit(0)
        else:
            raise UsageError(f"unrecognized argument '{arg}'")

    return CliArgs(method=method, show_failure_response=show_failure_response)


def select_fixtures(fixtures: Iterable[RpcFixture], method: str | None) -> list[RpcFixture]:
    """Keep only the fixtures for ``method``, or all of them when it is None."""
    if method is None:
        return list(fixtures)
    filtered = [fixture for fixture in fixtures if fixture.method == method]
    if not filtered:
        raise UsageError(f"no fixtures were found for method '{method}'")
    return filtered


class Spinner:
    """A progress spinner on a terminal stream; silent elsewhere or under NO_COLOR."""

    FRAMES = ("|", "/", "-", "\\")
    FRAME_INTERVAL = 0.1

    def __init__(self, message: str, stream: TextIO | None = None) -> None:
        self.message = message
        self.stream = sys.stderr if stream is None else stream
        self._done = threading.Event()
        self._thread: threading.Thread | None = None

    def _spin(self) -> None:
        for frame in itertools.cycle(self.FRAMES):
            if self._done.is_set():
                return
            self.stream.write(f"\r{frame} {self.message}")
            self.stream.flush()
            self._done.wait(self.FRAME_INTERVAL)

    def start(self) -> Spinner:
        enabled = self.stream.isatty() and "NO_COLOR" not in os.environ
        if enabled and self._thread is None:
            self._done.clear()
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()
        return self

    def stop(self) -> None:
        if self._thread is None:
            return
        self._done.set()
        self._thread.join()
        self._thread = None
        self.stream.write("\r\x1b[2K")
        self.stream.flush()

    def __enter__(self) -> Spinner:
        return self.start()

    def __exit__(self, *args: object) -> None:
        self.stop()


def _run(args: CliArgs) -> int:
    config = Config.from_env()
    print(f"Running against RPC_ENDPOINT={config.rpc_endpoint}")
    fixtures = select_fixtures(load_rpc_fixtures(FIXTURE_DIRECTORY), args.method)
    if not fixtures:
        raise FixtureError(f"no RPC fixtures were found in {FIXTURE_DIRECTORY.as_posix()}")

    with Spinner("Running compatibility checks"):
        report = run_checks(config, fixtures, args.show_failure_response)
    report.print_summary()

    if report.has_failures():
        raise ValidationError("one or more compatibility checks failed")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    try:
        return _run(parse_args(argv))
    except (UsageError, ConfigError, FixtureError, ValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())