"""Runtime configuration read from the environment."""

from __future__ import annotations

import dataclasses
import os

from dotenv import find_dotenv, load_dotenv

DEFAULT_MINIMUM_REQUEST_INTERVAL_MS = 2_000


class ConfigError(RuntimeError):
    """Raised when the configuration cannot be assembled."""


@dataclasses.dataclass(frozen=True)
class Config:
    rpc_endpoint: str
    minimum_request_interval_ms: int = DEFAULT_MINIMUM_REQUEST_INTERVAL_MS

    @classmethod
    def from_env(cls) -> Config:
        """Read ``RPC_ENDPOINT`` from the environment or a ``.env`` file."""
        load_dotenv(find_dotenv(usecwd=True))
        rpc_endpoint = os.environ.get("RPC_ENDPOINT")
        if rpc_endpoint is None:
            raise ConfigError("RPC_ENDPOINT must be set in the environment or .env file")
        return cls(rpc_endpoint=rpc_endpoint)