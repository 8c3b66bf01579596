"""
pioclient Configuration
Connection settings for the event and engine clients.
"""

import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .exceptions import InvalidArgumentError


DEFAULT_EVENT_URL = "http://localhost:7070"
DEFAULT_ENGINE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 300.0  # 5 minutes

ACCESS_KEY_ENV = "PIO_ACCESS_KEY"


@dataclass(frozen=True)
class ClientConfig:
    """Endpoint configuration, read-only once a client is built."""

    base_url: str = DEFAULT_EVENT_URL

    # Per-call timeout in seconds
    timeout: float = DEFAULT_TIMEOUT

    # Connection pool size shared by all outstanding calls
    max_connections: int = 100

    @classmethod
    def from_env(cls, prefix: str, default_url: str) -> "ClientConfig":
        """
        Build a config from ``<PREFIX>_URL``, ``<PREFIX>_TIMEOUT`` and
        ``<PREFIX>_MAX_CONNECTIONS``, falling back to the defaults.
        """
        return cls(
            base_url=os.getenv(f"{prefix}_URL", default_url),
            timeout=_env_number(f"{prefix}_TIMEOUT", float, DEFAULT_TIMEOUT),
            max_connections=_env_number(f"{prefix}_MAX_CONNECTIONS", int, 100),
        )

    def replace(self, base_url: Optional[str] = None, timeout: Optional[float] = None) -> "ClientConfig":
        """Copy with the given overrides applied."""
        return ClientConfig(
            base_url=base_url if base_url is not None else self.base_url,
            timeout=timeout if timeout is not None else self.timeout,
            max_connections=self.max_connections,
        )


NumberT = TypeVar("NumberT", int, float)


def _env_number(name: str, parse: Callable[[str], NumberT], default: NumberT) -> NumberT:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return parse(raw)
    except ValueError as e:
        raise InvalidArgumentError(f"{name} must be a number, got {raw!r}") from e


def access_key_from_env() -> Optional[str]:
    """Access key from the environment, if one is set."""
    return os.getenv(ACCESS_KEY_ENV)


# Default configurations
DEFAULT_EVENT_CONFIG = ClientConfig(base_url=DEFAULT_EVENT_URL)
DEFAULT_ENGINE_CONFIG = ClientConfig(base_url=DEFAULT_ENGINE_URL)
