"""
Client configuration for searchcore.

``ClientConfig`` is an immutable value passed explicitly into every client,
the task poller and the tenant token generator. There is no process-wide
configuration singleton.
"""

import os
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

import yaml  # pyright: ignore[reportMissingImports]

logger = logging.getLogger(__name__)

DEFAULT_HOST = "http://127.0.0.1:7700"
DEFAULT_TIMEOUT = 10.0
DEFAULT_TASK_INTERVAL = 0.05
DEFAULT_TASK_TIMEOUT = 5.0


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior on idempotent reads."""
    max_attempts: int = 3
    base_delay: float = 0.2
    max_delay: float = 2.0
    exponential_base: float = 2.0
    jitter: bool = True


@dataclass(frozen=True)
class ClientConfig:
    """Connection and wait settings for the search service."""

    host: str = DEFAULT_HOST
    api_key: Optional[str] = None

    # Request Configuration
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = "searchcore"
    retry: RetryConfig = field(default_factory=RetryConfig)

    # Circuit breaker
    failure_threshold: int = 5
    recovery_timeout: float = 30.0

    # Task waiting defaults
    task_interval: float = DEFAULT_TASK_INTERVAL
    task_timeout: float = DEFAULT_TASK_TIMEOUT

    def __post_init__(self):
        if not self.host:
            raise ValueError("host must not be empty")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "host", self.host.rstrip("/"))
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.task_interval <= 0:
            raise ValueError("task_interval must be positive")
        if self.task_timeout <= 0:
            raise ValueError("task_timeout must be positive")

    @classmethod
    def from_env(cls, base: Optional["ClientConfig"] = None) -> "ClientConfig":
        """Create configuration from environment variables, layered over ``base``."""
        base = base or cls()
        return replace(
            base,
            host=os.getenv("SEARCHCORE_HOST", base.host),
            api_key=os.getenv("SEARCHCORE_API_KEY", base.api_key),
            timeout=float(os.getenv("SEARCHCORE_TIMEOUT", str(base.timeout))),
            task_interval=float(os.getenv("SEARCHCORE_TASK_INTERVAL", str(base.task_interval))),
            task_timeout=float(os.getenv("SEARCHCORE_TASK_TIMEOUT", str(base.task_timeout))),
        )

    @classmethod
    def from_file(cls, path: str, *, apply_env: bool = True) -> "ClientConfig":
        """
        Load configuration from a YAML file.

        The file holds a flat mapping of ``ClientConfig`` field names, with an
        optional nested ``retry`` mapping. Environment variables override the
        file unless ``apply_env`` is False.
        """
        with open(path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        config = cls.from_dict(raw)
        logger.debug("Loaded client config from %s", path)
        return cls.from_env(config) if apply_env else config

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientConfig":
        data = dict(data)
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        retry = data.pop("retry", None)
        if isinstance(retry, dict):
            data["retry"] = RetryConfig(**retry)
        return cls(**data)

    def with_api_key(self, api_key: Optional[str]) -> "ClientConfig":
        """Return a copy using a different API key (e.g. a tenant token)."""
        return replace(self, api_key=api_key)

    def get_headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def is_configured(self) -> bool:
        return bool(self.host) and self.api_key is not None
