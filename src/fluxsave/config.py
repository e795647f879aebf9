"""Configuration objects for the Fluxsave Python SDK."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Iterable, Optional

__version__ = "0.1.0"

DEFAULT_RETRY_ON: FrozenSet[int] = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    retries: int = 2
    delay: float = 0.4
    retry_on: FrozenSet[int] = DEFAULT_RETRY_ON

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.delay < 0:
            raise ValueError("delay must be >= 0")
        # Accept any iterable of status codes from callers.
        object.__setattr__(self, "retry_on", frozenset(int(code) for code in self.retry_on))

    def merge(
        self,
        retries: int,
        delay: Optional[float] = None,
        retry_on: Optional[Iterable[int]] = None,
    ) -> "RetryPolicy":
        """Return a new policy, keeping the current delay and status set when not given."""
        return RetryPolicy(
            retries=retries,
            delay=self.delay if delay is None else delay,
            retry_on=self.retry_on if retry_on is None else frozenset(retry_on),
        )


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    timeout: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    user_agent: str = f"fluxsave-python/{__version__}"
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.base_url.endswith("/"):
            object.__setattr__(self, "base_url", self.base_url[:-1])

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key) and bool(self.api_secret)

    def with_auth(self, api_key: str, api_secret: str) -> "ClientConfig":
        return replace(self, api_key=api_key, api_secret=api_secret)

    def with_timeout(self, timeout: float) -> "ClientConfig":
        return replace(self, timeout=timeout)

    def with_retry(self, retry: RetryPolicy) -> "ClientConfig":
        return replace(self, retry=retry)

    @classmethod
    def from_env(cls, base_url: Optional[str] = None) -> "ClientConfig":
        url = base_url or os.environ.get("FLUXSAVE_BASE_URL")
        if not url:
            raise ValueError("FLUXSAVE_BASE_URL must be configured")

        defaults = RetryPolicy()
        retry_on = tuple(
            int(code.strip())
            for code in os.environ.get("FLUXSAVE_RETRY_ON", "").split(",")
            if code.strip()
        ) or defaults.retry_on
        retry = RetryPolicy(
            retries=int(os.environ.get("FLUXSAVE_RETRIES", str(defaults.retries))),
            delay=float(os.environ.get("FLUXSAVE_RETRY_DELAY", str(defaults.delay))),
            retry_on=frozenset(retry_on),
        )

        return cls(
            base_url=url,
            api_key=os.environ.get("FLUXSAVE_API_KEY") or None,
            api_secret=os.environ.get("FLUXSAVE_API_SECRET") or None,
            timeout=float(os.environ.get("FLUXSAVE_TIMEOUT", "30.0")),
            retry=retry,
        )


__all__ = ["ClientConfig", "RetryPolicy", "DEFAULT_RETRY_ON", "__version__"]
