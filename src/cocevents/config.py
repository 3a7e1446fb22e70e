"""Client configuration for cocevents."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Iterable
from typing import Any

from cocevents._constants import (
    BASE_URL,
    DEFAULT_MAINTENANCE_INTERVAL,
    DEFAULT_RATE_LIMIT,
    DEFAULT_REFRESH_RATE,
)
from cocevents._redact import mask_token
from cocevents.exceptions import CocConfigError


def _split_tokens(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclasses.dataclass(frozen=True)
class EventsConfig:
    """Event poller configuration.

    Parameters
    ----------
    tokens : tuple of str
        API credentials. Requests rotate over them round-robin, so the
        effective request rate scales with the number of tokens.
    base_url : str
        API root. Defaults to the production endpoint.
    timeout : float or None
        Per-request timeout in seconds. ``None`` disables the timeout.
    rate_limit : float
        Requests per second allowed for a single token.
    refresh_rate : float
        Seconds between the starts of two consecutive sweeps of the same
        category.  A sweep that takes longer starts the next one at once.
    maintenance_interval : float
        Seconds between two maintenance probes.
    """

    tokens: tuple[str, ...]
    base_url: str = BASE_URL
    timeout: float | None = None
    rate_limit: float = DEFAULT_RATE_LIMIT
    refresh_rate: float = DEFAULT_REFRESH_RATE
    maintenance_interval: float = DEFAULT_MAINTENANCE_INTERVAL

    def __post_init__(self) -> None:
        tokens = self.tokens
        if isinstance(tokens, str):
            tokens = (tokens,)
        elif not isinstance(tokens, tuple):
            tokens = tuple(tokens)
        object.__setattr__(self, "tokens", tokens)
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

        if not tokens:
            raise CocConfigError("at least one API token is required")
        if self.rate_limit <= 0:
            raise CocConfigError(f"rate_limit must be positive, got {self.rate_limit}")
        if self.refresh_rate < 0:
            raise CocConfigError(f"refresh_rate must not be negative, got {self.refresh_rate}")
        if self.maintenance_interval < 0:
            raise CocConfigError(f"maintenance_interval must not be negative, got {self.maintenance_interval}")
        if self.timeout is not None and self.timeout <= 0:
            object.__setattr__(self, "timeout", None)

    def __repr__(self) -> str:
        masked = ", ".join(mask_token(token) for token in self.tokens)
        return (
            f"EventsConfig(tokens=[{masked}], base_url={self.base_url!r}, timeout={self.timeout!r}, "
            f"rate_limit={self.rate_limit!r}, refresh_rate={self.refresh_rate!r}, "
            f"maintenance_interval={self.maintenance_interval!r})"
        )

    @property
    def requests_per_second(self) -> float:
        """Global request budget across every token."""
        return self.rate_limit * len(self.tokens)

    @classmethod
    def from_env(cls, **overrides: Any) -> EventsConfig:
        """Create configuration from environment variables.

        Reads ``COC_TOKENS`` (comma-separated) and the optional
        ``COC_BASE_URL``, ``COC_TIMEOUT``, ``COC_RATE_LIMIT``,
        ``COC_REFRESH_RATE`` and ``COC_MAINTENANCE_INTERVAL`` variables.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        EventsConfig
            Populated configuration.

        Raises
        ------
        CocConfigError
            If no token is available or a numeric variable is malformed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        tokens_env = env.get("COC_TOKENS")
        if tokens_env is not None:
            config_kwargs["tokens"] = _split_tokens(tokens_env)
        else:
            config_kwargs["tokens"] = ()

        base_url = env.get("COC_BASE_URL")
        if base_url:
            config_kwargs["base_url"] = base_url

        _ENV_FLOAT_MAP = {
            "COC_TIMEOUT": "timeout",
            "COC_RATE_LIMIT": "rate_limit",
            "COC_REFRESH_RATE": "refresh_rate",
            "COC_MAINTENANCE_INTERVAL": "maintenance_interval",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = float(val)
            except ValueError as exc:
                raise CocConfigError(f"{env_key} must be a number, got {val!r}") from exc

        tokens_override = overrides.pop("tokens", None)
        if tokens_override is not None:
            config_kwargs["tokens"] = _coerce_tokens(tokens_override)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)


def _coerce_tokens(value: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(value, str):
        return _split_tokens(value)
    return tuple(value)
