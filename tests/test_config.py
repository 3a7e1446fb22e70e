from __future__ import annotations

import pytest

from cocevents.config import EventsConfig
from cocevents.exceptions import CocConfigError


def test_defaults() -> None:
    config = EventsConfig(tokens=("A",))
    assert config.base_url == "https://api.clashofclans.com/v1"
    assert config.timeout is None
    assert config.rate_limit == 10
    assert config.refresh_rate == 120.0
    assert config.maintenance_interval == 30.0


def test_requests_per_second_scales_with_tokens() -> None:
    config = EventsConfig(tokens=["A", "B"], rate_limit=10)
    assert config.tokens == ("A", "B")
    assert config.requests_per_second == 20


def test_empty_token_pool_fails_fast() -> None:
    with pytest.raises(CocConfigError):
        EventsConfig(tokens=())


def test_invalid_rate_limit_rejected() -> None:
    with pytest.raises(CocConfigError):
        EventsConfig(tokens=("A",), rate_limit=0)


def test_zero_timeout_means_no_timeout() -> None:
    assert EventsConfig(tokens=("A",), timeout=0).timeout is None


def test_repr_masks_tokens() -> None:
    text = repr(EventsConfig(tokens=("secret-token-abcd",)))
    assert "secret-token" not in text
    assert "abcd" in text


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COC_TOKENS", "A, B,,C")
    monkeypatch.setenv("COC_BASE_URL", "http://localhost:8080/v1/")
    monkeypatch.setenv("COC_RATE_LIMIT", "5")
    monkeypatch.setenv("COC_REFRESH_RATE", "60")

    config = EventsConfig.from_env(refresh_rate=30.0)

    assert config.tokens == ("A", "B", "C")
    assert config.base_url == "http://localhost:8080/v1"
    assert config.rate_limit == 5.0
    assert config.refresh_rate == 30.0


def test_from_env_token_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("COC_TOKENS", raising=False)
    assert EventsConfig.from_env(tokens="X,Y").tokens == ("X", "Y")


def test_from_env_without_tokens_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("COC_TOKENS", raising=False)
    with pytest.raises(CocConfigError):
        EventsConfig.from_env()


def test_from_env_rejects_bad_number(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COC_TOKENS", "A")
    monkeypatch.setenv("COC_TIMEOUT", "soon")
    with pytest.raises(CocConfigError):
        EventsConfig.from_env()
