"""Helpers for safe debug logging.

API credentials are long-lived bearer tokens; they must never reach the logs
verbatim. This module masks them before emitting DEBUG records.
"""

from __future__ import annotations

from collections.abc import Mapping

_SENSITIVE_HEADERS: frozenset[str] = frozenset({"authorization", "cookie"})


def mask_token(token: str, *, visible: int = 4) -> str:
    """Return *token* with everything but its last *visible* characters hidden."""
    if len(token) <= visible:
        return "<redacted>"
    return f"…{token[-visible:]}"


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of request *headers* with credential values masked."""
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() not in _SENSITIVE_HEADERS:
            redacted[key] = value
            continue
        scheme, _, credential = value.partition(" ")
        redacted[key] = f"{scheme} {mask_token(credential)}" if credential else mask_token(value)
    return redacted
