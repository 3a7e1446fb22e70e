from __future__ import annotations

from cocevents._redact import mask_token, redact_headers


def test_redact_headers_masks_bearer_token() -> None:
    headers = {"Authorization": "Bearer abcdefgh1234", "Accept": "application/json"}

    redacted = redact_headers(headers)

    assert redacted == {"Authorization": "Bearer …1234", "Accept": "application/json"}
    # The caller's dict is left untouched.
    assert headers["Authorization"] == "Bearer abcdefgh1234"


def test_redact_headers_masks_value_without_scheme() -> None:
    assert redact_headers({"cookie": "session=abcdefgh1234"}) == {"cookie": "…1234"}


def test_mask_token_keeps_only_suffix() -> None:
    assert mask_token("abcdefgh1234") == "…1234"
    assert mask_token("abc") == "<redacted>"
