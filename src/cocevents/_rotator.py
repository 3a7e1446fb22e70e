"""Round-robin selection over the API token pool."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from cocevents._redact import mask_token
from cocevents.exceptions import CocConfigError

_logger = logging.getLogger(__name__)


class CredentialRotator:
    """Hand out tokens in a fixed cyclic order.

    The cursor is shared by every loop of a client, so rotation is global:
    N consecutive dispatches visit each of N tokens exactly once.
    """

    def __init__(self, tokens: Iterable[str]) -> None:
        self._tokens: tuple[str, ...] = tuple(tokens)
        if not self._tokens:
            raise CocConfigError("credential pool must contain at least one token")
        self._active = 0

    def __len__(self) -> int:
        return len(self._tokens)

    @property
    def active_index(self) -> int:
        return self._active

    def next(self) -> str:
        """Return the token under the cursor and advance the cursor."""
        token = self._tokens[self._active]
        self._active = (self._active + 1) % len(self._tokens)
        _logger.debug("Using token %s", mask_token(token))
        return token
