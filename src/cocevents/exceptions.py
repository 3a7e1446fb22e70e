"""Custom exception hierarchy for cocevents."""

from __future__ import annotations


class CocError(Exception):
    """Base exception for all cocevents errors."""


class CocConfigError(CocError):
    """Invalid or missing configuration."""


class CocNotInitializedError(CocError):
    """Client used outside of its ``async with`` block."""


class CocTransportError(CocError):
    """HTTP-level failure (network, timeout, invalid JSON).

    Raised only inside the transport; :meth:`HttpTransport.fetch` collapses
    it into a non-ok :class:`~cocevents.models.FetchResult` before returning.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)
