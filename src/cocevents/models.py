"""Result model for raw API fetches."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cocevents._constants import MAINTENANCE_STATUS, TRANSPORT_FAILURE_STATUS


class FetchResult(BaseModel):
    """Outcome of one ``GET`` against the API.

    The fetch primitive never raises; failures are described by the
    ``ok``/``status`` pair instead:

    * transport failure or timeout: ``ok=False, status=504``
    * body that is not a JSON object: ``ok=False, status=<http status>``
    * otherwise: ``ok`` is ``status == 200`` and ``data`` holds the body
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: int
    ok: bool
    max_age: int | None = Field(
        default=None,
        description="Seconds from the Cache-Control max-age directive, if any.",
    )
    data: dict[str, Any] = Field(default_factory=dict, description="Parsed JSON body")

    @classmethod
    def failure(cls, status: int = TRANSPORT_FAILURE_STATUS) -> FetchResult:
        return cls(status=status, ok=False)

    @property
    def in_maintenance(self) -> bool:
        return self.status == MAINTENANCE_STATUS
