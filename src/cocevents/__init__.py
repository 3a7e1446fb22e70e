"""cocevents - Async change-event poller for the Clash of Clans API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cocevents")
except PackageNotFoundError:
    __version__ = "0+local"
from cocevents.client import ClashEvents
from cocevents.config import EventsConfig
from cocevents.events import Event, EventBus, EventName
from cocevents.exceptions import (
    CocConfigError,
    CocError,
    CocNotInitializedError,
    CocTransportError,
)
from cocevents.models import FetchResult
from cocevents.sweep import Category
from cocevents.tags import validate_tag
from cocevents.watch import SweepState, WatchSet

__all__ = [
    "__version__",
    "Category",
    "ClashEvents",
    "CocConfigError",
    "CocError",
    "CocNotInitializedError",
    "CocTransportError",
    "Event",
    "EventBus",
    "EventName",
    "EventsConfig",
    "FetchResult",
    "SweepState",
    "WatchSet",
    "validate_tag",
]
