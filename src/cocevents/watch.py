"""Watched tags and their last known snapshots.

A :class:`WatchSet` is read by exactly one sweep loop and mutated by the
public client API, possibly while that sweep is suspended in the middle of
a pass. Iteration therefore re-reads the live set at every step instead of
iterating a dict view.
"""

from __future__ import annotations

import copy
import itertools
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


class SweepState:
    """Cooperative cancellation token for one category's sweep.

    ``clear()`` on the watch set requests an abort; the sweep checks the
    flag once per tag, so the in-flight fetch finishes and the remaining
    tags of the pass are skipped.
    """

    def __init__(self) -> None:
        self._abort_requested = False

    @property
    def abort_requested(self) -> bool:
        return self._abort_requested

    def request_abort(self) -> None:
        self._abort_requested = True

    def reset(self) -> None:
        self._abort_requested = False


@dataclass
class WatchEntry:
    seq: int
    snapshot: dict[str, Any] = field(default_factory=dict)


class WatchSet:
    """Insertion-ordered ``tag -> snapshot`` mapping for one category."""

    def __init__(self, state: SweepState | None = None) -> None:
        self._entries: dict[str, WatchEntry] = {}
        self._seq = itertools.count()
        self.state = state if state is not None else SweepState()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, tag: object) -> bool:
        return tag in self._entries

    def __repr__(self) -> str:
        return f"WatchSet({list(self._entries)!r})"

    def has(self, tag: str) -> bool:
        return tag in self._entries

    def add(self, tag: str) -> bool:
        """Start watching *tag*. Returns ``False`` if it was already watched."""
        if tag in self._entries:
            return False
        self._entries[tag] = WatchEntry(seq=next(self._seq))
        return True

    def remove(self, tag: str) -> bool:
        """Stop watching *tag*. Returns ``False`` if it was not watched."""
        return self._entries.pop(tag, None) is not None

    def clear(self) -> None:
        """Drop every tag and abort the pass currently iterating this set."""
        self._entries.clear()
        self.state.request_abort()

    def get(self, tag: str) -> dict[str, Any]:
        """Last stored snapshot for *tag* (empty before the first fetch)."""
        entry = self._entries.get(tag)
        if entry is None:
            return {}
        return copy.deepcopy(entry.snapshot)

    def update(self, tag: str, snapshot: dict[str, Any]) -> None:
        """Replace the snapshot of a watched tag.

        A tag removed while its fetch was in flight stays removed.
        """
        entry = self._entries.get(tag)
        if entry is not None:
            entry.snapshot = copy.deepcopy(snapshot)

    def keys(self) -> Iterator[str]:
        """Yield watched tags in insertion order.

        The live set is consulted before every step: tags removed before
        being reached are skipped, tags added mid-iteration are yielded at
        the end, and a tag is yielded at most once per call even if it is
        removed and re-added while the caller is suspended.

        Each round walks a snapshot of the entries newer than the last one
        seen, so a pass with no additions costs a single scan.
        """
        visited: set[str] = set()
        last_seq = -1
        while True:
            batch = [(tag, entry.seq) for tag, entry in self._entries.items() if entry.seq > last_seq]
            if not batch:
                return
            for tag, seq in batch:
                last_seq = seq
                entry = self._entries.get(tag)
                if entry is None or entry.seq != seq or tag in visited:
                    continue
                visited.add(tag)
                yield tag

    def __iter__(self) -> Iterator[str]:
        return self.keys()
