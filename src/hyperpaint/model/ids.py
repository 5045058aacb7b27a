"""Monotonic id sequences for nodes and strokes."""

from __future__ import annotations

import itertools


class IdSequence:
    """Generate unique ids of the form ``<prefix>-<n>``.

    Ids only need to be unique within a store, so a counter is enough.
    """

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)

    def next(self) -> str:
        """Return the next id in the sequence."""
        return f"{self.prefix}-{next(self._counter)}"

    def reset(self) -> None:
        """Restart the sequence at 1."""
        self._counter = itertools.count(1)
