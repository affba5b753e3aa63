"""
Timing helper for request logging.

Example:
    with timeit("synthesize") as t:
        response = await client.send(request)
    verbose(_LOG, "request_completed", seconds=t.timing.seconds)
"""
from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, Optional


@dataclass
class Timing:
    name: str
    seconds: float
    meta: Optional[Dict[str, Any]] = None


class timeit:
    """Context manager measuring the wall-clock time of its block."""

    def __init__(self, name: str, meta: Optional[Dict[str, Any]] = None):
        self.name = name
        self.meta = meta
        self._t0: float | None = None
        self.timing: Timing | None = None

    def __enter__(self) -> "timeit":
        self._t0 = perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.timing = Timing(name=self.name, seconds=self.elapsed, meta=self.meta)

    @property
    def elapsed(self) -> float:
        """
        Seconds since entry, usable inside the block.

        Raises:
            RuntimeError: If the block has not been entered.
        """
        if self._t0 is None:
            raise RuntimeError(f"timeit({self.name!r}) has not been entered")
        return perf_counter() - self._t0
