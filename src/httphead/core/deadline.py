"""
Cumulative time budget for a whole head-read.

A per-recv socket timeout is NOT enough to bound a read:

    timeout = 1s per recv()

    t=0.0  recv() → "G"          ┐
    t=0.9  recv() → "E"          │  every single recv() finishes in time,
    t=1.8  recv() → "T"          │  yet the request never completes
    ...                          ┘  ("slowloris")

Deadline fixes the end time once, at the start of the read, and every
wait for bytes is given only what is left of the budget.
"""

import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Deadline:
    """
    A fixed point in (monotonic) time after which a read must give up.

    Attributes:
        timeout: Total budget in seconds, or None for "no deadline".
        started_at: time.monotonic() value when the budget started.

    Usage:
        deadline = Deadline.from_millis(options.completion_timeout)
        while need_more_bytes:
            sock.settimeout(deadline.remaining())   # None = block forever
            ...
    """

    timeout: Optional[float] = None
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def from_millis(cls, milliseconds: Optional[int]) -> "Deadline":
        """Start a budget of ``milliseconds`` now (None = unbounded)."""
        if milliseconds is None:
            return cls(timeout=None)
        return cls(timeout=milliseconds / 1000.0)

    @property
    def is_bounded(self) -> bool:
        return self.timeout is not None

    @property
    def elapsed(self) -> float:
        """Seconds since the budget started."""
        return time.monotonic() - self.started_at

    def remaining(self) -> Optional[float]:
        """
        Seconds left, never negative; None when unbounded.
        """
        if self.timeout is None:
            return None
        return max(0.0, self.timeout - self.elapsed)

    @property
    def expired(self) -> bool:
        return self.timeout is not None and self.elapsed >= self.timeout
