"""Download-phase synchronization across repository workers."""

from __future__ import annotations

import threading
from typing import Optional


class PhaseBarrier:
    """Countdown latch separating the download phase from link validation.

    Every worker calls :meth:`arrive` exactly once when its download step ends.
    Workers whose download succeeded then call :meth:`wait`; workers whose
    download failed only arrive, so they never hold up their siblings.
    """

    def __init__(self, parties: int) -> None:
        if parties < 0:
            raise ValueError("parties must not be negative")
        self.parties = parties
        self._remaining = parties
        self._condition = threading.Condition()

    @property
    def remaining(self) -> int:
        with self._condition:
            return self._remaining

    def arrive(self) -> None:
        with self._condition:
            if self._remaining == 0:
                raise RuntimeError("All parties have already arrived at the barrier")
            self._remaining -= 1
            if self._remaining == 0:
                self._condition.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every party has arrived; False when ``timeout`` expires first."""
        with self._condition:
            return self._condition.wait_for(lambda: self._remaining == 0, timeout=timeout)

    def arrive_and_wait(self, timeout: Optional[float] = None) -> bool:
        self.arrive()
        return self.wait(timeout)


__all__ = ["PhaseBarrier"]
