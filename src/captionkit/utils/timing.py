"""Named step durations for long-running operations such as exports."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator


@dataclass(frozen=True)
class StepTiming:
    name: str
    duration_s: float
    ok: bool = True


class StepTimer:
    def __init__(self, *, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self.steps: list[StepTiming] = []

    @contextmanager
    def step(self, name: str) -> Iterator[None]:
        """Record how long the block took and whether it raised."""
        started = self._clock()
        ok = False
        try:
            yield
            ok = True
        finally:
            self.steps.append(StepTiming(name=name, duration_s=self._clock() - started, ok=ok))

    @property
    def total_s(self) -> float:
        return sum(s.duration_s for s in self.steps)

    def failed(self) -> list[str]:
        return [s.name for s in self.steps if not s.ok]

    def summary(self) -> str:
        parts = [f"{s.name}={s.duration_s:.2f}s" + ("" if s.ok else " (failed)") for s in self.steps]
        return ", ".join(parts) + f"; total={self.total_s:.2f}s"
