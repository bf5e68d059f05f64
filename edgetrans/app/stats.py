from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Callable, Deque

import psutil

from edgetrans.contracts import PerformanceSample

_MB = 1024 * 1024


@dataclass(frozen=True)
class SystemSnapshot:
    cpu_usage: float
    mem_used_mb: float
    mem_total_mb: float
    process_cpu_percent: float
    process_mem_mb: float


def psutil_sampler() -> Callable[[], SystemSnapshot]:
    proc = psutil.Process()
    # Prime the counters; the first non-blocking reading is always 0.0.
    proc.cpu_percent(interval=None)
    psutil.cpu_percent(interval=None)

    def _sample() -> SystemSnapshot:
        vm = psutil.virtual_memory()
        return SystemSnapshot(
            cpu_usage=float(psutil.cpu_percent(interval=None)),
            mem_used_mb=round(vm.used / _MB, 1),
            mem_total_mb=round(vm.total / _MB, 1),
            process_cpu_percent=float(proc.cpu_percent(interval=None)),
            process_mem_mb=round(proc.memory_info().rss / _MB, 1),
        )

    return _sample


class PerformanceTracker:
    """
    Recent process CPU/memory samples in a fixed-size ring buffer plus running
    peaks. One lock guards both; every `record` appends and may raise a peak.
    """

    def __init__(
        self,
        capacity: int = 60,
        *,
        sampler: Callable[[], SystemSnapshot] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.capacity = int(capacity)
        self._sampler = sampler or psutil_sampler()
        self._clock = clock
        self._lock = threading.Lock()
        self._history: Deque[PerformanceSample] = deque(maxlen=self.capacity)
        self._peak_cpu = 0.0
        self._peak_mem = 0.0

    def record(self) -> dict[str, Any]:
        snap = self._sampler()
        sample = PerformanceSample(
            timestamp=self._clock(),
            cpu_percent=snap.process_cpu_percent,
            mem_mb=snap.process_mem_mb,
        )
        with self._lock:
            self._history.append(sample)
            self._peak_cpu = max(self._peak_cpu, sample.cpu_percent)
            self._peak_mem = max(self._peak_mem, sample.mem_mb)
            body = self._snapshot_locked()
        body.update(
            cpu_usage=snap.cpu_usage,
            mem_used_mb=snap.mem_used_mb,
            mem_total_mb=snap.mem_total_mb,
            process={"cpu_percent": sample.cpu_percent, "mem_mb": sample.mem_mb},
        )
        return body

    def _snapshot_locked(self) -> dict[str, Any]:
        return {
            "peak": {"cpu_percent": self._peak_cpu, "mem_mb": self._peak_mem},
            "history": [asdict(s) for s in self._history],
        }

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return self._snapshot_locked()

    def history(self) -> list[PerformanceSample]:
        with self._lock:
            return list(self._history)

    def reset(self) -> None:
        with self._lock:
            self._history.clear()
            self._peak_cpu = 0.0
            self._peak_mem = 0.0
