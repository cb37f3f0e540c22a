"""
karmabot.services.metrics — Host metrics for the ``host`` command
==================================================================

Thin wrapper over :mod:`psutil`.  ``snapshot`` blocks while it samples
CPU usage, so callers run it through ``run_io``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import psutil

_MB = 1024 ** 2


@dataclass(frozen=True, slots=True)
class HostMetrics:
    cpu_percent: float
    cpu_cores: int
    memory_used_mb: float
    memory_total_mb: float


class MetricsProvider(Protocol):
    def snapshot(self) -> HostMetrics: ...


class PsutilMetrics:
    """Samples the local machine with psutil."""

    def __init__(self, sample_seconds: float = 0.2) -> None:
        self.sample_seconds = sample_seconds

    def snapshot(self) -> HostMetrics:
        cpu = psutil.cpu_percent(interval=self.sample_seconds)
        memory = psutil.virtual_memory()
        total_mb = memory.total / _MB
        free_mb = memory.available / _MB
        return HostMetrics(
            cpu_percent=cpu,
            cpu_cores=psutil.cpu_count() or 1,
            memory_used_mb=total_mb - free_mb,
            memory_total_mb=total_mb,
        )
