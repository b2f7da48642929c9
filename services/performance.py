"""
Per-session timing of pipeline steps.

    monitor = PerformanceMonitor()
    with monitor.measure("excel_extraction", file="catalog.xlsx"):
        ...
    report = monitor.report()
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from config.settings import SLOW_OPERATION_SECONDS

logger = logging.getLogger(__name__)

SLOW_FILE_PROCESSING_SECONDS = 2.0
MANY_OPERATIONS = 10


@dataclass
class OperationTiming:
    name: str
    start: float
    end: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> Optional[float]:
        return None if self.end is None else self.end - self.start


@dataclass(frozen=True)
class PerformanceReport:
    total_time: float
    operations: List[OperationTiming]
    recommendations: List[str]


class PerformanceMonitor:
    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self._clock = clock
        self._operations: Dict[str, OperationTiming] = {}

    def start(self, name: str, **metadata: Any) -> None:
        self._operations[name] = OperationTiming(name, self._clock(), metadata=metadata)

    def end(self, name: str) -> float:
        """Stop timing `name` and return its duration in seconds (0 if never started)."""
        operation = self._operations.get(name)
        if operation is None:
            logger.warning(f"Performance operation '{name}' was never started")
            return 0.0
        operation.end = self._clock()
        return operation.duration

    @contextmanager
    def measure(self, name: str, **metadata: Any) -> Iterator[None]:
        self.start(name, **metadata)
        try:
            yield
        finally:
            self.end(name)

    def get(self, name: str) -> Optional[OperationTiming]:
        return self._operations.get(name)

    def report(self) -> PerformanceReport:
        completed = sorted(
            (op for op in self._operations.values() if op.end is not None),
            key=lambda op: op.duration,
            reverse=True,
        )
        total = sum(op.duration for op in completed)
        return PerformanceReport(total, completed, self._recommendations(completed))

    def _recommendations(self, completed: List[OperationTiming]) -> List[str]:
        recommendations: List[str] = []

        slow = [op.name for op in completed if op.duration > SLOW_OPERATION_SECONDS]
        if slow:
            recommendations.append(f"{len(slow)} slow operation(s): {', '.join(slow)}")

        file_ops = [op for op in completed if "excel" in op.name or "pdf" in op.name]
        if file_ops:
            average = sum(op.duration for op in file_ops) / len(file_ops)
            if average > SLOW_FILE_PROCESSING_SECONDS:
                recommendations.append(f"High file processing time: {average:.2f}s on average")

        if len(completed) > MANY_OPERATIONS:
            recommendations.append(f"Many operations ({len(completed)}): consider caching results")

        return recommendations

    def clear(self) -> None:
        self._operations.clear()
