"""
Activity metrics for Bloom filters.

A ``FilterMetrics`` instance passed to a filter records insert and query
counts, query hits, rejected input, the last measured fill ratio and recent
insert latencies. ``export_prometheus`` renders them in the Prometheus text
exposition format.
"""
import threading
from collections import deque
from dataclasses import asdict, dataclass
from typing import Optional

import structlog


@dataclass
class LatencySummary:
    """Summary of recorded insert latencies, in seconds."""
    count: int
    total: float
    fastest: float
    slowest: float
    mean: float

    def to_dict(self) -> dict:
        return asdict(self)


class LatencyWindow:
    """Sliding window over the most recent latency samples."""

    def __init__(self, max_samples: int = 1000):
        if max_samples <= 0:
            raise ValueError("max_samples must be positive")
        self._samples: deque = deque(maxlen=max_samples)

    def record(self, seconds: float) -> None:
        self._samples.append(seconds)

    def __len__(self) -> int:
        return len(self._samples)

    def summary(self) -> Optional[LatencySummary]:
        if not self._samples:
            return None
        samples = list(self._samples)
        total = sum(samples)
        return LatencySummary(
            count=len(samples),
            total=total,
            fastest=min(samples),
            slowest=max(samples),
            mean=total / len(samples),
        )

    def quantile(self, q: float) -> Optional[float]:
        """Nearest-rank quantile of the window, q in [0, 1]."""
        if not self._samples:
            return None
        ordered = sorted(self._samples)
        return ordered[min(int(len(ordered) * q), len(ordered) - 1)]


class FilterMetrics:
    """
    Counters and gauges for the activity of one or more filters.

    Updates take an internal lock so a metrics object can be shared by a
    concurrent filter.
    """

    QUANTILES = (0.5, 0.95, 0.99)

    def __init__(self, max_samples: int = 1000):
        """
        Initialize metrics.

        Args:
            max_samples: Number of recent insert latencies to keep
        """
        self.logger = structlog.get_logger()
        self._lock = threading.Lock()

        self.inserts = 0
        self.queries = 0
        self.query_hits = 0
        self.input_errors = 0
        self.fill_ratio = 0.0
        self.insert_latency = LatencyWindow(max_samples)

    def record_insert(self, seconds: float) -> None:
        with self._lock:
            self.inserts += 1
            self.insert_latency.record(seconds)

    def record_query(self, found: bool) -> None:
        with self._lock:
            self.queries += 1
            if found:
                self.query_hits += 1

    def record_input_error(self) -> None:
        with self._lock:
            self.input_errors += 1
        self.logger.debug("bloom_input_rejected", input_errors=self.input_errors)

    def record_fill_ratio(self, ratio: float) -> None:
        self.fill_ratio = ratio

    def get_summary(self) -> dict:
        """
        Get a snapshot of the recorded metrics.

        Returns:
            Dictionary with counts, hit ratio, fill ratio and insert latency
        """
        latency = self.insert_latency.summary()
        return {
            'inserts': self.inserts,
            'queries': self.queries,
            'query_hits': self.query_hits,
            'hit_ratio': self.query_hits / self.queries if self.queries else 0.0,
            'input_errors': self.input_errors,
            'fill_ratio': self.fill_ratio,
            'insert_latency': latency.to_dict() if latency else None,
        }

    def export_prometheus(self, prefix: str = "bloom_filter") -> str:
        """
        Render the metrics in Prometheus text format.

        Args:
            prefix: Prepended to every metric name

        Returns:
            Exposition text ending in a newline
        """
        lines = []

        def emit(name, kind, help_text, value):
            lines.append(f"# HELP {prefix}_{name} {help_text}")
            lines.append(f"# TYPE {prefix}_{name} {kind}")
            lines.append(f"{prefix}_{name} {value}")

        emit("inserts_total", "counter", "Insert calls", self.inserts)
        emit("queries_total", "counter", "Membership queries", self.queries)
        emit("query_hits_total", "counter", "Queries answered possibly present", self.query_hits)
        emit("input_errors_total", "counter", "Calls rejected for missing or empty input",
             self.input_errors)
        emit("fill_ratio", "gauge", "Fraction of bits set", self.fill_ratio)

        latency = self.insert_latency.summary()
        if latency:
            name = f"{prefix}_insert_seconds"
            lines.append(f"# HELP {name} Insert latency")
            lines.append(f"# TYPE {name} summary")
            for q in self.QUANTILES:
                lines.append(f'{name}{{quantile="{q}"}} {self.insert_latency.quantile(q)}')
            lines.append(f"{name}_sum {latency.total}")
            lines.append(f"{name}_count {latency.count}")

        return "\n".join(lines) + "\n"
