"""
Counters and latency aggregates for namespaced cache facades.

Every facade call reports here, so nothing per-call is retained: each
(namespace, operation) pair keeps a call count, a running total and a peak
latency. Memory use depends on the number of namespaces and operations in
use, never on the number of calls.

Lookups are split by operation, so existence checks (has) do not skew the
read hit rate (get).
"""

import logging
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, DefaultDict, Dict

logger = logging.getLogger(__name__)


@dataclass
class LatencyAggregate:
    """Running count, total and peak of a latency series, in milliseconds."""

    count: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    def add(self, latency_ms: float) -> None:
        self.count += 1
        self.total_ms += latency_ms
        if latency_ms > self.max_ms:
            self.max_ms = latency_ms

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0

    def as_dict(self) -> Dict[str, float]:
        return {'count': self.count, 'avg_ms': self.avg_ms, 'max_ms': self.max_ms}


@dataclass
class NamespaceCounters:
    """Lookup outcomes and per-operation latency for one namespace path."""

    lookups: DefaultDict[str, Dict[str, int]] = field(
        default_factory=lambda: defaultdict(lambda: {'hit': 0, 'miss': 0})
    )
    latency: DefaultDict[str, LatencyAggregate] = field(
        default_factory=lambda: defaultdict(LatencyAggregate)
    )

    def hit_rate(self, operation: str = 'get') -> float:
        outcome = self.lookups.get(operation)
        if not outcome:
            return 0.0
        total = outcome['hit'] + outcome['miss']
        return outcome['hit'] / total if total else 0.0


def _label(value: str) -> str:
    """Escape a Prometheus label value."""
    return value.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')


class CacheMetrics:
    """
    In-process collector fed by NamespacedCache and DjangoCachePool.

    Namespaces are keyed by their "::" path; the root namespace is "".

    Example Usage:
        >>> metrics = CacheMetrics()
        >>> with metrics.timed('get', "app::users"):
        ...     item = pool.get_item(key)
        >>> metrics.record_lookup("app::users", 'get', item.is_hit())
        >>> metrics.namespace_stats("app::users")['hit_rate']
    """

    def __init__(self):
        self._namespaces: DefaultDict[str, NamespaceCounters] = defaultdict(NamespaceCounters)
        self._errors: DefaultDict[str, int] = defaultdict(int)

    def record_lookup(self, namespace: str, operation: str, hit: bool) -> None:
        """Count a hit or miss observed by a get or has call."""
        self._namespaces[namespace].lookups[operation]['hit' if hit else 'miss'] += 1

    def record_error(self, error_type: str) -> None:
        """Count a backend failure ('get', 'save', 'delete', 'clear')."""
        self._errors[error_type] += 1
        logger.debug(f"Metric recorded - operation=error, error_type={error_type}")

    @contextmanager
    def timed(self, operation: str, namespace: str):
        """
        Time a pool round-trip and fold it into the namespace aggregate.

        The call is counted even when the body raises.
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            self._namespaces[namespace].latency[operation].add(
                (time.perf_counter() - start) * 1000
            )

    def namespace_stats(self, namespace: str) -> Dict[str, Any]:
        """
        Summary for one namespace path.

        Returns:
            Dictionary with:
            - hit_rate: get hit rate (0.0 to 1.0)
            - lookups: {'get': {'hit': n, 'miss': n}, 'has': {...}}
            - operations: {operation: {'count', 'avg_ms', 'max_ms'}}
        """
        counters = self._namespaces.get(namespace)
        if counters is None:
            return {'hit_rate': 0.0, 'lookups': {}, 'operations': {}}

        return {
            'hit_rate': counters.hit_rate('get'),
            'lookups': {op: dict(outcome) for op, outcome in counters.lookups.items()},
            'operations': {op: agg.as_dict() for op, agg in counters.latency.items()},
        }

    def snapshot(self) -> Dict[str, Any]:
        """
        Totals across namespaces.

        Returns:
            Dictionary with:
            - operations: {operation: {'count', 'avg_ms', 'max_ms'}}
            - errors: {error_type: count}
            - namespaces: sorted namespace paths seen so far
        """
        merged: DefaultDict[str, LatencyAggregate] = defaultdict(LatencyAggregate)
        for counters in self._namespaces.values():
            for operation, agg in counters.latency.items():
                total = merged[operation]
                total.count += agg.count
                total.total_ms += agg.total_ms
                total.max_ms = max(total.max_ms, agg.max_ms)

        return {
            'operations': {op: agg.as_dict() for op, agg in merged.items()},
            'errors': dict(self._errors),
            'namespaces': sorted(self._namespaces),
        }

    def reset(self) -> None:
        self._namespaces.clear()
        self._errors.clear()
        logger.info("Cache metrics reset")

    def export_prometheus(self) -> str:
        """Render the collected metrics in Prometheus exposition format."""
        lines = [
            "# HELP nscache_lookups_total Lookups by namespace, operation and result",
            "# TYPE nscache_lookups_total counter",
        ]
        for namespace, counters in sorted(self._namespaces.items()):
            for operation, outcome in sorted(counters.lookups.items()):
                for result in ('hit', 'miss'):
                    lines.append(
                        f'nscache_lookups_total{{namespace="{_label(namespace)}",'
                        f'operation="{operation}",result="{result}"}} {outcome[result]}'
                    )

        lines.append("# HELP nscache_operation_duration_ms Pool round-trip time by namespace and operation")
        lines.append("# TYPE nscache_operation_duration_ms summary")
        for namespace, counters in sorted(self._namespaces.items()):
            for operation, agg in sorted(counters.latency.items()):
                labels = f'namespace="{_label(namespace)}",operation="{operation}"'
                lines.append(f'nscache_operation_duration_ms_count{{{labels}}} {agg.count}')
                lines.append(f'nscache_operation_duration_ms_sum{{{labels}}} {agg.total_ms:.3f}')

        lines.append("# HELP nscache_backend_errors_total Backend failures by call")
        lines.append("# TYPE nscache_backend_errors_total counter")
        for error_type, count in sorted(self._errors.items()):
            lines.append(f'nscache_backend_errors_total{{error_type="{error_type}"}} {count}')

        return '\n'.join(lines) + '\n'


# Shared by every facade and pool in the process
cache_metrics = CacheMetrics()
