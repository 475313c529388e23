"""
Shared metrics configuration for the document store caching layer.
"""

from prometheus_client import Counter, Histogram, Info, CollectorRegistry
from typing import Dict, Any, Optional
import threading


class MetricsCollector:
    """Centralized metrics collector for data sources.

    Metrics are left unregistered unless a registry is passed, so several
    collectors can live in one process (one per data source, or per test).
    """

    def __init__(self, component_name: str = "datasource", registry: Optional[CollectorRegistry] = None):
        self.component_name = component_name
        self.registry = registry
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up metrics for the caching layer."""

        self._metrics["component_info"] = Info(
            "datasource_component_info",
            "Data source component information",
            registry=self.registry
        )
        self._metrics["component_info"].info({
            "component": self.component_name,
            "version": "1.0.0"
        })

        self._metrics["cache_hits_total"] = Counter(
            "datasource_cache_hits_total",
            "Total async cache hits",
            ["loader"],
            registry=self.registry
        )

        self._metrics["cache_misses_total"] = Counter(
            "datasource_cache_misses_total",
            "Total async cache misses",
            ["loader"],
            registry=self.registry
        )

        self._metrics["cache_errors_total"] = Counter(
            "datasource_cache_errors_total",
            "Total swallowed cache adapter errors",
            ["operation"],
            registry=self.registry
        )

        self._metrics["store_queries_total"] = Counter(
            "datasource_store_queries_total",
            "Total physical store queries",
            ["loader", "status"],
            registry=self.registry
        )

        self._metrics["batch_size"] = Histogram(
            "datasource_batch_size",
            "Distinct keys per dispatched batch",
            ["loader"],
            buckets=(1, 2, 5, 10, 25, 50, 100, 250, 1000),
            registry=self.registry
        )

        self._metrics["store_query_duration_seconds"] = Histogram(
            "datasource_store_query_duration_seconds",
            "Store query duration in seconds",
            ["loader"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def record_cache_lookup(self, loader: str, hit: bool):
        """Record an async cache lookup outcome."""
        metric_name = "cache_hits_total" if hit else "cache_misses_total"
        self._metrics[metric_name].labels(loader=loader).inc()

    def record_cache_error(self, operation: str):
        """Record a cache adapter failure."""
        self._metrics["cache_errors_total"].labels(operation=operation).inc()

    def record_batch(self, loader: str, size: int, duration: float, status: str = "success"):
        """Record one dispatched store query."""
        with self._lock:
            self._metrics["store_queries_total"].labels(loader=loader, status=status).inc()
            self._metrics["batch_size"].labels(loader=loader).observe(size)
            self._metrics["store_query_duration_seconds"].labels(loader=loader).observe(duration)


def get_metrics_collector(component_name: str = "datasource", registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a component."""
    return MetricsCollector(component_name, registry)
