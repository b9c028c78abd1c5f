"""Prometheus export of the orchestrator counters.

Exposes:
- janitor_runs_total: Counter of enabled run cycles
- janitor_errors: Gauge of failed cleanup unit calls
- janitor_running: Gauge, 1 while a run cycle is in flight
"""

from __future__ import annotations

from typing import Iterator, Optional

from prometheus_client import REGISTRY, CollectorRegistry, start_http_server
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.registry import Collector

from janitor.orchestrator.counters import RunCounters


class JanitorCollector(Collector):
    """Reads the orchestrator counters at scrape time."""

    def __init__(self, counters: RunCounters) -> None:
        self.counters = counters

    def collect(self) -> Iterator:
        values = self.counters.snapshot()

        runs = CounterMetricFamily("janitor_runs", "Number of enabled janitor run cycles")
        runs.add_metric([], values["runs"])
        yield runs

        errors = GaugeMetricFamily("janitor_errors", "Number of failed cleanup unit calls")
        errors.add_metric([], values["errors"])
        yield errors

        running = GaugeMetricFamily("janitor_running", "1 while a janitor run cycle is in flight")
        running.add_metric([], values["running"])
        yield running


def register_counters(counters: RunCounters, registry: Optional[CollectorRegistry] = None) -> JanitorCollector:
    """Register a collector for the counters.

    Args:
        counters: Orchestrator counters
        registry: Prometheus registry (default: the global REGISTRY)

    Returns:
        The registered collector, for later unregistering
    """
    collector = JanitorCollector(counters)
    (registry or REGISTRY).register(collector)
    return collector


def serve_metrics(port: int, registry: Optional[CollectorRegistry] = None) -> None:
    """Serve /metrics over HTTP from a background thread."""
    start_http_server(port, registry=registry or REGISTRY)
