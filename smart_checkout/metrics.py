"""Prometheus metrics for the checkout service.

A Metrics instance owns its own CollectorRegistry. create_app() builds one
per app and stores it in app.extensions["metrics"]; blueprints fetch it with
get_metrics() and pass it down to the services that record outcomes.

Metrics:
- http_request_duration_seconds{method, route, status}  (histogram)
- http_requests_total{method, route, status}
- stripe_payments_total{status}            initiated / failed / completed
- airtable_operations_total{operation, status}   initiated / success / failed
- stripe_webhook_events_total{event_type, status}
      received / processed / signature_error / malformed
"""

import time

from flask import current_app, g, request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)
from prometheus_client import gc_collector, platform_collector, process_collector

REQUEST_DURATION_BUCKETS = (0.1, 0.5, 1, 2, 5)


class Metrics:
    """Process-wide counters and histograms, bound to one registry."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry=None, collect_defaults=True):
        self.registry = registry or CollectorRegistry()

        if collect_defaults:
            process_collector.ProcessCollector(registry=self.registry)
            platform_collector.PlatformCollector(registry=self.registry)
            gc_collector.GCCollector(registry=self.registry)

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            ["method", "route", "status"],
            buckets=REQUEST_DURATION_BUCKETS,
            registry=self.registry,
        )
        self.http_requests = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["method", "route", "status"],
            registry=self.registry,
        )
        self.stripe_payments = Counter(
            "stripe_payments_total",
            "Total number of Stripe payments",
            ["status"],
            registry=self.registry,
        )
        self.airtable_operations = Counter(
            "airtable_operations_total",
            "Total number of Airtable operations",
            ["operation", "status"],
            registry=self.registry,
        )
        self.webhook_events = Counter(
            "stripe_webhook_events_total",
            "Total number of Stripe webhook events",
            ["event_type", "status"],
            registry=self.registry,
        )

    # --- Recording helpers ---

    def observe_request(self, method, route, status, duration):
        labels = {"method": method, "route": route, "status": str(status)}
        self.http_request_duration.labels(**labels).observe(duration)
        self.http_requests.labels(**labels).inc()

    def payment(self, status):
        self.stripe_payments.labels(status=status).inc()

    def airtable(self, operation, status):
        self.airtable_operations.labels(operation=operation, status=status).inc()

    def webhook(self, event_type, status):
        self.webhook_events.labels(event_type=event_type, status=status).inc()

    def render(self):
        """Return the text exposition of every metric in the registry."""
        return generate_latest(self.registry)


def get_metrics():
    """Return the Metrics instance bound to the current app."""
    return current_app.extensions["metrics"]


def init_request_metrics(app, metrics):
    """Time every request and record it when the response is finished."""

    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _record_request(response):
        started = g.pop("request_started", None)
        if started is not None:
            metrics.observe_request(
                request.method,
                request.path,
                response.status_code,
                time.perf_counter() - started,
            )
        return response
