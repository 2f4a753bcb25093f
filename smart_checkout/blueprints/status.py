"""Status blueprint — liveness, health, app info and Prometheus metrics."""

import time
from datetime import datetime, timezone

from flask import Blueprint, Response, current_app, jsonify

from smart_checkout import __version__
from smart_checkout.metrics import get_metrics

status_bp = Blueprint("status", __name__)

APPLICATION_NAME = "Stripe Smart Checkout"


def _uptime():
    """Seconds since the app was created."""
    return max(0.0, time.monotonic() - current_app.config["STARTED_AT"])


def _timestamp():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@status_bp.route("/")
def index():
    return Response("✅ Server is up and running", mimetype="text/plain")


@status_bp.route("/health")
def health():
    """Health check for load balancers and Kubernetes probes."""
    return jsonify({
        "status": "healthy",
        "timestamp": _timestamp(),
        "uptime": _uptime(),
        "environment": current_app.config["APP_ENV"],
    }), 200


@status_bp.route("/info")
def info():
    return jsonify({
        "application": APPLICATION_NAME,
        "version": __version__,
        "environment": current_app.config["APP_ENV"],
        "uptime": _uptime(),
        "timestamp": _timestamp(),
        "metrics_endpoint": "/metrics",
        "health_endpoint": "/health",
    })


@status_bp.route("/metrics")
def metrics():
    """Prometheus scrape endpoint."""
    registry = get_metrics()
    return Response(registry.render(), content_type=registry.content_type)
