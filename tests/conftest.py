"""Shared test fixtures for the Smart Checkout test suite.

Provides:
- app: Flask app configured for testing (fake keys, inline order writes)
- client: Flask test client
- metrics: the app's Metrics registry
- sample: read a metric value (0.0 when the labelled series does not exist yet)
- signed_payload: build a webhook body + a genuine Stripe-Signature header
- make_event: build a Stripe event envelope
"""

import hashlib
import hmac
import json
import time

import pytest

from smart_checkout import create_app


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def metrics(app):
    return app.extensions["metrics"]


@pytest.fixture
def sample(metrics):
    """Return a reader for metric samples.

    Counters are process-wide and never reset, so tests compare values
    before and after a request instead of asserting absolute numbers.
    """

    def _sample(name, **labels):
        value = metrics.registry.get_sample_value(name, labels)
        return value or 0.0

    return _sample


@pytest.fixture
def signed_payload(app):
    """Build (body, header) signed with the test webhook secret."""

    def _sign(event, secret=None):
        secret = secret or app.config["STRIPE_WEBHOOK_SECRET"]
        body = json.dumps(event)
        timestamp = int(time.time())
        signed = f"{timestamp}.{body}".encode("utf-8")
        signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
        return body, f"t={timestamp},v1={signature}"

    return _sign


@pytest.fixture
def make_event():
    """Build a Stripe event envelope."""

    def _make(event_type, obj, event_id="evt_test_001"):
        return {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "data": {"object": obj},
        }

    return _make
