"""Tests for the Airtable order-record service and CLI checks.

Covers:
- create_order_record request shape and (ok, error) results
- Missing configuration short-circuits without an HTTP call
- Background-thread writes (the default outside tests)
- flask check-config / verify-record-store
"""

from unittest.mock import MagicMock, patch

import requests

from smart_checkout.metrics import Metrics
from smart_checkout.services import airtable_service

FIELDS = {
    "Name": "Jane Doe",
    "Email": "jane@example.com",
    "Amount": 20.0,
    "Status": "paid",
    "SessionID": "cs_test_123",
}


class TestCreateOrderRecord:

    @patch("smart_checkout.services.airtable_service.requests.post")
    def test_posts_single_record(self, mock_post, app):
        mock_post.return_value = MagicMock()

        with app.app_context():
            ok, error = airtable_service.create_order_record(FIELDS)

        assert ok is True
        assert error is None
        mock_post.assert_called_once()
        kwargs = mock_post.call_args.kwargs
        assert kwargs["json"] == {"records": [{"fields": FIELDS}]}
        assert kwargs["timeout"] == 30

    @patch("smart_checkout.services.airtable_service.requests.post")
    def test_request_error_returned_not_raised(self, mock_post, app):
        mock_post.side_effect = requests.Timeout("read timed out")

        with app.app_context():
            ok, error = airtable_service.create_order_record(FIELDS)

        assert ok is False
        assert "timed out" in error

    @patch("smart_checkout.services.airtable_service.requests.post")
    def test_missing_config_skips_request(self, mock_post, app):
        config = dict(app.config, AIRTABLE_API_KEY=None)

        ok, error = airtable_service.create_order_record(FIELDS, config=config)

        assert ok is False
        assert error == "Airtable is not configured"
        mock_post.assert_not_called()


class TestSubmitOrder:

    @patch("smart_checkout.services.airtable_service.threading.Thread")
    @patch("smart_checkout.services.airtable_service.save_order")
    def test_inline_when_background_disabled(self, mock_save, mock_thread, app):
        metrics = Metrics(collect_defaults=False)

        with app.app_context():
            airtable_service.submit_order(FIELDS, metrics)

        mock_save.assert_called_once_with(FIELDS, metrics, config=app.config)
        mock_thread.assert_not_called()

    @patch("smart_checkout.services.airtable_service.requests.post")
    def test_background_thread_writes_and_counts(self, mock_post, app):
        """With background writes on, the row is saved on a daemon thread."""
        mock_post.return_value = MagicMock()
        metrics = Metrics(collect_defaults=False)
        started = []
        real_thread = airtable_service.threading.Thread

        def _capture(*args, **kwargs):
            thread = real_thread(*args, **kwargs)
            started.append(thread)
            return thread

        app.config["ORDER_WRITES_IN_BACKGROUND"] = True
        try:
            with patch("smart_checkout.services.airtable_service.threading.Thread", side_effect=_capture):
                with app.app_context():
                    airtable_service.submit_order(FIELDS, metrics)
            for thread in started:
                thread.join(timeout=5)
        finally:
            app.config["ORDER_WRITES_IN_BACKGROUND"] = False

        assert len(started) == 1
        assert started[0].daemon is True
        assert mock_post.call_count == 1
        assert metrics.registry.get_sample_value(
            "airtable_operations_total", {"operation": "create", "status": "success"}
        ) == 1.0


class TestCli:

    def test_check_config_never_prints_values(self, app, monkeypatch):
        monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_supersecret")
        monkeypatch.delenv("AIRTABLE_API_KEY", raising=False)

        result = app.test_cli_runner().invoke(args=["check-config"])

        assert result.exit_code == 0
        assert "sk_test_supersecret" not in result.output
        assert "STRIPE_SECRET_KEY" in result.output
        assert "MISSING" in result.output
        assert "Stripe key mode: Test" in result.output

    @patch("smart_checkout.services.airtable_service.requests.get")
    def test_verify_record_store_ok(self, mock_get, app):
        mock_get.return_value = MagicMock(**{"json.return_value": {"records": [{"id": "rec1"}]}})

        result = app.test_cli_runner().invoke(args=["verify-record-store"])

        assert result.exit_code == 0
        assert "Airtable OK" in result.output
        assert mock_get.call_args.kwargs["params"] == {"maxRecords": 1}

    @patch("smart_checkout.services.airtable_service.requests.get")
    def test_verify_record_store_error(self, mock_get, app):
        mock_get.side_effect = requests.ConnectionError("unreachable")

        result = app.test_cli_runner().invoke(args=["verify-record-store"])

        assert result.exit_code == 1
        assert "ERROR: unreachable" in result.output
