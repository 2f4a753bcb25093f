import os
import logging
import time

import click
from flask import Flask, jsonify

from smart_checkout.config import ProdConfig, config_by_name
from smart_checkout.extensions import limiter
from smart_checkout.metrics import Metrics, init_request_metrics

__version__ = "1.0.0"

PUBLIC_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "public")

logger = logging.getLogger(__name__)


def create_app(config_name=None, metrics=None):
    """Application factory.

    Args:
        config_name: Key into config_by_name (defaults to APP_ENV).
                     Unknown names (staging, preview, ...) get ProdConfig.
        metrics:     Metrics registry to record into. A fresh one is
                     created when omitted.
    """

    if config_name is None:
        config_name = os.environ.get("APP_ENV", "development")

    config_class = config_by_name.get(config_name)
    if config_class is None:
        logger.warning(f"Unknown config name {config_name!r}, using production settings")
        config_class = ProdConfig

    app = Flask(__name__, static_folder=PUBLIC_DIR, static_url_path="")
    app.config.from_object(config_class)
    app.config["STARTED_AT"] = time.monotonic()

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_class.validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    limiter.init_app(app)

    # --- Metrics ---
    if metrics is None:
        metrics = Metrics()
    app.extensions["metrics"] = metrics
    init_request_metrics(app, metrics)

    # --- Register blueprints ---
    from smart_checkout.blueprints.checkout import checkout_bp
    from smart_checkout.blueprints.status import status_bp
    from smart_checkout.blueprints.webhooks import webhooks_bp

    app.register_blueprint(webhooks_bp)
    app.register_blueprint(checkout_bp)
    app.register_blueprint(status_bp)

    # --- Error handlers ---
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({"error": "Too many requests"}), 429

    @app.errorhandler(500)
    def server_error(e):
        return jsonify({"error": "Internal server error"}), 500

    # --- CLI commands ---
    register_cli(app)

    # --- Security headers ---
    @app.after_request
    def add_security_headers(response):
        """Add security headers to every response."""
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Stripe.js needs its own script, frame and API origins
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self' https://js.stripe.com; "
            "style-src 'self' 'unsafe-inline'; "
            "connect-src 'self' https://api.stripe.com; "
            "frame-src https://js.stripe.com https://hooks.stripe.com; "
            "base-uri 'self'; "
            "form-action 'self' https://checkout.stripe.com; "
            "frame-ancestors 'none';"
        )
        if not app.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    logger.info("Server setup complete. Listening for requests...")

    return app


# Environment variables reported by `flask check-config`.
CONFIG_VARS = [
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "STRIPE_PUBLISHABLE_KEY",
    "AIRTABLE_API_KEY",
    "AIRTABLE_BASE_ID",
    "AIRTABLE_TABLE_ID",
    "APP_BASE_URL",
    "APP_ENV",
    "PORT",
]


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("check-config")
    def check_config():
        """Report which configuration variables are set.

        Values are never printed, only whether each one exists.

        Usage:
            flask check-config
        """
        click.echo("")
        click.echo("=" * 60)
        click.echo("Configuration")
        click.echo("=" * 60)
        for name in CONFIG_VARS:
            state = "set" if os.environ.get(name) else "MISSING"
            click.echo(f"  {name:<24} {state}")

        api_key = app.config.get("STRIPE_SECRET_KEY") or ""
        if api_key:
            key_mode = "Live" if api_key.startswith("sk_live_") else "Test"
            click.echo("")
            click.echo(f"Stripe key mode: {key_mode}")
        click.echo("=" * 60)

    @app.cli.command("verify-record-store")
    def verify_record_store():
        """Check the configured Airtable table is reachable (read-only).

        Usage:
            flask verify-record-store
        """
        from smart_checkout.services.airtable_service import check_table_access

        ok, message = check_table_access(app.config)
        if ok:
            click.echo(f"Airtable OK: {message}")
        else:
            click.echo(f"ERROR: {message}")
            raise SystemExit(1)
