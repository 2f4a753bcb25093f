"""Checkout blueprint — Stripe Checkout for the storefront page.

Routes:
- POST /create-checkout-session  — create a Checkout Session, return its ID
- GET  /config                   — publishable key for Stripe.js
"""

import logging

from flask import Blueprint, current_app, jsonify

from smart_checkout.extensions import limiter
from smart_checkout.metrics import get_metrics
from smart_checkout.services.stripe_service import create_checkout_session

logger = logging.getLogger(__name__)

checkout_bp = Blueprint("checkout", __name__)


def _checkout_rate_limit():
    return current_app.config["CHECKOUT_RATE_LIMIT"]


@checkout_bp.route("/create-checkout-session", methods=["POST"])
@limiter.limit(_checkout_rate_limit)
def create_session():
    """Create a Stripe Checkout Session and return its ID as JSON.

    The browser redirects to Stripe with the ID via Stripe.js.
    Errors are reported with a generic message only.
    """
    metrics = get_metrics()

    try:
        session_id = create_checkout_session()
    except Exception as e:
        # stripe.StripeError or anything unexpected; never leak details
        metrics.payment("failed")
        logger.error(f"Failed to create checkout session: {e}", exc_info=True)
        return jsonify({"error": "Failed to create checkout session"}), 500

    metrics.payment("initiated")
    logger.info(f"Checkout session created: {session_id}")
    return jsonify({"id": session_id})


@checkout_bp.route("/config")
def public_config():
    """Serve the publishable key to the frontend."""
    return jsonify({"publishableKey": current_app.config["STRIPE_PUBLISHABLE_KEY"]})
