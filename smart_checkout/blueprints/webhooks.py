"""Webhooks blueprint — /webhook

Receives Stripe webhook events.
Raw body is required for signature verification.
"""

import logging

from flask import Blueprint, jsonify, request

from smart_checkout.metrics import get_metrics
from smart_checkout.services.stripe_service import handle_webhook_event, verify_webhook_signature

logger = logging.getLogger(__name__)

webhooks_bp = Blueprint("webhooks", __name__)


@webhooks_bp.route("/webhook", methods=["POST"])
def stripe_webhook():
    """Receive and process Stripe webhook events.

    1. Get raw body (required for signature verification)
    2. Verify signature with STRIPE_WEBHOOK_SECRET
    3. Pass to handle_webhook_event
    4. Return 200 to acknowledge receipt

    Once the signature checks out the response is always 200, even if
    saving the order fails; Stripe would otherwise retry the delivery.
    """
    metrics = get_metrics()
    payload = request.get_data()
    sig_header = request.headers.get("Stripe-Signature")

    # --- Verify signature ---
    try:
        if not sig_header:
            raise ValueError("No Stripe-Signature header value was provided.")
        event = verify_webhook_signature(payload, sig_header)
    except Exception as e:
        logger.error(f"Webhook signature error: {e}")
        metrics.webhook("unknown", "signature_error")
        return f"Webhook Error: {e}", 400, {"Content-Type": "text/plain; charset=utf-8"}

    handle_webhook_event(event, metrics)

    return jsonify({"received": True}), 200
