"""
Deferred extension instances.

Created here, bound to the app in create_app() via init_app().
"""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Only checkout creation carries a limit (CHECKOUT_RATE_LIMIT); webhooks
# from Stripe and the status endpoints are never throttled.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],
    storage_uri="memory://",
)
