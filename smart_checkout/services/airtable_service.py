"""Airtable service — order records stored in an Airtable table.

Talks to the Airtable REST API directly:
    POST {AIRTABLE_API_URL}/{base_id}/{table_id}   create records
    GET  {AIRTABLE_API_URL}/{base_id}/{table_id}   list records (CLI check)

Orders are only ever created, never updated or deleted.
"""

import logging
import threading

import requests
from flask import current_app

logger = logging.getLogger(__name__)


def _get_airtable_config(config):
    """Return Airtable connection settings from an app config mapping."""
    return {
        "url": config["AIRTABLE_API_URL"].rstrip("/"),
        "key": config.get("AIRTABLE_API_KEY"),
        "base_id": config.get("AIRTABLE_BASE_ID"),
        "table_id": config.get("AIRTABLE_TABLE_ID"),
        "timeout": config.get("AIRTABLE_TIMEOUT", 30),
    }


def _table_url(airtable):
    return f"{airtable['url']}/{airtable['base_id']}/{airtable['table_id']}"


def _headers(airtable):
    return {
        "Authorization": f"Bearer {airtable['key']}",
        "Content-Type": "application/json",
    }


def create_order_record(fields, config=None):
    """Create one order row.

    Args:
        fields: Dict with Name, Email, Amount, Status, SessionID.
        config: App config mapping (defaults to current_app.config).

    Returns (ok: bool, error: str|None). Never raises for API failures.
    """
    airtable = _get_airtable_config(config if config is not None else current_app.config)

    if not airtable["key"] or not airtable["base_id"] or not airtable["table_id"]:
        return False, "Airtable is not configured"

    payload = {"records": [{"fields": fields}]}

    try:
        resp = requests.post(
            _table_url(airtable),
            headers=_headers(airtable),
            json=payload,
            timeout=airtable["timeout"],
        )
        resp.raise_for_status()
    except requests.RequestException as e:
        return False, str(e)

    return True, None


def save_order(fields, metrics, config=None):
    """Write an order row and record the outcome.

    Increments airtable_operations_total for initiated, then success or
    failed. Failures are logged and swallowed; nothing is retried.
    """
    metrics.airtable("create", "initiated")

    ok, error = create_order_record(fields, config=config)

    if ok:
        logger.info(f"Order saved to Airtable (session {fields.get('SessionID')})")
        metrics.airtable("create", "success")
    else:
        logger.error(f"Airtable error for session {fields.get('SessionID')}: {error}")
        metrics.airtable("create", "failed")

    return ok, error


def _save_order_in_thread(app, fields, metrics):
    """Thread target: run save_order inside the app's context."""
    with app.app_context():
        save_order(fields, metrics, config=app.config)


def submit_order(fields, metrics):
    """Save an order, on a background thread unless disabled in config.

    The webhook response must not wait on Airtable, so by default the
    write is handed to a daemon thread. With ORDER_WRITES_IN_BACKGROUND
    off (tests) it runs inline.
    """
    app = current_app._get_current_object()

    if not app.config.get("ORDER_WRITES_IN_BACKGROUND", True):
        save_order(fields, metrics, config=app.config)
        return

    thread = threading.Thread(target=_save_order_in_thread, args=(app, fields, metrics))
    thread.daemon = True
    thread.start()


def check_table_access(config=None):
    """Read-only access check: list at most one record.

    Returns (ok: bool, message: str).
    """
    airtable = _get_airtable_config(config if config is not None else current_app.config)

    if not airtable["key"] or not airtable["base_id"] or not airtable["table_id"]:
        return False, "AIRTABLE_API_KEY, AIRTABLE_BASE_ID and AIRTABLE_TABLE_ID must all be set"

    try:
        resp = requests.get(
            _table_url(airtable),
            headers=_headers(airtable),
            params={"maxRecords": 1},
            timeout=airtable["timeout"],
        )
        resp.raise_for_status()
    except requests.RequestException as e:
        return False, str(e)

    count = len(resp.json().get("records", []))
    return True, f"Table reachable ({count} record(s) returned)"
