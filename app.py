# app.py
from flask import Flask, request, jsonify, abort
import logging
import os
import secrets
from functools import lru_cache

from issue_notifications.channels import send_telegram
from issue_notifications.config import TRUTHY
from issue_notifications.directory import DirectoryError, RecipientDirectory
from issue_notifications.payloads import PayloadError, parse_event
from issue_notifications.service import Sender, process_event
from issue_notifications.tasks import enqueue_notification

from celery_app import celery_app  # noqa: F401  producer side of the delivery queue

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
LOGGER = logging.getLogger(__name__)

app = Flask(__name__)

DEBUG = os.getenv("FLASK_ENV") != "production"


# ------------------------------- Config -------------------------------
@lru_cache(maxsize=1)
def get_directory() -> RecipientDirectory:
    """Recipient directory, read once per process."""
    path = os.getenv("NOTIFY_DIRECTORY_FILE")
    if not path:
        LOGGER.warning("NOTIFY_DIRECTORY_FILE not configured; nobody will be notified")
        return RecipientDirectory()
    return RecipientDirectory.load(path)


def get_sender() -> Sender:
    if os.getenv("NOTIFY_ASYNC", "0").strip().lower() in TRUTHY:
        return enqueue_notification
    return send_telegram


def check_webhook_token() -> None:
    expected = os.getenv("WEBHOOK_SECRET")
    if not expected:
        return
    submitted = request.headers.get("X-Webhook-Token", "")
    if not submitted or not secrets.compare_digest(submitted, expected):
        abort(401)


# ------------------------------- Routes -------------------------------
@app.route("/healthz")
def healthz():
    return jsonify({"ok": True})


@app.route("/webhooks/issues", methods=["POST"])
def issue_event():
    check_webhook_token()

    payload = request.get_json(silent=True)
    if payload is None:
        return jsonify({"error": "Expected a JSON body"}), 400
    try:
        issue, current_user = parse_event(payload)
    except PayloadError as exc:
        LOGGER.info("Rejected issue event: %s", exc)
        return jsonify({"error": str(exc)}), 400

    try:
        directory = get_directory()
    except DirectoryError:
        LOGGER.exception("Recipient directory unavailable")
        return jsonify({"error": "Recipient directory unavailable"}), 500

    result = process_event(issue, current_user, directory, get_sender())
    if result.status == "skipped":
        return jsonify({"status": "skipped"})
    return jsonify({
        "status": result.status,
        "notifications": len(result.notifications),
        "delivered": result.delivered,
    })


# ------------- Run -------------
if __name__ == "__main__":
    app.run(debug=DEBUG)
