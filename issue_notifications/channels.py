from __future__ import annotations

import json
import logging
import os

import requests

from .config import DEFAULT_TELEGRAM_API_URL

LOGGER = logging.getLogger(__name__)


def _send_message_url(token: str) -> str:
    base = os.getenv("TELEGRAM_API_URL", DEFAULT_TELEGRAM_API_URL).rstrip("/")
    return f"{base}/bot{token}/sendMessage"


def send_telegram(chat_id: str, text: str) -> bool:
    """Send one Markdown message to a Telegram chat through the Bot API."""
    token = os.getenv("TELEGRAM_BOT_TOKEN")
    if not token:
        LOGGER.warning("Skipping telegram notification: TELEGRAM_BOT_TOKEN not configured")
        return False

    payload = {
        "chat_id": chat_id,
        "text": text,
        "parse_mode": "Markdown",
        "disable_web_page_preview": True,
    }
    headers = {"Content-Type": "application/json"}

    try:
        resp = requests.post(_send_message_url(token), headers=headers, data=json.dumps(payload), timeout=5)
    except requests.RequestException as exc:
        LOGGER.error("Failed to send telegram notification to %s: %s", chat_id, exc)
        return False

    if resp.status_code >= 400:
        LOGGER.error("Telegram responded with %s for chat %s: %s", resp.status_code, chat_id, resp.text[:120])
        return False
    LOGGER.info("Sent telegram notification to %s", chat_id)
    return True
