"""Notification webhooks fired after a sync."""

from __future__ import annotations

import requests

from .version import user_agent


class WebhookError(Exception):
    """Raised when a webhook cannot be delivered."""


def invoke_webhook(url: str) -> None:
    """POST to ``url``; raise WebhookError on failure or an error status."""
    try:
        response = requests.post(url, headers={"User-Agent": user_agent()})
    except requests.RequestException as exc:
        raise WebhookError(f"send webhook request: {exc}") from exc
    with response:
        if response.status_code >= 400:
            raise WebhookError(f"webhook returned status {response.status_code}")


class WebhookClient:
    """Calls the configured success and failure webhooks; empty URLs are skipped."""

    def __init__(self, success_webhook_url: str = "", failure_webhook_url: str = "") -> None:
        self.success_webhook_url = success_webhook_url
        self.failure_webhook_url = failure_webhook_url

    def success(self) -> None:
        if self.success_webhook_url:
            invoke_webhook(self.success_webhook_url)

    def failure(self) -> None:
        if self.failure_webhook_url:
            invoke_webhook(self.failure_webhook_url)