"""
Alert delivery channels.

Delivery is best-effort: every notifier reports success as a bool and never
raises for transport problems.
"""
import logging
from typing import List, Optional

import requests

from mediawatch.schemas.analysis_result import AlertEvent

logger = logging.getLogger(__name__)


def format_alert(event: AlertEvent) -> str:
    return f"{event.rule.keyword} found in {event.post.source}"


class LoggingNotifier:
    """Writes alerts to the application log."""

    def notify(self, event: AlertEvent) -> bool:
        logger.warning(
            f"ALERT TRIGGERED: keyword '{event.rule.keyword}' found in post {event.post.id} "
            f"from {event.post.source}. Severity: {event.rule.severity.value}"
        )
        return True


class WebhookNotifier:
    """Posts a Slack-style JSON message to a webhook URL."""

    def __init__(self, webhook_url: str, timeout: float = 10):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": "MediaWatch/1.0"
        })

    def notify(self, event: AlertEvent) -> bool:
        payload = {"text": f"🚨 Alert: {format_alert(event)}"}
        try:
            response = self.session.post(self.webhook_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.error(f"Webhook delivery failed for rule {event.rule.id}: {e}")
            return False


class CompositeNotifier:
    """Fans an alert out to every channel; succeeds if any channel did."""

    def __init__(self, notifiers: Optional[List[object]] = None):
        self.notifiers = list(notifiers or [])

    def notify(self, event: AlertEvent) -> bool:
        delivered = False
        for notifier in self.notifiers:
            try:
                delivered = notifier.notify(event) or delivered
            except Exception as e:
                logger.error(f"{type(notifier).__name__} raised while delivering alert: {e}")
        return delivered
