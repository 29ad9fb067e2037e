"""Chat webhook notifications."""

from typing import Optional

import requests

from kubedeployer.constants import NOTIFICATION_TIMEOUT_SECONDS
from kubedeployer.models import NotificationEvent


class WebhookNotifier:
    """Posts terminal pipeline status to a Slack-compatible webhook.

    Delivery is best effort: failures are logged and never raised, and a
    notifier without a webhook URL does nothing.
    """

    def __init__(
        self,
        webhook_url: Optional[str],
        logger,
        requests_module=requests,
        timeout: float = NOTIFICATION_TIMEOUT_SECONDS,
        dry_run: bool = False,
    ):
        self.webhook_url = webhook_url or None
        self.logger = logger
        self.requests = requests_module
        self.timeout = timeout
        self.dry_run = dry_run

    @property
    def enabled(self) -> bool:
        return self.webhook_url is not None

    def send(self, event: NotificationEvent) -> bool:
        if not self.enabled:
            self.logger.debug("No webhook configured, skipping %s notification.", event.status.value)
            return False

        if self.dry_run:
            self.logger.info("[dry-run] notify (%s): %s", event.status.value, event.message)
            return False

        try:
            response = self.requests.post(
                self.webhook_url,
                json={"text": event.message},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except self.requests.RequestException as exc:
            self.logger.warning("Could not deliver %s notification: %s", event.status.value, exc)
            return False

        return True
