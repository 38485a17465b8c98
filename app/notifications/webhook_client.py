import httpx

from app.logging.logger import Log
from app.upload.exceptions import NotificationError
from app.upload.models import WebhookNotification


class WebhookNotifier:
    """Posts new referrals to the downstream automation webhook."""

    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: int,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)

    def notify(self, notification: WebhookNotification) -> None:
        """Send one notification. The response body is not read.

        Raises:
            NotificationError: on transport failure or a non-2xx status.
        """
        try:
            response = self._client.post(self._url, json=notification.to_payload())
        except httpx.HTTPError as exc:
            raise NotificationError(f"Webhook transport error: {exc}") from exc

        if not response.is_success:
            Log.error(
                "Webhook failed",
                status=response.status_code,
                reason=response.reason_phrase,
            )
            raise NotificationError(f"Webhook returned HTTP {response.status_code}")
