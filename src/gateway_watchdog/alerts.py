"""Alert delivery for watchdog status messages.

Alerts go to Rocket.Chat through the ``chat.postMessage`` REST endpoint. When
no destination is configured, or the configured channel is not supported,
alerts are written to the log instead.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from gateway_watchdog.config.channels import ChannelsConfig, RocketChatAccount
from gateway_watchdog.config.watchdog import AlertConfig
from gateway_watchdog.errors import AlertError

ROCKETCHAT_CHANNEL = "rocketchat"
POST_MESSAGE_PATH = "/api/v1/chat.postMessage"
DEFAULT_ALERT_TIMEOUT = 10.0


class RocketChatClient:
    """Minimal Rocket.Chat REST client for posting messages."""

    def __init__(self, account: RocketChatAccount, timeout: float = DEFAULT_ALERT_TIMEOUT):
        if not account.is_complete():
            raise AlertError("Rocket.Chat account requires base_url, user_id and auth_token")
        self.account = account
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{str(self.account.base_url).rstrip('/')}{POST_MESSAGE_PATH}"

    @staticmethod
    def build_payload(to: str, text: str) -> dict[str, Any]:
        """Build the postMessage body; '#name' targets a channel, anything else a room ID."""
        payload: dict[str, Any] = {"text": text}
        if to.startswith("#"):
            payload["channel"] = to
        else:
            payload["roomId"] = to
        return payload

    async def post_message(self, to: str, text: str) -> None:
        """
        Post a message to a room or channel.

        Raises:
            AlertError: On transport errors or a non-2xx response
        """
        headers = {
            "X-User-Id": str(self.account.user_id),
            "X-Auth-Token": str(self.account.auth_token),
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.url,
                    headers=headers,
                    json=self.build_payload(to, text),
                )
        except httpx.HTTPError as e:
            raise AlertError(f"watchdog: Rocket.Chat send failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise AlertError(
                f"watchdog: Rocket.Chat send failed {response.status_code}: {response.text}"
            )


class AlertSink:
    """
    Routes watchdog alerts to the configured destination.

    - Empty ``alert.to``: log only.
    - Unsupported ``alert.channel``: warn and log only.
    - Rocket.Chat: post the message; failures raise AlertError.
    """

    def __init__(
        self,
        alert: AlertConfig,
        channels: ChannelsConfig | None = None,
        logger: logging.Logger | None = None,
        timeout: float = DEFAULT_ALERT_TIMEOUT,
    ) -> None:
        self.alert = alert
        self.channels = channels or ChannelsConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.timeout = timeout

    def _resolve_account(self) -> RocketChatAccount | None:
        rocketchat = self.channels.rocketchat
        if rocketchat is None:
            return None
        return rocketchat.resolve_account()

    async def send(self, text: str) -> None:
        """
        Deliver an alert.

        Args:
            text: Human-readable status message

        Raises:
            AlertError: If Rocket.Chat delivery was attempted and failed
        """
        to = self.alert.to
        channel = self.alert.channel

        if not to:
            self.logger.info(text)
            return

        if channel != ROCKETCHAT_CHANNEL:
            self.logger.warning(f"watchdog: unsupported alert.channel={channel}; logging only")
            self.logger.info(text)
            return

        account = self._resolve_account()
        if account is None:
            raise AlertError("watchdog: Rocket.Chat not configured (channels.rocketchat.*)")

        client = RocketChatClient(account, timeout=self.timeout)
        await client.post_message(to, text)
        self.logger.info(f"Alert sent to {channel} {to}: {text}")
