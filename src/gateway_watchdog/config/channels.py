"""
Notification channel configuration.

Rocket.Chat credentials can be given either as a single flat account record
or as a map of named accounts with a "default" entry.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

__all__ = ["ChannelsConfig", "RocketChatAccount", "RocketChatChannelConfig"]


class RocketChatAccount(BaseModel):
    """Credentials for one Rocket.Chat account."""

    base_url: str | None = Field(
        default=None,
        description="Rocket.Chat server URL, e.g. https://chat.example.com",
    )
    user_id: str | None = Field(
        default=None,
        description="User ID sent as X-User-Id",
    )
    auth_token: str | None = Field(
        default=None,
        description="Personal access token sent as X-Auth-Token",
    )

    def is_complete(self) -> bool:
        """Return True when every credential field is set."""
        return bool(self.base_url and self.user_id and self.auth_token)


class RocketChatChannelConfig(RocketChatAccount):
    """Rocket.Chat channel settings (flat account plus optional named accounts)."""

    accounts: dict[str, RocketChatAccount] = Field(
        default_factory=dict,
        description="Named accounts; the 'default' entry is used when no flat account is set",
    )

    def resolve_account(self) -> RocketChatAccount | None:
        """
        Resolve the account used for delivery.

        Returns:
            The flat account if complete, else accounts["default"] if complete,
            else None.
        """
        if self.is_complete():
            return RocketChatAccount(
                base_url=self.base_url,
                user_id=self.user_id,
                auth_token=self.auth_token,
            )
        default = self.accounts.get("default")
        if default is not None and default.is_complete():
            return default
        return None


class ChannelsConfig(BaseModel):
    """Notification channel credentials."""

    rocketchat: RocketChatChannelConfig | None = Field(
        default=None,
        description="Rocket.Chat credentials",
    )
