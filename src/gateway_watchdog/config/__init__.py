"""Configuration models and loader for the gateway watchdog."""

from gateway_watchdog.config.app import AppConfig, LoggingSettings, load_config
from gateway_watchdog.config.channels import (
    ChannelsConfig,
    RocketChatAccount,
    RocketChatChannelConfig,
)
from gateway_watchdog.config.watchdog import (
    AlertConfig,
    ProbeConfig,
    RecoverConfig,
    WatchdogConfig,
)

__all__ = [
    "AlertConfig",
    "AppConfig",
    "ChannelsConfig",
    "LoggingSettings",
    "ProbeConfig",
    "RecoverConfig",
    "RocketChatAccount",
    "RocketChatChannelConfig",
    "WatchdogConfig",
    "load_config",
]
