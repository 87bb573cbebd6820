"""Exceptions raised by watchdog sub-components.

None of these are fatal: the state machine catches every one of them inside a
tick so the polling loop keeps running.
"""

from __future__ import annotations


class WatchdogError(Exception):
    """Base class for watchdog errors."""


class ProbeError(WatchdogError):
    """Raised when no probe backend produced a usable health result."""


class AlertError(WatchdogError):
    """Raised when an alert could not be delivered to the notification channel."""


class RecoveryError(WatchdogError):
    """Raised when a recovery action failed or is not recognized."""

    def __init__(self, message: str, action: str | None = None) -> None:
        super().__init__(message)
        self.action = action


class ConfigError(WatchdogError):
    """Raised by the configuration loader for unreadable or invalid config."""
