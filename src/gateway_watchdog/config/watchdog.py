"""
Watchdog configuration module.

Contains configuration for the gateway watchdog: polling interval, failure
threshold, recovery cooldown, alert destination, recovery action and the
probe backends.
"""

from pydantic import BaseModel, Field, field_validator

__all__ = ["AlertConfig", "ProbeConfig", "RecoverConfig", "WatchdogConfig"]


class AlertConfig(BaseModel):
    """Where watchdog alerts are delivered."""

    channel: str = Field(
        default="rocketchat",
        description="Notification channel (only 'rocketchat' is delivered, others log only)",
    )
    to: str = Field(
        default="",
        description="Rocket.Chat roomId or #channel; empty means log only",
    )


class RecoverConfig(BaseModel):
    """Automatic recovery settings."""

    enabled: bool = Field(
        default=False,
        description="Attempt recovery once the failure threshold is reached",
    )
    action: str = Field(
        default="gateway-restart",
        description="Recovery action to run (supported: gateway-restart)",
    )
    timeout_sec: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds for the recovery command",
    )


class ProbeConfig(BaseModel):
    """Health probe settings."""

    backends: list[str] = Field(
        default=["clawdbot", "openclaw"],
        description="CLI binaries tried in order for 'gateway health --json'",
    )
    timeout_sec: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for each probe backend attempt",
    )

    @field_validator("backends")
    @classmethod
    def validate_backends(cls, v: list[str]) -> list[str]:
        """Require at least one non-empty backend name."""
        names = [name.strip() for name in v if name.strip()]
        if not names:
            raise ValueError("probe.backends must contain at least one backend")
        return names


class WatchdogConfig(BaseModel):
    """Configuration for the gateway watchdog."""

    enabled: bool = Field(
        default=True,
        description="Enable the watchdog",
    )
    interval_sec: float = Field(
        default=60.0,
        ge=10.0,
        description="Seconds between health checks",
    )
    failure_threshold: int = Field(
        default=3,
        ge=1,
        description="Consecutive failures before escalating and attempting recovery",
    )
    cooldown_sec: float = Field(
        default=600.0,
        ge=0.0,
        description="Minimum seconds between recovery attempts",
    )
    alert: AlertConfig = Field(
        default_factory=AlertConfig,
        description="Alert destination",
    )
    recover: RecoverConfig = Field(
        default_factory=RecoverConfig,
        description="Recovery settings",
    )
    probe: ProbeConfig = Field(
        default_factory=ProbeConfig,
        description="Health probe settings",
    )
