"""
Gateway watchdog state machine.

Each tick probes the gateway, updates the failure counter, sends
de-duplicated alerts and, once the failure threshold is reached, triggers a
recovery action subject to a cooldown.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from gateway_watchdog.alerts import AlertSink
from gateway_watchdog.config.channels import ChannelsConfig
from gateway_watchdog.config.watchdog import WatchdogConfig
from gateway_watchdog.errors import AlertError, ProbeError, RecoveryError
from gateway_watchdog.probe import HealthProber
from gateway_watchdog.recovery import RecoveryExecutor


def format_status(name: str, ok: bool, meta: str | None = None, now: datetime | None = None) -> str:
    """Format a status line, e.g. ``watchdog: gateway DOWN (failures=1) @ <iso>``."""
    ts = (now or datetime.now(UTC)).isoformat()
    suffix = f" ({meta})" if meta else ""
    return f"watchdog: {name} {'OK' if ok else 'DOWN'}{suffix} @ {ts}"


@dataclass
class WatchdogState:
    """Mutable per-target state, owned by the Watchdog."""

    consecutive_failures: int = 0
    last_recovery_at: float | None = None
    # None until the first probe completes
    last_known_healthy: bool | None = None


@dataclass
class TickOutcome:
    """What happened during one tick."""

    healthy: bool
    failures: int
    detail: str = ""
    alerts: list[str] = field(default_factory=list)
    recovery_attempted: bool = False
    recovery_error: str | None = None


class Watchdog:
    """
    Failure/alert/recovery policy for one monitored target.

    Alerts fire on the first failure, when the failure count reaches the
    threshold, and once when health returns after an outage. Recovery runs
    when enabled, the count is at or above the threshold, and the cooldown
    since the last attempt has elapsed.

    No exception from the prober, alert sink or recovery executor escapes
    tick(). Ticks are serialized with a lock so the state is never updated
    concurrently.
    """

    def __init__(
        self,
        config: WatchdogConfig,
        prober: HealthProber,
        alert_sink: AlertSink,
        recovery_executor: RecoveryExecutor,
        target: str = "gateway",
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.prober = prober
        self.alert_sink = alert_sink
        self.recovery_executor = recovery_executor
        self.target = target
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock

        self.state = WatchdogState()
        self._lock = asyncio.Lock()

    def cooldown_active(self, now: float) -> bool:
        """Check if the recovery cooldown is still active."""
        last = self.state.last_recovery_at
        if last is None:
            return False

        elapsed = now - last
        if elapsed < self.config.cooldown_sec:
            remaining = self.config.cooldown_sec - elapsed
            self.logger.debug(f"Recovery cooldown active, {remaining:.1f}s remaining")
            return True
        return False

    def should_recover(self, now: float) -> bool:
        """
        Determine if a recovery attempt should run now.

        Returns:
            True if recovery is enabled, the threshold is reached and the
            cooldown has elapsed.
        """
        if not self.config.recover.enabled:
            return False

        if self.state.consecutive_failures < self.config.failure_threshold:
            return False

        return not self.cooldown_active(now)

    async def tick(self) -> TickOutcome:
        """Run one check -> alert -> recovery cycle."""
        async with self._lock:
            return await self._tick()

    async def _tick(self) -> TickOutcome:
        healthy, detail = await self._check()

        if healthy:
            outcome = TickOutcome(healthy=True, failures=0, detail=detail)
            was_unhealthy = self.state.last_known_healthy is False
            self.state.consecutive_failures = 0
            self.state.last_known_healthy = True
            if was_unhealthy:
                self.logger.info(f"{self.target} recovered ({detail})")
                await self._alert(format_status(self.target, True), outcome)
            return outcome

        self.state.consecutive_failures += 1
        self.state.last_known_healthy = False
        failures = self.state.consecutive_failures
        outcome = TickOutcome(healthy=False, failures=failures, detail=detail)

        self.logger.warning(
            f"{self.target} health check failed ({failures}/"
            f"{self.config.failure_threshold}){': ' + detail if detail else ''}"
        )

        if failures == 1 or failures == self.config.failure_threshold:
            meta = f"failures={failures}{': ' + detail if detail else ''}"
            await self._alert(format_status(self.target, False, meta), outcome)

        now = self._clock()
        if self.should_recover(now):
            await self._recover(now, outcome)

        return outcome

    async def _check(self) -> tuple[bool, str]:
        """Probe the target; any probe failure counts as unhealthy."""
        try:
            result = await self.prober.probe()
        except ProbeError as e:
            return False, str(e)
        except Exception as e:
            self.logger.error(f"Unexpected error probing {self.target}: {e}", exc_info=True)
            return False, str(e) or type(e).__name__
        return result.healthy, result.detail

    async def _alert(self, text: str, outcome: TickOutcome) -> None:
        """Send an alert; delivery failures are logged and swallowed."""
        outcome.alerts.append(text)
        try:
            await self.alert_sink.send(text)
        except AlertError as e:
            self.logger.error(f"Alert delivery failed: {e} (alert: {text})")
        except Exception as e:
            self.logger.error(
                f"Unexpected error delivering alert: {e} (alert: {text})", exc_info=True
            )

    async def _recover(self, now: float, outcome: TickOutcome) -> None:
        """Run the configured recovery action."""
        action = self.config.recover.action
        failures = self.state.consecutive_failures

        # Stamp before executing so a slow restart cannot trigger a second attempt
        self.state.last_recovery_at = now
        outcome.recovery_attempted = True

        self.logger.warning(f"Failure threshold reached after {failures} consecutive failures")
        await self._alert(f"watchdog: attempting recovery: {action} (failures={failures})", outcome)

        try:
            await self.recovery_executor.execute(action)
        except RecoveryError as e:
            outcome.recovery_error = str(e)
            self.logger.error(f"Recovery action {action} failed: {e}")
            await self._alert(f"watchdog: recovery failed: {e}", outcome)
        except Exception as e:
            outcome.recovery_error = str(e) or type(e).__name__
            self.logger.error(f"Unexpected error during recovery {action}: {e}", exc_info=True)
            await self._alert(f"watchdog: recovery failed: {outcome.recovery_error}", outcome)
        else:
            self.logger.info(f"Recovery action {action} completed")


def build_watchdog(
    config: WatchdogConfig,
    channels: ChannelsConfig | None = None,
    logger: logging.Logger | None = None,
) -> Watchdog:
    """Wire a Watchdog with the CLI prober, alert sink and recovery executor."""
    prober = HealthProber.from_config(config.probe)
    return Watchdog(
        config=config,
        prober=prober,
        alert_sink=AlertSink(config.alert, channels, logger=logger),
        recovery_executor=RecoveryExecutor.from_config(
            config.recover, binary=prober.backends[0].binary
        ),
        logger=logger,
    )
