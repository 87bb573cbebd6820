"""Watchdog scheduler - runs watchdog ticks on a fixed interval."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from types import TracebackType

from gateway_watchdog.config.channels import ChannelsConfig
from gateway_watchdog.config.watchdog import WatchdogConfig
from gateway_watchdog.watchdog import TickOutcome, Watchdog, build_watchdog

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_GRACE = 5.0


class WatchdogHandle:
    """
    A running watchdog, returned by WatchdogScheduler.start().

    Owns the repeating timer task and the in-flight tick tasks. stop() cancels
    the timer, gives in-flight ticks up to ``shutdown_grace`` seconds to
    finish, then cancels whatever is left. Usable as an async context manager.
    """

    def __init__(
        self,
        watchdog: Watchdog,
        interval: float,
        shutdown_grace: float = DEFAULT_SHUTDOWN_GRACE,
    ):
        self.watchdog = watchdog
        self.interval = interval
        self.shutdown_grace = shutdown_grace
        self._timer_task: asyncio.Task[None] | None = None
        self._tick_tasks: set[asyncio.Task[TickOutcome]] = set()
        self._stopped = False

    @property
    def running(self) -> bool:
        return (
            not self._stopped
            and self._timer_task is not None
            and not self._timer_task.done()
        )

    @property
    def in_flight(self) -> int:
        """Number of ticks currently running (0 or 1)."""
        return len(self._tick_tasks)

    def _arm(self) -> None:
        """Kick one tick immediately, then start the interval timer."""
        self._launch_tick()
        self._timer_task = asyncio.create_task(
            self._timer_loop(),
            name=f"watchdog-timer-{self.watchdog.target}",
        )

    def _launch_tick(self) -> None:
        # At most one tick at a time; timer fires during a running tick are dropped
        if self._tick_tasks:
            logger.debug(f"Previous {self.watchdog.target} tick still running, skipping")
            return
        task = asyncio.create_task(
            self.watchdog.tick(),
            name=f"watchdog-tick-{self.watchdog.target}",
        )
        self._tick_tasks.add(task)
        task.add_done_callback(self._tick_tasks.discard)

    async def _timer_loop(self) -> None:
        while not self._stopped:
            try:
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                break
            if self._stopped:
                break
            self._launch_tick()

    async def stop(self) -> None:
        """Stop scheduling ticks. Safe to call more than once."""
        if self._stopped:
            return
        self._stopped = True

        if self._timer_task is not None:
            self._timer_task.cancel()
            await asyncio.gather(self._timer_task, return_exceptions=True)

        pending = set(self._tick_tasks)
        if pending:
            _, still_running = await asyncio.wait(pending, timeout=self.shutdown_grace)
            if still_running:
                logger.warning(
                    f"Cancelling {len(still_running)} watchdog tick(s) still running "
                    f"after {self.shutdown_grace}s"
                )
                for task in still_running:
                    task.cancel()
                await asyncio.gather(*still_running, return_exceptions=True)

        logger.info("Watchdog stopped")

    async def __aenter__(self) -> WatchdogHandle:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()


class WatchdogScheduler:
    """Starts and stops the watchdog for one target.

    Each start() builds a fresh Watchdog, so failure counts and the last
    recovery time never survive a stop/start cycle.
    """

    def __init__(
        self,
        config: WatchdogConfig,
        channels: ChannelsConfig | None = None,
        watchdog_factory: Callable[[], Watchdog] | None = None,
        shutdown_grace: float = DEFAULT_SHUTDOWN_GRACE,
    ):
        self.config = config
        self.channels = channels
        self.shutdown_grace = shutdown_grace
        self._watchdog_factory = watchdog_factory or (
            lambda: build_watchdog(self.config, self.channels)
        )

    async def start(self) -> WatchdogHandle | None:
        """
        Start the watchdog.

        Returns:
            The running WatchdogHandle, or None when disabled by config
        """
        if not self.config.enabled:
            logger.info("Watchdog disabled by config")
            return None

        handle = WatchdogHandle(
            self._watchdog_factory(),
            interval=self.config.interval_sec,
            shutdown_grace=self.shutdown_grace,
        )
        logger.info(
            f"watchdog: started (interval={self.config.interval_sec}s "
            f"threshold={self.config.failure_threshold} "
            f"recover={'on' if self.config.recover.enabled else 'off'})"
        )
        handle._arm()
        return handle

    async def stop(self, handle: WatchdogHandle | None) -> None:
        """Stop a handle returned by start(); None is ignored."""
        if handle is not None:
            await handle.stop()
