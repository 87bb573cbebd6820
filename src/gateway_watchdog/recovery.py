"""Recovery actions for an unhealthy gateway."""

from __future__ import annotations

import asyncio
import logging

from gateway_watchdog.config.watchdog import RecoverConfig
from gateway_watchdog.errors import RecoveryError
from gateway_watchdog.process import OutputLimitExceeded, collect_output, kill_process

logger = logging.getLogger(__name__)

GATEWAY_RESTART = "gateway-restart"
SUPPORTED_ACTIONS = frozenset({GATEWAY_RESTART})
DEFAULT_RECOVERY_TIMEOUT = 60.0


class RecoveryExecutor:
    """
    Runs recovery actions against the gateway.

    ``gateway-restart`` goes through the gateway CLI so it works for both
    launchd and systemd installs.
    """

    def __init__(
        self,
        binary: str = "clawdbot",
        timeout: float = DEFAULT_RECOVERY_TIMEOUT,
    ) -> None:
        self.binary = binary
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: RecoverConfig, binary: str = "clawdbot") -> RecoveryExecutor:
        return cls(binary=binary, timeout=config.timeout_sec)

    async def execute(self, action: str) -> None:
        """
        Execute a recovery action.

        Args:
            action: Action identifier (only "gateway-restart" is supported)

        Raises:
            RecoveryError: If the action is unknown or the command failed
        """
        if action not in SUPPORTED_ACTIONS:
            raise RecoveryError(f"unknown recover action: {action}", action=action)

        logger.info(f"Running recovery action {action}")
        await self._run([self.binary, "gateway", "restart"], action)

    async def _run(self, cmd: list[str], action: str) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except FileNotFoundError as e:
            raise RecoveryError(f"{cmd[0]}: command not found", action=action) from e
        except OSError as e:
            raise RecoveryError(f"{cmd[0]}: failed to start: {e}", action=action) from e

        try:
            stdout, _ = await asyncio.wait_for(collect_output(process), timeout=self.timeout)
        except TimeoutError as e:
            await kill_process(process)
            raise RecoveryError(
                f"{' '.join(cmd)} timed out after {self.timeout}s", action=action
            ) from e
        except OutputLimitExceeded as e:
            await kill_process(process)
            raise RecoveryError(f"{' '.join(cmd)}: {e}", action=action) from e
        except asyncio.CancelledError:
            await kill_process(process)
            raise

        if process.returncode != 0:
            output = stdout.decode("utf-8", errors="replace").strip() if stdout else ""
            raise RecoveryError(
                f"{' '.join(cmd)} exited with code {process.returncode}: {output[:500]}",
                action=action,
            )
