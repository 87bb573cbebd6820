"""Gateway health probe.

Runs ``<backend> gateway health --json`` for each configured CLI backend in
priority order and returns the first parseable result. The CLIs may print
styled doctor output before the JSON, so the last JSON object in the combined
output is used.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from gateway_watchdog.config.watchdog import ProbeConfig
from gateway_watchdog.errors import ProbeError
from gateway_watchdog.process import (
    MAX_OUTPUT_BYTES,
    OutputLimitExceeded,
    collect_output,
    kill_process,
)

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 10.0


@dataclass(frozen=True)
class CliProbeBackend:
    """A CLI binary that can report gateway health as JSON."""

    name: str
    binary: str
    args: tuple[str, ...] = ("gateway", "health", "--json")

    def command(self) -> list[str]:
        return [self.binary, *self.args]


DEFAULT_PROBE_BACKENDS: tuple[CliProbeBackend, ...] = (
    CliProbeBackend(name="clawdbot", binary="clawdbot"),
    CliProbeBackend(name="openclaw", binary="openclaw"),
)


@dataclass
class ProbeResult:
    """Outcome of a single health probe."""

    healthy: bool
    detail: str
    backend: str
    raw: dict[str, Any] = field(default_factory=dict)


def extract_last_json_object(text: str) -> dict[str, Any]:
    """
    Extract the trailing JSON object from mixed CLI output.

    Tries each '{' from the end of the text and accepts the first object that
    decodes cleanly up to the end of the output. If none does, falls back to
    the slice between the first '{' and the last '}'.

    Args:
        text: Combined stdout/stderr of a health command

    Returns:
        The parsed JSON object

    Raises:
        ValueError: If no JSON object can be parsed
    """
    decoder = json.JSONDecoder()
    stripped = text.rstrip()

    pos = stripped.rfind("{")
    if pos < 0:
        raise ValueError("no JSON object found in output")

    while pos >= 0:
        try:
            obj, end = decoder.raw_decode(stripped, pos)
        except json.JSONDecodeError:
            obj, end = None, -1
        if end == len(stripped) and isinstance(obj, dict):
            return obj
        pos = stripped.rfind("{", 0, pos)

    start = text.find("{")
    end = text.rfind("}")
    if start >= 0 and end > start:
        try:
            obj = json.loads(text[start : end + 1])
        except json.JSONDecodeError as e:
            raise ValueError(f"failed to parse JSON output: {e}") from e
        if isinstance(obj, dict):
            return obj

    raise ValueError("failed to parse JSON output")


def _format_detail(backend: str, data: dict[str, Any]) -> str:
    duration = data.get("durationMs")
    if isinstance(duration, int | float) and not isinstance(duration, bool):
        return f"{backend} durationMs={duration}"
    return backend


class HealthProber:
    """
    Probes gateway health through an ordered list of CLI backends.

    The first backend that produces a parseable JSON object wins; later
    backends are not consulted. A backend that times out, exits non-zero, is
    missing, or prints no usable JSON only fails its own attempt.
    """

    def __init__(
        self,
        backends: Sequence[CliProbeBackend] = DEFAULT_PROBE_BACKENDS,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        if not backends:
            raise ValueError("at least one probe backend is required")
        self.backends = tuple(backends)
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: ProbeConfig) -> HealthProber:
        backends = [CliProbeBackend(name=name, binary=name) for name in config.backends]
        return cls(backends=backends, timeout=config.timeout_sec)

    async def probe(self) -> ProbeResult:
        """
        Run one health probe.

        Returns:
            ProbeResult from the first backend that produced usable output

        Raises:
            ProbeError: If every backend failed; carries the last error message
        """
        last_error: ProbeError | None = None

        for backend in self.backends:
            try:
                data = await self._run_backend(backend)
            except ProbeError as e:
                logger.debug(f"Probe backend {backend.name} failed: {e}")
                last_error = e
                continue

            return ProbeResult(
                healthy=bool(data.get("ok")),
                detail=_format_detail(backend.name, data),
                backend=backend.name,
                raw=data,
            )

        raise ProbeError(str(last_error) if last_error else "health failed")

    async def _run_backend(self, backend: CliProbeBackend) -> dict[str, Any]:
        """Run one backend and parse its JSON output."""
        try:
            process = await asyncio.create_subprocess_exec(
                *backend.command(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ProbeError(f"{backend.name}: command not found") from e
        except OSError as e:
            raise ProbeError(f"{backend.name}: failed to start: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                collect_output(process, MAX_OUTPUT_BYTES),
                timeout=self.timeout,
            )
        except TimeoutError as e:
            await kill_process(process)
            raise ProbeError(f"{backend.name}: timed out after {self.timeout}s") from e
        except OutputLimitExceeded as e:
            await kill_process(process)
            raise ProbeError(f"{backend.name}: {e}") from e
        except asyncio.CancelledError:
            await kill_process(process)
            raise

        out = stdout.decode("utf-8", errors="replace") if stdout else ""
        err = stderr.decode("utf-8", errors="replace") if stderr else ""

        if process.returncode != 0:
            message = (err or out).strip()[:500] or "no output"
            raise ProbeError(
                f"{backend.name}: exited with code {process.returncode}: {message}"
            )

        try:
            return extract_last_json_object(f"{out}\n{err}")
        except ValueError as e:
            raise ProbeError(f"{backend.name}: {e}") from e
