"""Pytest configuration and shared fixtures for gateway watchdog tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from gateway_watchdog.config.watchdog import RecoverConfig, WatchdogConfig
from gateway_watchdog.probe import ProbeResult


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def healthy_result(detail: str = "clawdbot durationMs=12") -> ProbeResult:
    return ProbeResult(healthy=True, detail=detail, backend="clawdbot", raw={"ok": True})


def unhealthy_result(detail: str = "clawdbot durationMs=9000") -> ProbeResult:
    return ProbeResult(healthy=False, detail=detail, backend="clawdbot", raw={"ok": False})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def watchdog_config() -> WatchdogConfig:
    """Threshold 3, no cooldown, recovery enabled."""
    return WatchdogConfig(
        failure_threshold=3,
        cooldown_sec=0,
        recover=RecoverConfig(enabled=True),
    )


@pytest.fixture
def mock_prober() -> MagicMock:
    prober = MagicMock()
    prober.probe = AsyncMock(return_value=healthy_result())
    return prober


@pytest.fixture
def mock_alert_sink() -> MagicMock:
    sink = MagicMock()
    sink.send = AsyncMock(return_value=None)
    return sink


@pytest.fixture
def mock_recovery_executor() -> MagicMock:
    executor = MagicMock()
    executor.execute = AsyncMock(return_value=None)
    return executor


@pytest.fixture
def watchdog_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point GATEWAY_WATCHDOG_HOME at a temp directory."""
    monkeypatch.setenv("GATEWAY_WATCHDOG_HOME", str(tmp_path))
    yield tmp_path
