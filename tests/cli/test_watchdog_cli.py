"""Tests for the gateway-watchdog CLI."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from gateway_watchdog.cli import cli
from gateway_watchdog.errors import ProbeError
from gateway_watchdog.probe import ProbeResult

pytestmark = pytest.mark.unit


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestInit:
    def test_writes_default_config(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        result = runner.invoke(cli, ["init", "--config", str(path)])

        assert result.exit_code == 0
        assert path.exists()
        assert "Wrote default configuration" in result.output

    def test_refuses_overwrite(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("watchdog: {}\n")
        result = runner.invoke(cli, ["init", "--config", str(path)])

        assert result.exit_code != 0
        assert "already exists" in result.output
        assert path.read_text() == "watchdog: {}\n"

    def test_force_overwrites(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("watchdog: {}\n")
        result = runner.invoke(cli, ["init", "--config", str(path), "--force"])

        assert result.exit_code == 0
        assert "interval_sec" in path.read_text()


class TestCheck:
    def test_healthy(self, runner: CliRunner, watchdog_home: Path) -> None:
        probe = AsyncMock(
            return_value=ProbeResult(healthy=True, detail="clawdbot durationMs=5", backend="clawdbot")
        )
        with patch("gateway_watchdog.cli.commands.HealthProber.probe", probe):
            result = runner.invoke(cli, ["check"])

        assert result.exit_code == 0
        assert "OK (clawdbot durationMs=5)" in result.output

    def test_unhealthy(self, runner: CliRunner, watchdog_home: Path) -> None:
        probe = AsyncMock(
            return_value=ProbeResult(healthy=False, detail="clawdbot", backend="clawdbot")
        )
        with patch("gateway_watchdog.cli.commands.HealthProber.probe", probe):
            result = runner.invoke(cli, ["check"])

        assert result.exit_code == 1
        assert "DOWN (clawdbot)" in result.output

    def test_probe_error(self, runner: CliRunner, watchdog_home: Path) -> None:
        probe = AsyncMock(side_effect=ProbeError("openclaw: command not found"))
        with patch("gateway_watchdog.cli.commands.HealthProber.probe", probe):
            result = runner.invoke(cli, ["check"])

        assert result.exit_code == 1
        assert "DOWN (openclaw: command not found)" in result.output

    def test_invalid_config(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("watchdog:\n  failure_threshold: 0\n")
        result = runner.invoke(cli, ["check", "--config", str(path)])

        assert result.exit_code != 0
        assert "Configuration validation failed" in result.output


class TestRun:
    def test_disabled_exits_immediately(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("watchdog:\n  enabled: false\n")
        with (
            patch("gateway_watchdog.cli.commands.setup_logging"),
            patch("gateway_watchdog.cli.commands.run_until_signalled") as mock_run,
        ):
            result = runner.invoke(cli, ["run", "--config", str(path)])

        assert result.exit_code == 0
        assert "disabled" in result.output
        mock_run.assert_not_called()

    def test_runs_scheduler(self, runner: CliRunner, watchdog_home: Path) -> None:
        with (
            patch("gateway_watchdog.cli.commands.setup_logging") as mock_logging,
            patch(
                "gateway_watchdog.cli.commands.run_until_signalled", new_callable=AsyncMock
            ) as mock_run,
        ):
            result = runner.invoke(cli, ["run", "-v"])

        assert result.exit_code == 0
        mock_run.assert_awaited_once()
        mock_logging.assert_called_once_with(True, level="info", log_file=None)

    def test_cli_overrides_take_precedence(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("watchdog:\n  interval_sec: 120\n  alert:\n    to: '#ops'\n")
        with (
            patch("gateway_watchdog.cli.commands.setup_logging"),
            patch(
                "gateway_watchdog.cli.commands.run_until_signalled", new_callable=AsyncMock
            ) as mock_run,
        ):
            result = runner.invoke(
                cli,
                ["run", "--config", str(path), "--interval", "30", "--alert-to", "ROOM1"],
            )

        assert result.exit_code == 0
        config = mock_run.call_args.args[0]
        assert config.watchdog.interval_sec == 30
        assert config.watchdog.alert.to == "ROOM1"

    def test_interval_override_is_validated(self, runner: CliRunner, watchdog_home: Path) -> None:
        with patch("gateway_watchdog.cli.commands.run_until_signalled") as mock_run:
            result = runner.invoke(cli, ["run", "--interval", "5"])

        assert result.exit_code != 0
        assert "Configuration validation failed" in result.output
        mock_run.assert_not_called()


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "gateway-watchdog" in result.output
