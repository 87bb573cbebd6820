"""Tests for watchdog and channel configuration models."""

import pytest
from pydantic import ValidationError

from gateway_watchdog.config.channels import RocketChatAccount, RocketChatChannelConfig
from gateway_watchdog.config.watchdog import ProbeConfig, WatchdogConfig

pytestmark = pytest.mark.unit


class TestWatchdogConfig:
    def test_defaults(self) -> None:
        config = WatchdogConfig()
        assert config.enabled is True
        assert config.interval_sec == 60
        assert config.failure_threshold == 3
        assert config.cooldown_sec == 600
        assert config.alert.channel == "rocketchat"
        assert config.alert.to == ""
        assert config.recover.enabled is False
        assert config.recover.action == "gateway-restart"
        assert config.recover.timeout_sec == 60
        assert config.probe.backends == ["clawdbot", "openclaw"]
        assert config.probe.timeout_sec == 10

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"interval_sec": 9.9},
            {"failure_threshold": 0},
            {"cooldown_sec": -1},
        ],
    )
    def test_bounds(self, kwargs: dict) -> None:
        with pytest.raises(ValidationError):
            WatchdogConfig(**kwargs)

    def test_minimums_accepted(self) -> None:
        config = WatchdogConfig(interval_sec=10, failure_threshold=1, cooldown_sec=0)
        assert config.interval_sec == 10
        assert config.failure_threshold == 1
        assert config.cooldown_sec == 0

    def test_nested_dicts(self) -> None:
        config = WatchdogConfig(
            alert={"to": "#ops"},
            recover={"enabled": True},
        )
        assert config.alert.to == "#ops"
        assert config.alert.channel == "rocketchat"
        assert config.recover.enabled is True

    def test_unknown_action_is_accepted(self) -> None:
        # Rejected at execution time by the recovery executor
        assert WatchdogConfig(recover={"action": "reboot"}).recover.action == "reboot"


class TestProbeConfig:
    def test_blank_backends_removed(self) -> None:
        assert ProbeConfig(backends=[" clawdbot ", ""]).backends == ["clawdbot"]

    def test_empty_backends_rejected(self) -> None:
        with pytest.raises(ValidationError, match="at least one backend"):
            ProbeConfig(backends=[])

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ProbeConfig(timeout_sec=0)


class TestRocketChatAccountResolution:
    def test_flat_account(self) -> None:
        config = RocketChatChannelConfig(base_url="https://a", user_id="u", auth_token="t")
        account = config.resolve_account()
        assert account == RocketChatAccount(base_url="https://a", user_id="u", auth_token="t")

    def test_default_named_account(self) -> None:
        config = RocketChatChannelConfig(
            accounts={"default": {"base_url": "https://b", "user_id": "u", "auth_token": "t"}}
        )
        account = config.resolve_account()
        assert account is not None
        assert account.base_url == "https://b"

    def test_flat_preferred_when_both_valid(self) -> None:
        config = RocketChatChannelConfig(
            base_url="https://flat",
            user_id="u1",
            auth_token="t1",
            accounts={"default": {"base_url": "https://named", "user_id": "u2", "auth_token": "t2"}},
        )
        account = config.resolve_account()
        assert account is not None
        assert account.base_url == "https://flat"

    def test_incomplete_flat_falls_back_to_default(self) -> None:
        config = RocketChatChannelConfig(
            base_url="https://flat",
            accounts={"default": {"base_url": "https://named", "user_id": "u2", "auth_token": "t2"}},
        )
        account = config.resolve_account()
        assert account is not None
        assert account.base_url == "https://named"

    def test_non_default_named_account_ignored(self) -> None:
        config = RocketChatChannelConfig(
            accounts={"work": {"base_url": "https://w", "user_id": "u", "auth_token": "t"}}
        )
        assert config.resolve_account() is None

    def test_nothing_configured(self) -> None:
        assert RocketChatChannelConfig().resolve_account() is None
