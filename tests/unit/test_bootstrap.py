"""Tests for bootstrap module."""

from pathlib import Path

from railwatch.bootstrap import build_config_store, build_notifier, build_throttle, create_monitor
from railwatch.config_store import JsonFileConfigStore, RedisConfigStore
from railwatch.credential_store import FileCredentialStore
from railwatch.notifications import LoggingNotifier, NotificationThrottle, WebhookNotifier
from railwatch.settings import MonitorSettings


def test_file_store_by_default(tmp_path) -> None:
    store = build_config_store(MonitorSettings(config_path=tmp_path / "config.json"))

    assert isinstance(store, JsonFileConfigStore)
    assert store.path == tmp_path / "config.json"


def test_redis_store_when_url_set() -> None:
    store = build_config_store(MonitorSettings(redis_url="redis://localhost:6379/0"))

    assert isinstance(store, RedisConfigStore)


def test_notifier_selection() -> None:
    assert isinstance(build_notifier(MonitorSettings()), LoggingNotifier)
    webhook = build_notifier(MonitorSettings(webhook_url="https://hooks.example.com/x"))
    assert isinstance(webhook, WebhookNotifier)
    assert webhook.url == "https://hooks.example.com/x"


def test_throttle_only_when_enabled() -> None:
    assert build_throttle(MonitorSettings()) is None
    throttle = build_throttle(MonitorSettings(notify_window_seconds=60, notify_max_per_window=2))
    assert isinstance(throttle, NotificationThrottle)


def test_create_monitor_reads_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("RAILWATCH_CONFIG_PATH", str(tmp_path / "cfg.json"))
    monkeypatch.setenv("RAILWATCH_CREDENTIALS_PATH", str(tmp_path / "token"))
    monkeypatch.setenv("RAILWATCH_HISTORY_CAPACITY", "7")

    monitor = create_monitor()

    assert monitor.settings.history_capacity == 7
    assert monitor.ledger.capacity == 7
    assert isinstance(monitor.credentials, FileCredentialStore)
    assert monitor.credentials.path == Path(tmp_path / "token")
    assert monitor.repository.store.path == tmp_path / "cfg.json"
