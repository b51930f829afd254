"""Tests for monitor_config module."""

import pytest

from railwatch.config_store import MemoryConfigStore
from railwatch.monitor_config import ConfigurationRepository, MonitorConfiguration
from railwatch.notifications import NotificationPreferences


def test_is_configured_requires_project_and_services() -> None:
    assert not MonitorConfiguration().is_configured
    assert not MonitorConfiguration(project_id="proj-1").is_configured
    assert MonitorConfiguration(project_id="proj-1", service_ids=("svc-a",)).is_configured
    assert MonitorConfiguration().display_project_name == "Project"


@pytest.mark.asyncio
async def test_save_and_load(memory_store) -> None:
    repository = ConfigurationRepository(memory_store)
    config = MonitorConfiguration(
        project_id="proj-1",
        project_name="Shop",
        environment_id="env-prod",
        service_ids=("svc-a", "svc-b"),
        service_names={"svc-a": "api"},
        preferences=NotificationPreferences(notify_on_building=False),
    )

    await repository.save(config)

    snapshot = memory_store.snapshot()
    assert snapshot["projectId"] == "proj-1"
    assert snapshot["serviceIds"] == ["svc-a", "svc-b"]
    assert snapshot["notificationPreferences"]["notifyOnBuilding"] is False
    assert await repository.load() == config


@pytest.mark.asyncio
async def test_none_values_remove_keys(memory_store) -> None:
    repository = ConfigurationRepository(memory_store)
    await repository.save(MonitorConfiguration(project_id="proj-1", environment_id="env-1"))

    await repository.save_environment(None)

    assert "environmentId" not in memory_store.snapshot()


@pytest.mark.asyncio
async def test_load_ignores_malformed_values() -> None:
    store = MemoryConfigStore({"projectId": "proj-1", "serviceIds": "svc-a", "serviceNames": ["x"]})

    config = await ConfigurationRepository(store).load()

    assert config.service_ids == ()
    assert config.service_names == {}
    assert config.preferences == NotificationPreferences()


@pytest.mark.asyncio
async def test_reset_clears_everything() -> None:
    store = MemoryConfigStore({"projectId": "proj-1", "deploymentHistory": [], "apps": []})

    await ConfigurationRepository(store).reset()

    assert store.snapshot() == {}
