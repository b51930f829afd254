"""Tests for models.transition module."""

from datetime import datetime, timedelta, timezone

import pytest

from railwatch.models.status import DeploymentStatus
from railwatch.models.transition import TransitionDecodeError, TransitionEvent

DETECTED_AT = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _event(**overrides) -> TransitionEvent:
    values = dict(
        service_id="svc-a",
        service_name="api",
        project_id="proj-1",
        deployment_id="dep-1",
        old_status=DeploymentStatus.BUILDING,
        new_status=DeploymentStatus.SUCCESS,
        timestamp=DETECTED_AT,
        deployment_created_at=DETECTED_AT - timedelta(seconds=65),
    )
    values.update(overrides)
    return TransitionEvent(**values)


class TestDeploymentDuration:
    def test_duration_for_terminal_transition(self) -> None:
        event = _event()

        assert event.deployment_duration() == "1m 5s"
        assert event.old_status is DeploymentStatus.BUILDING
        assert event.new_status is DeploymentStatus.SUCCESS

    def test_seconds_only(self) -> None:
        event = _event(deployment_created_at=DETECTED_AT - timedelta(seconds=45))

        assert event.deployment_duration() == "45s"

    def test_no_duration_for_in_progress_target(self) -> None:
        event = _event(new_status=DeploymentStatus.DEPLOYING)

        assert event.deployment_duration() is None

    def test_no_duration_without_creation_time(self) -> None:
        event = _event(deployment_created_at=None)

        assert event.deployment_duration() is None


class TestPersistence:
    def test_to_dict_uses_persisted_key_names(self) -> None:
        payload = _event().to_dict()

        assert payload["serviceId"] == "svc-a"
        assert payload["projectId"] == "proj-1"
        assert payload["oldStatus"] == "BUILDING"
        assert payload["newStatus"] == "SUCCESS"
        assert payload["timestamp"] == "2024-05-01T12:00:00Z"
        assert payload["deploymentCreatedAt"] == "2024-05-01T11:58:55Z"

    def test_from_dict_restores_event(self) -> None:
        original = _event()

        restored = TransitionEvent.from_dict(original.to_dict())

        assert restored == original

    def test_legacy_entry_without_project_fields(self) -> None:
        legacy = {
            "id": "1b4e28ba-2fa1-11d2-883f-0016d3cca427",
            "serviceId": "svc-a",
            "serviceName": "api",
            "oldStatus": "DEPLOYING",
            "newStatus": "FAILED",
            "timestamp": "2024-05-01T12:00:00.123Z",
        }

        event = TransitionEvent.from_dict(legacy)

        assert event.project_id == ""
        assert event.deployment_id is None
        assert event.deployment_created_at is None
        assert event.new_status is DeploymentStatus.FAILED

    def test_missing_required_field_raises(self) -> None:
        payload = _event().to_dict()
        del payload["serviceId"]

        with pytest.raises(TransitionDecodeError):
            TransitionEvent.from_dict(payload)


def test_time_ago_and_url() -> None:
    event = _event()

    assert event.time_ago(DETECTED_AT + timedelta(minutes=5)) == "5m ago"
    assert event.time_ago(DETECTED_AT + timedelta(seconds=3)) == "just now"
    assert event.railway_url == "https://railway.com/project/proj-1/service/svc-a/deployment/dep-1"


def test_events_get_unique_ids() -> None:
    assert _event().id != _event().id
