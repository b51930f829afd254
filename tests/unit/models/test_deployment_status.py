"""Tests for models.status module."""

import itertools

import pytest

from railwatch.models.status import (
    DeploymentStatus,
    is_failed,
    is_healthy,
    is_in_progress,
    priority,
    sort_worst_first,
    worst_status,
)

EXPECTED_PRIORITY = {
    DeploymentStatus.FAILED: 0,
    DeploymentStatus.CRASHED: 0,
    DeploymentStatus.ERROR: 0,
    DeploymentStatus.BUILDING: 1,
    DeploymentStatus.DEPLOYING: 2,
    DeploymentStatus.INITIALIZING: 2,
    DeploymentStatus.WAITING: 2,
    DeploymentStatus.SUCCESS: 3,
    DeploymentStatus.SLEEPING: 4,
    DeploymentStatus.REMOVED: 5,
    DeploymentStatus.REMOVING: 5,
    DeploymentStatus.UNKNOWN: 5,
}


class TestPriority:
    """Tests for the worst-first priority table."""

    @pytest.mark.parametrize("status,expected", list(EXPECTED_PRIORITY.items()))
    def test_priority_table(self, status: DeploymentStatus, expected: int) -> None:
        assert priority(status) == expected
        assert status.priority == expected

    def test_every_status_has_a_priority(self) -> None:
        assert set(EXPECTED_PRIORITY) == set(DeploymentStatus)

    def test_ordering_is_total(self) -> None:
        for lhs, rhs in itertools.product(DeploymentStatus, repeat=2):
            assert (priority(lhs) <= priority(rhs)) or (priority(rhs) <= priority(lhs))

    def test_sort_worst_first(self) -> None:
        ordered = sort_worst_first([DeploymentStatus.SUCCESS, DeploymentStatus.BUILDING, DeploymentStatus.FAILED])

        assert ordered == [DeploymentStatus.FAILED, DeploymentStatus.BUILDING, DeploymentStatus.SUCCESS]

    def test_worst_status_empty(self) -> None:
        assert worst_status([]) is None

    def test_worst_status_of_one(self) -> None:
        for status in DeploymentStatus:
            assert worst_status([status]) is status


class TestClassification:
    """Tests for healthy/failed/in-progress predicates."""

    def test_only_success_is_healthy(self) -> None:
        assert [status for status in DeploymentStatus if is_healthy(status)] == [DeploymentStatus.SUCCESS]

    def test_failed_states(self) -> None:
        failed = {status for status in DeploymentStatus if is_failed(status)}

        assert failed == {DeploymentStatus.FAILED, DeploymentStatus.CRASHED, DeploymentStatus.ERROR}

    def test_in_progress_states(self) -> None:
        in_progress = {status for status in DeploymentStatus if is_in_progress(status)}

        assert in_progress == {
            DeploymentStatus.BUILDING,
            DeploymentStatus.DEPLOYING,
            DeploymentStatus.INITIALIZING,
            DeploymentStatus.WAITING,
        }

    def test_terminal_states(self) -> None:
        assert DeploymentStatus.SUCCESS.is_terminal
        assert DeploymentStatus.CRASHED.is_terminal
        assert not DeploymentStatus.BUILDING.is_terminal
        assert not DeploymentStatus.SLEEPING.is_terminal

    def test_display_names(self) -> None:
        assert DeploymentStatus.SUCCESS.display_name == "Online"
        assert DeploymentStatus.CRASHED.display_name == "Crashed"


class TestFromWire:
    def test_known_value(self) -> None:
        assert DeploymentStatus.from_wire("BUILDING") is DeploymentStatus.BUILDING

    def test_lowercase_value(self) -> None:
        assert DeploymentStatus.from_wire(" success ") is DeploymentStatus.SUCCESS

    @pytest.mark.parametrize("raw", ["QUEUED", "", None, 3])
    def test_unknown_values(self, raw) -> None:
        assert DeploymentStatus.from_wire(raw) is DeploymentStatus.UNKNOWN
