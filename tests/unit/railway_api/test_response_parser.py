"""Tests for railway_api.response_parser module."""

from datetime import datetime, timezone

import pytest

from railwatch.errors import ApiError, DecodeError, NotFoundError, RateLimitedError, UnauthorizedError
from railwatch.models import DeploymentStatus
from railwatch.railway_api.response_parser import (
    parse_deployment,
    parse_optional_project,
    parse_projects,
    raise_for_graphql_errors,
    require_data,
    service_names,
)


def _edges(*nodes):
    return {"edges": [{"node": node} for node in nodes]}


PROJECT_NODE = {
    "id": "proj-1",
    "name": "Shop",
    "services": _edges({"id": "svc-a", "name": "api"}, {"id": "svc-b", "name": "worker"}),
    "environments": _edges({"id": "env-prod", "name": "production"}),
}


class TestGraphqlErrors:
    def test_no_errors_passes(self) -> None:
        raise_for_graphql_errors({"data": {}})
        raise_for_graphql_errors({"errors": []})

    @pytest.mark.parametrize(
        "message, error_type",
        [
            ("Rate limit exceeded", RateLimitedError),
            ("Too Many Requests", RateLimitedError),
            ("Not Authorized", UnauthorizedError),
            ("Service not found", NotFoundError),
            ("Something odd", ApiError),
        ],
    )
    def test_messages_map_to_errors(self, message, error_type) -> None:
        with pytest.raises(error_type):
            raise_for_graphql_errors({"errors": [{"message": message}]})

    def test_api_error_keeps_all_messages(self) -> None:
        with pytest.raises(ApiError) as info:
            raise_for_graphql_errors({"errors": [{"message": "first"}, "second"]})

        assert info.value.messages == ("first", "second")
        assert str(info.value) == "first, second"

    def test_malformed_errors_field(self) -> None:
        with pytest.raises(DecodeError):
            raise_for_graphql_errors({"errors": "nope"})


class TestRequireData:
    def test_missing_data(self) -> None:
        with pytest.raises(ApiError, match="No data returned from API"):
            require_data({"data": None})

    def test_non_object_data(self) -> None:
        with pytest.raises(DecodeError):
            require_data({"data": [1]})


class TestDeployment:
    def test_newest_edge_wins(self) -> None:
        data = {
            "deployments": _edges(
                {"id": "dep-2", "status": "BUILDING", "createdAt": "2024-05-01T12:00:00.123Z"},
                {"id": "dep-1", "status": "SUCCESS", "createdAt": "2024-04-30T12:00:00Z"},
            )
        }

        result = parse_deployment(data)

        assert result is not None
        assert result.id == "dep-2"
        assert result.status is DeploymentStatus.BUILDING
        assert result.created_at.replace(microsecond=0) == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_no_deployments(self) -> None:
        assert parse_deployment({"deployments": {"edges": []}}) is None

    def test_unknown_status_value(self) -> None:
        data = {"deployments": _edges({"id": "dep-1", "status": "QUEUED", "createdAt": "2024-05-01T12:00:00Z"})}

        assert parse_deployment(data).status is DeploymentStatus.UNKNOWN

    def test_bad_timestamp_is_decode_error(self) -> None:
        data = {"deployments": _edges({"id": "dep-1", "status": "SUCCESS", "createdAt": "yesterday"})}

        with pytest.raises(DecodeError):
            parse_deployment(data)

    def test_out_of_range_timestamp_is_decode_error(self) -> None:
        data = {"deployments": _edges({"id": "dep-1", "status": "SUCCESS", "createdAt": 1e300})}

        with pytest.raises(DecodeError, match="createdAt"):
            parse_deployment(data)

    def test_missing_edges(self) -> None:
        with pytest.raises(DecodeError):
            parse_deployment({"deployments": {"nodes": []}})


class TestProjects:
    def test_parse_projects(self) -> None:
        projects = parse_projects({"projects": _edges(PROJECT_NODE)})

        assert [project.name for project in projects] == ["Shop"]
        assert [service.id for service in projects[0].services] == ["svc-a", "svc-b"]
        assert projects[0].production_environment_id == "env-prod"
        assert service_names(projects) == {"svc-a": "api", "svc-b": "worker"}

    def test_optional_project(self) -> None:
        assert parse_optional_project({"project": None}) is None
        assert parse_optional_project({"project": PROJECT_NODE}).id == "proj-1"

    def test_service_without_name(self) -> None:
        node = dict(PROJECT_NODE, services=_edges({"id": "svc-a"}))

        with pytest.raises(DecodeError):
            parse_optional_project({"project": node})
