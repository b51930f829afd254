"""Mapping of GraphQL payloads onto model objects and typed errors."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..errors import ApiError, DecodeError, NotFoundError, RateLimitedError, UnauthorizedError, messages_of
from ..models.service import Deployment, Environment, Project, ServiceSummary
from ..models.status import DeploymentStatus
from ..time_utils import parse_timestamp

_RATE_LIMIT_MARKERS = ("rate limit", "ratelimit", "too many requests")
_UNAUTHORIZED_MARKERS = ("not authorized", "unauthorized", "unauthenticated")
_NOT_FOUND_MARKERS = ("not found",)


def raise_for_graphql_errors(payload: Dict[str, Any]) -> None:
    """Raise the most specific error for a non-empty ``errors`` array."""
    errors = payload.get("errors")
    if not errors:
        return
    if not isinstance(errors, list):
        raise DecodeError("errors field is not a list")
    messages = messages_of(errors)
    lowered = [message.lower() for message in messages]
    if any(marker in message for message in lowered for marker in _RATE_LIMIT_MARKERS):
        raise RateLimitedError()
    if any(marker in message for message in lowered for marker in _UNAUTHORIZED_MARKERS):
        raise UnauthorizedError()
    if any(marker in message for message in lowered for marker in _NOT_FOUND_MARKERS):
        raise NotFoundError(messages[0])
    raise ApiError(messages)


def require_data(payload: Dict[str, Any]) -> Dict[str, Any]:
    data = payload.get("data")
    if data is None:
        raise ApiError(["No data returned from API"])
    if not isinstance(data, dict):
        raise DecodeError("data field is not an object")
    return data


def _edge_nodes(container: Any, field_name: str) -> List[Dict[str, Any]]:
    if container is None:
        return []
    if not isinstance(container, dict) or not isinstance(container.get("edges"), list):
        raise DecodeError(f"{field_name} is missing its edges list")
    nodes = []
    for edge in container["edges"]:
        node = edge.get("node") if isinstance(edge, dict) else None
        if not isinstance(node, dict):
            raise DecodeError(f"{field_name} edge without a node")
        nodes.append(node)
    return nodes


def _require_str(node: Dict[str, Any], key: str, context: str) -> str:
    value = node.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"{context}.{key} is missing or not a string")
    return value


def parse_deployment(data: Dict[str, Any]) -> Optional[Deployment]:
    """Newest deployment from a ``deployments`` connection, or None when there is none."""
    nodes = _edge_nodes(data.get("deployments"), "deployments")
    if not nodes:
        return None
    node = nodes[0]
    try:
        created_at = parse_timestamp(node.get("createdAt"))
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"deployment.createdAt: {exc}") from exc
    assert created_at is not None
    return Deployment(
        id=_require_str(node, "id", "deployment"),
        status=DeploymentStatus.from_wire(node.get("status")),
        created_at=created_at,
    )


def parse_project(node: Dict[str, Any]) -> Project:
    services = tuple(
        ServiceSummary(id=_require_str(item, "id", "service"), name=_require_str(item, "name", "service"))
        for item in _edge_nodes(node.get("services"), "services")
    )
    environments = tuple(
        Environment(id=_require_str(item, "id", "environment"), name=_require_str(item, "name", "environment"))
        for item in _edge_nodes(node.get("environments"), "environments")
    )
    return Project(
        id=_require_str(node, "id", "project"),
        name=_require_str(node, "name", "project"),
        services=services,
        environments=environments,
    )


def parse_projects(data: Dict[str, Any]) -> List[Project]:
    return [parse_project(node) for node in _edge_nodes(data.get("projects"), "projects")]


def parse_optional_project(data: Dict[str, Any]) -> Optional[Project]:
    node = data.get("project")
    if node is None:
        return None
    if not isinstance(node, dict):
        raise DecodeError("project is not an object")
    return parse_project(node)


def service_names(projects: Sequence[Project]) -> Dict[str, str]:
    """Service id -> name across ``projects`` (used to seed display names)."""
    return {service.id: service.name for project in projects for service in project.services}


__all__ = [
    "parse_deployment",
    "parse_optional_project",
    "parse_project",
    "parse_projects",
    "raise_for_graphql_errors",
    "require_data",
    "service_names",
]
