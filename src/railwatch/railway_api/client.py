"""Railway GraphQL API client implementing the polling engine's status source."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp
import orjson

from ..errors import ApiError, DecodeError, NetworkError, RateLimitedError, UnauthorizedError
from ..models.service import Deployment, Project
from . import queries
from .response_parser import (
    parse_deployment,
    parse_optional_project,
    parse_projects,
    raise_for_graphql_errors,
    require_data,
)
from .session_manager import SessionManager

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://backboard.railway.com/graphql/v2"
DEFAULT_TIMEOUT_SECONDS = 20.0

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_TOO_MANY_REQUESTS = 429

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


def _retry_after_seconds(headers: Any) -> Optional[float]:
    raw = headers.get("Retry-After") if headers is not None else None
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except (TypeError, ValueError):  # HTTP-date form is not used by the API  # policy_guard: allow-silent-handler
        return None


class RailwayClient:
    """
    Thin async client for the handful of Railway operations the monitor needs.

    Every request is a POST of ``{"query", "variables"}`` with a Bearer token;
    the operation name is also passed as ``?query=<name>`` for server-side
    tracing. Failures surface as ``railwatch.errors`` exceptions.
    """

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session_manager: Optional[SessionManager] = None,
    ) -> None:
        self._token = token
        self.api_url = api_url
        self._session_manager = session_manager or SessionManager(timeout_seconds)

    def update_token(self, token: str) -> None:
        self._token = token

    async def close(self) -> None:
        await self._session_manager.close()

    async def __aenter__(self) -> "RailwayClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def fetch_status(self, service_id: str, environment_id: Optional[str] = None) -> Optional[Deployment]:
        variables: Dict[str, Any] = {"serviceId": service_id}
        if environment_id is not None:
            variables["environmentId"] = environment_id
        data = await self._execute(queries.SERVICE_DEPLOYMENTS_QUERY, variables, "ServiceDeployments")
        return parse_deployment(data)

    async def fetch_project(self, project_id: str) -> Optional[Project]:
        data = await self._execute(queries.PROJECT_BY_ID_QUERY, {"id": project_id}, "Project")
        return parse_optional_project(data)

    async def fetch_projects(self) -> List[Project]:
        data = await self._execute(queries.PROJECTS_QUERY, None, "Projects")
        return parse_projects(data)

    async def restart_deployment(self, deployment_id: str) -> None:
        """Restart the container of an existing deployment (same build)."""
        await self._execute(queries.DEPLOYMENT_RESTART_MUTATION, {"id": deployment_id}, "DeploymentRestart")
        logger.info("Requested restart of deployment %s", deployment_id)

    async def redeploy_deployment(self, deployment_id: str) -> None:
        """Trigger a fresh build and deploy from an existing deployment."""
        await self._execute(queries.DEPLOYMENT_REDEPLOY_MUTATION, {"id": deployment_id}, "DeploymentRedeploy")
        logger.info("Requested redeploy of deployment %s", deployment_id)

    async def validate_token(self) -> bool:
        """False when the API rejects the token; transport failures propagate."""
        try:
            await self.fetch_projects()
        except (ApiError, UnauthorizedError) as exc:  # policy_guard: allow-silent-handler
            logger.info("Token validation failed: %s", exc)
            return False
        return True

    async def _execute(self, query: str, variables: Optional[Dict[str, Any]], operation_name: str) -> Dict[str, Any]:
        body: Dict[str, Any] = {"query": query}
        if variables is not None:
            body["variables"] = variables
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._token}",
        }
        session = await self._session_manager.get_session()
        try:
            async with session.post(
                self.api_url,
                params={"query": operation_name},
                data=orjson.dumps(body),
                headers=headers,
            ) as response:
                status = response.status
                if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
                    raise UnauthorizedError()
                if status == HTTP_TOO_MANY_REQUESTS:
                    raise RateLimitedError(_retry_after_seconds(response.headers))
                raw = await response.read()
        except TRANSPORT_ERRORS as exc:
            detail = str(exc) or type(exc).__name__
            logger.debug("Railway request %s failed: %s", operation_name, detail)
            raise NetworkError(detail) from exc

        payload = self._decode(raw, status, operation_name)
        raise_for_graphql_errors(payload)
        if status >= 400:
            raise NetworkError(f"HTTP {status} from {operation_name}")
        return require_data(payload)

    @staticmethod
    def _decode(raw: bytes, status: int, operation_name: str) -> Dict[str, Any]:
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            if status >= 400:
                raise NetworkError(f"HTTP {status} from {operation_name}") from exc
            raise DecodeError(str(exc)) from exc
        if not isinstance(payload, dict):
            raise DecodeError(f"{operation_name} response is not a JSON object")
        return payload


__all__ = ["DEFAULT_API_URL", "DEFAULT_TIMEOUT_SECONDS", "RailwayClient", "TRANSPORT_ERRORS"]
