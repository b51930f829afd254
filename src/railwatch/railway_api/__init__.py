"""Railway GraphQL API client."""

from .client import DEFAULT_API_URL, RailwayClient
from .response_parser import service_names
from .session_manager import SessionManager

__all__ = ["DEFAULT_API_URL", "RailwayClient", "SessionManager", "service_names"]
