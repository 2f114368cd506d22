"""Home Assistant integration for hatool."""

from .api import HomeAssistantAPI
from .errors import (
    AuthenticationFailed,
    ConnectionClosed,
    HomeAssistantError,
    InvocationTimeout,
    RemoteInvocationError,
    RequestFailed,
)
from .types import EntitySummary, SessionState
from .websocket import ServiceInvocation, invoke_service

__all__ = [
    "AuthenticationFailed",
    "ConnectionClosed",
    "EntitySummary",
    "HomeAssistantAPI",
    "HomeAssistantError",
    "InvocationTimeout",
    "RemoteInvocationError",
    "RequestFailed",
    "ServiceInvocation",
    "SessionState",
    "invoke_service",
]
