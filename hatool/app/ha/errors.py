"""Exceptions raised by the Home Assistant clients."""

from __future__ import annotations

from typing import Any


class HomeAssistantError(Exception):
    """Base class for Home Assistant client errors."""


class RequestFailed(HomeAssistantError):
    """Raised when a REST call does not return HTTP 200."""

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(f"Request failed with status {status}: {message}")


class ConnectionClosed(HomeAssistantError):
    """Raised when the WebSocket closes before the service call settles."""


class AuthenticationFailed(ConnectionClosed):
    """Raised when the controller rejects the access token."""


class InvocationTimeout(ConnectionClosed):
    """Raised when a service call does not settle within the configured timeout."""


class RemoteInvocationError(HomeAssistantError):
    """A service call failure reported inside a result message.

    Only raised when the invocation is configured with ``raise_on_error``;
    otherwise the failure message is returned as the call result.
    """

    def __init__(self, code: str, message: str, payload: dict[str, Any]) -> None:
        self.code = code
        self.message = message
        self.payload = payload
        super().__init__(f"Service call failed ({code}): {message}")
