"""Pytest configuration and fixtures for hatool tests."""

from __future__ import annotations

import asyncio
import json
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import aiohttp
import pytest
from pydantic import SecretStr

from hatool.app.config import HomeAssistantToolConfig
from hatool.app.tools.base import BaseTool
from hatool.app.tools.registry import ToolRegistry

HA_URL = "http://homeassistant.local:8123/api"
HA_TOKEN = "test-token"


@dataclass
class FakeWSMessage:
    """Stand-in for aiohttp.WSMessage."""

    type: aiohttp.WSMsgType
    data: Any = None


class FakeWebSocket:
    """A WebSocket that answers like Home Assistant.

    Sending ``auth`` queues ``auth_reply``; sending ``call_service`` queues
    the result registered for that message ID, preceded by any
    ``before_result`` messages. Strings are sent as raw text frames.
    When nothing is queued the socket reports itself closed, or blocks
    forever with ``hang=True``.
    """

    def __init__(
        self,
        results: dict[int, dict[str, Any]] | None = None,
        auth_reply: str = "auth_ok",
        hang: bool = False,
        before_result: list[Any] | None = None,
    ) -> None:
        self.results = results or {}
        self.before_result = before_result or []
        self.auth_reply = auth_reply
        self.hang = hang
        self.inbound: deque[Any] = deque(
            [{"type": "auth_required", "ha_version": "2024.6.0"}]
        )
        self.sent: list[dict[str, Any]] = []
        self.close_calls = 0
        self.closed = False

    async def send_json(self, data: dict[str, Any]) -> None:
        if self.closed:
            raise ConnectionResetError("Cannot write to closing transport")
        self.sent.append(data)

        if data["type"] == "auth":
            reply: dict[str, Any] = {"type": self.auth_reply, "ha_version": "2024.6.0"}
            if self.auth_reply == "auth_invalid":
                reply["message"] = "Invalid access token or password"
            self.inbound.append(reply)
        elif data["type"] == "call_service" and data["id"] in self.results:
            self.inbound.extend(self.before_result)
            self.inbound.append({"id": data["id"], "type": "result", **self.results[data["id"]]})

    async def receive(self) -> FakeWSMessage:
        if self.inbound:
            item = self.inbound.popleft()
            if isinstance(item, FakeWSMessage):
                return item
            if isinstance(item, str):
                return FakeWSMessage(aiohttp.WSMsgType.TEXT, item)
            return FakeWSMessage(aiohttp.WSMsgType.TEXT, json.dumps(item))
        if self.hang:
            await asyncio.Event().wait()
        return FakeWSMessage(aiohttp.WSMsgType.CLOSED)

    async def close(self) -> bool:
        self.close_calls += 1
        self.closed = True
        return True

    @property
    def calls(self) -> list[dict[str, Any]]:
        """Get the call_service messages sent."""
        return [m for m in self.sent if m["type"] == "call_service"]


class FakeResponse:
    """Minimal aiohttp response used as an async context manager."""

    def __init__(self, status: int, body: Any) -> None:
        self.status = status
        self._body = body

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def text(self) -> str:
        return self._body if isinstance(self._body, str) else json.dumps(self._body)

    async def json(self, content_type: str | None = "application/json") -> Any:
        return json.loads(await self.text())


class FakeClientSession:
    """Records requests and serves canned responses keyed by URL."""

    def __init__(
        self,
        ws: FakeWebSocket | None = None,
        responses: dict[str, tuple[int, Any]] | None = None,
        connect_error: Exception | None = None,
        request_error: Exception | None = None,
        connect_delay: float = 0.0,
    ) -> None:
        self.ws = ws
        self.connect_delay = connect_delay
        self.responses = responses or {}
        self.connect_error = connect_error
        self.request_error = request_error
        self.ws_urls: list[str] = []
        self.requests: list[tuple[str, dict[str, str]]] = []
        self.closed = False

    async def ws_connect(self, url: str, **kwargs: Any) -> FakeWebSocket:
        self.ws_urls.append(url)
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.connect_error:
            raise self.connect_error
        assert self.ws is not None
        return self.ws

    def get(self, url: str, headers: dict[str, str] | None = None) -> FakeResponse:
        self.requests.append((url, headers or {}))
        if self.request_error:
            raise self.request_error
        status, body = self.responses.get(url, (404, "404: Not Found"))
        return FakeResponse(status, body)

    async def close(self) -> None:
        self.closed = True


def ok(response: Any = None) -> dict[str, Any]:
    """Build a successful result body."""
    result: dict[str, Any] = {"context": {"id": "01HXYZ", "parent_id": None, "user_id": None}}
    if response is not None:
        result["response"] = response
    return {"success": True, "result": result}


def failed(code: str, message: str) -> dict[str, Any]:
    """Build a failed result body."""
    return {"success": False, "error": {"code": code, "message": message}}


@pytest.fixture
def make_ws() -> Callable[..., FakeWebSocket]:
    """Factory for scripted Home Assistant WebSockets."""
    return FakeWebSocket


@pytest.fixture
def make_session() -> Callable[..., FakeClientSession]:
    """Factory for fake aiohttp sessions."""
    return FakeClientSession


@pytest.fixture
def result_ok() -> Callable[..., dict[str, Any]]:
    return ok


@pytest.fixture
def result_failed() -> Callable[[str, str], dict[str, Any]]:
    return failed


@pytest.fixture
def ha_config() -> HomeAssistantToolConfig:
    """Create a test configuration."""
    return HomeAssistantToolConfig(api_url=HA_URL, api_key=SecretStr(HA_TOKEN))


class MockTool(BaseTool):
    """Mock tool for testing."""

    def __init__(
        self,
        name: str = "mock_tool",
        description: str = "A mock tool for testing",
        result: str = "Mock result",
        error: Exception | None = None,
    ) -> None:
        self._name = name
        self._description = description
        self._result = result
        self._error = error
        self._calls: list[dict[str, Any]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Test query"},
            },
            "required": ["query"],
        }

    async def execute(self, **kwargs: Any) -> str:
        self._calls.append(kwargs)
        if self._error:
            raise self._error
        return self._result

    @property
    def calls(self) -> list[dict[str, Any]]:
        """Get recorded calls."""
        return self._calls


@pytest.fixture
def make_tool() -> Callable[..., MockTool]:
    """Factory for mock tools."""
    return MockTool


@pytest.fixture
def tool_registry(make_tool: Callable[..., MockTool]) -> ToolRegistry:
    """Create a tool registry with a mock tool."""
    registry = ToolRegistry()
    registry.register(make_tool())
    return registry
