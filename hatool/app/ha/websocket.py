"""WebSocket service invocation for Home Assistant."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp

from ..config import to_websocket_url
from ..utils.logging import get_logger
from .errors import AuthenticationFailed, ConnectionClosed, InvocationTimeout, RemoteInvocationError
from .types import (
    AuthMessage,
    CallServiceMessage,
    InboundType,
    ResultMessage,
    SessionState,
    to_json,
)

logger = get_logger(__name__)

_CLOSED_TYPES = (
    aiohttp.WSMsgType.CLOSE,
    aiohttp.WSMsgType.CLOSING,
    aiohttp.WSMsgType.CLOSED,
    aiohttp.WSMsgType.ERROR,
)


class ServiceInvocation:
    """One service call over a dedicated Home Assistant WebSocket.

    The session connects, authenticates, sends ``call_service`` asking for
    the response inline and waits for the matching result. If the controller
    rejects the call with a validation error (services that return no data
    do this when a response is requested), the call is resent once without
    ``return_response``.

    Application-level failures are returned as the JSON-encoded result
    message unless ``raise_on_error`` is set. Only losing the socket raises.
    """

    def __init__(
        self,
        url: str,
        token: str,
        domain: str,
        service: str,
        entity_id: str | list[str],
        data: Any = None,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float | None = None,
        raise_on_error: bool = False,
    ) -> None:
        """Initialize the session.

        Args:
            url: Home Assistant REST base URL (http or https, including /api).
            token: Long-lived access token.
            domain: Service domain (e.g., "light").
            service: Service name (e.g., "turn_on").
            entity_id: Target entity ID or list of entity IDs.
            data: Service data payload, sent as-is.
            session: Optional aiohttp session to open the socket from.
            timeout: Seconds to wait for the call to settle. None waits forever.
            raise_on_error: Raise RemoteInvocationError for failed results.
        """
        if not domain or not service:
            raise ValueError("domain and service are required")

        self._ws_url = to_websocket_url(url)
        self._token = token
        self._domain = domain
        self._service = service
        self._entity_id = entity_id
        self._data = data if data is not None else {}
        self._session = session
        self._timeout = timeout
        self._raise_on_error = raise_on_error

        self._state = SessionState.CONNECTING
        self._retried = False
        self._message_id = 0

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def retried(self) -> bool:
        """Whether the call was resent after a validation error."""
        return self._retried

    @property
    def request_id(self) -> int:
        """ID of the most recent call_service message (0 before the first)."""
        return self._message_id

    def _next_id(self) -> int:
        """Get the next message ID."""
        self._message_id += 1
        return self._message_id

    async def invoke(self) -> str:
        """Run the session to completion.

        Returns:
            The JSON-encoded service response, "done" when the service
            returned nothing, or the JSON-encoded failure message.

        Raises:
            ConnectionClosed: If the socket closes before a result arrives.
            AuthenticationFailed: If the access token is rejected.
            InvocationTimeout: If the timeout expires first.
            RemoteInvocationError: On a failed result with raise_on_error.
        """
        if self._state is not SessionState.CONNECTING:
            raise RuntimeError("ServiceInvocation can only be invoked once")

        owns_session = self._session is None
        session = self._session or aiohttp.ClientSession()

        try:
            if self._timeout is None:
                return await self._connect_and_run(session)

            try:
                async with asyncio.timeout(self._timeout):
                    return await self._connect_and_run(session)
            except TimeoutError as e:
                logger.error(
                    "Service call %s.%s timed out after %.1fs",
                    self._domain,
                    self._service,
                    self._timeout,
                )
                raise InvocationTimeout(
                    f"No result for {self._domain}.{self._service} within {self._timeout}s"
                ) from e
        finally:
            self._state = SessionState.SETTLED
            if owns_session:
                await session.close()

    async def _connect_and_run(self, session: aiohttp.ClientSession) -> str:
        """Open the socket, run the protocol and close the socket again."""
        logger.info("Connecting to WebSocket: %s", self._ws_url)
        try:
            ws = await session.ws_connect(self._ws_url)
        except aiohttp.ClientError as e:
            logger.error("WebSocket connection failed: %s", e)
            raise ConnectionClosed(f"Could not connect to {self._ws_url}: {e}") from e

        try:
            return await self._run(ws)
        except (aiohttp.ClientError, ConnectionResetError) as e:
            logger.error("WebSocket error during %s.%s: %s", self._domain, self._service, e)
            raise ConnectionClosed(f"WebSocket failed: {e}") from e
        finally:
            self._state = SessionState.SETTLED
            await ws.close()

    async def _run(self, ws: aiohttp.ClientWebSocketResponse) -> str:
        """Drive the protocol until the call settles."""
        self._state = SessionState.AUTHENTICATING
        await ws.send_json(AuthMessage(self._token).to_dict())

        while True:
            msg = await ws.receive()

            if msg.type in _CLOSED_TYPES:
                logger.warning(
                    "WebSocket closed while %s (%s.%s)",
                    self._state.value,
                    self._domain,
                    self._service,
                )
                raise ConnectionClosed(
                    f"WebSocket closed before {self._domain}.{self._service} returned a result"
                )

            if msg.type != aiohttp.WSMsgType.TEXT:
                continue

            try:
                data = json.loads(msg.data)
            except ValueError:
                logger.warning("Ignoring non-JSON frame: %.100s", msg.data)
                continue
            if not isinstance(data, dict):
                logger.warning("Ignoring frame that is not a JSON object: %.100s", msg.data)
                continue

            outcome = await self._handle(ws, data)
            if outcome is not None:
                return outcome

    async def _handle(self, ws: aiohttp.ClientWebSocketResponse, data: dict[str, Any]) -> str | None:
        """Handle one inbound message, returning the result once settled."""
        msg_type = data.get("type")

        if msg_type == InboundType.AUTH_REQUIRED:
            logger.debug("Controller requested authentication")
            return None

        if msg_type == InboundType.AUTH_INVALID:
            logger.error("Authentication failed: %s", data.get("message"))
            raise AuthenticationFailed(data.get("message") or "Invalid access token")

        if msg_type == InboundType.AUTH_OK:
            if self._state is not SessionState.AUTHENTICATING:
                return None
            logger.debug("WebSocket authenticated")
            self._state = SessionState.AWAITING_RESULT
            await self._send_call(ws, return_response=True)
            return None

        if msg_type != InboundType.RESULT:
            return None

        if self._state not in (SessionState.AWAITING_RESULT, SessionState.AWAITING_RETRY_RESULT):
            return None

        result = ResultMessage.from_dict(data)
        if result.id != self._message_id:
            logger.debug("Ignoring result for id %s", result.id)
            return None

        if result.success:
            logger.info("Service %s.%s succeeded", self._domain, self._service)
            return to_json(result.response) if result.has_response else "done"

        if result.is_validation_error and not self._retried:
            logger.info(
                "Service %s.%s rejected the response request, retrying without it",
                self._domain,
                self._service,
            )
            self._retried = True
            self._state = SessionState.AWAITING_RETRY_RESULT
            await self._send_call(ws, return_response=False)
            return None

        logger.warning(
            "Service %s.%s failed (%s): %s",
            self._domain,
            self._service,
            result.error_code,
            result.error_message,
        )
        if self._raise_on_error:
            raise RemoteInvocationError(
                result.error_code or "unknown_error",
                result.error_message or "",
                result.raw,
            )
        return to_json(result.raw)

    async def _send_call(self, ws: aiohttp.ClientWebSocketResponse, return_response: bool) -> None:
        """Send the call_service message under a fresh ID."""
        message = CallServiceMessage(
            id=self._next_id(),
            domain=self._domain,
            service=self._service,
            entity_id=self._entity_id,
            service_data=self._data,
            return_response=return_response,
        )
        logger.debug("Sending call_service %s.%s (id=%d)", self._domain, self._service, message.id)
        await ws.send_json(message.to_dict())


async def invoke_service(
    url: str,
    token: str,
    domain: str,
    service: str,
    entity_id: str | list[str],
    data: Any = None,
    **kwargs: Any,
) -> str:
    """Call a Home Assistant service over a fresh WebSocket session.

    Keyword arguments are passed to ServiceInvocation.
    """
    invocation = ServiceInvocation(url, token, domain, service, entity_id, data, **kwargs)
    return await invocation.invoke()
