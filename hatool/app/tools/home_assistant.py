"""Home Assistant tool.

A single tool that lets the LLM query and control Home Assistant
entities. The command argument selects the operation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..ha.api import split_entity
from ..ha.websocket import ServiceInvocation
from ..utils.logging import get_logger
from .base import BaseTool

if TYPE_CHECKING:
    import aiohttp

    from ..config import HomeAssistantToolConfig
    from ..ha.api import HomeAssistantAPI

logger = get_logger(__name__)

COMMANDS = ("checkAPI", "queryState", "queryService", "callService")
NOT_RECOGNISED = "Command not recognised"


class HomeAssistantTool(BaseTool):
    """Tool to query and control Home Assistant entities."""

    def __init__(
        self,
        ha_api: HomeAssistantAPI,
        token: str,
        ws_timeout: float | None = None,
        raise_on_error: bool = False,
        ws_session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._ha_api = ha_api
        self._token = token
        self._ws_timeout = ws_timeout
        self._raise_on_error = raise_on_error
        self._ws_session = ws_session

    @classmethod
    def from_config(cls, ha_api: HomeAssistantAPI, config: HomeAssistantToolConfig) -> HomeAssistantTool:
        """Create the tool from loaded configuration."""
        return cls(
            ha_api,
            token=config.api_key.get_secret_value(),
            ws_timeout=config.ws_timeout,
            raise_on_error=config.raise_on_error,
        )

    @property
    def name(self) -> str:
        return "home-assistant"

    @property
    def description(self) -> str:
        return (
            "You can query and control home assistant entities.\n\n"
            "Pass a command, one of the following:\n"
            " - checkAPI: Check the API is available and running.\n"
            " - queryState: Pass with no other parameters for a list of all entities. "
            "Pass with a domain for a list of all entities in that domain. "
            "Pass with a domain and entity, or a full entity ID, for full details of a particular entity.\n"
            " - queryService: Pass with a domain to list the services available for that domain.\n"
            " - callService: Pass with a domain, service name, entity and optional data "
            "to run the service on that entity."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "enum": list(COMMANDS),
                    "description": "The command type to run, one of checkAPI, queryState, queryService, callService.",
                },
                "domain": {
                    "type": "string",
                    "description": "The domain of the entity (e.g., 'light', 'switch', 'todo').",
                },
                "entity": {
                    "type": "string",
                    "description": (
                        "The entity to interact with. This can either be the full entity ID "
                        "(e.g. domain.entity) or the domain can be passed as a separate parameter."
                    ),
                },
                "service": {
                    "type": "string",
                    "description": "The service to call (e.g., 'turn_on', 'toggle', 'get_items').",
                },
                "data": {
                    "type": "object",
                    "description": "Service data for callService (e.g., {'brightness': 255}).",
                },
            },
            "required": ["command"],
        }

    async def execute(self, **kwargs: Any) -> str:
        command = kwargs.get("command", "")
        domain = kwargs.get("domain") or None
        entity = kwargs.get("entity") or None

        logger.info("Home Assistant command: %s", command)

        if command in ("checkAPI", "checkApi"):
            return await self._ha_api.check_api()
        if command == "queryState":
            if entity and not domain and "." not in entity:
                return "Error: pass a domain or a full entity ID (domain.entity) for queryState."
            return await self._ha_api.query_state(domain, entity)
        if command == "queryService":
            return await self._ha_api.query_services(domain)
        if command == "callService":
            return await self._call_service(domain, entity, kwargs.get("service"), kwargs.get("data"))

        logger.warning("Unrecognised command: %s", command)
        return NOT_RECOGNISED

    async def _call_service(
        self,
        domain: str | None,
        entity: str | None,
        service: str | None,
        data: Any,
    ) -> str:
        domain, entity = split_entity(domain, entity)

        if not domain or not service:
            return "Error: domain and service are required for callService."
        if not entity:
            return "Error: entity is required for callService."

        entity_id = entity if "." in entity else f"{domain}.{entity}"

        invocation = ServiceInvocation(
            self._ha_api.url,
            self._token,
            domain,
            service,
            entity_id,
            data,
            session=self._ws_session,
            timeout=self._ws_timeout,
            raise_on_error=self._raise_on_error,
        )
        return await invocation.invoke()
