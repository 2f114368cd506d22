"""REST API client for Home Assistant."""

from __future__ import annotations

from typing import Any

import aiohttp

from ..utils.logging import get_logger
from .errors import RequestFailed
from .types import EntitySummary, to_json

logger = get_logger(__name__)


def split_entity(domain: str | None, entity: str | None) -> tuple[str | None, str | None]:
    """Split a full entity ID passed without a domain.

    ``(None, "light.kitchen")`` becomes ``("light", "kitchen")``. Anything
    else is returned unchanged.
    """
    if not domain and entity and "." in entity:
        domain, entity = entity.split(".", 1)
    return domain, entity


def filter_by_domain(states: list[dict[str, Any]], domain: str | None) -> list[dict[str, Any]]:
    """Reduce a /states listing to entity_id, state and last_changed.

    Args:
        states: Entries returned by the /states endpoint.
        domain: Keep only entities in this domain. None keeps everything.

    Returns:
        The reduced records, in listing order.
    """
    prefix = f"{domain}." if domain else ""
    return [
        EntitySummary.from_dict(item).to_dict()
        for item in states
        if item.get("entity_id", "").startswith(prefix)
    ]


class HomeAssistantAPI:
    """REST API client for Home Assistant.

    Every helper performs one authenticated GET and hands the JSON body
    back as a string for the LLM.
    """

    def __init__(
        self,
        url: str,
        token: str,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            url: Home Assistant REST base URL, including /api.
            token: Long-lived access token.
            session: Optional aiohttp session to reuse.
        """
        self._base_url = url.rstrip("/")
        self._token = token
        self._session = session
        self._owns_session = session is None
        logger.info("Using Home Assistant API at %s", self._base_url)

    @property
    def url(self) -> str:
        """Get the REST base URL."""
        return self._base_url

    @property
    def _headers(self) -> dict[str, str]:
        """Get request headers."""
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def get(self, endpoint: str) -> Any:
        """Make a GET request and return the decoded JSON body.

        Raises:
            RequestFailed: If the status is not 200 or the request fails.
        """
        session = await self._ensure_session()
        url = f"{self._base_url}/{endpoint.lstrip('/')}"

        logger.debug("GET %s", url)

        try:
            async with session.get(url, headers=self._headers) as response:
                logger.debug("Got response %d from %s", response.status, url)
                if response.status != 200:
                    text = await response.text()
                    raise RequestFailed(response.status, text)
                return await response.json(content_type=None)

        except aiohttp.ClientError as e:
            raise RequestFailed(0, str(e)) from e

    async def check_api(self) -> str:
        """Check that the API is available and running."""
        logger.info("Checking Home Assistant API status")
        return to_json(await self.get(""))

    async def query_state(self, domain: str | None = None, entity: str | None = None) -> str:
        """Query entity states.

        Args:
            domain: Entity domain. Alone, lists that domain's entities.
            entity: Entity name, or a full entity ID when domain is empty.

        Returns:
            Full state of one entity, or a reduced listing.

        Raises:
            ValueError: If a bare entity name is given without a domain.
        """
        domain, entity = split_entity(domain, entity)

        if entity and not domain:
            raise ValueError(f"Entity '{entity}' needs a domain or a full entity ID (domain.entity)")

        if domain and entity:
            logger.info("Querying state of %s.%s", domain, entity)
            return to_json(await self.get(f"states/{domain}.{entity}"))

        logger.info("Querying all states (domain filter: %s)", domain or "none")
        states = await self.get("states")
        return to_json(filter_by_domain(states, domain))

    async def query_services(self, domain: str | None = None) -> str:
        """List available services, optionally for one domain only."""
        logger.info("Querying services (domain: %s)", domain or "all")
        services = await self.get("services")

        if domain:
            services = [entry for entry in services if entry.get("domain") == domain]
        return to_json(services)

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None
