"""hatool - Home Assistant as a tool for LLM agents.

Builds the tool registry from configuration and offers a one-shot
command line entry point for running a single tool command.
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Mapping, Sequence
from typing import Any

from .config import HomeAssistantToolConfig, load_config
from .ha.api import HomeAssistantAPI
from .tools.home_assistant import HomeAssistantTool
from .tools.registry import ToolRegistry
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


class HomeAssistantToolkit:
    """The Home Assistant tool wired to its REST client and a registry."""

    def __init__(self, config: HomeAssistantToolConfig | None = None) -> None:
        """Initialize the toolkit.

        Args:
            config: Loaded configuration. Read from the environment if None.
        """
        self._config = config or load_config()
        if not self._config.api_url:
            logger.warning("No Home Assistant URL configured (HA_API_URL)")

        self._ha_api = HomeAssistantAPI(
            self._config.api_url,
            self._config.api_key.get_secret_value(),
        )
        self._tool = HomeAssistantTool.from_config(self._ha_api, self._config)
        self._tool_registry = ToolRegistry()
        self._tool_registry.register(self._tool)

    @property
    def registry(self) -> ToolRegistry:
        """Get the tool registry."""
        return self._tool_registry

    @property
    def tool(self) -> HomeAssistantTool:
        """Get the Home Assistant tool."""
        return self._tool

    async def run(self, command: str, **kwargs: Any) -> str:
        """Run one tool command through the registry."""
        return await self._tool_registry.execute(self._tool.name, command=command, **kwargs)

    async def close(self) -> None:
        """Release the HTTP session."""
        await self._ha_api.close()


def parse_arguments(argv: Sequence[str]) -> tuple[str, dict[str, Any]]:
    """Parse ``<command> [key=value ...]`` arguments.

    The ``data`` value is decoded as JSON.
    """
    if not argv:
        raise ValueError("usage: hatool <command> [domain=..] [entity=..] [service=..] [data=<json>]")

    command, *pairs = argv
    kwargs: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got: {pair}")
        kwargs[key] = json.loads(value) if key == "data" else value
    return command, kwargs


async def run_once(argv: Sequence[str], config: HomeAssistantToolConfig | None = None) -> str:
    """Run a single command against the configured Home Assistant."""
    command, kwargs = parse_arguments(argv)
    toolkit = HomeAssistantToolkit(config)
    try:
        return await toolkit.run(command, **kwargs)
    finally:
        await toolkit.close()


def main(argv: Sequence[str] | None = None, env: Mapping[str, str] | None = None) -> None:
    """Main entry point."""
    try:
        config = load_config(env)
    except ValueError as e:
        print(e, file=sys.stderr)
        sys.exit(2)

    setup_logging(config.log_level)

    try:
        result = asyncio.run(run_once(sys.argv[1:] if argv is None else argv, config))
    except ValueError as e:
        print(e, file=sys.stderr)
        sys.exit(2)

    print(result)


if __name__ == "__main__":
    main()
