"""Base class for hatool tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..llm.types import Tool as LLMTool


class BaseTool(ABC):
    """Abstract base class for tools handed to an LLM agent.

    Each tool declares its parameters via JSON Schema and implements an
    execute method returning a string for the LLM.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the tool name used by the LLM to invoke the tool."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Return a description of what the tool does."""
        ...

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """Return the JSON Schema for tool parameters."""
        ...

    @abstractmethod
    async def execute(self, **kwargs: Any) -> str:
        """Execute the tool with the given parameters.

        Args:
            **kwargs: Tool parameters as defined in the schema.

        Returns:
            A string result that will be passed back to the LLM.
        """
        ...

    def to_llm_tool(self) -> LLMTool:
        """Convert to LLM tool format."""
        return LLMTool(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
        )

    async def validate_and_execute(self, **kwargs: Any) -> str:
        """Drop arguments the schema does not declare, then execute.

        Override this method if you need custom validation logic.
        """
        known = self.parameters.get("properties", {})
        accepted = {key: value for key, value in kwargs.items() if key in known}
        return await self.execute(**accepted)
