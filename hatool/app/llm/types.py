"""Tool definitions exchanged with LLM agent frameworks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class Tool:
    """Definition of a tool available to the LLM."""

    name: str
    description: str
    parameters: dict[str, Any]  # JSON Schema

    def to_anthropic_format(self) -> dict[str, Any]:
        """Convert to Anthropic's tool format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }

    def to_openai_format(self) -> dict[str, Any]:
        """Convert to OpenAI's tool format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }
