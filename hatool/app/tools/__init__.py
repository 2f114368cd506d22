"""Tools framework for hatool."""

from .base import BaseTool
from .home_assistant import HomeAssistantTool
from .registry import ToolRegistry

__all__ = ["BaseTool", "HomeAssistantTool", "ToolRegistry"]
