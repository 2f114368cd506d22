"""Tool definitions shared with LLM agent frameworks."""

from .types import Tool

__all__ = ["Tool"]
