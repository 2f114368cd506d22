"""Tests for the tool registry."""

from __future__ import annotations

import pytest

from hatool.app.tools.registry import ToolNotFoundError, ToolRegistry


class TestToolRegistry:
    """Tests for ToolRegistry class."""

    def test_register_tool(self, make_tool) -> None:
        """Test registering a tool."""
        registry = ToolRegistry()

        registry.register(make_tool(name="test_tool"))

        assert "test_tool" in registry
        assert len(registry) == 1

    def test_get_tool(self, make_tool) -> None:
        """Test getting a registered tool."""
        registry = ToolRegistry()
        tool = make_tool(name="test_tool")
        registry.register(tool)

        assert registry.get("test_tool") is tool

    def test_get_tool_not_found(self) -> None:
        """Test getting a non-existent tool."""
        registry = ToolRegistry()

        with pytest.raises(ToolNotFoundError):
            registry.get("nonexistent")

    def test_has_tool(self, tool_registry: ToolRegistry) -> None:
        """Test checking if a tool exists."""
        assert tool_registry.has("mock_tool") is True
        assert tool_registry.has("nonexistent") is False

    def test_unregister_tool(self, tool_registry: ToolRegistry) -> None:
        """Test unregistering a tool."""
        tool_registry.unregister("mock_tool")

        assert "mock_tool" not in tool_registry
        assert len(tool_registry) == 0

    def test_tool_names(self, make_tool) -> None:
        """Test getting tool names."""
        registry = ToolRegistry()
        registry.register(make_tool(name="tool1"))
        registry.register(make_tool(name="tool2"))

        assert registry.tool_names == ["tool1", "tool2"]

    def test_get_llm_tools(self, make_tool) -> None:
        """Test getting tools in LLM format."""
        registry = ToolRegistry()
        registry.register(make_tool(name="test_tool", description="A test tool"))

        llm_tools = registry.get_llm_tools()

        assert len(llm_tools) == 1
        assert llm_tools[0].name == "test_tool"
        assert llm_tools[0].description == "A test tool"

    @pytest.mark.asyncio
    async def test_execute_tool(self, make_tool) -> None:
        """Test executing a tool."""
        registry = ToolRegistry()
        tool = make_tool(name="test_tool", result="Success!")
        registry.register(tool)

        result = await registry.execute("test_tool", query="test query")

        assert result == "Success!"
        assert tool.calls == [{"query": "test query"}]

    @pytest.mark.asyncio
    async def test_execute_drops_undeclared_arguments(self, make_tool) -> None:
        """Test arguments outside the schema are not passed to the tool."""
        registry = ToolRegistry()
        tool = make_tool(name="test_tool")
        registry.register(tool)

        await registry.execute("test_tool", query="q", bogus=1)

        assert tool.calls == [{"query": "q"}]

    @pytest.mark.asyncio
    async def test_execute_failure_returns_error(self, make_tool) -> None:
        """Test a failing tool is reported as an error string."""
        registry = ToolRegistry()
        registry.register(make_tool(name="test_tool", error=RuntimeError("boom")))

        result = await registry.execute("test_tool", query="q")

        assert result == "Error executing test_tool: boom"

    @pytest.mark.asyncio
    async def test_execute_unknown_tool(self) -> None:
        """Test executing an unknown tool."""
        registry = ToolRegistry()

        with pytest.raises(ToolNotFoundError):
            await registry.execute("nonexistent", query="test")
