"""
MCP bridge against a real stdio server subprocess.
"""
import pytest

from toolhost.runtime.capabilities.provider import CapabilityContext
from toolhost.runtime.mcp.bridge import McpToolBridge, tool_name
from toolhost.runtime.mcp.capability import McpCapabilityModule, create_mcp_tool_plugin

from helpers import write_mcp_config


def _context(workspace):
    return CapabilityContext(profile="general", working_dir=str(workspace), env={})


def _server(python_executable, script, *extra):
    return {"command": python_executable, "args": [str(script), *extra]}


@pytest.mark.asyncio
async def test_bridge_surfaces_and_calls_tools(workspace, mcp_server_script, python_executable):
    write_mcp_config(workspace, {"mcpServers": {"fake": _server(python_executable, mcp_server_script)}})
    bridge = McpToolBridge(_context(workspace))
    try:
        suites = await bridge.initialize()
        assert [s.id for s in suites] == ["mcp.fake"]
        assert suites[0].names() == ["mcp__fake__echo", "mcp__fake__add"]

        echo = suites[0].tools[0]
        assert echo.description == "[fake] Echo text back"
        assert await echo.executor({"text": "hello"}) == "hello"

        add = suites[0].tools[1]
        assert add.description == 'MCP tool "add" from fake'
        assert '"sum": 5' in await add.executor({"a": 2, "b": 3})
    finally:
        await bridge.dispose()
    assert bridge.initialized is False
    assert bridge.servers() == []


@pytest.mark.asyncio
async def test_failing_server_does_not_block_others(workspace, mcp_server_script, python_executable):
    write_mcp_config(
        workspace,
        {
            "crashy": _server(python_executable, mcp_server_script, "--crash"),
            "missing": {"command": "definitely-not-a-real-binary-xyz"},
            "good": _server(python_executable, mcp_server_script),
        },
    )
    bridge = McpToolBridge(_context(workspace))
    try:
        suites = await bridge.initialize()
        assert [s.id for s in suites] == ["mcp.good"]
        assert [s.id for s in bridge.servers()] == ["good"]
    finally:
        await bridge.dispose()


@pytest.mark.asyncio
async def test_module_returns_nothing_without_tools(workspace, mcp_server_script, python_executable):
    write_mcp_config(workspace, {"empty": _server(python_executable, mcp_server_script, "--no-tools")})
    assert await McpCapabilityModule().create(_context(workspace)) is None


@pytest.mark.asyncio
async def test_module_returns_nothing_without_config(workspace):
    assert await McpCapabilityModule().create(_context(workspace)) is None


class FakeClient:
    def __init__(self, tools):
        self.tools = tools
        self.closed = 0

    async def start(self):
        pass

    async def list_tools(self):
        return self.tools

    async def call_tool(self, name, arguments):
        return {"content": []}

    async def close(self):
        self.closed += 1


@pytest.mark.asyncio
async def test_contribution_dispose_is_idempotent(workspace):
    from toolhost.runtime.mcp.types import MCPTool

    write_mcp_config(workspace, {"a": {"command": "unused"}})
    clients = []

    def factory(server, working_dir):
        clients.append(FakeClient([MCPTool(name="ping")]))
        return clients[-1]

    contribution = await McpCapabilityModule(client_factory=factory).create(_context(workspace))
    assert contribution.id == "mcp.tools"
    assert contribution.metadata == {"servers": ["a"]}
    assert await contribution.suites()[0].tools[0].executor({}) == "MCP tool completed without returning content."

    await contribution.dispose()
    await contribution.dispose()
    assert clients[0].closed == 1


@pytest.mark.asyncio
async def test_reinitialize_closes_previous_clients(workspace):
    from toolhost.runtime.mcp.types import MCPTool

    write_mcp_config(workspace, {"a": {"command": "unused"}})
    clients = []

    def factory(server, working_dir):
        clients.append(FakeClient([MCPTool(name="ping")]))
        return clients[-1]

    bridge = McpToolBridge(_context(workspace), client_factory=factory)
    await bridge.initialize()
    await bridge.initialize()
    assert [c.closed for c in clients] == [1, 0]
    await bridge.dispose()
    assert [c.closed for c in clients] == [1, 1]


def test_tool_names_are_sanitized():
    assert tool_name("my.server", "read file") == "mcp__my_server__read_file"


def test_mcp_plugin_is_node_only():
    plugin = create_mcp_tool_plugin()
    assert plugin.supports("node")
    assert not plugin.supports("browser")
    assert not plugin.supports("cloud")


@pytest.mark.asyncio
async def test_server_with_colliding_tool_names_is_skipped(workspace):
    from toolhost.runtime.mcp.types import MCPTool

    write_mcp_config(workspace, {"good": {"command": "unused"}, "dup": {"command": "unused"}})
    clients = {}

    def factory(server, working_dir):
        if server.id == "dup":
            tools = [MCPTool(name="read.file"), MCPTool(name="read_file")]
        else:
            tools = [MCPTool(name="ping")]
        clients[server.id] = FakeClient(tools)
        return clients[server.id]

    bridge = McpToolBridge(_context(workspace), client_factory=factory)
    suites = await bridge.initialize()
    assert [s.id for s in suites] == ["mcp.good"]
    assert [s.id for s in bridge.servers()] == ["good"]
    assert clients["dup"].closed == 1

    await bridge.dispose()
    assert clients["good"].closed == 1
