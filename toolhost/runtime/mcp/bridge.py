from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol

from toolhost import config
from toolhost.runtime.capabilities.provider import CapabilityContext
from toolhost.runtime.mcp.config import McpServerConfig, load_mcp_servers
from toolhost.runtime.mcp.http_client import MCPStreamableHttpClient
from toolhost.runtime.mcp.stdio_client import McpStdioClient
from toolhost.runtime.mcp.types import MCPTool, format_tool_result
from toolhost.runtime.tools.registry import ToolDefinition, ToolSuite

logger = logging.getLogger("toolhost.mcp")


class McpClient(Protocol):
    async def start(self) -> None: ...

    async def list_tools(self) -> List[MCPTool]: ...

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any: ...

    async def close(self) -> None: ...


ClientFactory = Callable[[McpServerConfig, str], McpClient]


def default_client_factory(server: McpServerConfig, working_dir: str) -> McpClient:
    timeout_s = config.mcp_request_timeout_s()
    if server.transport == "http":
        return MCPStreamableHttpClient(base_url=server.url, headers=server.headers, timeout_s=timeout_s)
    return McpStdioClient(server, working_dir=working_dir, timeout_s=timeout_s)


def tool_name(server_id: str, name: str) -> str:
    safe_server = re.sub(r"[^a-zA-Z0-9_-]", "_", server_id)
    safe_tool = re.sub(r"[^a-zA-Z0-9_-]", "_", name)
    return f"mcp__{safe_server}__{safe_tool}"


def build_tool_suite(suite_id: str, server_id: str, description: str, client: McpClient, tools: List[MCPTool]) -> ToolSuite:
    def definition(tool: MCPTool) -> ToolDefinition:
        async def _call(args: Dict[str, Any]) -> Any:
            return format_tool_result(await client.call_tool(tool.name, args or {}))

        return ToolDefinition(
            name=tool_name(server_id, tool.name),
            capability=f"mcp.{server_id}",
            description=f"[{server_id}] {tool.description}" if tool.description else f'MCP tool "{tool.name}" from {server_id}',
            parameters=tool.input_schema or {"type": "object", "additionalProperties": True, "properties": {}},
            executor=_call,
        )

    return ToolSuite(id=suite_id, description=description, tools=tuple(definition(t) for t in tools))


@dataclass
class _LiveServer:
    server: McpServerConfig
    client: McpClient


class McpToolBridge:
    """
    Surfaces tools from MCP servers declared in workspace config.

    uninitialized --initialize()--> initialized --dispose()--> uninitialized

    Descriptors are re-read on every initialize(). One server failing to start, failing the
    handshake, or advertising no tools is logged and skipped; the others still contribute.
    """

    def __init__(self, context: CapabilityContext, *, client_factory: Optional[ClientFactory] = None):
        self.context = context
        self.client_factory = client_factory or default_client_factory
        self._servers: List[_LiveServer] = []
        self.initialized = False

    async def initialize(self) -> List[ToolSuite]:
        if self.initialized:
            await self.dispose()
        self.initialized = True
        servers = load_mcp_servers(working_dir=self.context.working_dir, env=self.context.env)
        suites: List[ToolSuite] = []
        for server in servers:
            client: Optional[McpClient] = None
            try:
                client = self.client_factory(server, self.context.working_dir)
                await client.start()
                tools = await client.list_tools()
                suite = None
                if tools:
                    suite = build_tool_suite(f"mcp.{server.id}", server.id, f"MCP server at {server.label()}", client, tools)
            except Exception as e:
                logger.warning("failed to load MCP server %s (%s): %s", server.id, server.source, e)
                if client is not None:
                    await self._close_quietly(server.id, client)
                continue
            if suite is None:
                logger.info("MCP server %s advertised no tools", server.id)
                await self._close_quietly(server.id, client)
                continue
            self._servers.append(_LiveServer(server=server, client=client))
            suites.append(suite)
            logger.info("MCP server %s ready with %d tool(s)", server.id, len(tools))
        return suites

    def servers(self) -> List[McpServerConfig]:
        return [s.server for s in self._servers]

    async def dispose(self) -> None:
        live, self._servers = self._servers, []
        for entry in live:
            await self._close_quietly(entry.server.id, entry.client)
        self.initialized = False

    @staticmethod
    async def _close_quietly(server_id: str, client: McpClient) -> None:
        try:
            await client.close()
        except Exception as e:
            logger.debug("closing MCP server %s: %s", server_id, e)
