from __future__ import annotations

from typing import Optional

from toolhost.runtime.capabilities.provider import CapabilityContext, CapabilityContribution
from toolhost.runtime.mcp.bridge import ClientFactory, McpToolBridge
from toolhost.runtime.plugins.registry import ToolPlugin


class McpCapabilityModule:
    id = "capability.mcp"
    description = "Model Context Protocol connectors declared via .mcp.json files."

    def __init__(self, *, client_factory: Optional[ClientFactory] = None):
        self.client_factory = client_factory

    async def create(self, context: CapabilityContext) -> Optional[CapabilityContribution]:
        bridge = McpToolBridge(context, client_factory=self.client_factory)
        try:
            suites = await bridge.initialize()
        except BaseException:
            await bridge.dispose()
            raise
        if not suites:
            await bridge.dispose()
            return None
        return CapabilityContribution(
            id="mcp.tools",
            description=self.description,
            tool_suites=suites,
            metadata={"servers": [s.id for s in bridge.servers()]},
            dispose=bridge.dispose,
        )


def create_mcp_tool_plugin(*, client_factory: Optional[ClientFactory] = None) -> ToolPlugin:
    return ToolPlugin(
        id="tool.mcp.bridge",
        description="Tools from MCP servers configured for the workspace.",
        targets=frozenset({"node"}),
        create=lambda _ctx: McpCapabilityModule(client_factory=client_factory),
    )
