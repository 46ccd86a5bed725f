from .bridge import McpToolBridge
from .capability import McpCapabilityModule, create_mcp_tool_plugin
from .config import McpServerConfig, load_mcp_servers

__all__ = ["McpToolBridge", "McpCapabilityModule", "create_mcp_tool_plugin", "McpServerConfig", "load_mcp_servers"]
