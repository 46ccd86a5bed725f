from .registry import ToolDefinition, ToolExecutor, ToolSet, ToolSuite

__all__ = ["ToolDefinition", "ToolExecutor", "ToolSet", "ToolSuite"]
