from .registry import TARGETS, ToolPlugin, ToolPluginContext, ToolPluginRegistry

__all__ = ["TARGETS", "ToolPlugin", "ToolPluginContext", "ToolPluginRegistry"]
