from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from toolhost.runtime.capabilities.provider import CapabilityContext, CapabilityContribution, FunctionCapabilityModule
from toolhost.runtime.mcp.capability import create_mcp_tool_plugin
from toolhost.runtime.plugins.registry import ToolPlugin, ToolPluginContext, ToolPluginRegistry
from toolhost.runtime.tools.filesystem import filesystem_list, filesystem_read, filesystem_write
from toolhost.runtime.tools.registry import ToolDefinition, ToolSuite
from toolhost.runtime.tools.search import fs_glob, fs_grep
from toolhost.runtime.tools.shell import shell_run
from toolhost.runtime.tools.web import web_fetch

FILESYSTEM_PLUGIN_ID = "tool.filesystem.local"
SEARCH_PLUGIN_ID = "tool.search.local"
SHELL_PLUGIN_ID = "tool.shell.local"
WEB_PLUGIN_ID = "tool.web.fetch"
MCP_PLUGIN_ID = "tool.mcp.bridge"


def _root(context: CapabilityContext) -> Path:
    return Path(context.working_dir).resolve()


def _filesystem_suite(context: CapabilityContext) -> CapabilityContribution:
    root = _root(context)

    async def _fs_read(args: Dict[str, Any]) -> Any:
        return await filesystem_read(root, str(args.get("path", "")))

    async def _fs_list(args: Dict[str, Any]) -> Any:
        return await filesystem_list(root, str(args.get("path", ".")))

    async def _fs_write(args: Dict[str, Any]) -> Any:
        return await filesystem_write(
            root,
            str(args.get("path", "")),
            str(args.get("content", "")),
            append=bool(args.get("append", False)),
            create_parents=bool(args.get("create_parents", True)),
        )

    suite = ToolSuite(
        id="filesystem",
        description="Read, list and write files inside the workspace.",
        tools=(
            ToolDefinition(
                name="filesystem_read",
                capability="filesystem.read",
                description="Read a text file within the workspace.",
                parameters={
                    "type": "object",
                    "properties": {"path": {"type": "string", "description": "Path to file"}},
                    "required": ["path"],
                },
                executor=_fs_read,
            ),
            ToolDefinition(
                name="filesystem_list",
                capability="filesystem.list",
                description="List a directory within the workspace.",
                parameters={
                    "type": "object",
                    "properties": {"path": {"type": "string", "description": "Path to directory", "default": "."}},
                },
                executor=_fs_list,
            ),
            ToolDefinition(
                name="filesystem_write",
                capability="filesystem.write",
                description="Write/overwrite a full text file within the workspace.",
                parameters={
                    "type": "object",
                    "properties": {
                        "path": {"type": "string", "description": "Path to file"},
                        "content": {"type": "string", "description": "Full file content to write"},
                        "append": {"type": "boolean", "description": "Append instead of overwrite", "default": False},
                        "create_parents": {"type": "boolean", "description": "Create parent dirs", "default": True},
                    },
                    "required": ["path", "content"],
                },
                executor=_fs_write,
            ),
        ),
    )
    return CapabilityContribution(id="filesystem.local", description=suite.description, tool_suite=suite)


def _search_suite(context: CapabilityContext) -> CapabilityContribution:
    root = _root(context)

    async def _glob(args: Dict[str, Any]) -> Any:
        return await fs_glob(
            root,
            pattern=str(args.get("pattern", "")),
            base_dir=str(args.get("base_dir", ".")),
            limit=int(args.get("limit", 200) or 200),
        )

    async def _grep(args: Dict[str, Any]) -> Any:
        return await fs_grep(
            root,
            query=str(args.get("query", "")),
            base_dir=str(args.get("base_dir", ".")),
            limit=int(args.get("limit", 50) or 50),
        )

    suite = ToolSuite(
        id="search",
        description="Find files and text inside the workspace.",
        tools=(
            ToolDefinition(
                name="fs_glob",
                capability="filesystem.glob",
                description="Find files by glob pattern under the workspace.",
                parameters={
                    "type": "object",
                    "properties": {
                        "pattern": {"type": "string", "description": "Glob pattern like **/*.py"},
                        "base_dir": {"type": "string", "description": "Base directory", "default": "."},
                        "limit": {"type": "integer", "description": "Max matches", "default": 200},
                    },
                    "required": ["pattern"],
                },
                executor=_glob,
            ),
            ToolDefinition(
                name="fs_grep",
                capability="filesystem.grep",
                description="Search for text under the workspace.",
                parameters={
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "description": "Substring query"},
                        "base_dir": {"type": "string", "description": "Base directory", "default": "."},
                        "limit": {"type": "integer", "description": "Max results", "default": 50},
                    },
                    "required": ["query"],
                },
                executor=_grep,
            ),
        ),
    )
    return CapabilityContribution(id="search.local", description=suite.description, tool_suite=suite)


def _shell_suite(context: CapabilityContext) -> CapabilityContribution:
    cwd = str(_root(context))
    env = {k: v for k, v in context.env.items() if v is not None}

    async def _run(args: Dict[str, Any]) -> Any:
        return await shell_run(
            str(args.get("command", "")),
            cwd=cwd,
            env=env,
            timeout_s=float(args.get("timeout_s", 60) or 60),
        )

    suite = ToolSuite(
        id="shell",
        description="Run shell commands in the workspace.",
        tools=(
            ToolDefinition(
                name="shell_run",
                capability="shell.run",
                description="Run a shell command in the workspace directory.",
                parameters={
                    "type": "object",
                    "properties": {
                        "command": {"type": "string", "description": "Shell command to run"},
                        "timeout_s": {"type": "number", "description": "Timeout in seconds", "default": 60},
                    },
                    "required": ["command"],
                },
                executor=_run,
            ),
        ),
    )
    return CapabilityContribution(id="shell.local", description=suite.description, tool_suite=suite)


def _web_suite(context: CapabilityContext) -> CapabilityContribution:
    async def _fetch(args: Dict[str, Any]) -> Any:
        return await web_fetch(
            str(args.get("url", "")),
            max_bytes=int(args.get("max_bytes", 1_000_000) or 1_000_000),
            timeout_s=float(args.get("timeout_s", 15.0) or 15.0),
        )

    suite = ToolSuite(
        id="web",
        description="Fetch web pages over HTTP(S).",
        tools=(
            ToolDefinition(
                name="web_fetch",
                capability="web.fetch",
                description="Fetch a URL (GET) and return text content.",
                parameters={
                    "type": "object",
                    "properties": {
                        "url": {"type": "string", "description": "http(s) URL"},
                        "max_bytes": {"type": "integer", "description": "Max bytes to read", "default": 1000000},
                        "timeout_s": {"type": "number", "description": "Request timeout seconds", "default": 15},
                    },
                    "required": ["url"],
                },
                executor=_fetch,
            ),
        ),
    )
    return CapabilityContribution(id="web.fetch", description=suite.description, tool_suite=suite)


def _module_plugin(plugin_id: str, module_id: str, description: str, targets: set, build: Callable) -> ToolPlugin:
    def create(ctx: ToolPluginContext) -> Optional[FunctionCapabilityModule]:
        if not os.path.isdir(ctx.working_dir):
            return None
        return FunctionCapabilityModule(id=module_id, factory=build, description=description)

    return ToolPlugin(id=plugin_id, description=description, targets=frozenset(targets), create=create)


def default_node_tool_plugins() -> List[ToolPlugin]:
    return [
        _module_plugin(FILESYSTEM_PLUGIN_ID, "capability.filesystem", "Local filesystem access.", {"node"}, _filesystem_suite),
        _module_plugin(SEARCH_PLUGIN_ID, "capability.search", "Glob and grep over the workspace.", {"node"}, _search_suite),
        _module_plugin(SHELL_PLUGIN_ID, "capability.shell", "Local shell execution.", {"node"}, _shell_suite),
        ToolPlugin(
            id=WEB_PLUGIN_ID,
            description="HTTP(S) fetch.",
            targets=frozenset({"node", "cloud"}),
            create=lambda _ctx: FunctionCapabilityModule(id="capability.web", factory=_web_suite, description="HTTP(S) fetch."),
        ),
        create_mcp_tool_plugin(),
    ]


def register_default_node_tool_plugins(registry: ToolPluginRegistry) -> List[str]:
    """
    Register the on-disk default plugin set. Ids already present are left alone so callers can
    pre-register replacements. Returns the ids that were added.
    """
    added: List[str] = []
    for plugin in default_node_tool_plugins():
        if registry.has(plugin.id):
            continue
        registry.register(plugin)
        added.append(plugin.id)
    return added
