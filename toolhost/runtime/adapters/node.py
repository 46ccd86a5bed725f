from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from toolhost import config
from toolhost.errors import ModuleFailure
from toolhost.runtime.adapters.types import RuntimeAdapterContext
from toolhost.runtime.capabilities.provider import CapabilityModule
from toolhost.runtime.plugins.defaults import (
    FILESYSTEM_PLUGIN_ID,
    SEARCH_PLUGIN_ID,
    SHELL_PLUGIN_ID,
    register_default_node_tool_plugins,
)
from toolhost.runtime.plugins.registry import PluginFilter, ToolPlugin, ToolPluginContext, ToolPluginRegistry

logger = logging.getLogger("toolhost.runtime")


class NodeRuntimeAdapter:
    """
    Local process with a real filesystem.

    Registers the default on-disk plugin set into `plugins` (keeping ids the caller already
    registered), then instantiates everything tagged `node` or `universal`.
    """

    id = "runtime.node"

    def __init__(
        self,
        plugins: ToolPluginRegistry,
        *,
        include_filesystem: bool = True,
        include_search: bool = True,
        include_shell: bool = True,
        filter: Optional[PluginFilter] = None,
        extra_modules: Optional[Sequence[CapabilityModule]] = None,
    ):
        self.plugins = plugins
        self.include_filesystem = include_filesystem
        self.include_search = include_search
        self.include_shell = include_shell
        self.filter = filter
        self.extra_modules = list(extra_modules or [])
        self.failures: List[ModuleFailure] = []

    def _accept(self, plugin: ToolPlugin) -> bool:
        excluded = set(config.disabled_plugins())
        if not self.include_filesystem:
            excluded.add(FILESYSTEM_PLUGIN_ID)
        if not self.include_search:
            excluded.add(SEARCH_PLUGIN_ID)
        if not self.include_shell:
            excluded.add(SHELL_PLUGIN_ID)
        if plugin.id in excluded:
            return False
        return self.filter is None or self.filter(plugin)

    async def create_capability_modules(self, context: RuntimeAdapterContext) -> List[CapabilityModule]:
        added = register_default_node_tool_plugins(self.plugins)
        if added:
            logger.debug("registered default node plugins: %s", ", ".join(added))
        modules, self.failures = await self.plugins.instantiate_isolated(
            "node",
            ToolPluginContext(working_dir=context.working_dir, env=context.env),
            filter=self._accept,
        )
        modules.extend(self.extra_modules)
        return modules
