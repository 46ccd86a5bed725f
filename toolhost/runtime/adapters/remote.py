from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Union

from toolhost.errors import ModuleFailure
from toolhost.runtime.adapters.types import RuntimeAdapterContext
from toolhost.runtime.capabilities.provider import CapabilityContext, CapabilityContribution, CapabilityModule, maybe_await
from toolhost.runtime.mcp.bridge import build_tool_suite
from toolhost.runtime.mcp.config import sanitize_id
from toolhost.runtime.mcp.http_client import MCPStreamableHttpClient
from toolhost.runtime.plugins.registry import ToolPluginContext, ToolPluginRegistry

logger = logging.getLogger("toolhost.runtime")

RemoteModuleFactory = Callable[[RuntimeAdapterContext], Union[CapabilityModule, Awaitable[CapabilityModule]]]


@dataclass(frozen=True)
class RemoteEndpoint:
    """
    A remote execution surface reachable over MCP Streamable HTTP.
    """

    id: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    description: str = ""


class RemoteToolModule:
    """
    Attaches to a remote endpoint and exposes its advertised tools as one suite.
    """

    def __init__(self, endpoint: RemoteEndpoint, *, timeout_s: float = 30.0):
        self.endpoint = endpoint
        self.timeout_s = timeout_s
        self.id = f"capability.remote.{sanitize_id(endpoint.id)}"

    async def create(self, context: CapabilityContext) -> Optional[CapabilityContribution]:
        server_id = sanitize_id(self.endpoint.id)
        client = MCPStreamableHttpClient(base_url=self.endpoint.url, headers=self.endpoint.headers, timeout_s=self.timeout_s)
        description = self.endpoint.description or f"Remote tools at {self.endpoint.url}"
        try:
            tools = await client.list_tools()
            suite = build_tool_suite(f"remote.{server_id}", server_id, description, client, tools) if tools else None
        except BaseException:
            await client.close()
            raise
        if suite is None:
            await client.close()
            return None
        return CapabilityContribution(
            id=f"remote.{server_id}",
            description=description,
            tool_suite=suite,
            metadata={"url": self.endpoint.url},
            dispose=client.close,
        )


class RemoteRuntimeAdapter:
    """
    Cloud/remote executor.

    `modules` may hold modules or (async) factories of the adapter context. Each endpoint
    becomes a RemoteToolModule. With a plugin registry, plugins tagged `cloud` are added too.
    """

    id = "runtime.remote"

    def __init__(
        self,
        modules: Optional[Sequence[Union[CapabilityModule, RemoteModuleFactory]]] = None,
        *,
        endpoints: Optional[Sequence[RemoteEndpoint]] = None,
        plugins: Optional[ToolPluginRegistry] = None,
    ):
        self.modules = list(modules or [])
        self.endpoints = list(endpoints or [])
        self.plugins = plugins
        self.failures: List[ModuleFailure] = []

    async def create_capability_modules(self, context: RuntimeAdapterContext) -> List[CapabilityModule]:
        self.failures = []
        modules: List[CapabilityModule] = []
        for entry in self.modules:
            if hasattr(entry, "create"):
                modules.append(entry)  # type: ignore[arg-type]
                continue
            try:
                modules.append(await maybe_await(entry(context)))  # type: ignore[operator]
            except Exception as e:
                name = getattr(entry, "__name__", repr(entry))
                logger.warning("remote module factory %s failed: %s", name, e)
                self.failures.append(ModuleFailure(module_id=name, stage="instantiate", error=e))
        modules.extend(RemoteToolModule(ep) for ep in self.endpoints)
        if self.plugins is not None:
            extra, failures = await self.plugins.instantiate_isolated(
                "cloud", ToolPluginContext(working_dir=context.working_dir, env=context.env)
            )
            modules.extend(extra)
            self.failures.extend(failures)
        return modules
