from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Sequence, Union

from toolhost.runtime.adapters.browser import BrowserRuntimeAdapter
from toolhost.runtime.adapters.node import NodeRuntimeAdapter
from toolhost.runtime.adapters.remote import RemoteEndpoint, RemoteModuleFactory, RemoteRuntimeAdapter
from toolhost.runtime.adapters.types import RuntimeAdapter
from toolhost.runtime.capabilities.provider import CapabilityContext, CapabilityModule, maybe_await
from toolhost.runtime.host import UniversalRuntime
from toolhost.runtime.plugins.registry import PluginFilter, ToolPluginRegistry
from toolhost.runtime.profiles import ProfileRegistry

logger = logging.getLogger("toolhost.runtime")


async def create_universal_runtime(
    adapter: RuntimeAdapter,
    *,
    profile: str,
    working_dir: str,
    workspace_context: Optional[str] = None,
    env: Optional[Mapping[str, Optional[str]]] = None,
    additional_modules: Optional[Sequence[CapabilityModule]] = None,
    profiles: Optional[ProfileRegistry] = None,
) -> UniversalRuntime:
    """
    Composition root: adapter modules + caller modules -> one disposable tool set.

    Profile lookup (when a registry is given) and adapter errors fail fast. Individual plugins and
    modules that fail are skipped and listed in `runtime.failures`.
    """
    if profiles is not None:
        profile = profiles.get(profile).name
    context = CapabilityContext(
        profile=profile,
        working_dir=str(working_dir),
        env=dict(env) if env is not None else dict(os.environ),
        workspace_context=workspace_context,
    )

    runtime = UniversalRuntime(context, adapter_id=getattr(adapter, "id", ""))
    modules = list(await maybe_await(adapter.create_capability_modules(context)))
    runtime.failures.extend(getattr(adapter, "failures", None) or [])
    modules.extend(additional_modules or [])

    try:
        await runtime.load_modules(modules)
    except BaseException:
        await runtime.close()
        raise
    logger.info(
        "runtime %s ready: %d suite(s), %d failure(s)",
        runtime.adapter_id or "custom",
        len(runtime.tools),
        len(runtime.failures),
    )
    return runtime


async def create_node_runtime(
    *,
    plugins: ToolPluginRegistry,
    profile: str,
    working_dir: str,
    workspace_context: Optional[str] = None,
    env: Optional[Mapping[str, Optional[str]]] = None,
    additional_modules: Optional[Sequence[CapabilityModule]] = None,
    profiles: Optional[ProfileRegistry] = None,
    include_filesystem: bool = True,
    include_search: bool = True,
    include_shell: bool = True,
    filter: Optional[PluginFilter] = None,
) -> UniversalRuntime:
    adapter = NodeRuntimeAdapter(
        plugins,
        include_filesystem=include_filesystem,
        include_search=include_search,
        include_shell=include_shell,
        filter=filter,
    )
    return await create_universal_runtime(
        adapter,
        profile=profile,
        working_dir=working_dir,
        workspace_context=workspace_context,
        env=env,
        additional_modules=additional_modules,
        profiles=profiles,
    )


async def create_browser_runtime(
    *,
    profile: str,
    working_dir: str = "/",
    modules: Optional[Sequence[CapabilityModule]] = None,
    workspace_context: Optional[str] = None,
    env: Optional[Mapping[str, Optional[str]]] = None,
    additional_modules: Optional[Sequence[CapabilityModule]] = None,
    profiles: Optional[ProfileRegistry] = None,
) -> UniversalRuntime:
    return await create_universal_runtime(
        BrowserRuntimeAdapter(modules),
        profile=profile,
        working_dir=working_dir,
        workspace_context=workspace_context,
        env=env if env is not None else {},
        additional_modules=additional_modules,
        profiles=profiles,
    )


async def create_cloud_runtime(
    *,
    profile: str,
    working_dir: str,
    modules: Optional[Sequence[Union[CapabilityModule, RemoteModuleFactory]]] = None,
    endpoints: Optional[Sequence[RemoteEndpoint]] = None,
    plugins: Optional[ToolPluginRegistry] = None,
    workspace_context: Optional[str] = None,
    env: Optional[Mapping[str, Optional[str]]] = None,
    additional_modules: Optional[Sequence[CapabilityModule]] = None,
    profiles: Optional[ProfileRegistry] = None,
) -> UniversalRuntime:
    return await create_universal_runtime(
        RemoteRuntimeAdapter(modules, endpoints=endpoints, plugins=plugins),
        profile=profile,
        working_dir=working_dir,
        workspace_context=workspace_context,
        env=env,
        additional_modules=additional_modules,
        profiles=profiles,
    )
