from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, MutableMapping, Optional, Sequence, Tuple, Union

from toolhost.errors import ModuleFailure, RegistrationError
from toolhost.runtime.capabilities.provider import CapabilityModule, maybe_await
from toolhost.runtime.registry import Registry

logger = logging.getLogger("toolhost.plugins")

TARGETS = frozenset({"node", "browser", "cloud", "universal"})


@dataclass(frozen=True)
class ToolPluginContext:
    working_dir: str
    env: Mapping[str, Optional[str]] = field(default_factory=dict)


PluginResult = Union[None, CapabilityModule, Sequence[Optional[CapabilityModule]]]
PluginFactory = Callable[[ToolPluginContext], Union[PluginResult, Awaitable[PluginResult]]]
PluginFilter = Callable[["ToolPlugin"], bool]


@dataclass(frozen=True)
class ToolPlugin:
    id: str
    create: PluginFactory
    targets: frozenset = frozenset()
    description: str = ""

    def supports(self, target: str) -> bool:
        return "universal" in self.targets or target in self.targets


def _normalize_targets(targets: Optional[Iterable[str]]) -> frozenset:
    tags = frozenset(str(t).strip().lower() for t in (targets or ()) if str(t).strip())
    unknown = sorted(tags - TARGETS)
    if unknown:
        raise RegistrationError(f"Unknown tool plugin target(s): {', '.join(unknown)}. Allowed: {', '.join(sorted(TARGETS))}.")
    return tags or frozenset({"universal"})


def _normalize_result(result: Any) -> List[CapabilityModule]:
    if result is None:
        return []
    if isinstance(result, (list, tuple)):
        return [m for m in result if m is not None]
    return [result]


class ToolPluginRegistry(Registry[ToolPlugin]):
    """
    Target-tagged factories for capability modules.

    Re-registering an id replaces the previous plugin. Instantiation walks plugins in
    registration order so the resulting module list is reproducible across runs.
    """

    kind = "tool plugin"

    def __init__(self, store: Optional[MutableMapping[str, ToolPlugin]] = None):
        super().__init__(store, allow_replace=True)

    def register(self, plugin: ToolPlugin, *, override: bool = False) -> None:  # type: ignore[override]
        plugin_id = self._normalize_key(getattr(plugin, "id", ""))
        if not plugin_id:
            raise RegistrationError("Tool plugin id cannot be blank.")
        normalized = ToolPlugin(
            id=plugin_id,
            create=plugin.create,
            targets=_normalize_targets(plugin.targets),
            description=plugin.description or "",
        )
        super().register(plugin_id, normalized, override=override)

    def _selected(self, target: str, filter: Optional[PluginFilter]) -> List[ToolPlugin]:
        if target not in TARGETS:
            raise RegistrationError(f"Unknown target: {target}. Allowed: {', '.join(sorted(TARGETS))}.")
        return [p for p in self.list() if p.supports(target) and (filter is None or filter(p))]

    async def instantiate(
        self,
        target: str,
        context: ToolPluginContext,
        filter: Optional[PluginFilter] = None,
    ) -> List[CapabilityModule]:
        """
        Create modules from every plugin matching `target` (or tagged universal).

        Errors raised by a plugin propagate; use `instantiate_isolated` to skip failing plugins.
        """
        modules: List[CapabilityModule] = []
        for plugin in self._selected(target, filter):
            modules.extend(_normalize_result(await maybe_await(plugin.create(context))))
        return modules

    async def instantiate_isolated(
        self,
        target: str,
        context: ToolPluginContext,
        filter: Optional[PluginFilter] = None,
    ) -> Tuple[List[CapabilityModule], List[ModuleFailure]]:
        modules: List[CapabilityModule] = []
        failures: List[ModuleFailure] = []
        for plugin in self._selected(target, filter):
            try:
                result = await maybe_await(plugin.create(context))
            except Exception as e:
                logger.warning("tool plugin %s failed to instantiate: %s", plugin.id, e)
                failures.append(ModuleFailure(module_id=plugin.id, stage="instantiate", error=e))
                continue
            modules.extend(_normalize_result(result))
        return modules, failures
