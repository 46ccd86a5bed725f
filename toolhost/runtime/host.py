from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from toolhost.errors import ModuleFailure
from toolhost.runtime.capabilities.provider import (
    CapabilityContext,
    CapabilityContribution,
    CapabilityModule,
    Disposer,
    maybe_await,
)
from toolhost.runtime.tools.registry import ToolSet

logger = logging.getLogger("toolhost.runtime")


@dataclass(frozen=True)
class CapabilityManifestEntry:
    id: str
    module_id: str
    description: str = ""
    suites: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)


def _contributions(result: Any) -> List[CapabilityContribution]:
    if result is None:
        return []
    if isinstance(result, (list, tuple)):
        return [c for c in result if c is not None]
    return [result]


def _validate(contribution: Any, module_id: str) -> CapabilityContribution:
    if not isinstance(contribution, CapabilityContribution):
        raise TypeError(f'Capability module "{module_id}" returned {type(contribution).__name__}, not a CapabilityContribution.')
    if not str(contribution.id or "").strip():
        raise ValueError(f'Capability module "{module_id}" emitted a contribution without an id.')
    for suite in contribution.suites():
        if not str(suite.id or "").strip():
            raise ValueError(f'Capability contribution "{contribution.id}" from module "{module_id}" emitted a tool suite without an id.')
    return contribution


class UniversalRuntime:
    """
    One session's consolidated tool set plus the disposal hooks of everything that built it.

    Create with `create_universal_runtime()` (or `load_modules()` on a fresh instance), use
    `tools`, then `close()` once. Also usable as `async with`.
    """

    def __init__(self, context: CapabilityContext, *, adapter_id: str = ""):
        self.context = context
        self.adapter_id = adapter_id
        self.tools = ToolSet()
        self.contributions: List[CapabilityContribution] = []
        self.failures: List[ModuleFailure] = []
        self._owners: Dict[str, str] = {}
        self._disposers: List[Tuple[str, Disposer]] = []
        self._closed = False

    async def load_modules(self, modules: Sequence[CapabilityModule]) -> None:
        """
        Create each module in order. A module that raises (or returns something invalid) is
        logged, recorded in `failures`, and left out; the rest still load.
        """
        for module in modules:
            await self.load_module(module)

    async def load_module(self, module: CapabilityModule) -> None:
        if self._closed:
            raise RuntimeError("Cannot load capability modules into a closed runtime.")
        module_id = str(getattr(module, "id", "") or type(module).__name__)
        try:
            created = _contributions(await maybe_await(module.create(self.context)))
        except Exception as e:
            logger.warning("capability module %s failed: %s", module_id, e)
            self.failures.append(ModuleFailure(module_id=module_id, stage="create", error=e))
            return

        accepted: List[CapabilityContribution] = []
        for contribution in created:
            try:
                accepted.append(_validate(contribution, module_id))
            except (TypeError, ValueError) as e:
                logger.warning("capability module %s: %s", module_id, e)
                self.failures.append(ModuleFailure(module_id=module_id, stage="create", error=e))
                # Still own whatever resources the invalid contribution holds.
                if callable(getattr(contribution, "dispose", None)):
                    self._disposers.append((module_id, contribution.dispose))

        for contribution in accepted:
            self.contributions.append(contribution)
            self._owners[contribution.id] = module_id
            self.tools.add(contribution.id, contribution.suites())
            if contribution.dispose is not None:
                self._disposers.append((contribution.id, contribution.dispose))
        if accepted:
            logger.info("capability module %s contributed %s", module_id, ", ".join(c.id for c in accepted))

    def describe_capabilities(self) -> List[CapabilityManifestEntry]:
        return [
            CapabilityManifestEntry(
                id=c.id,
                module_id=self._owners.get(c.id, "unknown"),
                description=c.description,
                suites=tuple(s.id for s in c.suites()),
                metadata=dict(c.metadata or {}),
            )
            for c in self.contributions
        ]

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> List[ModuleFailure]:
        """
        Run every captured dispose hook exactly once, newest first. Failures never propagate:
        they are logged together after all hooks ran and returned.
        """
        if self._closed:
            return []
        self._closed = True
        hooks, self._disposers = self._disposers, []
        failures: List[ModuleFailure] = []
        for owner, dispose in reversed(hooks):
            try:
                await maybe_await(dispose())
            except Exception as e:
                failures.append(ModuleFailure(module_id=owner, stage="dispose", error=e))
        if failures:
            logger.error(
                "%d disposal hook(s) failed: %s",
                len(failures),
                "; ".join(f.describe() for f in failures),
            )
        return failures

    async def __aenter__(self) -> "UniversalRuntime":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
