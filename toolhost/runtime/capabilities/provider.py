from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from toolhost.runtime.tools.registry import ToolSuite


@dataclass(frozen=True)
class CapabilityContext:
    """
    Per-session context handed unchanged to every capability module and tool plugin.
    """

    profile: str
    working_dir: str
    env: Mapping[str, Optional[str]] = field(default_factory=dict)
    workspace_context: Optional[str] = None


Disposer = Callable[[], Union[None, Awaitable[None]]]


@dataclass
class CapabilityContribution:
    id: str
    description: str = ""
    tool_suite: Optional[ToolSuite] = None
    tool_suites: Sequence[ToolSuite] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)
    dispose: Optional[Disposer] = None

    def suites(self) -> List[ToolSuite]:
        out: List[ToolSuite] = []
        if self.tool_suite is not None:
            out.append(self.tool_suite)
        out.extend(self.tool_suites or ())
        return out


CreateResult = Union[None, CapabilityContribution, Sequence[Optional[CapabilityContribution]]]


@runtime_checkable
class CapabilityModule(Protocol):
    """
    Unit of contribution to a session.

    Any object with an `id` and a `create(context)` method qualifies. `create` may be sync or
    async and returns None, one contribution, or a list of them. Whoever consumes the
    contribution owns it and must call its `dispose` hook exactly once.
    """

    id: str

    def create(self, context: CapabilityContext) -> Union[CreateResult, Awaitable[CreateResult]]:
        ...


@dataclass
class FunctionCapabilityModule:
    """
    Capability module backed by a plain (sync or async) function of the context.
    """

    id: str
    factory: Callable[[CapabilityContext], Union[CreateResult, Awaitable[CreateResult]]]
    description: str = ""

    def create(self, context: CapabilityContext) -> Union[CreateResult, Awaitable[CreateResult]]:
        return self.factory(context)


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value
