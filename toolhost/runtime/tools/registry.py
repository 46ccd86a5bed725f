from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

logger = logging.getLogger("toolhost.runtime")

ToolExecutor = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class ToolDefinition:
    """
    name: OpenAI function name (must be simple, no dots)
    capability: policy capability string (e.g. "shell.run")
    """

    name: str
    capability: str
    description: str
    parameters: Dict[str, Any]  # JSON schema
    executor: ToolExecutor

    def to_openai_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass(frozen=True)
class ToolSuite:
    id: str
    tools: Tuple[ToolDefinition, ...] = ()
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "tools", tuple(self.tools))
        seen: set[str] = set()
        for t in self.tools:
            if t.name in seen:
                raise ValueError(f'Duplicate tool name "{t.name}" in suite "{self.id}"')
            seen.add(t.name)

    def names(self) -> List[str]:
        return [t.name for t in self.tools]


@dataclass
class ToolSet:
    """
    Consolidated, session-wide tool set keyed by contribution id.

    Suite ids are expected to be unique across the session but this is not enforced;
    a collision is logged and both suites are kept.
    """

    _by_contribution: Dict[str, List[ToolSuite]] = field(default_factory=dict)

    def add(self, contribution_id: str, suites: Sequence[ToolSuite]) -> None:
        known = set(self.suite_ids())
        for s in suites:
            if s.id in known:
                logger.warning("tool suite id %s contributed more than once (latest from %s)", s.id, contribution_id)
            known.add(s.id)
        self._by_contribution.setdefault(contribution_id, []).extend(suites)

    def contributions(self) -> List[str]:
        return list(self._by_contribution.keys())

    def suites(self, contribution_id: Optional[str] = None) -> List[ToolSuite]:
        if contribution_id is not None:
            return list(self._by_contribution.get(contribution_id, []))
        out: List[ToolSuite] = []
        for suites in self._by_contribution.values():
            out.extend(suites)
        return out

    def suite_ids(self) -> List[str]:
        return [s.id for s in self.suites()]

    def tools(self) -> List[ToolDefinition]:
        out: List[ToolDefinition] = []
        for s in self.suites():
            out.extend(s.tools)
        return out

    def get(self, name: str) -> ToolDefinition:
        for t in self.tools():
            if t.name == name:
                return t
        raise KeyError(f"Tool not found: {name}")

    def to_openai_tools(self) -> List[Dict[str, Any]]:
        return [t.to_openai_tool() for t in self.tools()]

    def __iter__(self) -> Iterator[ToolSuite]:
        return iter(self.suites())

    def __len__(self) -> int:
        return len(self.suites())
