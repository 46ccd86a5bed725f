from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


class ToolhostError(RuntimeError):
    pass


class ConfigurationError(ToolhostError):
    """
    Programmer/config mistakes. Raised immediately, never retried.
    """


class RegistrationError(ConfigurationError):
    pass


class DuplicateRegistrationError(RegistrationError):
    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f'{kind.capitalize()} "{key}" is already registered.')


class UnknownEntryError(ConfigurationError):
    def __init__(self, kind: str, key: str, known: Iterable[str]):
        self.kind = kind
        self.key = key
        self.known = sorted(known)
        listing = ", ".join(self.known) or "none"
        super().__init__(f'{kind.capitalize()} "{key}" is not registered. Registered {kind}s: {listing}.')


class McpError(ToolhostError):
    pass


class McpConfigError(McpError):
    pass


@dataclass(frozen=True)
class ModuleFailure:
    """
    stage: "instantiate" (tool plugin), "create" (capability module) or "dispose"
    """

    module_id: str
    stage: str
    error: BaseException

    def describe(self) -> str:
        return f"{self.module_id} ({self.stage}): {self.error}"
