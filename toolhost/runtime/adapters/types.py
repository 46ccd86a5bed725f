from __future__ import annotations

from typing import Awaitable, List, Protocol, Union

from toolhost.errors import ModuleFailure
from toolhost.runtime.capabilities.provider import CapabilityContext, CapabilityModule

# The adapter sees the same per-session context the modules do.
RuntimeAdapterContext = CapabilityContext


class RuntimeAdapter(Protocol):
    """
    Host-specific strategy that supplies the baseline capability modules for a session.

    `failures` holds plugins the adapter skipped while building its list.
    """

    id: str
    failures: List[ModuleFailure]

    def create_capability_modules(
        self, context: RuntimeAdapterContext
    ) -> Union[List[CapabilityModule], Awaitable[List[CapabilityModule]]]:
        ...
