from __future__ import annotations

from typing import List, Optional, Sequence

from toolhost.errors import ModuleFailure
from toolhost.runtime.adapters.types import RuntimeAdapterContext
from toolhost.runtime.capabilities.provider import CapabilityModule


class BrowserRuntimeAdapter:
    """
    In-browser sandbox: nothing on disk, so only the modules the caller injects.
    """

    id = "runtime.browser"

    def __init__(self, modules: Optional[Sequence[CapabilityModule]] = None):
        self.modules = list(modules or [])
        self.failures: List[ModuleFailure] = []

    async def create_capability_modules(self, context: RuntimeAdapterContext) -> List[CapabilityModule]:
        return list(self.modules)
