from .browser import BrowserRuntimeAdapter
from .node import NodeRuntimeAdapter
from .remote import RemoteEndpoint, RemoteRuntimeAdapter, RemoteToolModule
from .types import RuntimeAdapter, RuntimeAdapterContext

__all__ = [
    "BrowserRuntimeAdapter",
    "NodeRuntimeAdapter",
    "RemoteEndpoint",
    "RemoteRuntimeAdapter",
    "RemoteToolModule",
    "RuntimeAdapter",
    "RuntimeAdapterContext",
]
