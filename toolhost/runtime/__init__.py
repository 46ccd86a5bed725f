from .host import CapabilityManifestEntry, UniversalRuntime
from .universal import (
    create_browser_runtime,
    create_cloud_runtime,
    create_node_runtime,
    create_universal_runtime,
)

__all__ = [
    "CapabilityManifestEntry",
    "UniversalRuntime",
    "create_browser_runtime",
    "create_cloud_runtime",
    "create_node_runtime",
    "create_universal_runtime",
]
