from .factory import ProviderFactory, ProviderRegistry
from .provider import LLMProvider, ProviderConfig

__all__ = ["LLMProvider", "ProviderConfig", "ProviderFactory", "ProviderRegistry"]
