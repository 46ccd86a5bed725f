from __future__ import annotations

from typing import Callable, List, MutableMapping, Optional

from toolhost.errors import RegistrationError, UnknownEntryError
from toolhost.runtime.llm.provider import LLMProvider, ProviderConfig
from toolhost.runtime.registry import Registry

ProviderFactory = Callable[[ProviderConfig], LLMProvider]


class ProviderRegistry(Registry[ProviderFactory]):
    """
    LLM backend id -> client factory.

    Registering an existing id fails unless `override=True`, so a provider plugin loaded later
    cannot silently shadow a configured backend.
    """

    kind = "provider"

    def __init__(self, store: Optional[MutableMapping[str, ProviderFactory]] = None):
        super().__init__(store, allow_replace=False)

    def register(self, key: str, value: ProviderFactory, *, override: bool = False) -> None:
        if not callable(value):
            raise RegistrationError(f'Provider "{key}" factory must be callable.')
        super().register(key, value, override=override)

    def create(self, config: ProviderConfig) -> LLMProvider:
        factory = self._store.get(self._normalize_key(config.provider))
        if factory is None:
            raise UnknownEntryError(self.kind, config.provider, self._store.keys())
        return factory(config)

    def list(self) -> List[str]:  # type: ignore[override]
        return self.keys()
