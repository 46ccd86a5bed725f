from __future__ import annotations

from typing import Generic, List, MutableMapping, Optional, TypeVar

from toolhost.errors import DuplicateRegistrationError, RegistrationError, UnknownEntryError

T = TypeVar("T")


class Registry(Generic[T]):
    """
    Keyed registry over an injected, process-scoped store.

    Shared by tool plugins, LLM providers and agent profiles. `allow_replace` decides whether
    registering an existing key silently replaces it (last write wins) or requires `override`.
    Build one per process, pass it to whoever registers or looks things up, and `clear()` it
    on shutdown or test teardown.
    """

    kind = "entry"

    def __init__(self, store: Optional[MutableMapping[str, T]] = None, *, allow_replace: bool = False):
        self._store: MutableMapping[str, T] = store if store is not None else {}
        self.allow_replace = allow_replace

    @staticmethod
    def _normalize_key(key: str) -> str:
        return str(key or "").strip()

    def register(self, key: str, value: T, *, override: bool = False) -> None:
        k = self._normalize_key(key)
        if not k:
            raise RegistrationError(f"{self.kind.capitalize()} id cannot be blank.")
        if k in self._store and not (self.allow_replace or override):
            raise DuplicateRegistrationError(self.kind, k)
        self._store[k] = value

    def unregister(self, key: str) -> None:
        self._store.pop(self._normalize_key(key), None)

    def get(self, key: str) -> T:
        k = self._normalize_key(key)
        if k not in self._store:
            raise UnknownEntryError(self.kind, str(key), self._store.keys())
        return self._store[k]

    def has(self, key: str) -> bool:
        return self._normalize_key(key) in self._store

    def keys(self) -> List[str]:
        return list(self._store.keys())

    def list(self) -> List[T]:
        return list(self._store.values())

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __len__(self) -> int:
        return len(self._store)
