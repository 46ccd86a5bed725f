from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Literal, Optional, Protocol

Level = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class ProviderConfig:
    provider: str
    model: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    reasoning_effort: Optional[Level] = None
    text_verbosity: Optional[Level] = None


class LLMProvider(Protocol):
    id: str
    model: str

    def stream_chat(self, *, messages: List[Dict[str, Any]]) -> AsyncIterator[str]:
        ...
