from __future__ import annotations

import json
from typing import Any, AsyncIterator, Dict, List, Optional


class OpenAIChatCompletionsProvider:
    """
    Streaming chat provider using OpenAI's Chat Completions API.

    Also serves OpenAI-compatible backends (DeepSeek, xAI) through `base_url`.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        provider_id: str = "openai",
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        reasoning_effort: Optional[str] = None,
        text_verbosity: Optional[str] = None,
    ):
        self.id = provider_id
        self.model = model
        self.base_url = base_url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.reasoning_effort = reasoning_effort
        self.text_verbosity = text_verbosity

        # Import lazily so non-LLM paths (tests, tools-only) don't require openai installed.
        from openai import AsyncOpenAI  # type: ignore

        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url)

    def _params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"model": self.model}
        if self.temperature is not None:
            params["temperature"] = self.temperature
        if self.max_tokens is not None:
            params["max_tokens"] = self.max_tokens
        if self.reasoning_effort is not None:
            params["reasoning_effort"] = self.reasoning_effort
        if self.text_verbosity is not None:
            params["verbosity"] = self.text_verbosity
        return params

    async def stream_chat(self, *, messages: List[Dict[str, Any]]) -> AsyncIterator[str]:
        stream = await self._client.chat.completions.create(messages=messages, stream=True, **self._params())
        async for chunk in stream:
            if not getattr(chunk, "choices", None):
                continue
            content = getattr(chunk.choices[0].delta, "content", None)
            if content:
                yield content

    async def stream_chat_chunks(
        self,
        *,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> AsyncIterator[Any]:
        """
        Yield raw chunks (used for tool-calling accumulation).
        """
        stream = await self._client.chat.completions.create(messages=messages, tools=tools or None, stream=True, **self._params())
        async for chunk in stream:
            yield chunk

    async def chat_json(self, *, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        resp = await self._client.chat.completions.create(
            messages=messages,
            response_format={"type": "json_object"},
            **self._params(),
        )
        content = resp.choices[0].message.content or "{}"
        try:
            return json.loads(content)
        except ValueError:
            return {}
