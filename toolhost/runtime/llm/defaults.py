from __future__ import annotations

import logging
import os
from typing import List, Optional

from toolhost.errors import ConfigurationError
from toolhost.runtime.llm.factory import ProviderFactory, ProviderRegistry
from toolhost.runtime.llm.openai_provider import OpenAIChatCompletionsProvider
from toolhost.runtime.llm.provider import ProviderConfig

logger = logging.getLogger("toolhost.llm")

# id -> (api key env var, base url)
OPENAI_COMPATIBLE = {
    "openai": ("OPENAI_API_KEY", None),
    "deepseek": ("DEEPSEEK_API_KEY", "https://api.deepseek.com"),
    "xai": ("XAI_API_KEY", "https://api.x.ai/v1"),
}


def require_env(name: str) -> str:
    value = os.getenv(name, "")
    if not value:
        raise ConfigurationError(f"Missing required environment variable {name}.")
    return value


def openai_compatible_factory(provider_id: str, api_key_env: str, base_url: Optional[str]) -> ProviderFactory:
    def factory(config: ProviderConfig) -> OpenAIChatCompletionsProvider:
        return OpenAIChatCompletionsProvider(
            api_key=require_env(api_key_env),
            model=config.model,
            provider_id=provider_id,
            base_url=base_url,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            reasoning_effort=config.reasoning_effort,
            text_verbosity=config.text_verbosity,
        )

    return factory


def register_default_providers(registry: ProviderRegistry) -> List[str]:
    added: List[str] = []
    for provider_id, (env_name, base_url) in OPENAI_COMPATIBLE.items():
        if registry.has(provider_id):
            continue
        registry.register(provider_id, openai_compatible_factory(provider_id, env_name, base_url))
        added.append(provider_id)
    logger.debug("registered default providers: %s", ", ".join(added) or "none")
    return added
