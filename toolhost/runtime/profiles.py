from __future__ import annotations

from dataclasses import dataclass, replace
from typing import MutableMapping, Optional

from toolhost import config
from toolhost.errors import RegistrationError
from toolhost.runtime.llm.provider import ProviderConfig
from toolhost.runtime.registry import Registry


@dataclass(frozen=True)
class AgentProfile:
    name: str
    default_provider: str
    default_model: str
    system_prompt: str = ""
    label: str = ""
    description: str = ""
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    rulebook: Optional[str] = None

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider=self.default_provider,
            model=self.default_model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )


class ProfileRegistry(Registry[AgentProfile]):
    kind = "profile"

    def __init__(self, store: Optional[MutableMapping[str, AgentProfile]] = None):
        super().__init__(store, allow_replace=True)

    def register(self, profile: AgentProfile, *, override: bool = False) -> None:  # type: ignore[override]
        name = str(getattr(profile, "name", "") or "").strip()
        if not name:
            raise RegistrationError("Agent profile name cannot be blank.")
        record = replace(profile, name=name, label=(profile.label or "").strip() or name)
        super().register(name, record, override=override)


DEFAULT_SYSTEM_PROMPT = (
    "You are a software engineering agent. Use the available tools to inspect and change the "
    "workspace, and explain what you did."
)


def register_default_profiles(registry: ProfileRegistry) -> None:
    if registry.has("general"):
        return
    registry.register(
        AgentProfile(
            name="general",
            label="General",
            description="General-purpose coding agent.",
            default_provider=config.default_provider(),
            default_model=config.default_model(),
            system_prompt=DEFAULT_SYSTEM_PROMPT,
            temperature=config.llm_temperature(),
            max_tokens=config.llm_max_tokens(),
        )
    )
