"""
Provider registry: duplicate protection, override, unknown-id messages, default providers.
"""
from dataclasses import dataclass

import pytest

from toolhost.errors import ConfigurationError, DuplicateRegistrationError, RegistrationError, UnknownEntryError
from toolhost.runtime.llm.defaults import register_default_providers
from toolhost.runtime.llm.factory import ProviderRegistry
from toolhost.runtime.llm.provider import ProviderConfig


@dataclass
class StubProvider:
    id: str
    model: str
    tag: str = ""

    async def stream_chat(self, *, messages):
        yield f"{self.id}:{self.model}"


def test_create_returns_the_registered_provider():
    registry = ProviderRegistry()
    registry.register("stub", lambda cfg: StubProvider("stub", cfg.model))
    provider = registry.create(ProviderConfig(provider="stub", model="demo-model"))
    assert provider.id == "stub"
    assert provider.model == "demo-model"


def test_factory_receives_the_full_config_unchanged():
    seen = []
    registry = ProviderRegistry()
    registry.register("stub", lambda cfg: seen.append(cfg) or StubProvider("stub", cfg.model))
    cfg = ProviderConfig(provider="stub", model="m", temperature=0.3, max_tokens=99, reasoning_effort="high", text_verbosity="low")
    registry.create(cfg)
    assert seen == [cfg]


def test_duplicate_without_override_names_the_id():
    registry = ProviderRegistry()
    registry.register("stub", lambda cfg: StubProvider("stub", cfg.model))
    with pytest.raises(DuplicateRegistrationError, match='"stub"'):
        registry.register("stub", lambda cfg: StubProvider("stub", cfg.model))


def test_override_replaces_the_factory():
    registry = ProviderRegistry()
    registry.register("stub", lambda cfg: StubProvider("stub", cfg.model, tag="old"))
    registry.register("stub", lambda cfg: StubProvider("stub", cfg.model, tag="new"), override=True)
    assert registry.create(ProviderConfig(provider="stub", model="m")).tag == "new"


def test_blank_id_is_rejected():
    with pytest.raises(RegistrationError):
        ProviderRegistry().register("  ", lambda cfg: None)


def test_unknown_provider_lists_sorted_ids():
    registry = ProviderRegistry()
    for provider_id in ("zeta", "alpha", "mid"):
        registry.register(provider_id, lambda cfg: None)
    with pytest.raises(UnknownEntryError) as exc:
        registry.create(ProviderConfig(provider="missing", model="m"))
    assert "alpha, mid, zeta" in str(exc.value)
    assert exc.value.known == ["alpha", "mid", "zeta"]


def test_unknown_provider_with_empty_registry():
    with pytest.raises(UnknownEntryError, match="none"):
        ProviderRegistry().create(ProviderConfig(provider="missing", model="m"))


def test_list_and_has_are_read_only():
    registry = ProviderRegistry()
    registry.register("a", lambda cfg: None)
    assert registry.list() == ["a"]
    assert registry.has("a")
    assert not registry.has("b")
    assert registry.list() == ["a"]


def test_default_providers_keep_existing_registrations():
    registry = ProviderRegistry()
    registry.register("openai", lambda cfg: StubProvider("custom", cfg.model))
    added = register_default_providers(registry)
    assert "openai" not in added
    assert set(registry.list()) == {"openai", "deepseek", "xai"}
    assert registry.create(ProviderConfig(provider="openai", model="m")).id == "custom"
    assert register_default_providers(registry) == []


def test_default_provider_requires_api_key(monkeypatch):
    monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)
    registry = ProviderRegistry()
    register_default_providers(registry)
    with pytest.raises(ConfigurationError, match="DEEPSEEK_API_KEY"):
        registry.create(ProviderConfig(provider="deepseek", model="deepseek-chat"))


def test_default_provider_builds_openai_compatible_client(monkeypatch):
    monkeypatch.setenv("XAI_API_KEY", "test-key")
    registry = ProviderRegistry()
    register_default_providers(registry)
    provider = registry.create(ProviderConfig(provider="xai", model="grok-2", temperature=0.2, max_tokens=64))
    assert provider.id == "xai"
    assert provider.base_url == "https://api.x.ai/v1"
    assert provider._params() == {"model": "grok-2", "temperature": 0.2, "max_tokens": 64}


def test_default_provider_forwards_text_verbosity(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    registry = ProviderRegistry()
    register_default_providers(registry)
    provider = registry.create(ProviderConfig(provider="openai", model="gpt-5", text_verbosity="low"))
    assert provider._params() == {"model": "gpt-5", "verbosity": "low"}
