import dataclasses

import pytest

from toolhost.errors import RegistrationError, UnknownEntryError
from toolhost.runtime.profiles import AgentProfile, ProfileRegistry, register_default_profiles


def test_register_trims_name_and_defaults_label():
    registry = ProfileRegistry()
    registry.register(AgentProfile(name="  coder  ", default_provider="openai", default_model="gpt-4o"))
    profile = registry.get("coder")
    assert profile.name == "coder"
    assert profile.label == "coder"
    assert registry.get("  coder ") is profile


def test_registered_profile_is_frozen():
    registry = ProfileRegistry()
    registry.register(AgentProfile(name="coder", default_provider="openai", default_model="gpt-4o"))
    with pytest.raises(dataclasses.FrozenInstanceError):
        registry.get("coder").default_model = "other"


def test_blank_name_is_rejected():
    with pytest.raises(RegistrationError):
        ProfileRegistry().register(AgentProfile(name=" ", default_provider="openai", default_model="m"))


def test_unknown_profile_lists_known_names():
    registry = ProfileRegistry()
    registry.register(AgentProfile(name="b", default_provider="openai", default_model="m"))
    registry.register(AgentProfile(name="a", default_provider="openai", default_model="m"))
    with pytest.raises(UnknownEntryError, match="a, b"):
        registry.get("c")


def test_default_profile_uses_config(tmp_path, monkeypatch):
    from toolhost import config

    cfg = tmp_path / "toolhost.json"
    cfg.write_text('{"llm": {"provider": "xai", "model_name": "grok-2", "temperature": 0.1}}', encoding="utf-8")
    monkeypatch.setenv("TOOLHOST_CONFIG", str(cfg))
    config.load_config.cache_clear()

    registry = ProfileRegistry()
    register_default_profiles(registry)
    provider_config = registry.get("general").provider_config()
    assert (provider_config.provider, provider_config.model, provider_config.temperature) == ("xai", "grok-2", 0.1)
