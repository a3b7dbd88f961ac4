from __future__ import annotations

import pytest

from charmline.core.config.schema import ProviderConfig, ProvidersConfig
from charmline.core.providers.registry import ProviderRegistry

ALL_KEYS = {"OPENAI_API_KEY": "sk-1", "ANTHROPIC_API_KEY": "ant-1", "HF_TOKEN": "hf-1"}


@pytest.mark.parametrize(
    "env, expected",
    [
        ({}, []),
        ({"HF_TOKEN": "hf-1"}, ["huggingface"]),
        ({"ANTHROPIC_API_KEY": "ant-1", "HF_TOKEN": "hf-1"}, ["anthropic", "huggingface"]),
        (ALL_KEYS, ["openai", "anthropic", "huggingface"]),
    ],
)
def test_registry_includes_only_configured_providers_in_priority_order(env, expected):
    providers = ProviderRegistry(ProvidersConfig(), env=env).build()
    assert [p.name for p in providers] == expected
    priorities = [p.priority for p in providers]
    assert priorities == sorted(priorities)


def test_blank_credentials_are_treated_as_missing():
    providers = ProviderRegistry(ProvidersConfig(), env={"OPENAI_API_KEY": "   ", "HF_TOKEN": ""}).build()
    assert providers == ()


def test_disabled_provider_is_skipped():
    cfg = ProvidersConfig()
    cfg.openai.enabled = False
    providers = ProviderRegistry(cfg, env=ALL_KEYS).build()
    assert [p.name for p in providers] == ["anthropic", "huggingface"]


def test_equal_priorities_keep_declaration_order():
    cfg = ProvidersConfig(
        openai=ProviderConfig(api_key_env="A", endpoint="https://a", model="a", priority=5),
        anthropic=ProviderConfig(api_key_env="B", endpoint="https://b", model="b", priority=5),
        huggingface=ProviderConfig(api_key_env="C", endpoint="https://c", model="c", priority=1),
    )
    providers = ProviderRegistry(cfg, env={"A": "1", "B": "2", "C": "3"}).build()
    assert [p.name for p in providers] == ["huggingface", "openai", "anthropic"]


def test_descriptor_headers_carry_credentials():
    by_name = {p.name: p for p in ProviderRegistry(ProvidersConfig(), env=ALL_KEYS).build()}

    assert by_name["openai"].headers["Authorization"] == "Bearer sk-1"
    assert by_name["openai"].endpoint == "https://api.openai.com/v1/chat/completions"
    assert by_name["openai"].model == "gpt-3.5-turbo"
    assert by_name["anthropic"].headers["x-api-key"] == "ant-1"
    assert by_name["anthropic"].headers["anthropic-version"] == "2023-06-01"
    assert "Authorization" not in by_name["anthropic"].headers
    assert by_name["huggingface"].headers["Authorization"] == "Bearer hf-1"
    assert all(p.headers["Content-Type"] == "application/json" for p in by_name.values())


def test_descriptors_are_immutable():
    descriptor = ProviderRegistry(ProvidersConfig(), env=ALL_KEYS).build()[0]
    with pytest.raises(AttributeError):
        descriptor.priority = 99  # type: ignore[misc]
    with pytest.raises(TypeError):
        descriptor.headers["Authorization"] = "tampered"  # type: ignore[index]
