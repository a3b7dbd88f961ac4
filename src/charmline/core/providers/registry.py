from __future__ import annotations

import os
from collections.abc import Mapping
from types import MappingProxyType

from charmline.core.config.schema import ProviderConfig, ProvidersConfig
from charmline.core.providers.base import ProviderDescriptor


def _auth_headers(name: str, api_key: str) -> dict[str, str]:
    if name == "anthropic":
        return {"x-api-key": api_key}
    return {"Authorization": f"Bearer {api_key}"}


class ProviderRegistry:
    """Turns provider configuration plus available credentials into an ordered provider list.

    Credentials come from ``env`` (defaults to ``os.environ``) and are looked up
    by each provider's ``api_key_env``; a provider without a non-blank
    credential is left out.
    """

    def __init__(self, config: ProvidersConfig, env: Mapping[str, str] | None = None) -> None:
        self.config = config
        self.env = env if env is not None else os.environ

    def _credential(self, provider: ProviderConfig) -> str:
        return (self.env.get(provider.api_key_env) or "").strip()

    def _describe(self, name: str, provider: ProviderConfig, api_key: str) -> ProviderDescriptor:
        headers = {**_auth_headers(name, api_key), "Content-Type": "application/json", **provider.extra_headers}
        return ProviderDescriptor(
            name=name,
            endpoint=provider.endpoint,
            headers=MappingProxyType(headers),
            model=provider.model,
            priority=provider.priority,
        )

    def build(self) -> tuple[ProviderDescriptor, ...]:
        descriptors: list[ProviderDescriptor] = []
        for name in ProvidersConfig.model_fields:
            provider: ProviderConfig = getattr(self.config, name)
            if not provider.enabled:
                continue
            api_key = self._credential(provider)
            if not api_key:
                continue
            descriptors.append(self._describe(name, provider, api_key))
        # sorted() is stable, so equal priorities keep declaration order
        return tuple(sorted(descriptors, key=lambda d: d.priority))
