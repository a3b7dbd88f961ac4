from __future__ import annotations

from pydantic import BaseModel, Field


class InstanceConfig(BaseModel):
    name: str = "charmline"


class ServerConfig(BaseModel):
    base_path: str = "/api"
    auth_token_env: str = "AUTH_TOKEN"
    owner_number_env: str = "MY_NUMBER"
    cors_allow_origin: str = "*"


class RuntimeConfig(BaseModel):
    max_retries: int = Field(default=3, ge=1)
    retry_delay_seconds: float = Field(default=1.0, ge=0.0)
    provider_timeout_seconds: float = Field(default=30.0, gt=0.0)
    generate_deadline_seconds: float | None = Field(default=None, gt=0.0)


class TelemetryConfig(BaseModel):
    log_level: str = "INFO"
    json_logs: bool = True


class ProviderConfig(BaseModel):
    enabled: bool = True
    api_key_env: str
    endpoint: str
    model: str
    priority: int = 100
    extra_headers: dict[str, str] = Field(default_factory=dict)


def _openai() -> ProviderConfig:
    return ProviderConfig(
        api_key_env="OPENAI_API_KEY",
        endpoint="https://api.openai.com/v1/chat/completions",
        model="gpt-3.5-turbo",
        priority=1,
    )


def _anthropic() -> ProviderConfig:
    return ProviderConfig(
        api_key_env="ANTHROPIC_API_KEY",
        endpoint="https://api.anthropic.com/v1/messages",
        model="claude-3-haiku-20240307",
        priority=2,
        extra_headers={"anthropic-version": "2023-06-01"},
    )


def _huggingface() -> ProviderConfig:
    return ProviderConfig(
        api_key_env="HF_TOKEN",
        endpoint="https://api-inference.huggingface.co/models/microsoft/DialoGPT-small",
        model="microsoft/DialoGPT-small",
        priority=3,
    )


class ProvidersConfig(BaseModel):
    openai: ProviderConfig = Field(default_factory=_openai)
    anthropic: ProviderConfig = Field(default_factory=_anthropic)
    huggingface: ProviderConfig = Field(default_factory=_huggingface)


class SearchConfig(BaseModel):
    endpoint: str = "https://html.duckduckgo.com/html/?q="
    user_agent: str = "Puch/1.0 (Autonomous)"
    timeout_seconds: float = 10.0
    max_results: int = Field(default=8, ge=1)
    snippet_chars: int = Field(default=200, ge=1)


class AppConfig(BaseModel):
    instance: InstanceConfig = Field(default_factory=InstanceConfig)
    environment: str = "dev"
    server: ServerConfig = Field(default_factory=ServerConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
