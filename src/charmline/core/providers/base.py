from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from charmline.core.runtime.errors import FailureKind

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."
FALLBACK_PROVIDER = "fallback"
FALLBACK_MODEL = "local"


@dataclass(slots=True, frozen=True)
class ProviderDescriptor:
    name: str
    endpoint: str
    headers: Mapping[str, str]
    model: str
    priority: int


class GenerationContext(BaseModel):
    """Per-call generation settings.

    ``kind`` (alias ``type``) and the auxiliary fields only steer the local
    fallback; unknown keys are kept as extras for the same purpose.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    system_prompt: str | None = Field(default=None, alias="systemPrompt")
    max_tokens: int = Field(default=150, ge=1, alias="maxTokens")
    temperature: float = Field(default=0.8, ge=0.0, le=1.0)
    kind: str | None = Field(default=None, alias="type")
    user_info: str | None = Field(default=None, alias="userInfo")
    target_info: str | None = Field(default=None, alias="targetInfo")
    name: str | None = None
    original_message: str | None = Field(default=None, alias="originalMessage")

    @classmethod
    def coerce(cls, value: GenerationContext | Mapping[str, Any] | None) -> GenerationContext:
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls.model_validate(dict(value))


@dataclass(slots=True, frozen=True)
class GenerationResult:
    text: str
    provider: str
    model: str

    @property
    def is_fallback(self) -> bool:
        return self.provider == FALLBACK_PROVIDER


@dataclass(slots=True)
class ProviderOutcome:
    """Result of one attempt (or of a whole retry budget) against a single provider."""

    provider: str
    text: str = ""
    failure: FailureKind | None = None
    detail: str = ""
    http_status: int | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.failure is None and bool(self.text.strip())

    @property
    def retryable(self) -> bool:
        return self.failure is not None and self.failure.retryable

    @property
    def reachable(self) -> bool:
        """The provider answered 2xx with a parseable body, even if the text was empty."""
        return self.failure is None or self.failure == FailureKind.EMPTY


class PayloadStyle(ABC):
    """Request/response shape of one family of provider APIs."""

    name: str

    @abstractmethod
    def build_payload(self, descriptor: ProviderDescriptor, prompt: str, context: GenerationContext) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def extract_text(self, body: Any, prompt: str) -> str:
        raise NotImplementedError
