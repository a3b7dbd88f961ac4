from __future__ import annotations

from typing import Any

from charmline.core.providers.base import DEFAULT_SYSTEM_PROMPT, GenerationContext, PayloadStyle, ProviderDescriptor
from charmline.core.runtime.errors import ConfigurationError

TOP_P = 0.9


def _first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None


class OpenAIStyle(PayloadStyle):
    """Chat-completions: system + user messages, text in ``choices[0].message.content``."""

    name = "openai"

    def build_payload(self, descriptor: ProviderDescriptor, prompt: str, context: GenerationContext) -> dict[str, Any]:
        return {
            "model": descriptor.model,
            "messages": [
                {"role": "system", "content": context.system_prompt or DEFAULT_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": context.max_tokens,
            "temperature": context.temperature,
            "top_p": TOP_P,
        }

    def extract_text(self, body: Any, prompt: str) -> str:
        if not isinstance(body, dict):
            raise ValueError("chat completion body is not an object")
        choice = _first(body.get("choices"))
        message = choice.get("message") if isinstance(choice, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""


class AnthropicStyle(PayloadStyle):
    """Messages API: top-level ``system``, text in ``content[0].text``."""

    name = "anthropic"

    def build_payload(self, descriptor: ProviderDescriptor, prompt: str, context: GenerationContext) -> dict[str, Any]:
        return {
            "model": descriptor.model,
            "max_tokens": context.max_tokens,
            "system": context.system_prompt or DEFAULT_SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": context.temperature,
        }

    def extract_text(self, body: Any, prompt: str) -> str:
        if not isinstance(body, dict):
            raise ValueError("messages body is not an object")
        block = _first(body.get("content"))
        text = block.get("text") if isinstance(block, dict) else None
        return text if isinstance(text, str) else ""


class HuggingFaceStyle(PayloadStyle):
    """Inference endpoint: raw ``inputs``; answer is ``[{"generated_text": ...}]`` which may echo the prompt."""

    name = "huggingface"

    def build_payload(self, descriptor: ProviderDescriptor, prompt: str, context: GenerationContext) -> dict[str, Any]:
        return {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": context.max_tokens,
                "temperature": context.temperature,
                "top_p": TOP_P,
                "do_sample": True,
            },
        }

    def extract_text(self, body: Any, prompt: str) -> str:
        if not isinstance(body, list):
            raise ValueError("inference body is not an array")
        first = _first(body)
        generated = first.get("generated_text") if isinstance(first, dict) else None
        if not isinstance(generated, str):
            return ""
        if prompt and generated.startswith(prompt):
            generated = generated[len(prompt):]
        return generated.strip()


STYLES: dict[str, PayloadStyle] = {style.name: style for style in (OpenAIStyle(), AnthropicStyle(), HuggingFaceStyle())}


def style_for(provider_name: str) -> PayloadStyle:
    style = STYLES.get(provider_name)
    if style is None:
        raise ConfigurationError(f"no payload style registered for provider: {provider_name}")
    return style
