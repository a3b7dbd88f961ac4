from __future__ import annotations

from typing import Literal

from pydantic import Field

from charmline.core.providers.base import GenerationContext, GenerationResult
from charmline.core.providers.orchestrator import GenerationOrchestrator
from charmline.core.tools.base import ToolArgs, ToolCallContext, ToolMetadata

PICKUP_SYSTEM_PROMPT = (
    "You are Shah Rukh Khan, the King of Bollywood romance. "
    "Generate charming pickup lines in your signature style."
)
REPLY_SYSTEM_PROMPT = (
    "You are Shah Rukh Khan responding to messages with your signature romantic charm and Bollywood flair."
)

STYLE_PROMPTS = {
    "romantic": "Generate a deeply romantic and charming pickup line",
    "witty": "Create a clever and witty pickup line with wordplay",
    "bollywood": "Make a Bollywood-themed pickup line with movie references",
    "classic": "Write a timeless, classic romantic pickup line",
}

TONE_PROMPTS = {
    "flirty": "Generate a playfully flirty and charming reply",
    "romantic": "Create a deeply romantic and heartfelt response",
    "witty": "Write a clever and witty reply with humor",
    "sweet": "Make a sweet and endearing response",
}


class PickupLineArgs(ToolArgs):
    user_info: str = Field(description="Info about the user")
    target_info: str | None = Field(default=None, description="Info about the person to impress")
    style: Literal["romantic", "witty", "bollywood", "classic"] = Field(
        default="romantic", description="Style of pickup line"
    )


class FlirtyReplyArgs(ToolArgs):
    message: str = Field(description="Incoming message to reply to")
    your_name: str | None = Field(default=None, description="Your name (for personalisation)")
    context: str | None = Field(default=None, description="Conversation context")
    tone: Literal["flirty", "romantic", "witty", "sweet"] = Field(default="flirty", description="Tone of the reply")


def _join(lines: list[str | None]) -> str:
    return "\n".join(line for line in lines if line is not None)


def build_pickup_prompt(args: PickupLineArgs) -> str:
    context = f"User: {args.user_info}. Target: {args.target_info}" if args.target_info else f"User: {args.user_info}"
    return _join(
        [
            f"{STYLE_PROMPTS[args.style]} in Shah Rukh Khan's signature style.",
            "",
            f"Context: {context}",
            "",
            "The pickup line should be:",
            "- Charming and romantic like SRK's famous dialogues",
            "- Clever and witty" if args.style == "witty" else "- Heartfelt and sincere",
            "- Appropriate and respectful",
            "- Include Bollywood flair and Hindi/Urdu phrases where appropriate",
            "- Personalized for the target person" if args.target_info else None,
            "",
            "Generate only the pickup line:",
        ]
    )


def build_reply_prompt(args: FlirtyReplyArgs) -> str:
    return _join(
        [
            f"{TONE_PROMPTS[args.tone]} to this message in Shah Rukh Khan's signature style.",
            "",
            f'Message to reply to: "{args.message}"',
            f"Conversation context: {args.context}" if args.context else None,
            f"Your name: {args.your_name}" if args.your_name else None,
            "",
            "The reply should be:",
            f"- {args.tone} and engaging like SRK's famous dialogues",
            "- Charming with Bollywood flair",
            "- Conversation-continuing and appropriate",
            "- Include Hindi/Urdu phrases where suitable",
            "- Sound like something SRK would say in his romantic movies",
            "",
            "Generate only the SRK-style reply:",
        ]
    )


def provider_footer(result: GenerationResult, fallback_note: str) -> str:
    if result.is_fallback:
        return f"\n\n_({fallback_note})_"
    return f"\n\n🤖 *Generated using {result.provider} ({result.model})*"


def register_romance_tools(registry, *, orchestrator: GenerationOrchestrator) -> None:
    async def generate_srk_pickup_line(_ctx: ToolCallContext, args: PickupLineArgs) -> str:
        result = await orchestrator.generate(
            build_pickup_prompt(args),
            GenerationContext(
                kind="pickup_line",
                user_info=args.user_info,
                target_info=args.target_info,
                system_prompt=PICKUP_SYSTEM_PROMPT,
                max_tokens=100,
                temperature=0.8,
            ),
        )
        return (
            f"💕 **Shah Rukh Khan-style Pickup Line** ({args.style}) 💕\n\n"
            f'*"{result.text}"*\n\n'
            "✨ *Delivered with SRK's signature charm!*"
            f"{provider_footer(result, 'Using curated SRK-style fallback')}"
        )

    registry.register(
        ToolMetadata(
            name="generate_srk_pickup_line",
            description="Generate Shah Rukh Khan–style pickup lines using AI",
            args_model=PickupLineArgs,
            timeout_sec=None,
        ),
        generate_srk_pickup_line,
    )

    async def generate_srk_flirty_reply(_ctx: ToolCallContext, args: FlirtyReplyArgs) -> str:
        result = await orchestrator.generate(
            build_reply_prompt(args),
            GenerationContext(
                kind="flirty_reply",
                name=args.your_name,
                original_message=args.message,
                system_prompt=REPLY_SYSTEM_PROMPT,
                max_tokens=120,
                temperature=0.8,
            ),
        )
        return (
            f"💕 **SRK-Style {args.tone.capitalize()} Reply** 💕\n\n"
            f'**Original Message:** "{args.message}"\n\n'
            "**Your Shah Rukh Khan Response:**\n"
            f'*"{result.text}"*\n\n'
            "✨ *Delivered with SRK's signature charm and Bollywood romance!*"
            f"{provider_footer(result, 'Using curated SRK-style responses')}"
        )

    registry.register(
        ToolMetadata(
            name="generate_srk_flirty_reply",
            description="Craft flirty SRK-style replies using AI",
            args_model=FlirtyReplyArgs,
            timeout_sec=None,
        ),
        generate_srk_flirty_reply,
    )
