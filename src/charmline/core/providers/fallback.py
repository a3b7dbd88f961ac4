"""Canned SRK-style text used when no remote provider produced anything."""

from __future__ import annotations

import random
import re

from charmline.core.providers.base import GenerationContext

GENERIC_RESPONSE = "I'm here to help! Let me know what you'd like to know."

_GREETING = re.compile(r"\b(hello|hi|hey|morning|evening)\b")
_GRATITUDE = re.compile(r"\b(thank|thanks)\b")
_APOLOGY = re.compile(r"\b(sorry|apologize)\b")


def pickup_line_candidates(context: GenerationContext) -> list[str]:
    info = context.user_info
    return [
        f"Just like Shah Rukh Khan in his movies, {info or 'you'} have made my heart skip a beat!",
        f"If I were to write a love story, {info or 'beautiful'}, you would be both the beginning and the happy ending.",
        f"Main hoon na, {info or 'gorgeous'}? Because like SRK, I promise to always be there for you.",
    ]


def flirty_reply_candidates(context: GenerationContext) -> list[str]:
    name = context.name
    return [
        f"You always know just what to say to make me smile, {name or 'beautiful'}! 😊",
        f"Tum paas aaye, yun muskuraye, and now I cannot stop smiling, {name or 'beautiful'}! 🎬",
        f"Kuch kuch hota hai every time you message me, {name or 'gorgeous'}! 💕",
    ]


class LocalFallback:
    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def render(self, prompt: str, context: GenerationContext) -> str:
        if context.kind == "pickup_line":
            return self.rng.choice(pickup_line_candidates(context))
        if context.kind == "flirty_reply":
            return self._flirty_reply(prompt, context)
        return GENERIC_RESPONSE

    def _flirty_reply(self, prompt: str, context: GenerationContext) -> str:
        text = (context.original_message or prompt or "").lower()
        if _GREETING.search(text):
            return f"Namaste {context.name or 'beautiful'}! Like in my movies, you've made my heart do a little dance 💃"
        if _GRATITUDE.search(text):
            return f"Anything for you, {context.name or 'gorgeous'}! Like I always say in my films, main hoon na! 🤗"
        if _APOLOGY.search(text):
            return f"Don't worry, {context.name or 'beautiful'}! True love means never having to say sorry 💕"
        return self.rng.choice(flirty_reply_candidates(context))
