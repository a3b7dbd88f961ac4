from __future__ import annotations

import random

import pytest

from charmline.core.providers.base import GenerationContext
from charmline.core.providers.fallback import (
    GENERIC_RESPONSE,
    LocalFallback,
    flirty_reply_candidates,
    pickup_line_candidates,
)


def test_pickup_line_is_drawn_from_candidate_family():
    ctx = GenerationContext(kind="pickup_line", user_info="Priya")
    fallback = LocalFallback(rng=random.Random(7))
    candidates = pickup_line_candidates(ctx)
    for _ in range(20):
        text = fallback.render("anything", ctx)
        assert text in candidates
        assert "Priya" in text


def test_pickup_line_uses_placeholder_words_when_info_missing():
    candidates = pickup_line_candidates(GenerationContext(kind="pickup_line"))
    assert any("you have made my heart" in c for c in candidates)
    assert any("beautiful" in c for c in candidates)
    assert any("gorgeous" in c for c in candidates)


@pytest.mark.parametrize(
    "message, expected_start",
    [
        ("Hi there!", "Namaste Simran!"),
        ("good morning", "Namaste Simran!"),
        ("Thanks for the flowers", "Anything for you, Simran!"),
        ("I'm so sorry I was late", "Don't worry, Simran!"),
    ],
)
def test_flirty_reply_keyword_branches(message, expected_start):
    ctx = GenerationContext(kind="flirty_reply", name="Simran", original_message=message)
    assert LocalFallback().render("ignored prompt", ctx).startswith(expected_start)


def test_flirty_reply_matches_whole_words_only():
    ctx = GenerationContext(kind="flirty_reply", name="Simran", original_message="this chili is spicy")
    text = LocalFallback(rng=random.Random(1)).render("", ctx)
    assert text in flirty_reply_candidates(ctx)


def test_flirty_reply_uses_prompt_when_no_original_message():
    ctx = GenerationContext(kind="flirty_reply")
    assert LocalFallback().render("hello love", ctx) == (
        "Namaste beautiful! Like in my movies, you've made my heart do a little dance 💃"
    )


@pytest.mark.parametrize("kind", [None, "", "weather_report"])
def test_unrecognized_type_returns_generic_string(kind):
    assert LocalFallback().render("hi", GenerationContext(kind=kind)) == GENERIC_RESPONSE


def test_flirty_reply_candidates_are_distinct_lines():
    candidates = flirty_reply_candidates(GenerationContext(kind="flirty_reply", name="Asha"))
    assert len(set(candidates)) == len(candidates)
    assert not any(a != b and b.startswith(a[:40]) for a in candidates for b in candidates)
