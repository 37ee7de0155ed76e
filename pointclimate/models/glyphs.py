from __future__ import annotations

import random

GLYPHS: tuple[str, ...] = (
    "🍎", "🍊", "🍋", "🍌", "🍉", "🍇", "🍓", "🫐",
    "🍈", "🍒", "🍑", "🥭", "🍍", "🥥", "🥝", "🍐",
)


def pick_glyph(rng: random.Random | None = None) -> str:
    return (rng or random).choice(GLYPHS)
