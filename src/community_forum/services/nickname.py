"""Random display names for anonymous authors."""
from __future__ import annotations

import random

ADJECTIVES: tuple[str, ...] = (
    "익명의", "조용한", "열정적인", "성실한", "배우는", "노력하는", "진실한", "따뜻한",
)
NOUNS: tuple[str, ...] = (
    "수련생", "상담사", "학습자", "연구자", "실습생", "전문가", "동료", "멘티",
)
MAX_SUFFIX = 9999


def generate_nickname(rng: random.Random) -> str:
    """Compose ``<adjective><noun><1-4 digits>`` from the supplied random source.

    The result is cosmetic and must never be treated as an identity.
    """
    adjective = rng.choice(ADJECTIVES)
    noun = rng.choice(NOUNS)
    return f"{adjective}{noun}{rng.randint(1, MAX_SUFFIX)}"
