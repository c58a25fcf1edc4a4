"""Concept generation — turns an approved topic into a token idea."""

from __future__ import annotations

import math
import random

from pydantic import BaseModel

from genmon.types import Agent

PREFIXES = ["Baby", "Mega", "Ultra", "Cosmic", "Quantum", "Neo", "Hyper", "Dark", "Astro", "Pixel"]
SUFFIXES = ["Inu", "Moon", "Verse", "Chain", "Swap", "Fi", "DAO", "Punk", "Bot", "Gem"]

_default_rng = random.Random()


class TokenConcept(BaseModel):
    name: str
    symbol: str
    concept: str


def generate_token_concept(
    agent: Agent,
    topic: str,
    rng: random.Random | None = None,
) -> TokenConcept:
    rng = rng or _default_rng
    dna = agent.dna
    # creativity 100 would index one past the end
    idx = min(len(PREFIXES) - 1, math.floor((dna.creativity / 100) * len(PREFIXES)))
    name = f"{PREFIXES[idx]}{rng.choice(SUFFIXES)}"

    strategy = (
        "Aggressive launch strategy." if dna.risk_tolerance > 70
        else "Conservative growth approach."
    )
    engagement = "strong" if dna.social_savvy > 60 else "moderate"
    concept = (
        f"{topic}-inspired token. {strategy} "
        f"Community-driven with {engagement} social engagement."
    )
    return TokenConcept(name=name, symbol=name[:4].upper(), concept=concept)
