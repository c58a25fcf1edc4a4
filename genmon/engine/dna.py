"""DNA model — random genomes, crossover, mutation and type inference.

A genome is four integer traits in [0, 100]. Every function here takes
an optional ``rng`` so that a seeded ``random.Random`` makes breeding
replayable.
"""

from __future__ import annotations

import math
import random

from genmon.types import DNA, TRAITS, TRAIT_MAX, TRAIT_MIN, AgentType

MUTATION_RATE = 0.2
MUTATION_SPAN = 10  # delta drawn from [-10, 9]

# Tie-break order for type_from_dna: earlier wins on equal scores.
TYPE_PRIORITY: tuple[AgentType, ...] = (
    AgentType.SCOUT,
    AgentType.ANALYST,
    AgentType.LAUNCHER,
)

_default_rng = random.Random()


def clamp_trait(value: float) -> int:
    return int(max(TRAIT_MIN, min(TRAIT_MAX, value)))


def round_half_up(value: float) -> int:
    """Round .5 upwards, unlike Python's round-half-to-even."""
    return math.floor(value + 0.5)


def random_dna(rng: random.Random | None = None) -> DNA:
    rng = rng or _default_rng
    return DNA(**{trait: rng.randrange(TRAIT_MAX) for trait in TRAITS})


def crossover(a: DNA, b: DNA, rng: random.Random | None = None) -> DNA:
    """Blend two genomes, drawing a fresh weight for every trait.

    Traits are not combined with a single lineage weight, so a child
    can sit close to parent A on one trait and close to B on another.
    """
    rng = rng or _default_rng
    child = {}
    for trait in TRAITS:
        w = rng.random()
        child[trait] = round_half_up(getattr(a, trait) * w + getattr(b, trait) * (1 - w))
    return DNA(**child)


def mutate(value: int, rng: random.Random | None = None) -> int:
    """With probability MUTATION_RATE nudge a trait by up to +/-10."""
    rng = rng or _default_rng
    if rng.random() < MUTATION_RATE:
        delta = rng.randrange(2 * MUTATION_SPAN) - MUTATION_SPAN
        return clamp_trait(value + delta)
    return value


def breed_dna(a: DNA, b: DNA, rng: random.Random | None = None) -> DNA:
    """Crossover followed by per-trait mutation."""
    rng = rng or _default_rng
    blended = crossover(a, b, rng)
    return DNA(**{t: mutate(getattr(blended, t), rng) for t in TRAITS})


def type_scores(dna: DNA) -> dict[AgentType, int]:
    return {
        AgentType.SCOUT: dna.social_savvy + dna.creativity,
        AgentType.ANALYST: dna.analytical_depth * 2,
        AgentType.LAUNCHER: dna.risk_tolerance * 2,
    }


def type_from_dna(dna: DNA) -> AgentType:
    """The role a genome is best suited for.

    Ties resolve to the earliest entry of TYPE_PRIORITY.
    """
    scores = type_scores(dna)
    best = TYPE_PRIORITY[0]
    for agent_type in TYPE_PRIORITY[1:]:
        if scores[agent_type] > scores[best]:
            best = agent_type
    return best
