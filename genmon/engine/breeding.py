"""Breeding — pick the fittest pair and produce a child.

Fitness rewards consistent winners first and raw PnL second. The best
candidate always breeds; its partner is drawn at random from the next
three, which keeps some diversity in the gene pool.
"""

from __future__ import annotations

import random

from genmon.engine.dna import breed_dna, type_from_dna
from genmon.types import Agent

NAMES_POOL = [
    "Alpha", "Nova", "Zephyr", "Blaze", "Echo", "Flux",
    "Onyx", "Pulse", "Rune", "Vex", "Warp", "Zen",
]

BREEDING_POOL_SIZE = 4
MIN_BREEDING_POPULATION = 3
MAX_POPULATION = 12
BREEDING_CHANCE = 0.2

_default_rng = random.Random()


def fitness(agent: Agent) -> float:
    return agent.win_rate * 50 + agent.total_pnl * 0.1 + agent.best_launch_pnl * 0.05


def breeding_candidates(population: list[Agent]) -> list[Agent]:
    return [a for a in population if a.alive and a.launch_count >= 1]


def select_pair(
    population: list[Agent],
    rng: random.Random | None = None,
) -> tuple[Agent, Agent] | None:
    """Choose two parents, or None when fewer than two agents qualify."""
    rng = rng or _default_rng
    candidates = breeding_candidates(population)
    if len(candidates) < 2:
        return None

    ranked = sorted(candidates, key=fitness, reverse=True)
    pool = ranked[:min(BREEDING_POOL_SIZE, len(ranked))]
    parent_a = pool[0]
    parent_b = rng.choice(pool[1:])
    if parent_a.id == parent_b.id:
        return None
    return parent_a, parent_b


def should_attempt_breeding(
    alive_count: int,
    rng: random.Random | None = None,
    min_population: int = MIN_BREEDING_POPULATION,
    max_population: int = MAX_POPULATION,
    chance: float = BREEDING_CHANCE,
) -> bool:
    """Population-size gate plus a coin flip, evaluated once per pass."""
    rng = rng or _default_rng
    if not min_population <= alive_count < max_population:
        return False
    return rng.random() < chance


def child_name(parent_a: Agent, parent_b: Agent, rng: random.Random | None = None) -> str:
    rng = rng or _default_rng
    generation = max(parent_a.generation, parent_b.generation) + 1
    return f"{rng.choice(NAMES_POOL)}-G{generation}"


def breed(parent_a: Agent, parent_b: Agent, rng: random.Random | None = None) -> Agent:
    """A fresh child agent. Its type follows its DNA, not its parents."""
    rng = rng or _default_rng
    dna = breed_dna(parent_a.dna, parent_b.dna, rng)
    generation = max(parent_a.generation, parent_b.generation) + 1
    return Agent(
        name=child_name(parent_a, parent_b, rng),
        type=type_from_dna(dna),
        dna=dna,
        generation=generation,
        parent_ids=(parent_a.id, parent_b.id),
        thoughts=[
            f"Born from {parent_a.name} x {parent_b.name}. Generation {generation}."
        ],
    )
