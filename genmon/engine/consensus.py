"""Consensus cycle — one scout -> analyst -> launcher pass over the swarm.

The cycle is a pure function of the population, the sentiment feed and
the RNG. It never touches the agents it reads; the caller applies the
returned thoughts, messages and proposal.
"""

from __future__ import annotations

import random

from pydantic import BaseModel, Field

from genmon.engine.analysis import CONFIDENCE_THRESHOLD, Analysis, analyze_opportunity
from genmon.engine.concept import generate_token_concept
from genmon.engine.scouting import Opportunity, SentimentFeed, scout_opportunity
from genmon.types import Agent, AgentId, AgentType, LaunchProposal, SwarmMessage, Votes

QUORUM = 2  # yes votes needed out of three
SCOUT_SENTIMENT_BAR = 55
LAUNCHER_RISK_BAR = 40
LAUNCHER_OVERRIDE_CONFIDENCE = 85

_default_rng = random.Random()


class CycleResult(BaseModel):
    """Everything one cycle produced. ``proposal`` is None on any abort."""

    proposal: LaunchProposal | None = None
    thoughts: dict[AgentId, str] = Field(default_factory=dict)
    messages: list[SwarmMessage] = Field(default_factory=list)
    opportunity: Opportunity | None = None
    analysis: Analysis | None = None


def alive_of_type(population: list[Agent], agent_type: AgentType) -> list[Agent]:
    return [a for a in population if a.alive and a.type == agent_type]


def cast_votes(opportunity: Opportunity, analysis: Analysis, launcher: Agent) -> Votes:
    return Votes(
        scout=opportunity.sentiment > SCOUT_SENTIMENT_BAR,
        analyst=analysis.confidence >= CONFIDENCE_THRESHOLD,
        launcher=(
            launcher.dna.risk_tolerance > LAUNCHER_RISK_BAR
            or analysis.confidence > LAUNCHER_OVERRIDE_CONFIDENCE
        ),
    )


def run_cycle(
    population: list[Agent],
    feed: SentimentFeed | None = None,
    rng: random.Random | None = None,
) -> CycleResult:
    """Run one consensus cycle and return its outcome.

    A population missing an alive agent of any type yields an empty
    result; that is a normal steady state, not an error.
    """
    rng = rng or _default_rng
    scouts = alive_of_type(population, AgentType.SCOUT)
    analysts = alive_of_type(population, AgentType.ANALYST)
    launchers = alive_of_type(population, AgentType.LAUNCHER)
    if not scouts or not analysts or not launchers:
        return CycleResult()

    result = CycleResult()

    # Scout
    scout = rng.choice(scouts)
    opportunity = scout_opportunity(scout, feed, rng)
    result.opportunity = opportunity
    result.thoughts[scout.id] = (
        f'Detected trend: "{opportunity.topic}" (sentiment: {opportunity.sentiment}%)'
    )

    analyst = rng.choice(analysts)
    result.messages.append(SwarmMessage(
        sender=scout.id,
        recipient=analyst.id,
        text=f"Found opportunity: {opportunity.topic} ({opportunity.sentiment}% sentiment)",
    ))

    # Analyst
    analysis = analyze_opportunity(analyst, opportunity, rng)
    result.analysis = analysis
    summary = f"Analysis: confidence {analysis.confidence}%, risk {analysis.risk}"
    if analysis.confidence < CONFIDENCE_THRESHOLD:
        result.thoughts[analyst.id] = f"{summary}. Below {CONFIDENCE_THRESHOLD}%, passing."
        return result
    result.thoughts[analyst.id] = summary

    # Launcher
    launcher = rng.choice(launchers)
    token = generate_token_concept(launcher, opportunity.topic, rng)
    result.thoughts[launcher.id] = f"Preparing launch: {token.name} ({token.symbol})"
    result.messages.append(SwarmMessage(
        sender=analyst.id,
        recipient=launcher.id,
        text=f"Green light: {analysis.confidence}% confidence. Proceed with launch.",
    ))

    votes = cast_votes(opportunity, analysis, launcher)
    if votes.count() < QUORUM:
        result.thoughts[launcher.id] = "Consensus not reached. Aborting launch."
        return result

    result.proposal = LaunchProposal(
        token_name=token.name,
        token_symbol=token.symbol,
        concept=token.concept,
        topic=opportunity.topic,
        confidence=analysis.confidence,
        votes=votes,
        scout_id=scout.id,
        analyst_id=analyst.id,
        launcher_id=launcher.id,
    )
    return result
