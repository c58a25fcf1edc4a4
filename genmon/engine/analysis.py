"""Analysis — an analyst's confidence in a scouted opportunity."""

from __future__ import annotations

import random

from pydantic import BaseModel

from genmon.engine.dna import round_half_up
from genmon.engine.scouting import Opportunity
from genmon.types import Agent

CONFIDENCE_THRESHOLD = 75
UNPROVEN_WIN_RATE = 0.5  # optimistic prior for agents without launches

SENTIMENT_WEIGHT = 0.6
DEPTH_WEIGHT = 0.3
NOISE_SPAN = 10.0
EXPERIENCE_WEIGHT = 10.0

_default_rng = random.Random()


class Analysis(BaseModel):
    confidence: int
    risk: str  # LOW / MEDIUM / HIGH
    recommendation: str


def risk_label(confidence: int) -> str:
    if confidence > 80:
        return "LOW"
    if confidence > 60:
        return "MEDIUM"
    return "HIGH"


def analyze_opportunity(
    agent: Agent,
    opportunity: Opportunity,
    rng: random.Random | None = None,
) -> Analysis:
    rng = rng or _default_rng
    if agent.launch_count > 0:
        win_rate = agent.success_count / agent.launch_count
    else:
        win_rate = UNPROVEN_WIN_RATE

    raw = (
        opportunity.sentiment * SENTIMENT_WEIGHT
        + agent.dna.analytical_depth * DEPTH_WEIGHT
        + rng.random() * NOISE_SPAN
        + win_rate * EXPERIENCE_WEIGHT
    )
    confidence = max(0, min(100, round_half_up(raw)))

    topic = opportunity.topic
    if confidence >= CONFIDENCE_THRESHOLD:
        recommendation = f'Strong opportunity in "{topic}". Recommend launch.'
    else:
        recommendation = (
            f'"{topic}" shows potential but confidence {confidence}% below threshold.'
        )
    return Analysis(
        confidence=confidence,
        risk=risk_label(confidence),
        recommendation=recommendation,
    )
