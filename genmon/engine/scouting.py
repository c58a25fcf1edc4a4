"""Scouting — a scout's pick of the hottest topic right now.

Topic choice is biased by the scout's social savvy with a little
exploration noise. Sentiment comes from the market feed when it knows
the topic and is synthesised otherwise.
"""

from __future__ import annotations

import math
import random

from pydantic import BaseModel, Field

from genmon.engine.dna import round_half_up
from genmon.types import Agent

FALLBACK_TOPICS = [
    "AI Memes", "Quantum DeFi", "Space Colonization", "Neural Music",
    "Cyber Pets", "Time Travel DAO", "Holographic Art", "Bio Hacking",
    "Dream Mining", "Emotion Tokens", "Gravity Finance", "Nano Worlds",
    "Psychic Network", "Robot Rights", "Soul Bound Love", "Void Explorer",
]

EXPLORATION_SPREAD = 3  # final index drifts by 0, 1 or 2
SYNTHETIC_SENTIMENT_MIN = 40.0
SYNTHETIC_SENTIMENT_SPAN = 40.0
SOCIAL_BIAS = 0.3

_default_rng = random.Random()


class TopicSentiment(BaseModel):
    """One entry of the market sentiment feed."""

    topic: str
    score: int = Field(ge=0, le=100)
    source: str = ""


class Opportunity(BaseModel):
    topic: str
    sentiment: int


class SentimentFeed:
    """Snapshot of market sentiment handed to scouts.

    Holds the latest non-empty refresh. An empty refresh leaves the
    previous snapshot in place; an empty feed falls back to
    FALLBACK_TOPICS with no known scores.
    """

    def __init__(self, entries: list[TopicSentiment] | None = None) -> None:
        self._entries: list[TopicSentiment] = list(entries or [])

    def update(self, entries: list[TopicSentiment]) -> bool:
        """Replace the snapshot. Returns False if the refresh was empty."""
        if not entries:
            return False
        self._entries = list(entries)
        return True

    def topics(self) -> list[str]:
        if self._entries:
            return [e.topic for e in self._entries]
        return list(FALLBACK_TOPICS)

    def lookup(self, topic: str) -> int | None:
        for entry in self._entries:
            if entry.topic == topic:
                return entry.score
        return None

    @property
    def is_live(self) -> bool:
        return bool(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def scout_opportunity(
    agent: Agent,
    feed: SentimentFeed | None = None,
    rng: random.Random | None = None,
) -> Opportunity:
    rng = rng or _default_rng
    feed = feed or SentimentFeed()
    social = agent.dna.social_savvy

    topics = feed.topics()
    base_index = math.floor((social / 100) * len(topics)) % len(topics)
    topic = topics[(base_index + rng.randrange(EXPLORATION_SPREAD)) % len(topics)]

    base = feed.lookup(topic)
    if base is None:
        base = SYNTHETIC_SENTIMENT_MIN + rng.random() * SYNTHETIC_SENTIMENT_SPAN
    sentiment = min(100, base + (social - 50) * SOCIAL_BIAS)
    return Opportunity(topic=topic, sentiment=round_half_up(sentiment))
