"""Tests for scouting and the sentiment feed."""

import random

from genmon.engine.scouting import (
    FALLBACK_TOPICS,
    SentimentFeed,
    TopicSentiment,
    scout_opportunity,
)
from genmon.types import AgentType

from tests.conftest import make_agent


def test_empty_feed_falls_back():
    feed = SentimentFeed()
    assert feed.topics() == FALLBACK_TOPICS
    assert not feed.is_live
    assert len(feed) == 0


def test_empty_refresh_keeps_snapshot():
    feed = SentimentFeed([TopicSentiment(topic="Pepe", score=90)])
    assert feed.update([]) is False
    assert feed.topics() == ["Pepe"]
    assert feed.is_live


def test_update_replaces_snapshot():
    feed = SentimentFeed([TopicSentiment(topic="Pepe", score=90)])
    assert feed.update([TopicSentiment(topic="Doge", score=80)]) is True
    assert feed.topics() == ["Doge"]
    assert feed.lookup("Pepe") is None
    assert feed.lookup("Doge") == 80


def test_scout_picks_from_fallback_topics():
    rng = random.Random(2)
    for social in (0, 37, 50, 99, 100):
        scout = make_agent(AgentType.SCOUT, social=social)
        opp = scout_opportunity(scout, SentimentFeed(), rng)
        assert opp.topic in FALLBACK_TOPICS
        assert 0 <= opp.sentiment <= 100


def test_synthetic_sentiment_range_for_neutral_scout():
    rng = random.Random(4)
    scout = make_agent(AgentType.SCOUT, social=50)
    for _ in range(500):
        opp = scout_opportunity(scout, None, rng)
        assert 40 <= opp.sentiment <= 80


def test_market_score_used_when_known():
    feed = SentimentFeed([TopicSentiment(topic="Pepe", score=80, source="coingecko")])
    scout = make_agent(AgentType.SCOUT, social=90)
    opp = scout_opportunity(scout, feed, random.Random(0))
    assert opp.topic == "Pepe"
    # 80 + (90 - 50) * 0.3
    assert opp.sentiment == 92


def test_sentiment_capped_at_100():
    feed = SentimentFeed([TopicSentiment(topic="Pepe", score=100)])
    scout = make_agent(AgentType.SCOUT, social=100)
    assert scout_opportunity(scout, feed, random.Random(0)).sentiment == 100


def test_topic_window_follows_social_savvy():
    feed = SentimentFeed([TopicSentiment(topic=f"T{i}", score=50) for i in range(10)])
    scout = make_agent(AgentType.SCOUT, social=50)
    rng = random.Random(8)
    picked = {scout_opportunity(scout, feed, rng).topic for _ in range(300)}
    assert picked == {"T5", "T6", "T7"}
