"""Tests for opportunity analysis."""

import random

from genmon.engine.analysis import CONFIDENCE_THRESHOLD, analyze_opportunity, risk_label
from genmon.engine.scouting import Opportunity
from genmon.types import AgentType

from tests.conftest import make_agent


def test_risk_label_boundaries():
    assert risk_label(81) == "LOW"
    assert risk_label(80) == "MEDIUM"
    assert risk_label(61) == "MEDIUM"
    assert risk_label(60) == "HIGH"


def test_confidence_range_and_recommendation():
    rng = random.Random(6)
    analyst = make_agent(AgentType.ANALYST, analytical=95)
    opp = Opportunity(topic="AI Memes", sentiment=90)
    for _ in range(500):
        analysis = analyze_opportunity(analyst, opp, rng)
        # 54 + 28.5 + [0, 10) + 5
        assert 88 <= analysis.confidence <= 98
        assert "Recommend launch" in analysis.recommendation
        assert analysis.risk == "LOW"


def test_low_confidence_recommendation():
    analyst = make_agent(AgentType.ANALYST, analytical=0)
    opp = Opportunity(topic="Void Explorer", sentiment=10)
    analysis = analyze_opportunity(analyst, opp, random.Random(1))
    assert analysis.confidence < CONFIDENCE_THRESHOLD
    assert "below threshold" in analysis.recommendation
    assert analysis.risk == "HIGH"


def test_track_record_counts():
    opp = Opportunity(topic="Cyber Pets", sentiment=60)
    winner = make_agent(AgentType.ANALYST, analytical=50, launch_count=4, success_count=4)
    loser = make_agent(AgentType.ANALYST, analytical=50, launch_count=4, success_count=0)
    a = analyze_opportunity(winner, opp, random.Random(3))
    b = analyze_opportunity(loser, opp, random.Random(3))
    assert a.confidence - b.confidence == 10
