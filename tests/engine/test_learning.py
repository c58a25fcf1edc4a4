"""Tests for outcome learning."""

import random

from genmon.engine.learning import learn, outcome_update
from genmon.types import AgentType

from tests.conftest import make_agent


def test_big_win_reinforces_all_traits():
    rng = random.Random(0)
    agent = make_agent(AgentType.SCOUT, risk=50, creativity=50, social=50, analytical=50)
    for _ in range(200):
        update = learn(agent, 50.0, rng)
        assert 50 <= update["risk_tolerance"] <= 52
        assert 50 <= update["creativity"] <= 52
        assert 50 <= update["social_savvy"] <= 51
        assert 50 <= update["analytical_depth"] <= 51


def test_small_outcomes_change_nothing():
    agent = make_agent()
    rng = random.Random(0)
    assert learn(agent, 10.0, rng) == {}
    assert learn(agent, 0.0, rng) == {}
    assert learn(agent, -20.0, rng) == {}


def test_bad_loss_makes_agent_cautious():
    rng = random.Random(1)
    agent = make_agent(risk=50, analytical=50)
    for _ in range(200):
        update = learn(agent, -30.0, rng)
        assert set(update) == {"risk_tolerance", "analytical_depth"}
        assert 44 <= update["risk_tolerance"] <= 48
        assert 51 <= update["analytical_depth"] <= 54


def test_learning_clamps():
    rng = random.Random(2)
    floor = make_agent(risk=0, analytical=100)
    update = learn(floor, -50.0, rng)
    assert update == {"risk_tolerance": 0, "analytical_depth": 100}

    ceiling = make_agent(risk=100, creativity=100, social=100, analytical=100)
    assert set(learn(ceiling, 50.0, rng).values()) == {100}


def test_outcome_update_small_win():
    agent = make_agent(success_count=1, launch_count=2, total_pnl=3.0, best_launch_pnl=3.0)
    patch = outcome_update(agent, 5.0, random.Random(0))
    assert patch["success_count"] == 2
    assert patch["fail_count"] == 0
    assert patch["launch_count"] == 3
    assert patch["total_pnl"] == 8.0
    assert patch["best_launch_pnl"] == 5.0
    assert patch["dna"] == agent.dna


def test_outcome_update_zero_counts_as_failure():
    agent = make_agent()
    patch = outcome_update(agent, 0.0, random.Random(0))
    assert patch["fail_count"] == 1
    assert patch["success_count"] == 0
    assert patch["best_launch_pnl"] == 0.0


def test_outcome_update_bad_loss():
    agent = make_agent(risk=60, best_launch_pnl=12.0)
    patch = outcome_update(agent, -40.0, random.Random(0))
    assert patch["fail_count"] == 1
    assert patch["total_pnl"] == -40.0
    assert patch["best_launch_pnl"] == 12.0
    assert patch["dna"].risk_tolerance < 60
