"""Tests for the in-memory population."""

import pytest

from genmon.engine.consensus import CycleResult
from genmon.exceptions import AgentNotFoundError, AgentStateError, ProposalNotFoundError
from genmon.swarm.population import Population
from genmon.types import (
    MAX_THOUGHTS,
    AgentStatus,
    AgentType,
    BreedingLogEntry,
    LaunchProposal,
    SwarmMessage,
)

from tests.conftest import make_agent


def _proposal(**fields):
    return LaunchProposal(
        token_name="NeoMoon", token_symbol="NEOM", concept="c", confidence=80,
        scout_id="s", analyst_id="a", launcher_id="l", **fields,
    )


def test_add_and_get_agent():
    pop = Population()
    agent = pop.add_agent(make_agent())
    assert pop.get_agent(agent.id) is agent
    assert len(pop) == 1


def test_get_missing_agent_raises():
    with pytest.raises(AgentNotFoundError):
        Population().get_agent("agent-nope")


def test_alive_filters_dead():
    live = make_agent()
    dead = make_agent(alive=False)
    pop = Population([live, dead])
    assert pop.alive() == [live]
    assert len(pop.agents) == 2


def test_thoughts_are_fifo():
    pop = Population()
    agent = pop.add_agent(make_agent())
    for i in range(15):
        pop.add_thought(agent.id, f"thought {i}")
    thoughts = pop.get_agent(agent.id).thoughts
    assert len(thoughts) == MAX_THOUGHTS
    assert thoughts[0] == "thought 5"
    assert thoughts[-1] == "thought 14"


def test_thoughts_trimmed_on_construction():
    agent = make_agent(thoughts=[str(i) for i in range(12)])
    assert agent.thoughts == [str(i) for i in range(2, 12)]


def test_kill_is_idempotent():
    pop = Population()
    agent = pop.add_agent(make_agent())
    pop.set_status(agent.id, AgentStatus.SCOUTING)
    assert pop.kill(agent.id) is True
    assert pop.kill(agent.id) is False
    killed = pop.get_agent(agent.id)
    assert not killed.alive
    assert killed.status == AgentStatus.IDLE


def test_dead_cannot_be_revived():
    pop = Population()
    agent = pop.add_agent(make_agent())
    pop.kill(agent.id)
    with pytest.raises(AgentStateError):
        pop.update_agent(agent.id, alive=True)


def test_update_agent_validates():
    pop = Population()
    agent = pop.add_agent(make_agent())
    updated = pop.update_agent(agent.id, launch_count=3, total_pnl=12.5)
    assert updated.launch_count == 3
    assert pop.get_agent(agent.id).total_pnl == 12.5
    with pytest.raises(ValueError):
        pop.update_agent(agent.id, launch_count=-1)


def test_proposal_outcome_fields_patchable():
    pop = Population()
    proposal = pop.add_proposal(_proposal())
    updated = pop.update_proposal(
        proposal.id, executed=True, successful=True, price_change=12.0, settled=True,
    )
    assert updated.executed and updated.successful and updated.settled
    assert pop.get_proposal(proposal.id).price_change == 12.0


def test_proposal_decision_fields_fixed():
    pop = Population()
    proposal = pop.add_proposal(_proposal())
    for field, value in [("confidence", 99), ("token_name", "X"), ("scout_id", "z")]:
        with pytest.raises(ValueError):
            pop.update_proposal(proposal.id, **{field: value})
    assert pop.get_proposal(proposal.id).confidence == 80


def test_get_missing_proposal_raises():
    with pytest.raises(ProposalNotFoundError):
        Population().get_proposal("prop-nope")


def test_message_and_breeding_history_caps():
    pop = Population()
    for i in range(60):
        pop.add_message(SwarmMessage(sender="a", recipient="b", text=str(i)))
        pop.add_breeding_log(BreedingLogEntry(parent_a="a", parent_b="b", child_id=str(i)))
    assert len(pop.messages) == 50
    assert pop.messages[0].text == "10"
    assert len(pop.breeding_log) == 20
    assert pop.breeding_log[-1].child_id == "59"


def test_apply_cycle():
    pop = Population()
    scout = pop.add_agent(make_agent(AgentType.SCOUT))
    proposal = _proposal()
    pop.apply_cycle(CycleResult(
        proposal=proposal,
        thoughts={scout.id: "Detected trend"},
        messages=[SwarmMessage(sender=scout.id, recipient="x", text="hi")],
    ))
    assert pop.get_agent(scout.id).thoughts[-1] == "Detected trend"
    assert pop.get_proposal(proposal.id) == proposal
    assert len(pop.messages) == 1
