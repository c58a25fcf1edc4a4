"""Shared test fixtures — seeded RNGs, agent factories, temp databases."""

from __future__ import annotations

import os
import random
import tempfile

import pytest

from genmon.types import DNA, Agent, AgentType


def make_agent(
    agent_type: AgentType = AgentType.SCOUT,
    risk: int = 50,
    creativity: int = 50,
    social: int = 50,
    analytical: int = 50,
    **fields,
) -> Agent:
    """Build an agent with explicit DNA; extra fields override defaults."""
    fields.setdefault("name", f"{agent_type.value.title()}-G0")
    return Agent(
        type=agent_type,
        dna=DNA(
            risk_tolerance=risk,
            creativity=creativity,
            social_savvy=social,
            analytical_depth=analytical,
        ),
        **fields,
    )


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def agent_factory():
    return make_agent


@pytest.fixture
def trio():
    """One alive agent of each type."""
    return [
        make_agent(AgentType.SCOUT, social=90),
        make_agent(AgentType.ANALYST, analytical=95),
        make_agent(AgentType.LAUNCHER, risk=90),
    ]


@pytest.fixture
def db_path():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    os.unlink(path)
