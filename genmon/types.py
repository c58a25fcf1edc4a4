"""Core types shared across all genmon subsystems."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Literal, TypeAlias

from pydantic import BaseModel, Field, field_validator

# ── ID Types ──────────────────────────────────────────────────────────────────

AgentId: TypeAlias = str
ProposalId: TypeAlias = str


def new_id() -> str:
    return uuid.uuid4().hex[:12]


# ── Agent Enums ───────────────────────────────────────────────────────────────


class AgentType(str, Enum):
    SCOUT = "SCOUT"
    ANALYST = "ANALYST"
    LAUNCHER = "LAUNCHER"


class AgentStatus(str, Enum):
    IDLE = "idle"
    SCOUTING = "scouting"
    ANALYZING = "analyzing"
    LAUNCHING = "launching"
    BREEDING = "breeding"


# What each type is doing while a cycle runs
WORKING_STATUS: dict[AgentType, AgentStatus] = {
    AgentType.SCOUT: AgentStatus.SCOUTING,
    AgentType.ANALYST: AgentStatus.ANALYZING,
    AgentType.LAUNCHER: AgentStatus.LAUNCHING,
}

MAX_THOUGHTS = 10


# ── DNA ──────────────────────────────────────────────────────────────────────

TRAIT_MIN = 0
TRAIT_MAX = 100

TRAITS = ("risk_tolerance", "creativity", "social_savvy", "analytical_depth")


class DNA(BaseModel):
    """Four behavioural traits, each an integer in [0, 100]."""

    risk_tolerance: int = Field(ge=TRAIT_MIN, le=TRAIT_MAX)
    creativity: int = Field(ge=TRAIT_MIN, le=TRAIT_MAX)
    social_savvy: int = Field(ge=TRAIT_MIN, le=TRAIT_MAX)
    analytical_depth: int = Field(ge=TRAIT_MIN, le=TRAIT_MAX)

    model_config = {"frozen": True}

    def merged(self, update: dict[str, int]) -> DNA:
        """Return a copy with a partial trait update applied (and validated)."""
        return DNA(**{**self.model_dump(), **update})


# ── Agent ────────────────────────────────────────────────────────────────────


class Agent(BaseModel):
    """A member of the swarm."""

    id: AgentId = Field(default_factory=lambda: f"agent-{new_id()}")
    name: str
    type: AgentType
    dna: DNA
    generation: int = Field(default=0, ge=0)
    alive: bool = True
    success_count: int = Field(default=0, ge=0)
    fail_count: int = Field(default=0, ge=0)
    launch_count: int = Field(default=0, ge=0)
    total_pnl: float = 0.0
    best_launch_pnl: float = 0.0
    status: AgentStatus = AgentStatus.IDLE
    thoughts: list[str] = Field(default_factory=list)
    parent_ids: tuple[AgentId, AgentId] | None = None
    birth_time: datetime = Field(default_factory=datetime.now)

    @field_validator("thoughts")
    @classmethod
    def _keep_latest_thoughts(cls, v: list[str]) -> list[str]:
        return v[-MAX_THOUGHTS:]

    @property
    def win_rate(self) -> float:
        if self.launch_count == 0:
            return 0.0
        return self.success_count / self.launch_count

    def add_thought(self, thought: str) -> None:
        """Append a thought, evicting the oldest beyond MAX_THOUGHTS."""
        self.thoughts.append(thought)
        if len(self.thoughts) > MAX_THOUGHTS:
            del self.thoughts[:-MAX_THOUGHTS]


# ── Launch Proposals ─────────────────────────────────────────────────────────


class Votes(BaseModel):
    scout: bool | None = None
    analyst: bool | None = None
    launcher: bool | None = None

    def count(self) -> int:
        """Number of yes votes."""
        return sum(1 for v in (self.scout, self.analyst, self.launcher) if v)


LaunchMode = Literal["simulation", "onchain"]


class LaunchProposal(BaseModel):
    """A swarm decision to launch a token.

    The engine fills in everything up to ``launcher_id``. The outcome
    fields below are written only by the launch executor and the
    performance tracker.
    """

    id: ProposalId = Field(default_factory=lambda: f"prop-{new_id()}")
    token_name: str
    token_symbol: str
    concept: str
    topic: str = ""
    confidence: int = Field(ge=0, le=100, frozen=True)
    votes: Votes = Field(default_factory=Votes)
    executed: bool = False
    successful: bool | None = None
    timestamp: datetime = Field(default_factory=datetime.now)
    scout_id: AgentId
    analyst_id: AgentId
    launcher_id: AgentId

    # Outcome tracking
    token_address: str | None = None
    launch_price: float | None = None
    current_price: float | None = None
    price_change: float | None = None
    volume_24h: float | None = None
    last_checked: datetime | None = None
    mode: LaunchMode | None = None
    settled: bool = False  # outcome credited to the contributing agents

    @property
    def contributor_ids(self) -> list[AgentId]:
        return [self.scout_id, self.analyst_id, self.launcher_id]


PROPOSAL_OUTCOME_FIELDS = frozenset({
    "executed",
    "successful",
    "token_address",
    "launch_price",
    "current_price",
    "price_change",
    "volume_24h",
    "last_checked",
    "mode",
    "settled",
})


# ── Evolution Records ────────────────────────────────────────────────────────


class BreedingLogEntry(BaseModel):
    """Append-only audit record of one birth."""

    id: str = Field(default_factory=new_id)
    parent_a: AgentId
    parent_b: AgentId
    child_id: AgentId
    timestamp: datetime = Field(default_factory=datetime.now)

    model_config = {"frozen": True}


class SwarmMessage(BaseModel):
    """Agent-to-agent chatter produced during a cycle."""

    sender: AgentId
    recipient: AgentId
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)
