"""Population — the shared, in-memory state of one swarm.

Holds agents, launch proposals, swarm chatter and the breeding log.
It assumes a single writer: the orchestrator, driven by the daemon,
is the only thing that mutates it.
"""

from __future__ import annotations

from typing import Any

from genmon.engine.consensus import CycleResult
from genmon.exceptions import AgentNotFoundError, AgentStateError, ProposalNotFoundError
from genmon.types import (
    PROPOSAL_OUTCOME_FIELDS,
    Agent,
    AgentId,
    AgentStatus,
    BreedingLogEntry,
    LaunchProposal,
    ProposalId,
    SwarmMessage,
)

MESSAGE_HISTORY = 50
BREEDING_HISTORY = 20


class Population:
    """Agents plus everything the swarm has said and decided."""

    def __init__(self, agents: list[Agent] | None = None) -> None:
        self._agents: dict[AgentId, Agent] = {}
        self._proposals: dict[ProposalId, LaunchProposal] = {}
        self._messages: list[SwarmMessage] = []
        self._breeding_log: list[BreedingLogEntry] = []
        for agent in agents or []:
            self.add_agent(agent)

    # ── Agents ──────────────────────────────────────────────────

    def add_agent(self, agent: Agent) -> Agent:
        self._agents[agent.id] = agent
        return agent

    def get_agent(self, agent_id: AgentId) -> Agent:
        agent = self._agents.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(f"No agent {agent_id}")
        return agent

    @property
    def agents(self) -> list[Agent]:
        return list(self._agents.values())

    def alive(self) -> list[Agent]:
        return [a for a in self._agents.values() if a.alive]

    def update_agent(self, agent_id: AgentId, **patch: Any) -> Agent:
        """Apply a partial update as one validated replacement."""
        agent = self.get_agent(agent_id)
        if patch.get("alive") and not agent.alive:
            raise AgentStateError(f"Agent {agent_id} is dead and cannot be revived")
        updated = Agent.model_validate({**agent.model_dump(), **patch})
        self._agents[agent_id] = updated
        return updated

    def set_status(self, agent_id: AgentId, status: AgentStatus) -> None:
        self.get_agent(agent_id).status = status

    def add_thought(self, agent_id: AgentId, thought: str) -> None:
        self.get_agent(agent_id).add_thought(thought)

    def kill(self, agent_id: AgentId) -> bool:
        """Soft-delete an agent. Returns False if it was already dead."""
        agent = self.get_agent(agent_id)
        if not agent.alive:
            return False
        agent.alive = False
        agent.status = AgentStatus.IDLE
        return True

    # ── Proposals ───────────────────────────────────────────────

    def add_proposal(self, proposal: LaunchProposal) -> LaunchProposal:
        self._proposals[proposal.id] = proposal
        return proposal

    def get_proposal(self, proposal_id: ProposalId) -> LaunchProposal:
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(f"No proposal {proposal_id}")
        return proposal

    @property
    def proposals(self) -> list[LaunchProposal]:
        return list(self._proposals.values())

    def update_proposal(self, proposal_id: ProposalId, **patch: Any) -> LaunchProposal:
        """Patch outcome fields. Decision fields are fixed at creation."""
        proposal = self.get_proposal(proposal_id)
        fixed = set(patch) - PROPOSAL_OUTCOME_FIELDS
        if fixed:
            raise ValueError(f"Cannot change {sorted(fixed)} on proposal {proposal_id}")
        updated = proposal.model_copy(update=patch)
        self._proposals[proposal_id] = updated
        return updated

    # ── Chatter & lineage ───────────────────────────────────────

    def add_message(self, message: SwarmMessage) -> None:
        self._messages.append(message)
        if len(self._messages) > MESSAGE_HISTORY:
            self._messages = self._messages[-MESSAGE_HISTORY:]

    @property
    def messages(self) -> list[SwarmMessage]:
        return list(self._messages)

    def add_breeding_log(self, entry: BreedingLogEntry) -> None:
        self._breeding_log.append(entry)
        if len(self._breeding_log) > BREEDING_HISTORY:
            self._breeding_log = self._breeding_log[-BREEDING_HISTORY:]

    @property
    def breeding_log(self) -> list[BreedingLogEntry]:
        return list(self._breeding_log)

    # ── Cycle application ───────────────────────────────────────

    def apply_cycle(self, result: CycleResult) -> None:
        """Commit a consensus cycle's thoughts, messages and proposal."""
        for agent_id, thought in result.thoughts.items():
            self.add_thought(agent_id, thought)
        for message in result.messages:
            self.add_message(message)
        if result.proposal is not None:
            self.add_proposal(result.proposal)

    def __len__(self) -> int:
        return len(self._agents)

    def __repr__(self) -> str:
        return f"Population(agents={len(self._agents)}, alive={len(self.alive())})"
