"""SwarmOrchestrator — binds the pure engine to the outside world.

The engine decides; the orchestrator fetches market data, commits the
engine's decisions to the population, executes launches, tracks how
launched tokens perform, feeds outcomes back into learning, and runs
natural selection and breeding.

Collaborator failures (market data, launch execution, storage,
notifications) are logged and absorbed. They never roll back a change
already applied to the population.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, Field

from genmon.engine.breeding import (
    BREEDING_CHANCE,
    MAX_POPULATION,
    MIN_BREEDING_POPULATION,
    breed,
    select_pair,
    should_attempt_breeding,
)
from genmon.engine.consensus import CycleResult, run_cycle
from genmon.engine.dna import random_dna, type_from_dna
from genmon.engine.learning import outcome_update
from genmon.engine.scouting import SentimentFeed
from genmon.engine.selection import select_for_death
from genmon.events.bus import (
    AGENT_BORN,
    AGENT_CREATED,
    AGENT_DIED,
    LAUNCH_PRICE_MOVE,
    SWARM_LAUNCH,
    SWARM_OPPORTUNITY,
    EventBus,
)
from genmon.exceptions import AgentNotFoundError, BreedingError, ProposalAlreadyExecutedError
from genmon.services.launcher import LaunchExecutor, LaunchResult, SimulatedLaunchExecutor
from genmon.services.market import MarketDataService
from genmon.storage.store import SwarmStore
from genmon.swarm.population import Population
from genmon.types import (
    DNA,
    WORKING_STATUS,
    Agent,
    AgentId,
    AgentStatus,
    AgentType,
    BreedingLogEntry,
    LaunchProposal,
    ProposalId,
    SwarmMessage,
)

_logger = logging.getLogger(__name__)

NAME_POOL = ["Alpha", "Nova", "Zephyr", "Blaze", "Echo", "Flux", "Onyx", "Pulse"]
OPPORTUNITY_SCORE = 75
PRICE_MOVE_PCT = 10.0
DEFAULT_LAUNCH_PRICE = 0.000001
SIM_PRICE_FLOOR = -95.0
SIM_PRICE_CAP = 500.0
DEATH_REASON = "Poor win rate / negative PnL"


class SwarmCycleReport(BaseModel):
    """What one full cycle did, including its side effects."""

    cycle: CycleResult = Field(default_factory=CycleResult)
    launch: LaunchResult | None = None
    feed_live: bool = False


class EvolutionReport(BaseModel):
    """What one tracking + evolution pass did."""

    tracked: list[ProposalId] = Field(default_factory=list)
    settled: list[ProposalId] = Field(default_factory=list)
    died: list[AgentId] = Field(default_factory=list)
    child: Agent | None = None
    parents: tuple[AgentId, AgentId] | None = None


class SwarmOrchestrator:
    """Runs cycles and evolution passes over one shared population."""

    def __init__(
        self,
        population: Population | None = None,
        market: MarketDataService | None = None,
        launcher: LaunchExecutor | None = None,
        store: SwarmStore | None = None,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
        feed: SentimentFeed | None = None,
        topic_limit: int = 10,
        settle_seconds: float = 120.0,
        min_breeding_population: int = MIN_BREEDING_POPULATION,
        max_population: int = MAX_POPULATION,
        breeding_chance: float = BREEDING_CHANCE,
    ) -> None:
        self.population = population if population is not None else Population()
        self.feed = feed if feed is not None else SentimentFeed()
        self.event_bus = event_bus or EventBus()
        self._market = market
        self._rng = rng or random.Random()
        self._launcher = launcher or SimulatedLaunchExecutor(self._rng)
        self._store = store
        self._topic_limit = topic_limit
        self._settle_seconds = settle_seconds
        self._min_breeding_population = min_breeding_population
        self._max_population = max_population
        self._breeding_chance = breeding_chance

    # ── Collaborator plumbing ───────────────────────────────────

    async def _mirror(self, op: Callable[[SwarmStore], Awaitable[Any]], what: str) -> None:
        """Write through to the store, if any. Failures are logged only."""
        if self._store is None:
            return
        try:
            await op(self._store)
        except Exception as e:
            _logger.warning("Store %s failed: %s", what, e)

    async def _emit(self, topic: str, data: dict[str, Any]) -> None:
        await self.event_bus.emit(topic, data, source="swarm")

    async def _patch_proposal(self, proposal_id: ProposalId, **patch: Any) -> LaunchProposal:
        proposal = self.population.update_proposal(proposal_id, **patch)
        await self._mirror(lambda s: s.patch_proposal(proposal_id, **patch), "patch_proposal")
        return proposal

    async def _think(self, agent_id: AgentId, thought: str) -> None:
        self.population.add_thought(agent_id, thought)
        thoughts = list(self.population.get_agent(agent_id).thoughts)
        await self._mirror(lambda s: s.patch_agent(agent_id, thoughts=thoughts), "thought")

    def _set_statuses(self, agents: list[Agent], status: AgentStatus | None = None) -> None:
        for agent in agents:
            self.population.set_status(agent.id, status or WORKING_STATUS[agent.type])

    # ── Agents ──────────────────────────────────────────────────

    async def create_agent(
        self,
        name: str | None = None,
        agent_type: AgentType | None = None,
        dna: DNA | None = None,
    ) -> Agent:
        """Add an agent. Missing DNA is random; a missing type follows the DNA."""
        dna = dna or random_dna(self._rng)
        agent = Agent(
            name=name or f"{self._rng.choice(NAME_POOL)}-G0",
            type=agent_type or type_from_dna(dna),
            dna=dna,
            thoughts=["Online and ready to hunt for opportunities."],
        )
        self.population.add_agent(agent)
        await self._mirror(lambda s: s.upsert_agent(agent), "upsert_agent")
        await self._emit(AGENT_CREATED, {"agent_id": agent.id, "name": agent.name, "type": agent.type.value})
        return agent

    # ── Consensus cycle ─────────────────────────────────────────

    async def refresh_sentiment(self) -> bool:
        """Pull trending topics into the feed. False keeps the old snapshot."""
        if self._market is None:
            return False
        try:
            entries = await self._market.get_market_sentiment(self._topic_limit)
        except Exception as e:
            _logger.warning("Sentiment refresh failed: %s", e)
            return False
        return self.feed.update(entries)

    async def run_full_cycle(self) -> SwarmCycleReport:
        """Refresh market data, run one consensus cycle and act on it."""
        report = SwarmCycleReport()
        await self.refresh_sentiment()
        report.feed_live = self.feed.is_live

        alive = self.population.alive()
        self._set_statuses(alive)
        try:
            result = run_cycle(alive, self.feed, self._rng)
            report.cycle = result

            self.population.apply_cycle(result)
            for agent_id in result.thoughts:
                thoughts = list(self.population.get_agent(agent_id).thoughts)
                await self._mirror(
                    lambda s, a=agent_id, t=thoughts: s.patch_agent(a, thoughts=t), "thought",
                )

            opportunity = result.opportunity
            if opportunity and opportunity.sentiment >= OPPORTUNITY_SCORE:
                source = "market" if self.feed.lookup(opportunity.topic) is not None else "synthetic"
                await self._emit(SWARM_OPPORTUNITY, {
                    "topic": opportunity.topic,
                    "score": opportunity.sentiment,
                    "source": source,
                })

            if result.proposal is not None:
                proposal = result.proposal
                await self._mirror(lambda s: s.upsert_proposal(proposal), "upsert_proposal")
                _logger.info(
                    "Swarm approved %s (%s) at %d%% confidence",
                    proposal.token_name, proposal.token_symbol, proposal.confidence,
                )
                try:
                    report.launch = await self.execute_proposal(proposal.id)
                except ProposalAlreadyExecutedError as e:
                    _logger.warning("Skipping launch: %s", e)
        finally:
            self._set_statuses(alive, AgentStatus.IDLE)
        return report

    async def execute_proposal(self, proposal_id: ProposalId) -> LaunchResult | None:
        """Hand a proposal to the launch executor. Each proposal runs at most once."""
        proposal = self.population.get_proposal(proposal_id)
        if proposal.executed:
            raise ProposalAlreadyExecutedError(f"Proposal {proposal_id} already executed")

        launcher_id = proposal.launcher_id
        await self._think(launcher_id, f"Launching {proposal.token_name}...")
        try:
            result = await self._launcher.execute(proposal)
        except Exception as e:
            _logger.warning("Launch of %s failed: %s", proposal.token_name, e)
            return None

        if not result.success:
            await self._patch_proposal(proposal_id, executed=True, successful=False)
            await self._think(launcher_id, f"Launch of {proposal.token_name} failed: {result.error}")
            return result

        price = result.launch_price or DEFAULT_LAUNCH_PRICE
        await self._patch_proposal(
            proposal_id,
            executed=True,
            successful=True,
            token_address=result.token_address,
            mode=result.mode,
            launch_price=price,
            current_price=price,
            price_change=0.0,
            last_checked=datetime.now(),
        )
        label = " (simulated)" if result.mode == "simulation" else ""
        address = (result.token_address or "")[:10]
        await self._think(launcher_id, f"Token launched{label}! Address: {address}...")
        await self._emit(SWARM_LAUNCH, {
            "proposal_id": proposal_id,
            "token_name": proposal.token_name,
            "token_symbol": proposal.token_symbol,
            "confidence": proposal.confidence,
            "mode": result.mode,
            "tx_hash": result.tx_hash,
        })
        return result

    # ── Outcomes & learning ─────────────────────────────────────

    async def _observe_price(self, proposal: LaunchProposal) -> float | None:
        """Update a launched token's price fields. Returns the % change."""
        pairs = []
        if self._market is not None and proposal.token_address:
            try:
                pairs = await self._market.search_dex_pairs(proposal.token_address)
            except Exception as e:
                _logger.warning("Price lookup for %s failed: %s", proposal.token_name, e)

        if pairs:
            pair = pairs[0]
            launch_price = proposal.launch_price or pair.price_usd or DEFAULT_LAUNCH_PRICE
            change = (pair.price_usd - launch_price) / launch_price * 100 if launch_price > 0 else 0.0
            volume = pair.volume_24h
            current = pair.price_usd
        elif proposal.mode == "simulation":
            # A random walk whose volatility grows with the token's age.
            age_minutes = (datetime.now() - proposal.timestamp).total_seconds() / 60
            drift = (self._rng.random() - 0.45) * 2
            volatility = min(50.0, age_minutes * 0.5)
            change = (proposal.price_change or 0.0) + drift * (volatility / 10)
            change = max(SIM_PRICE_FLOOR, min(SIM_PRICE_CAP, change))
            launch_price = proposal.launch_price or DEFAULT_LAUNCH_PRICE
            current = max(0.0, launch_price * (1 + change / 100))
            volume = float(self._rng.randrange(50000) + 1000)
        else:
            return None

        change = round(change, 2)
        await self._patch_proposal(
            proposal.id,
            launch_price=launch_price,
            current_price=current,
            price_change=change,
            volume_24h=volume,
            last_checked=datetime.now(),
        )
        if abs(change) >= PRICE_MOVE_PCT:
            await self._emit(LAUNCH_PRICE_MOVE, {
                "proposal_id": proposal.id,
                "token_name": proposal.token_name,
                "price_change": change,
                "volume_24h": volume,
            })
        return change

    def _credit_outcome(self, proposal: LaunchProposal, pnl: float) -> dict[AgentId, dict[str, Any]]:
        """Commit a realised PnL to every alive contributor, in memory only."""
        patches: dict[AgentId, dict[str, Any]] = {}
        for agent_id in proposal.contributor_ids:
            try:
                agent = self.population.get_agent(agent_id)
            except AgentNotFoundError:
                continue
            if not agent.alive:
                continue
            patch = outcome_update(agent, pnl, self._rng)
            self.population.update_agent(agent_id, **patch)
            patches[agent_id] = patch
        return patches

    async def _mirror_agent_patches(self, patches: dict[AgentId, dict[str, Any]]) -> None:
        for agent_id, patch in patches.items():
            await self._mirror(
                lambda s, a=agent_id, p=patch: s.patch_agent(a, **p), "patch_agent",
            )

    async def apply_learning(self, proposal: LaunchProposal, pnl: float) -> list[AgentId]:
        """Credit a realised PnL to every alive agent behind a proposal."""
        patches = self._credit_outcome(proposal, pnl)
        await self._mirror_agent_patches(patches)
        return list(patches)

    async def track_launch_performance(self) -> EvolutionReport:
        """Refresh launched-token prices, settle mature outcomes, then evolve.

        Settling credits every contributor and marks the proposal settled
        in one step with no await in between, so a cancelled pass never
        leaves a proposal half-credited.
        """
        tracked: list[ProposalId] = []
        settled: list[ProposalId] = []
        for proposal in self.population.proposals:
            if not (proposal.executed and proposal.token_address):
                continue
            change = await self._observe_price(proposal)
            if change is None:
                continue
            tracked.append(proposal.id)

            proposal = self.population.get_proposal(proposal.id)
            age = (datetime.now() - proposal.timestamp).total_seconds()
            if proposal.settled or age < self._settle_seconds:
                continue
            patches = self._credit_outcome(proposal, change)
            self.population.update_proposal(proposal.id, settled=True)
            settled.append(proposal.id)
            await self._mirror_agent_patches(patches)
            await self._mirror(
                lambda s, p=proposal.id: s.patch_proposal(p, settled=True), "patch_proposal",
            )

        report = await self.run_evolution_pass()
        report.tracked = tracked
        report.settled = settled
        return report


    # ── Evolution ───────────────────────────────────────────────

    async def run_evolution_pass(self) -> EvolutionReport:
        """Natural selection, then (maybe) one birth."""
        report = EvolutionReport()

        for agent in select_for_death(self.population.alive()):
            if not self.population.kill(agent.id):
                continue
            await self._mirror(
                lambda s, a=agent.id: s.patch_agent(a, alive=False, status=AgentStatus.IDLE),
                "kill",
            )
            await self._think(
                agent.id, "Natural selection: eliminated due to poor performance.",
            )
            report.died.append(agent.id)
            _logger.info("Agent %s (%s) eliminated", agent.name, agent.id)
            await self._emit(AGENT_DIED, {
                "agent_id": agent.id, "name": agent.name, "reason": DEATH_REASON,
            })

        alive = self.population.alive()
        if not should_attempt_breeding(
            len(alive),
            self._rng,
            min_population=self._min_breeding_population,
            max_population=self._max_population,
            chance=self._breeding_chance,
        ):
            return report

        pair = select_pair(alive, self._rng)
        if pair is None:
            return report
        report.child = await self._give_birth(*pair)
        report.parents = (pair[0].id, pair[1].id)
        return report

    async def breed_now(self, parent_a_id: AgentId, parent_b_id: AgentId) -> Agent:
        """Breed two named agents immediately, bypassing the breeding policy."""
        if parent_a_id == parent_b_id:
            raise BreedingError("An agent cannot breed with itself")
        parent_a = self.population.get_agent(parent_a_id)
        parent_b = self.population.get_agent(parent_b_id)
        for parent in (parent_a, parent_b):
            if not parent.alive:
                raise BreedingError(f"Agent {parent.id} is dead")
        return await self._give_birth(parent_a, parent_b)

    async def _give_birth(self, parent_a: Agent, parent_b: Agent) -> Agent:
        child = breed(parent_a, parent_b, self._rng)
        self.population.add_agent(child)
        await self._mirror(lambda s: s.upsert_agent(child), "upsert_agent")

        entry = BreedingLogEntry(parent_a=parent_a.id, parent_b=parent_b.id, child_id=child.id)
        self.population.add_breeding_log(entry)
        await self._mirror(lambda s: s.add_breeding_log(entry), "breeding_log")

        await self._think(parent_a.id, f"Bred with {parent_b.name} -> {child.name}")
        await self._think(parent_b.id, f"Bred with {parent_a.name} -> {child.name}")
        self.population.add_message(SwarmMessage(
            sender=parent_a.id,
            recipient=parent_b.id,
            text=f"New offspring: {child.name} (Gen {child.generation})",
        ))
        _logger.info(
            "%s born to %s x %s (gen %d, %s)",
            child.name, parent_a.name, parent_b.name, child.generation, child.type.value,
        )
        await self._emit(AGENT_BORN, {
            "child_id": child.id,
            "child_name": child.name,
            "generation": child.generation,
            "parent_a_name": parent_a.name,
            "parent_b_name": parent_b.name,
        })
        return child
