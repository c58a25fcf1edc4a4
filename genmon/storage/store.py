"""SwarmStore — SQLite persistence for agents, proposals and lineage.

Agents and proposals are upserted whole or patched field by field;
breeding log entries are insert-only. Nested values (DNA, votes,
thoughts) live in JSON columns. The swarm never waits on the store for
correctness: the in-memory population is the source of truth and the
store is a mirror.
"""

from __future__ import annotations

from typing import Any

import aiosqlite
import orjson
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from genmon.migrations.runner import apply_migrations
from genmon.types import Agent, AgentId, BreedingLogEntry, LaunchProposal, ProposalId

AGENT_COLUMNS = (
    "id", "name", "type", "dna", "generation", "alive", "success_count",
    "fail_count", "launch_count", "total_pnl", "best_launch_pnl", "status",
    "thoughts", "parent_ids", "birth_time",
)
PROPOSAL_COLUMNS = (
    "id", "token_name", "token_symbol", "concept", "topic", "confidence",
    "votes", "executed", "successful", "timestamp", "scout_id", "analyst_id",
    "launcher_id", "token_address", "launch_price", "current_price",
    "price_change", "volume_24h", "last_checked", "mode", "settled",
)
JSON_COLUMNS = frozenset({"dna", "thoughts", "parent_ids", "votes"})


def _encode(column: str, value: Any) -> Any:
    plain = to_jsonable_python(value)
    if column in JSON_COLUMNS:
        return None if plain is None else orjson.dumps(plain).decode()
    return plain


def _decode_row(row: aiosqlite.Row) -> dict[str, Any]:
    data = dict(row)
    for column in data.keys() & JSON_COLUMNS:
        if data[column] is not None:
            data[column] = orjson.loads(data[column])
    return data


class SwarmStore:
    """Async SQLite mirror of a swarm population."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await apply_migrations(self._db_path)

    async def _upsert(self, table: str, columns: tuple[str, ...], model: BaseModel) -> None:
        values = model.model_dump()
        placeholders = ", ".join("?" for _ in columns)
        updates = ", ".join(f"{c} = excluded.{c}" for c in columns if c != "id")
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) "
                f"ON CONFLICT(id) DO UPDATE SET {updates}",
                [_encode(c, values[c]) for c in columns],
            )
            await db.commit()

    async def _patch(
        self, table: str, columns: tuple[str, ...], row_id: str, fields: dict[str, Any],
    ) -> bool:
        unknown = set(fields) - set(columns)
        if unknown:
            raise ValueError(f"Unknown {table} columns: {sorted(unknown)}")
        if not fields:
            return False
        assignments = ", ".join(f"{c} = ?" for c in fields)
        params = [_encode(c, v) for c, v in fields.items()] + [row_id]
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?", params,
            )
            await db.commit()
            return cursor.rowcount > 0

    async def _select(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        rows = []
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(sql, params) as cursor:
                async for row in cursor:
                    rows.append(_decode_row(row))
        return rows

    # ── Agents ──────────────────────────────────────────────────

    async def upsert_agent(self, agent: Agent) -> None:
        await self._upsert("agents", AGENT_COLUMNS, agent)

    async def patch_agent(self, agent_id: AgentId, **fields: Any) -> bool:
        return await self._patch("agents", AGENT_COLUMNS, agent_id, fields)

    async def load_agents(self, alive_only: bool = False) -> list[Agent]:
        sql = "SELECT * FROM agents"
        if alive_only:
            sql += " WHERE alive = 1"
        sql += " ORDER BY birth_time"
        return [Agent.model_validate(r) for r in await self._select(sql)]

    # ── Proposals ───────────────────────────────────────────────

    async def upsert_proposal(self, proposal: LaunchProposal) -> None:
        await self._upsert("proposals", PROPOSAL_COLUMNS, proposal)

    async def patch_proposal(self, proposal_id: ProposalId, **fields: Any) -> bool:
        return await self._patch("proposals", PROPOSAL_COLUMNS, proposal_id, fields)

    async def load_proposals(self, limit: int = 100) -> list[LaunchProposal]:
        rows = await self._select(
            "SELECT * FROM proposals ORDER BY timestamp DESC LIMIT ?", (limit,),
        )
        return [LaunchProposal.model_validate(r) for r in rows]

    # ── Breeding log ────────────────────────────────────────────

    async def add_breeding_log(self, entry: BreedingLogEntry) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT INTO breeding_log (id, parent_a, parent_b, child_id, timestamp) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    entry.id,
                    entry.parent_a,
                    entry.parent_b,
                    entry.child_id,
                    entry.timestamp.isoformat(),
                ),
            )
            await db.commit()

    async def load_breeding_log(self, limit: int = 100) -> list[BreedingLogEntry]:
        rows = await self._select(
            "SELECT * FROM breeding_log ORDER BY timestamp DESC LIMIT ?", (limit,),
        )
        return [BreedingLogEntry.model_validate(r) for r in rows]
