"""Migration 001: agents, proposals and the breeding log."""

from __future__ import annotations

import aiosqlite


async def upgrade(db: aiosqlite.Connection) -> None:
    await db.execute("""
        CREATE TABLE IF NOT EXISTS agents (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            type TEXT NOT NULL,
            dna TEXT NOT NULL,
            generation INTEGER DEFAULT 0,
            alive INTEGER DEFAULT 1,
            success_count INTEGER DEFAULT 0,
            fail_count INTEGER DEFAULT 0,
            launch_count INTEGER DEFAULT 0,
            total_pnl REAL DEFAULT 0,
            best_launch_pnl REAL DEFAULT 0,
            status TEXT DEFAULT 'idle',
            thoughts TEXT DEFAULT '[]',
            parent_ids TEXT,
            birth_time TEXT NOT NULL
        )
    """)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS proposals (
            id TEXT PRIMARY KEY,
            token_name TEXT NOT NULL,
            token_symbol TEXT NOT NULL,
            concept TEXT,
            topic TEXT,
            confidence INTEGER NOT NULL,
            votes TEXT NOT NULL,
            executed INTEGER DEFAULT 0,
            successful INTEGER,
            timestamp TEXT NOT NULL,
            scout_id TEXT,
            analyst_id TEXT,
            launcher_id TEXT,
            token_address TEXT,
            launch_price REAL,
            current_price REAL,
            price_change REAL,
            volume_24h REAL,
            last_checked TEXT,
            mode TEXT,
            settled INTEGER DEFAULT 0
        )
    """)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS breeding_log (
            id TEXT PRIMARY KEY,
            parent_a TEXT NOT NULL,
            parent_b TEXT NOT NULL,
            child_id TEXT NOT NULL,
            timestamp TEXT NOT NULL
        )
    """)
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_agents_alive ON agents(alive)"
    )
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_proposals_time ON proposals(timestamp DESC)"
    )
