"""Schema migrations for the swarm database.

A migration is a module in this package named `m_NNN_description.py`
that defines `async def upgrade(db: aiosqlite.Connection)`. Applied
versions are recorded in `schema_version`; anything newer than the
highest recorded version is applied in order, each in its own
transaction.
"""

from __future__ import annotations

import importlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

_logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
_MIGRATION_RE = re.compile(r"^m_(\d+)_\w+$")

_VERSION_TABLE = (
    "CREATE TABLE IF NOT EXISTS schema_version ("
    "version INTEGER PRIMARY KEY, "
    "name TEXT, "
    "applied_at TEXT DEFAULT CURRENT_TIMESTAMP)"
)


@dataclass(frozen=True)
class Migration:
    version: int
    name: str


def _version_of(path: Path) -> int | None:
    match = _MIGRATION_RE.match(path.stem)
    return int(match.group(1)) if match else None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[Migration]:
    """Migration modules in `directory`, oldest first.

    Two modules claiming the same version is a packaging error.
    """
    found: dict[int, Migration] = {}
    for path in directory.glob("m_*.py"):
        version = _version_of(path)
        if version is None:
            continue
        if version in found:
            raise ValueError(
                f"Migrations {found[version].name} and {path.stem} share version {version}"
            )
        found[version] = Migration(version, path.stem)
    return [found[v] for v in sorted(found)]


async def _current_version(db: aiosqlite.Connection) -> int:
    await db.execute(_VERSION_TABLE)
    await db.commit()
    cursor = await db.execute("SELECT MAX(version) FROM schema_version")
    (version,) = await cursor.fetchone()
    return version or 0


async def get_schema_version(db_path: str | Path) -> int:
    """Current schema version of the database (0 when fresh)."""
    async with aiosqlite.connect(db_path) as db:
        return await _current_version(db)


async def apply_migrations(db_path: str | Path) -> list[int]:
    """Bring the database up to date. Returns the versions applied."""
    applied: list[int] = []
    async with aiosqlite.connect(db_path) as db:
        current = await _current_version(db)
        for migration in discover_migrations():
            if migration.version <= current:
                continue
            module = importlib.import_module(f"{__package__}.{migration.name}")
            try:
                await module.upgrade(db)
                await db.execute(
                    "INSERT INTO schema_version (version, name) VALUES (?, ?)",
                    (migration.version, migration.name),
                )
                await db.commit()
            except Exception:
                await db.rollback()
                _logger.error("Migration %s failed", migration.name)
                raise
            _logger.info("Applied migration %s", migration.name)
            applied.append(migration.version)
    return applied
