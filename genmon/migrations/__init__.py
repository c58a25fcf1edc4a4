"""Schema migrations for the genmon SQLite store.

Each ``m_NNN_description.py`` module defines ``async def upgrade(db)``;
the runner applies the ones newer than the recorded schema version.
"""
