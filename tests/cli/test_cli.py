"""Tests for the genmon CLI."""

import orjson
import pytest
from typer.testing import CliRunner

from genmon.cli.context import GenmonContext
from genmon.cli.main import _app
from genmon.config import settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def workspace(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "workspace_dir", tmp_path / ".genmon")
    monkeypatch.setattr(settings, "db_path", tmp_path / ".genmon" / "genmon.db")
    monkeypatch.setattr(settings, "offline", True)
    monkeypatch.setattr(settings, "seed", 42)
    monkeypatch.setattr(settings, "notify_webhook_url", "")
    GenmonContext._instance = None
    yield tmp_path
    GenmonContext._instance = None


def _alive():
    return GenmonContext.get().population.alive()


def test_init_seeds_starter_swarm():
    result = runner.invoke(_app, ["init"])
    assert result.exit_code == 0, result.output
    assert "initialized" in result.output
    assert sorted(a.type.value for a in _alive()) == ["ANALYST", "LAUNCHER", "SCOUT"]
    assert settings.db_path.exists()


def test_init_empty():
    result = runner.invoke(_app, ["init", "--empty"])
    assert result.exit_code == 0
    assert _alive() == []


def test_agents_survive_a_restart():
    runner.invoke(_app, ["init"])
    ids = sorted(a.id for a in _alive())
    GenmonContext._instance = None
    result = runner.invoke(_app, ["ps"])
    assert result.exit_code == 0
    assert sorted(a.id for a in _alive()) == ids


def test_status():
    runner.invoke(_app, ["init"])
    result = runner.invoke(_app, ["status"])
    assert result.exit_code == 0
    assert "Swarm Status" in result.output
    assert "offline" in result.output


def test_spawn_with_explicit_dna():
    result = runner.invoke(_app, [
        "agent", "spawn", "--name", "Tank", "--risk", "95", "--creativity", "5",
        "--social", "5", "--analytical", "5",
    ])
    assert result.exit_code == 0, result.output
    [agent] = _alive()
    assert agent.name == "Tank"
    assert agent.type.value == "LAUNCHER"
    assert agent.dna.risk_tolerance == 95


def test_spawn_rejects_partial_dna():
    result = runner.invoke(_app, ["agent", "spawn", "--risk", "50"])
    assert result.exit_code == 1
    assert _alive() == []


def test_cycle_runs():
    runner.invoke(_app, ["init"])
    result = runner.invoke(_app, ["cycle", "-n", "3"])
    assert result.exit_code == 0, result.output
    assert "#3" in result.output


def test_cycle_on_empty_swarm():
    runner.invoke(_app, ["init", "--empty"])
    result = runner.invoke(_app, ["cycle"])
    assert result.exit_code == 0
    assert "Swarm incomplete" in result.output


def test_evolve_runs():
    runner.invoke(_app, ["init"])
    result = runner.invoke(_app, ["evolve"])
    assert result.exit_code == 0, result.output
    assert "Tracked 0 launches" in result.output


def test_breed_and_lineage():
    runner.invoke(_app, ["init"])
    a, b = _alive()[:2]
    result = runner.invoke(_app, ["agent", "breed", a.id, b.id])
    assert result.exit_code == 0, result.output
    assert "Born" in result.output
    assert len(_alive()) == 4

    result = runner.invoke(_app, ["lineage"])
    assert result.exit_code == 0
    assert a.name in result.output


def test_breed_with_self_fails():
    runner.invoke(_app, ["init"])
    agent = _alive()[0]
    result = runner.invoke(_app, ["agent", "breed", agent.id, agent.id])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_show_unknown_agent():
    result = runner.invoke(_app, ["agent", "show", "agent-ghost"])
    assert result.exit_code == 1


def test_empty_history_views():
    runner.invoke(_app, ["init", "--empty"])
    assert "No proposals yet." in runner.invoke(_app, ["proposals"]).output
    assert "No births yet." in runner.invoke(_app, ["lineage"]).output


def test_export(workspace):
    runner.invoke(_app, ["init"])
    out = workspace / "snapshot.json"
    result = runner.invoke(_app, ["system", "export", str(out)])
    assert result.exit_code == 0, result.output
    snapshot = orjson.loads(out.read_bytes())
    assert len(snapshot["agents"]) == 3
    assert snapshot["proposals"] == []
    assert snapshot["breeding_log"] == []


def test_top_level_shortcuts(workspace):
    result = runner.invoke(_app, ["spawn", "--type", "SCOUT"])
    assert result.exit_code == 0, result.output
    result = runner.invoke(_app, ["spawn", "--type", "ANALYST"])
    assert result.exit_code == 0, result.output
    a, b = _alive()
    assert runner.invoke(_app, ["breed", a.id, b.id]).exit_code == 0
    out = workspace / "top.json"
    assert runner.invoke(_app, ["export", str(out)]).exit_code == 0
    assert len(orjson.loads(out.read_bytes())["agents"]) == 3
