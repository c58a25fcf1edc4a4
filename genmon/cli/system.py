"""System commands — genmon init, status, export."""

from __future__ import annotations

from pathlib import Path

import orjson
import typer
from rich.console import Console
from rich.panel import Panel

from genmon.config import settings
from genmon.types import AgentType

app = typer.Typer(help="System management")
console = Console()


@app.command()
def init(
    starter: bool = typer.Option(
        True, "--starter/--empty", help="Seed one scout, analyst and launcher",
    ),
):
    """Initialize a genmon workspace in the current directory."""
    from genmon.cli.context import GenmonContext, run_async

    ctx = GenmonContext.get()

    async def _init():
        orchestrator = await ctx.ensure_loaded()
        created = []
        if starter and not ctx.population.alive():
            for agent_type in AgentType:
                created.append(await orchestrator.create_agent(agent_type=agent_type))
        return created

    created = run_async(_init())
    lines = [f"[green]genmon workspace initialized at {settings.workspace_dir}[/green]"]
    if created:
        lines.append("")
        lines.extend(f"  {a.type.value:<9} {a.name} ({a.id})" for a in created)
    lines.extend([
        "",
        "Run one consensus cycle:  [bold]genmon cycle[/bold]",
        "Run the swarm:            [bold]genmon run[/bold]",
    ])
    console.print(Panel("\n".join(lines), title="genmon", border_style="cyan"))


@app.command()
def status():
    """Show swarm-wide status."""
    from genmon import __version__
    from genmon.cli.context import GenmonContext, run_async

    ctx = GenmonContext.get()
    run_async(ctx.ensure_loaded())
    pop = ctx.population
    alive = pop.alive()
    by_type = {t: sum(1 for a in alive if a.type == t) for t in AgentType}
    launched = [p for p in pop.proposals if p.executed and p.successful]
    top_gen = max((a.generation for a in pop.agents), default=0)

    console.print(Panel(
        f"[bold]genmon v{__version__}[/bold]\n\n"
        f"Database:    {settings.db_path}\n"
        f"Market data: {'[yellow]offline[/yellow]' if settings.offline else '[green]live[/green]'}\n"
        f"Notify:      {'[green]on[/green]' if ctx.notifier.enabled else '[dim]off[/dim]'}\n"
        f"Alive:       {len(alive)} "
        f"({', '.join(f'{n} {t.value.lower()}' for t, n in by_type.items())})\n"
        f"Dead:        {len(pop.agents) - len(alive)}\n"
        f"Generations: {top_gen}\n"
        f"Proposals:   {len(pop.proposals)} ({len(launched)} launched)",
        title="Swarm Status",
        border_style="cyan",
    ))


@app.command()
def export(
    path: Path = typer.Argument(Path("genmon-snapshot.json"), help="Output file"),
):
    """Write the whole swarm (agents, proposals, lineage) to a JSON file."""
    from genmon.cli.context import GenmonContext, run_async

    ctx = GenmonContext.get()
    run_async(ctx.ensure_loaded())
    pop = ctx.population
    snapshot = {
        "agents": [a.model_dump(mode="json") for a in pop.agents],
        "proposals": [p.model_dump(mode="json") for p in pop.proposals],
        "breeding_log": [e.model_dump(mode="json") for e in pop.breeding_log],
    }
    path.write_bytes(orjson.dumps(snapshot, option=orjson.OPT_INDENT_2))
    console.print(f"[green]Exported {len(pop.agents)} agents to {path}[/green]")
