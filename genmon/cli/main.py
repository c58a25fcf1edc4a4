"""genmon CLI — drive the swarm from the terminal.

`genmon cycle` runs one consensus cycle, `genmon evolve` one
tracking + selection + breeding pass, and `genmon run` keeps both going
on their schedules until interrupted.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console

from genmon.cli import agents, system
from genmon.config import settings

console = Console()

_app = typer.Typer(
    name="genmon",
    help="genmon -- a self-evolving swarm of token-launching agents.",
    no_args_is_help=True,
)

_app.add_typer(agents.app, name="agent", help="Manage agents (ps, spawn, show, breed)")
_app.add_typer(system.app, name="system", help="System management (init, status, export)")


@_app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@_app.command("init")
def init(
    starter: bool = typer.Option(True, "--starter/--empty", help="Seed one agent per role"),
):
    """Initialize workspace."""
    system.init(starter=starter)


@_app.command("status")
def status():
    """Show swarm status."""
    system.status()


@_app.command("ps")
def ps(all_agents: bool = typer.Option(False, "--all", "-a", help="Include dead agents")):
    """List agents."""
    agents.ps(all_agents=all_agents)


_app.command("spawn")(agents.spawn)
_app.command("breed")(agents.breed)
_app.command("export")(system.export)


@_app.command("cycle")
def cycle(
    count: int = typer.Option(1, "--count", "-n", help="Number of cycles to run"),
):
    """Run consensus cycles now: scout, analyze, vote, maybe launch."""
    from genmon.cli.context import GenmonContext, run_async

    ctx = GenmonContext.get()

    async def _cycles():
        orchestrator = await ctx.ensure_loaded()
        return [await orchestrator.run_full_cycle() for _ in range(count)]

    for i, report in enumerate(run_async(_cycles()), 1):
        result = report.cycle
        prefix = f"[dim]#{i}[/dim] " if count > 1 else ""
        if result.opportunity is None:
            console.print(f"{prefix}[yellow]Swarm incomplete: need a live scout, analyst and launcher.[/yellow]")
            continue
        opp = result.opportunity
        line = f"{prefix}{opp.topic} [dim](sentiment {opp.sentiment}%)[/dim]"
        if result.analysis is not None:
            line += f" -> confidence {result.analysis.confidence}% ({result.analysis.risk})"
        if result.proposal is None:
            console.print(f"{line} -> [dim]no launch[/dim]")
            continue
        p = result.proposal
        console.print(
            f"{line} -> [bold green]LAUNCH[/bold green] {p.token_name} (${p.token_symbol}) "
            f"votes {p.votes.count()}/3"
        )


@_app.command("evolve")
def evolve():
    """Track launched tokens, credit outcomes, cull and maybe breed."""
    from genmon.cli.context import GenmonContext, run_async

    ctx = GenmonContext.get()

    async def _evolve():
        orchestrator = await ctx.ensure_loaded()
        return await orchestrator.track_launch_performance()

    report = run_async(_evolve())
    console.print(
        f"Tracked {len(report.tracked)} launches, settled {len(report.settled)}."
    )
    for agent_id in report.died:
        console.print(f"[red]Eliminated[/red] {ctx.population.get_agent(agent_id).name}")
    if report.child is not None:
        c = report.child
        console.print(f"[green]Born[/green] {c.name} ({c.type.value}, gen {c.generation})")


@_app.command("run")
def run(
    cycle_interval: float = typer.Option(
        None, "--cycle-interval", help="Seconds between consensus cycles",
    ),
    evolution_interval: float = typer.Option(
        None, "--evolution-interval", help="Seconds between evolution passes",
    ),
):
    """Run the swarm on its schedules until Ctrl+C."""
    import asyncio

    from genmon.cli.context import GenmonContext, run_async
    from genmon.events.bus import Event
    from genmon.swarm.daemon import SwarmDaemon
    from rich.markup import escape

    ctx = GenmonContext.get()

    async def _echo(event: Event) -> None:
        console.print(f"[dim]{event.timestamp:%H:%M:%S}[/dim] [cyan]{event.topic}[/cyan] {escape(str(event.data))}")

    async def _start():
        await ctx.ensure_loaded()
        ctx.event_bus.subscribe("*", _echo)
        daemon = ctx.daemon
        if cycle_interval or evolution_interval:
            daemon = SwarmDaemon(
                ctx.orchestrator,
                cycle_interval=cycle_interval or settings.cycle_interval_seconds,
                evolution_interval=evolution_interval or settings.evolution_interval_seconds,
            )
        await daemon.start()
        console.print("[green]Swarm running.[/green] [dim]Press Ctrl+C to stop.[/dim]")
        try:
            while daemon.is_running:
                await asyncio.sleep(1)
        finally:
            await daemon.stop()

    try:
        run_async(_start())
    except KeyboardInterrupt:
        console.print("\n[dim]Swarm stopped.[/dim]")


@_app.command("proposals")
def proposals(
    limit: int = typer.Option(20, "--limit", "-n", help="Max proposals"),
):
    """Show recent launch proposals and how their tokens are doing."""
    from genmon.cli.context import GenmonContext, run_async
    from rich.table import Table

    ctx = GenmonContext.get()
    run_async(ctx.ensure_loaded())
    items = sorted(ctx.population.proposals, key=lambda p: p.timestamp, reverse=True)[:limit]

    if not items:
        console.print("[dim]No proposals yet.[/dim]")
        return

    table = Table(title="Launch Proposals")
    table.add_column("When", style="dim", no_wrap=True)
    table.add_column("Token", style="white")
    table.add_column("Topic", style="blue", max_width=20)
    table.add_column("Conf", justify="right")
    table.add_column("Votes", justify="center")
    table.add_column("Mode", style="dim")
    table.add_column("Change", justify="right")

    for p in items:
        votes = "".join(
            "Y" if v else "n" for v in (p.votes.scout, p.votes.analyst, p.votes.launcher)
        )
        change = "-" if p.price_change is None else f"{p.price_change:+.2f}%"
        table.add_row(
            p.timestamp.strftime("%Y-%m-%d %H:%M"),
            f"{p.token_name} (${p.token_symbol})",
            p.topic,
            f"{p.confidence}%",
            votes,
            p.mode or "-",
            change,
        )

    console.print(table)


@_app.command("lineage")
def lineage(
    limit: int = typer.Option(20, "--limit", "-n", help="Max births"),
):
    """Show the most recent births."""
    from genmon.cli.context import GenmonContext, run_async
    from genmon.exceptions import AgentNotFoundError

    ctx = GenmonContext.get()
    run_async(ctx.ensure_loaded())
    entries = list(reversed(ctx.population.breeding_log))[:limit]
    if not entries:
        console.print("[dim]No births yet.[/dim]")
        return

    def _name(agent_id: str) -> str:
        try:
            return ctx.population.get_agent(agent_id).name
        except AgentNotFoundError:
            return agent_id

    for e in entries:
        console.print(
            f"[dim]{e.timestamp:%Y-%m-%d %H:%M}[/dim] "
            f"{_name(e.parent_a)} x {_name(e.parent_b)} -> [green]{_name(e.child_id)}[/green]"
        )


def app():
    """Entry point."""
    _app()


if __name__ == "__main__":
    app()
