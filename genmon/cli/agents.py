"""Agent management commands — genmon agent ps / spawn / show / breed."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from genmon.cli.context import GenmonContext, run_async
from genmon.exceptions import GenmonError
from genmon.types import DNA, AgentType

app = typer.Typer(help="Manage swarm agents")
console = Console()

TYPE_STYLE = {
    AgentType.SCOUT: "cyan",
    AgentType.ANALYST: "magenta",
    AgentType.LAUNCHER: "bright_red",
}


@app.command("ps")
def ps(
    all_agents: bool = typer.Option(False, "--all", "-a", help="Include dead agents"),
):
    """List agents with their DNA and track record."""
    ctx = GenmonContext.get()
    run_async(ctx.ensure_loaded())
    agents = ctx.population.agents if all_agents else ctx.population.alive()

    if not agents:
        console.print("[dim]No agents yet. Try: genmon agent spawn[/dim]")
        return

    table = Table(title="Swarm")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Type")
    table.add_column("Gen", justify="right")
    table.add_column("DNA R/C/S/A", style="blue")
    table.add_column("W/L", justify="right")
    table.add_column("PnL", justify="right", style="yellow")
    table.add_column("State")

    for a in agents:
        style = TYPE_STYLE[a.type]
        dna = a.dna
        state = a.status.value if a.alive else "[red]dead[/red]"
        table.add_row(
            a.id,
            a.name,
            f"[{style}]{a.type.value}[/{style}]",
            str(a.generation),
            f"{dna.risk_tolerance}/{dna.creativity}/{dna.social_savvy}/{dna.analytical_depth}",
            f"{a.success_count}/{a.fail_count}",
            f"{a.total_pnl:+.1f}",
            state,
        )

    console.print(table)


@app.command("spawn")
def spawn(
    name: str = typer.Option(None, "--name", "-n", help="Agent name"),
    agent_type: AgentType = typer.Option(None, "--type", "-t", help="Role (default: from DNA)"),
    risk: int = typer.Option(None, "--risk", min=0, max=100),
    creativity: int = typer.Option(None, "--creativity", min=0, max=100),
    social: int = typer.Option(None, "--social", min=0, max=100),
    analytical: int = typer.Option(None, "--analytical", min=0, max=100),
):
    """Create an agent. Give all four traits or none for random DNA."""
    traits = (risk, creativity, social, analytical)
    if any(t is not None for t in traits) and not all(t is not None for t in traits):
        console.print("[red]Give all four traits, or none for random DNA.[/red]")
        raise typer.Exit(1)

    dna = None
    if risk is not None:
        dna = DNA(
            risk_tolerance=risk,
            creativity=creativity,
            social_savvy=social,
            analytical_depth=analytical,
        )

    ctx = GenmonContext.get()

    async def _spawn():
        orchestrator = await ctx.ensure_loaded()
        return await orchestrator.create_agent(name=name, agent_type=agent_type, dna=dna)

    agent = run_async(_spawn())
    style = TYPE_STYLE[agent.type]
    console.print(
        f"[green]Spawned[/green] {agent.name} "
        f"[{style}]{agent.type.value}[/{style}] ({agent.id})"
    )


@app.command("show")
def show(agent_id: str = typer.Argument(help="Agent ID")):
    """Show one agent's DNA, record and recent thoughts."""
    ctx = GenmonContext.get()
    run_async(ctx.ensure_loaded())
    try:
        a = ctx.population.get_agent(agent_id)
    except GenmonError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    parents = " x ".join(a.parent_ids) if a.parent_ids else "-"
    thoughts = "\n".join(f"  - {t}" for t in a.thoughts) or "  (none)"
    console.print(Panel(
        f"[bold]{a.name}[/bold] {a.type.value}, generation {a.generation}"
        f"{'' if a.alive else ' [red](dead)[/red]'}\n\n"
        f"Risk {a.dna.risk_tolerance}  Creativity {a.dna.creativity}  "
        f"Social {a.dna.social_savvy}  Analytical {a.dna.analytical_depth}\n"
        f"Launches {a.launch_count}  Wins {a.success_count}  Losses {a.fail_count}\n"
        f"Total PnL {a.total_pnl:+.2f}  Best {a.best_launch_pnl:+.2f}\n"
        f"Parents   {parents}\n\n"
        f"Thoughts:\n{thoughts}",
        title=a.id,
        border_style=TYPE_STYLE[a.type],
    ))


@app.command("breed")
def breed(
    parent_a: str = typer.Argument(help="First parent ID"),
    parent_b: str = typer.Argument(help="Second parent ID"),
):
    """Breed two agents now, ignoring the breeding policy."""
    ctx = GenmonContext.get()

    async def _breed():
        orchestrator = await ctx.ensure_loaded()
        return await orchestrator.breed_now(parent_a, parent_b)

    try:
        child = run_async(_breed())
    except GenmonError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    console.print(
        f"[green]Born[/green] {child.name} ({child.type.value}, gen {child.generation}) "
        f"[dim]{child.id}[/dim]"
    )
