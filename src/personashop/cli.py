"""CLI application for personashop."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from personashop.config import EngineConfig, configure_logging
from personashop.engine import PersonalizationEngine, PersonalizationState
from personashop.personas import PERSONA_INFO, PERSONA_ORDER
from personashop.preferences import PERSONA_PREFERENCES, PreferenceBundle
from personashop.scenarios import SCENARIOS

app = typer.Typer(help="Personashop: persona-driven storefront personalization")
console = Console()


def _format_value(value: object) -> str:
    return str(getattr(value, "value", value))


def _preferences_table(title: str, bundles: dict[str, PreferenceBundle]) -> Table:
    table = Table(title=title)
    table.add_column("Preference", style="bold")
    for name in bundles:
        table.add_column(name)

    for field_name in PreferenceBundle.field_names():
        table.add_row(
            field_name,
            *(_format_value(getattr(bundle, field_name)) for bundle in bundles.values()),
        )
    return table


def _print_state(state: PersonalizationState) -> None:
    info = PERSONA_INFO[state.persona]
    console.print(f"\n[bold green]{info.icon} {info.label}[/bold green]: {info.description}")

    scores = Table(title="Persona scores")
    scores.add_column("Persona")
    scores.add_column("Score", justify="right")
    for label in PERSONA_ORDER:
        style = "bold green" if label is state.persona else ""
        scores.add_row(label.value, f"{state.scores[label]:.3f}", style=style)
    console.print(scores)

    console.print(_preferences_table("Preferences", {"value": state.preferences}))


@app.command()
def serve(
    host: str = "0.0.0.0",
    port: int = 9020,
    reload: bool = False,
) -> None:
    """Start the FastAPI server."""
    import uvicorn

    console.print(f"[bold green]Starting Personashop API on {host}:{port}[/bold green]")
    uvicorn.run(
        "personashop.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from personashop import __version__

    console.print(f"[bold]Personashop[/bold] version [green]{__version__}[/green]")


@app.command()
def personas() -> None:
    """Show the default preferences of every persona."""
    bundles = {label.value: PERSONA_PREFERENCES[label] for label in PERSONA_ORDER}
    console.print(_preferences_table("Persona defaults", bundles))


@app.command()
def simulate(
    scenario: str = typer.Argument(
        ...,
        help=f"Scripted session to replay ({', '.join(SCENARIOS)})",
    ),
    epochs: int = typer.Option(
        50,
        "--epochs",
        help="Classifier training passes over the synthetic data",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Seed for synthetic data and weight initialization",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Replay a scripted session through a fresh engine and show the result."""
    if scenario not in SCENARIOS:
        console.print(f"[bold red]Error:[/bold red] unknown scenario {scenario!r}")
        console.print(f"Available: {', '.join(SCENARIOS)}")
        raise typer.Exit(1)

    configure_logging("DEBUG" if verbose else "WARNING")
    config = EngineConfig(
        training_epochs=epochs,
        seed=seed,
        reevaluate_interval_seconds=0,
        time_tick_seconds=0,
    )

    async def _simulate() -> PersonalizationState:
        console.print("[bold blue]Training persona classifier...[/bold blue]")
        async with PersonalizationEngine(config=config) as engine:
            events = SCENARIOS[scenario]
            console.print(f"[bold blue]Replaying {len(events)} events ({scenario})...[/bold blue]")
            for event in events:
                engine.record_event(event)
            return await engine.reevaluate()

    try:
        state = asyncio.run(_simulate())
    except KeyboardInterrupt:
        console.print("\n[bold red]Interrupted by user[/bold red]")
        raise typer.Exit(1)

    _print_state(state)


if __name__ == "__main__":
    app()
