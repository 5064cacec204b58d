"""
bo-engine CLI - run Bayesian optimization scenarios from the command line.
"""

from pathlib import Path
from typing import Optional
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from bo_engine import __version__
from bo_engine.config import get_settings
from bo_engine.core.runner import BORunner, RunState
from bo_engine.exceptions import BOEngineError
from bo_engine.plugins.registry import get_registry
from bo_engine.spec.loader import (
    BRANIN_SCENARIO,
    build_run_config,
    load_scenario,
    load_scenario_from_file,
)
from bo_engine.spec.models import ScenarioSpec

app = typer.Typer(
    name="bo-engine",
    help="bo-engine CLI - Bayesian optimization of black-box functions",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"bo-engine version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """bo-engine CLI - Bayesian optimization of black-box functions"""
    pass


def setup_logging(level: Optional[str]) -> None:
    """Route library logs through rich at the requested level."""
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _print_summary(scenario: ScenarioSpec, runner: BORunner, state: RunState) -> None:
    table = Table(title=f"Scenario: {scenario.name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Evaluations", f"{state.step} / {runner.config.budget}")
    table.add_row("Stopped", state.done_reason.value if state.done_reason else "-")
    table.add_row("Seed", str(runner.config.seed))
    table.add_row("Best value", f"{state.best_so_far:.6g}")
    if state.best_x is not None:
        decoded = runner.domain.decode(state.best_x)
        table.add_row(
            "Best point",
            ", ".join(
                f"{k}={v:.4g}" if isinstance(v, float) else f"{k}={v}"
                for k, v in decoded.items()
            ),
        )

    console.print(table)


def _run_scenario(
    scenario: ScenarioSpec,
    seed: Optional[int],
    budget: Optional[int],
    events: Optional[Path],
    output: Optional[Path],
) -> RunState:
    overrides = {}
    if seed is not None:
        overrides["seed"] = seed
    if budget is not None:
        overrides["budget"] = budget

    try:
        config = build_run_config(scenario, get_registry(), **overrides)
        runner = BORunner(config)
        state = runner.run()
    except BOEngineError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    _print_summary(scenario, runner, state)

    if events:
        runner.events.write_jsonl(events)
        console.print(f"[green]Wrote {len(runner.events)} events to {events}[/green]")
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        runner.to_dataframe().to_csv(output, index=False)
        console.print(f"[green]Wrote {state.step} evaluations to {output}[/green]")

    return state


# =============================================================================
# Run Commands
# =============================================================================

@app.command()
def run(
    scenario_file: Path = typer.Argument(..., help="Path to scenario YAML file"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Override the scenario seed"),
    budget: Optional[int] = typer.Option(None, "--budget", "-b", help="Override the evaluation budget"),
    events: Optional[Path] = typer.Option(None, "--events", "-e", help="Write the event log as JSON lines"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write evaluations as CSV"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Log level"),
):
    """Run a scenario file to completion."""
    setup_logging(log_level)

    try:
        scenario = load_scenario_from_file(scenario_file)
    except BOEngineError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    _run_scenario(scenario, seed, budget, events, output)


@app.command()
def branin(
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Override the scenario seed"),
    budget: Optional[int] = typer.Option(None, "--budget", "-b", help="Override the evaluation budget"),
    events: Optional[Path] = typer.Option(None, "--events", "-e", help="Write the event log as JSON lines"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write evaluations as CSV"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Log level"),
):
    """Run the bundled Branin benchmark."""
    from bo_engine.plugins.builtin.oracles import BRANIN_MINIMUM

    setup_logging(log_level)
    scenario = load_scenario(BRANIN_SCENARIO)
    state = _run_scenario(scenario, seed, budget, events, output)

    console.print(Panel.fit(
        f"[bold]Known minimum:[/bold] {BRANIN_MINIMUM}\n"
        f"[bold]Gap:[/bold] {state.best_so_far - BRANIN_MINIMUM:.6g}",
        title="Branin",
    ))


# =============================================================================
# Plugin Commands
# =============================================================================

@app.command()
def plugins():
    """List registered plugins."""
    registry = get_registry()

    table = Table(title="Plugins")
    table.add_column("Kind", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Version", style="magenta")
    table.add_column("Description", style="yellow")

    for type_registry in registry.registries():
        for name, plugin_class in type_registry.all().items():
            meta = plugin_class.get_meta()
            table.add_row(type_registry.kind, name, meta.version, meta.description)

    console.print(table)


if __name__ == "__main__":
    app()
