from __future__ import annotations

import json
import logging
from pathlib import Path
from time import perf_counter
from typing import Callable, TypeVar

import typer

from cutlists.config import Settings, load_settings
from cutlists.logging_config import configure_logging
from cutlists.models import RetrievalOutcome
from cutlists.progress import ProgressDisplay
from cutlists.selection import has_cutlists, retrieve_cutlist

app = typer.Typer(help="Retrieve and validate cutlists from a cutlist server.")
config_app = typer.Typer(help="Configuration commands.")

app.add_typer(config_app, name="config")

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONFIG_OPTION = typer.Option(
    Path("configs/default.yaml"),
    "--config",
    "-c",
    envvar="CUTLISTS_CONFIG",
    help="Path to YAML configuration file.",
)


class _DotProgress:
    """Prints one dot per tick to stderr."""

    def __init__(self) -> None:
        self.ticks = 0

    def tick(self) -> None:
        self.ticks += 1
        typer.echo(".", nl=False, err=True)


def _run_with_progress(
    step_index: int,
    total_steps: int,
    label: str,
    work: Callable[[ProgressDisplay], T],
) -> T:
    typer.echo(f"[{step_index}/{total_steps}] {label}...", err=True)
    display = _DotProgress()
    started_at = perf_counter()
    try:
        result = work(display)
    finally:
        if display.ticks:
            typer.echo("", err=True)
    elapsed = perf_counter() - started_at
    typer.echo(f"[{step_index}/{total_steps}] {label} done in {elapsed:.1f}s", err=True)
    return result


def _bootstrap(config_path: Path, verbose: bool = False) -> Settings:
    settings = load_settings(config_path)
    configure_logging(settings.logging, verbose=verbose)
    logger.debug("Loaded runtime settings from %s", config_path)
    return settings


@config_app.command("show")
def show_config(config_path: Path = CONFIG_OPTION) -> None:
    """Print resolved runtime configuration."""

    settings = _bootstrap(config_path)
    typer.echo(json.dumps(settings.model_dump(mode="json"), indent=2))


@app.command()
def fetch(
    video_keys: list[str] = typer.Argument(..., help="Video keys (recording file names) to fetch cutlists for."),
    config_path: Path = CONFIG_OPTION,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Fetch the best valid cutlist for each video key and print it as JSON."""

    settings = _bootstrap(config_path, verbose=verbose)
    total_steps = len(video_keys)
    failures = 0

    for step_index, video_key in enumerate(video_keys, start=1):
        outcome: RetrievalOutcome = _run_with_progress(
            step_index,
            total_steps,
            f"Fetch cutlist for {video_key}",
            lambda display, key=video_key: retrieve_cutlist(
                key,
                base_url=settings.server.base_url,
                timeout_seconds=settings.server.timeout_seconds,
                user_agent=settings.server.user_agent,
                on_tick=display.tick,
                tick_interval_seconds=settings.progress.interval_ms / 1000,
            ),
        )
        if not outcome.ok:
            failures += 1
            typer.echo(f"Error: {video_key}: {outcome.error}", err=True)
        typer.echo(json.dumps(outcome.to_dict(), indent=2))

    if failures:
        raise typer.Exit(code=1)


@app.command()
def check(
    video_key: str,
    config_path: Path = CONFIG_OPTION,
) -> None:
    """Report whether the cutlist server lists any cutlist for a video key."""

    settings = _bootstrap(config_path)
    available = has_cutlists(
        video_key,
        base_url=settings.server.base_url,
        timeout_seconds=settings.server.timeout_seconds,
        user_agent=settings.server.user_agent,
    )
    typer.echo(json.dumps({"video_key": video_key, "has_cutlists": available}, indent=2))
    if not available:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
