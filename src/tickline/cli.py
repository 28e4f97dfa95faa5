"""Command-line interface for tickline."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .config import TimelineConfig, get_config_path, load_config
from .exceptions import ParseError
from .formatter import format_bar_beat, format_conversion_table, format_time
from .grid import iter_grid_lines
from .project import Project
from .storage import load_project


def _load(ctx: click.Context, project_file: str) -> Project:
    path = Path(project_file)
    config_path = ctx.obj.get("config_path") or get_config_path(path.parent)
    config = load_config(config_path) or TimelineConfig()
    try:
        return load_project(path, config)
    except ParseError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (defaults to tickline.json next to the project).",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """tickline - convert between ticks, seconds and bars."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command()
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("ticks", nargs=-1, type=float, required=True)
@click.option("--markdown", is_flag=True, help="Print a markdown table.")
@click.pass_context
def time(ctx: click.Context, project_file: str, ticks: tuple[float, ...], markdown: bool) -> None:
    """Convert tick positions to seconds and bar:beat."""
    project = _load(ctx, project_file)

    if markdown:
        click.echo(format_conversion_table(project, list(ticks)))
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Tick", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Seconds", justify="right", style="dim")
    table.add_column("Bar:Beat", justify="right")
    table.add_column("BPM", justify="right")
    for tick in ticks:
        seconds = project.tempo_map.get_time(tick)
        bar, beat = project.time_signature_map.get_bar_and_beat(tick)
        table.add_row(
            f"{tick:g}",
            format_time(seconds),
            f"{seconds:.6f}",
            format_bar_beat(bar, beat),
            f"{project.tempo_map.get_bpm_at(tick):g}",
        )
    Console().print(table)


@main.command()
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("seconds", nargs=-1, type=float, required=True)
@click.pass_context
def tick(ctx: click.Context, project_file: str, seconds: tuple[float, ...]) -> None:
    """Convert seconds to tick positions."""
    project = _load(ctx, project_file)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Seconds", justify="right")
    table.add_column("Tick", justify="right")
    table.add_column("Bar:Beat", justify="right")
    for value in seconds:
        position = project.tempo_map.get_tick(value)
        bar, beat = project.time_signature_map.get_bar_and_beat(position)
        table.add_row(f"{value:g}", f"{position:.3f}", format_bar_beat(bar, beat))
    Console().print(table)


@main.command()
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--start", "start_tick", type=float, default=0.0, show_default=True)
@click.option("--end", "end_tick", type=float, required=True)
@click.option("--beats/--no-beats", default=True, help="Include beat lines.")
@click.pass_context
def grid(ctx: click.Context, project_file: str, start_tick: float, end_tick: float, beats: bool) -> None:
    """List bar and beat lines between two ticks."""
    project = _load(ctx, project_file)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Tick", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Bar:Beat", justify="right")
    for line in iter_grid_lines(project.time_signature_map, start_tick, end_tick, beats):
        style = "bold" if line.is_bar else "dim"
        table.add_row(
            f"{line.tick:g}",
            format_time(project.tempo_map.get_time(line.tick)),
            format_bar_beat(line.bar_index, line.beat_index),
            style=style,
        )
    table.add_section()
    for tempo in project.tempo_map.tempos_in_range(start_tick, end_tick):
        table.add_row(f"{tempo.pos.value:g}", "", f"♩ = {tempo.bpm.value:g}", style="cyan")
    Console().print(table)


if __name__ == "__main__":
    main()
