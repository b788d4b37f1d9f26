"""Typer-based CLI for tsgraph."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__, config_manager
from .analysis import analyze_source
from .chunker import BoundaryAwareChunker
from .crawler import DirectoryCrawler
from .errors import SourceParseError, TsGraphError
from .mermaid import render_sections

app = typer.Typer(
    help="TypeScript structure extraction and boundary-aware chunking with Mermaid graphs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"tsgraph v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log per-file and per-chunk decisions."),
):
    """tsgraph: split TypeScript sources into chunks paired with class diagrams."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _read_source(file: Path) -> str:
    try:
        return file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise typer.BadParameter(f"Cannot read {file}: {exc}")


def _fail(file: Path, exc: TsGraphError) -> None:
    console.print(f"[red]✗[/red] {file}: {exc}")
    raise typer.Exit(code=1)


@app.command("chunk")
def chunk_directory(
    root: Path = typer.Argument(..., exists=True, file_okay=False, help="Directory to scan."),
    max_size: Optional[int] = typer.Option(None, "--max-size", "-m", min=1, help="Chunk budget in characters."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="JSONL file to append records to."),
    ignore: Optional[List[str]] = typer.Option(None, "--ignore", "-i", help="Path segment to skip (repeatable)."),
    graph_only: bool = typer.Option(False, "--graph-only", help="Emit diagrams without code."),
):
    """Chunk every TypeScript/JavaScript file under ROOT into a JSONL log."""
    settings = config_manager.load_config()
    output_file = output or Path(settings.output_file)
    crawler = DirectoryCrawler(
        max_size or settings.max_context_size,
        ignore_paths=ignore or settings.ignore_paths,
        graph_only_dirs=settings.graph_only_dirs,
        graph_only=graph_only,
    )
    stats = crawler.crawl(root, output_file)

    table = Table(title=f"Chunked {root}", show_header=True)
    table.add_column("Files", justify="right")
    table.add_column("Chunks", justify="right")
    table.add_column("Failures", justify="right")
    table.add_column("Output")
    table.add_row(str(stats.files), str(stats.chunks), str(len(stats.failures)), str(output_file))
    console.print(table)

    for path, reason in stats.failures:
        console.print(f"  [yellow]⚠[/yellow] {path}: {reason}")


@app.command("model")
def show_model(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source file to analyze."),
):
    """Print the structural model of FILE as JSON."""
    try:
        model, _ = analyze_source(_read_source(file), file)
    except SourceParseError as exc:
        _fail(file, exc)
        return
    typer.echo(json.dumps(model.to_dict(), indent=2))
    summary = ", ".join(f"{count} {label}" for label, count in render_sections(model) if count)
    console.print(f"[dim]{summary or 'no entities'}[/dim]", highlight=False)


@app.command("graph")
def show_graph(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source file to render."),
):
    """Print the Mermaid class diagram of FILE."""
    try:
        _, graph = analyze_source(_read_source(file), file)
    except SourceParseError as exc:
        _fail(file, exc)
        return
    if not graph:
        console.print("[dim](no diagram)[/dim]")
        return
    typer.echo(graph, nl=False)


@app.command("split")
def split_file(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source file to chunk."),
    max_size: Optional[int] = typer.Option(None, "--max-size", "-m", min=1, help="Chunk budget in characters."),
):
    """Print the chunks of FILE with their diagrams."""
    size = max_size or config_manager.load_config().max_context_size
    try:
        chunks = BoundaryAwareChunker(size).chunk(_read_source(file), file)
    except SourceParseError as exc:
        _fail(file, exc)
        return
    for index, chunk in enumerate(chunks, start=1):
        console.rule(f"chunk {index} · {len(chunk.code) + len(chunk.graph)} chars")
        typer.echo(chunk.code)
        if chunk.graph:
            typer.echo("")
            typer.echo(chunk.graph, nl=False)


@app.command("show-config")
def show_config():
    """Show the current chunker defaults."""
    settings = config_manager.load_config()
    table = Table(show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in settings.to_dict().items():
        table.add_row(key, ", ".join(value) if isinstance(value, list) else str(value))
    table.add_row("config", str(config_manager.CONFIG_FILE))
    console.print(table)


@app.command("set-config")
def set_config(
    max_size: Optional[int] = typer.Option(None, "--max-size", "-m", min=1, help="Default chunk budget."),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Default JSONL output path."),
    ignore: Optional[List[str]] = typer.Option(None, "--ignore", "-i", help="Ignored path segments (replaces list)."),
    graph_only_dir: Optional[List[str]] = typer.Option(
        None, "--graph-only-dir", help="Directories emitted without code (replaces list)."
    ),
    reset: bool = typer.Option(False, "--reset", help="Drop saved settings and use built-in defaults."),
):
    """Persist chunker defaults to the config file."""
    if reset:
        if config_manager.reset_config():
            console.print("[green]✓[/green] Chunker settings reset to defaults")
        else:
            console.print("[dim]No saved chunker settings[/dim]")
        return

    settings = config_manager.load_config()
    if max_size is not None:
        settings.max_context_size = max_size
    if output:
        settings.output_file = output
    if ignore:
        settings.ignore_paths = list(ignore)
    if graph_only_dir:
        settings.graph_only_dirs = list(graph_only_dir)

    if not config_manager.save_config(settings):
        console.print(f"[red]✗[/red] Could not write {config_manager.CONFIG_FILE}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Saved to {config_manager.CONFIG_FILE}")
