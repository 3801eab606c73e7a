"""
KJV OSIS Importer - Main CLI Application

Command-line interface for fetching, converting and analysing the CrossWire
KJV OSIS document.
"""
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import Config, get_config
from core.errors import KjvError
from data.schemas import ParseResult
from integrations.crosswire import CrosswireImporter, ImportSummary
from observability.logging import get_logger, setup_logging, shutdown_logging
from osis.converter import convert
from osis.references import ReferencePolicy
from reports.strongs import DEFAULT_LIMIT, build_report, render_markdown

# Initialize app
app = typer.Typer(
    name="kjv-import",
    help="KJV OSIS Importer - CrossWire KJV to per-verse JSON records",
    add_completion=False
)

console = Console()
logger = get_logger("kjv.cli")


def _configure(verbose: bool = False) -> Config:
    """Apply logging settings from the effective configuration."""
    config = get_config()
    if verbose:
        config.logging.level = "DEBUG"
    shutdown_logging()
    setup_logging(config.logging)
    return config


def _fail(error: KjvError) -> None:
    console.print(f"[red]Error: {error.message}[/red]")
    for suggestion in error.suggestions:
        console.print(f"  - {suggestion}")
    logger.error("Command failed", **error.to_dict())
    raise typer.Exit(1)


def _convert_local(source: Path, config: Config) -> ParseResult:
    config.ensure_valid()
    if not source.exists():
        console.print(f"[red]Error: Source file not found: {source}[/red]")
        raise typer.Exit(1)
    return convert(
        source,
        policy=ReferencePolicy(config.parser.default_strongs_prefix),
        chunk_size=config.parser.chunk_size,
    )


@app.command()
def run(
    source: Optional[Path] = typer.Option(None, "--source", "-s", help="Local OSIS file (skips download)"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help="Verse store root"),
    edition: Optional[str] = typer.Option(None, "--edition", "-e", help="Edition directory name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Fetch (or read), convert and store the whole KJV."""
    config = _configure(verbose)
    if data_dir is not None:
        config.store.data_dir = data_dir
    if edition is not None:
        config.store.edition = edition

    console.print(Panel.fit(
        "[bold blue]KJV OSIS Importer[/bold blue]",
        border_style="blue"
    ))

    try:
        summary = CrosswireImporter(config).run(source)
    except KjvError as e:
        _fail(e)
        return

    _display_summary(summary)
    console.print(f"[green]Verses written to {summary.output_dir}[/green]")


@app.command("convert")
def convert_command(
    source: Path = typer.Argument(..., help="OSIS XML file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write all verse records as JSON lines"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Convert a local OSIS file without writing the verse store."""
    config = _configure(verbose)
    try:
        result = _convert_local(source, config)
    except KjvError as e:
        _fail(e)
        return

    _display_result(result)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            for verse in result.verses:
                record = {"id": verse.verse_id, **verse.to_dict()}
                f.write(json.dumps(record, ensure_ascii=False) + "\n")
        console.print(f"[green]Records saved to {output}[/green]")


@app.command()
def report(
    source: Path = typer.Argument(..., help="OSIS XML file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Markdown report file"),
    limit: int = typer.Option(DEFAULT_LIMIT, "--limit", "-n", help="Rows in the word table"),
):
    """Analyse words that carry no Strong's number."""
    config = _configure()
    try:
        result = _convert_local(source, config)
    except KjvError as e:
        _fail(e)
        return

    markdown = render_markdown(build_report(result), limit=limit)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(markdown, encoding="utf-8")
        console.print(f"[green]Report saved to {output}[/green]")
    else:
        console.print(markdown, markup=False, highlight=False)


@app.command("config")
def show_config():
    """Show the effective configuration and any problems with it."""
    config = _configure()

    table = Table(title="Configuration")
    table.add_column("Section", style="cyan")
    table.add_column("Key")
    table.add_column("Value", style="green")

    for section, values in config.to_dict().items():
        if isinstance(values, dict):
            for key, value in values.items():
                table.add_row(section, key, str(value))
        else:
            table.add_row("", section, str(values))
    console.print(table)

    problems = config.validate()
    for problem in problems:
        console.print(f"[red]  - {problem}[/red]")
    if problems:
        raise typer.Exit(1)
    console.print("[green]Configuration valid[/green]")


def _display_result(result: ParseResult):
    """Display conversion counts as rich table."""
    table = Table(title="Conversion Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Books", str(len(result.books())))
    table.add_row("Verses", str(len(result.verses)))
    table.add_row("Words", str(result.word_count))
    table.add_row("Colophons attached", str(result.attached_colophon_count))
    table.add_row("Diagnostics", str(len(result.diagnostics)))

    console.print(table)
    _display_diagnostics(result.diagnostics)


def _display_summary(summary: ImportSummary):
    """Display import counts as rich table."""
    table = Table(title="Import Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Source", str(summary.source))
    table.add_row("Verses", str(summary.verses))
    table.add_row("Words", str(summary.words))
    table.add_row("Colophons attached", str(summary.colophons_attached))
    table.add_row("Diagnostics", str(len(summary.diagnostics)))
    table.add_row("Duration", f"{summary.duration:.2f}s")

    console.print(table)
    _display_diagnostics(summary.diagnostics)


def _display_diagnostics(diagnostics):
    for diagnostic in diagnostics:
        console.print(f"[yellow]  - {diagnostic.kind.value}: {diagnostic.message}[/yellow]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
