"""CLI entry point for Prism."""

from __future__ import annotations

import json
import logging
import sqlite3
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from prism import __version__
from prism.config import ConfigError, Settings
from prism.document.loader import DocumentLoadError, load_document
from prism.engine.selection import ActiveStrategies
from prism.export.apparatus import apparatus_hash, apparatus_jsonl
from prism.export.tei import render_tei
from prism.persistence.store import KeyValueStore, MemoryStore, SQLiteStore
from prism.session import AlternativeIndexError, ReadingSession, UnknownLineError
from prism.share.codec import decode

console = Console()

IMPACT_COLORS = {
    "Major shift": "red",
    "Moderate change": "yellow",
    "Subtle change": "green",
}


def _open_store(settings: Settings) -> KeyValueStore:
    """Picks database, or an in-memory store if it cannot be opened."""
    try:
        return SQLiteStore(settings.db_path)
    except (sqlite3.Error, OSError) as e:
        console.print(f"[yellow]⚠ Picks database unavailable ({e}); not saving[/yellow]")
        return MemoryStore()


def _open_session(ctx: click.Context, share_token: str | None = None) -> ReadingSession:
    """Load the document and restore persisted picks; exit 1 if no document."""
    settings: Settings = ctx.obj["settings"]
    try:
        document, report = load_document(
            settings.document, timeout=settings.fetch_timeout
        )
    except DocumentLoadError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    for warning in report.warnings:
        console.print(f"[dim yellow]⚠ {warning}[/dim yellow]")

    session = ReadingSession(document, store=_open_store(settings), settings=settings)
    session.restore(share_token)
    return session


def _strategy_options(func):
    func = click.option("--foreignizing", is_flag=True, help="Favor foreignizing")(func)
    func = click.option("--natural", is_flag=True, help="Favor natural")(func)
    func = click.option("--literal", is_flag=True, help="Favor literal")(func)
    return func


def _print_balance(session: ReadingSession) -> None:
    balance = session.balance()
    console.print(
        f"[bold]Literal ← Natural:[/bold] {balance.literal_natural.format()}   "
        f"[bold]Foreignizing ← Domesticating:[/bold] "
        f"{balance.foreignizing_domesticating.format()}"
    )


def _warn_not_persisted() -> None:
    console.print("[yellow]⚠ Could not save picks; they apply to this run only[/yellow]")


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="YAML settings file (default: $PRISM_CONFIG or ~/.prism/config.yaml)",
)
@click.option("--document", "-d", help="Document path or URL")
@click.option("--db", "db_path", type=click.Path(dir_okay=False), help="Picks database")
@click.option("--log-level", default="warning", help="Log level")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    document: str | None,
    db_path: str | None,
    log_level: str,
):
    """Prism - compare translations line by line and share your reading."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    try:
        settings = Settings.load(config_path)
    except ConfigError as e:
        console.print(f"[red]Config error: {e}[/red]")
        sys.exit(1)
    if document:
        settings.document = document
    if db_path:
        settings.db_path = Path(db_path)
    ctx.obj = {"settings": settings}


@cli.command()
@click.option("--share", "share_token", help="Apply a share token over saved picks")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx: click.Context, share_token: str | None, as_json: bool):
    """Show the source text beside the current reading."""
    session = _open_session(ctx, share_token)
    doc = session.document
    lines = session.effective_lines()

    if as_json:
        click.echo(
            json.dumps(
                {
                    "doc_id": doc.doc_id,
                    "lines": lines,
                    "picks": session.selection.to_dict(),
                    "balance": session.balance().to_dict(),
                    "share_token": session.share_token(),
                },
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    table = Table(title=doc.title or doc.doc_id)
    table.add_column("#", style="dim")
    table.add_column("Source")
    table.add_column("Reading")
    table.add_column("Alts", justify="right")

    for i, text in enumerate(lines):
        source = doc.source_lines[i] if i < len(doc.source_lines) else None
        source_cell = ""
        if source:
            source_cell = source.text
            if source.transliteration:
                source_cell += f"\n[dim]{source.transliteration}[/dim]"
        choice = doc.choice_for_line(i)
        marker = "[cyan]*[/cyan]" if session.selection.has_pick(i) else ""
        table.add_row(
            str(i + 1),
            source_cell,
            f"{text} {marker}".rstrip(),
            str(len(choice.alternatives)) if choice else "",
        )

    console.print(table)
    _print_balance(session)


@cli.command()
@click.argument("line", type=int)
@_strategy_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def alternatives(
    ctx: click.Context,
    line: int,
    literal: bool,
    natural: bool,
    foreignizing: bool,
    as_json: bool,
):
    """List a line's alternatives, ranked by the chosen strategies.

    LINE is 0-based. Example: prism alternatives 2 --literal
    """
    session = _open_session(ctx)
    active = ActiveStrategies(literal=literal, natural=natural, foreignizing=foreignizing)
    try:
        views = session.ranked(line, active)
    except UnknownLineError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([v.to_dict() for v in views], indent=2, ensure_ascii=False))
        return

    choice = session.document.choice_for_line(line)
    if choice and choice.stakes:
        console.print(Panel(choice.stakes, title=f"Line {line + 1}"))

    for view in views:
        mark = "✅ " if view.chosen else ""
        color = IMPACT_COLORS.get(view.impact, "white")
        console.print(
            f"\n[bold]\\[{view.index}][/bold] {mark}{view.text} "
            f"[dim](score: {view.score:.2f})[/dim]"
        )
        details = []
        if view.philosophy_badge:
            details.append(view.philosophy_badge)
        details.append(f"[{color}]{view.impact}[/{color}]")
        if view.chips:
            details.append("style: " + ", ".join(view.chips))
        console.print("  " + "  ".join(details))
        if view.note:
            console.print(f"  [dim]{view.note}[/dim]")
        if view.bucket:
            console.print(f"  [magenta]{view.bucket}[/magenta]")
        if view.reader_preference:
            console.print(f"  [dim]{view.reader_preference['label']}[/dim]")


@cli.command()
@click.argument("line", type=int)
@click.argument("index", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def pick(ctx: click.Context, line: int, index: int, as_json: bool):
    """Choose alternative INDEX for LINE (both 0-based)."""
    session = _open_session(ctx)
    try:
        result = session.pick(line, index)
    except (UnknownLineError, AlternativeIndexError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    report = result.report
    color = IMPACT_COLORS.get(report.impact, "white")
    console.print(f"[green]✓ Line {line + 1}:[/green] {result.text}")
    console.print(f"  [{color}]{report.impact}[/{color}]")
    console.print(f"\n[bold]What changed on line {line + 1}?[/bold]")
    console.print(f"  Emphasizes: {', '.join(report.diff.gained) or '—'}")
    console.print(f"  De-emphasizes: {', '.join(report.diff.lost) or '—'}")
    if report.stakes:
        console.print(f"  [italic]{report.stakes}[/italic]")
    for ripple in report.ripples:
        style = "red" if ripple.direction.value == "weaken" else "green"
        console.print(
            f"  [{style}]↳ line {ripple.affects_line + 1}: {ripple.message} "
            f"(×{ripple.magnitude:g})[/{style}]"
        )
    _print_balance(session)
    if not result.persisted:
        _warn_not_persisted()


@cli.command("apply-strategy")
@_strategy_options
@click.pass_context
def apply_strategy(ctx: click.Context, literal: bool, natural: bool, foreignizing: bool):
    """Pick the best alternative on every line for the chosen strategies."""
    session = _open_session(ctx)
    session.set_strategies(
        ActiveStrategies(literal=literal, natural=natural, foreignizing=foreignizing)
    )
    persisted = session.apply_strategy_to_all()

    axes = [a.value for a in session.strategies.active_axes()] or ["none"]
    console.print(f"[green]✓ Applied strategy: {', '.join(axes)}[/green]")
    for text in session.effective_lines():
        console.print(f"  {text}")
    _print_balance(session)
    if not persisted:
        _warn_not_persisted()


@cli.command()
@click.pass_context
def reset(ctx: click.Context):
    """Return every line to the original translation."""
    session = _open_session(ctx)
    session.reset()
    console.print("[green]✓ Reset to original translation[/green]")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def balance(ctx: click.Context, as_json: bool):
    """Show the literal/natural and foreignizing/domesticating balance."""
    session = _open_session(ctx)
    if as_json:
        click.echo(json.dumps(session.balance().to_dict(), indent=2))
        return
    _print_balance(session)


@cli.command()
@click.pass_context
def compare(ctx: click.Context):
    """Compare the original translation with your version."""
    session = _open_session(ctx)
    table = Table()
    table.add_column("#", style="dim")
    table.add_column("Original Translation")
    table.add_column("Your Version")
    for row in session.comparison():
        current = f"[bold cyan]{row.current}[/bold cyan]" if row.changed else row.current
        table.add_row(str(row.line + 1), row.original, current)
    console.print(table)


@cli.command()
@click.option("--base-url", help="Reader URL to attach the token to")
@click.pass_context
def share(ctx: click.Context, base_url: str | None):
    """Print a share token (or link) for the current reading."""
    session = _open_session(ctx)
    if base_url:
        click.echo(session.share_url(base_url))
    else:
        click.echo(session.share_token())


@cli.command("decode")
@click.argument("token")
def decode_token(token: str):
    """Decode a share token (position -> index), without range checks."""
    click.echo(json.dumps(decode(token).to_dict()))


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["tei", "jsonl"]),
    default="tei",
    help="Export format",
)
@click.option("--output", "-o", type=click.Path(), help="Output file")
@click.pass_context
def export(ctx: click.Context, fmt: str, output: str | None):
    """Export the reading as a critical apparatus."""
    session = _open_session(ctx)
    entries = session.apparatus()
    if fmt == "tei":
        content = render_tei(session.document, entries)
    else:
        content = apparatus_jsonl(entries)

    if output:
        Path(output).write_text(content, encoding="utf-8")
        console.print(f"[green]✓ Apparatus written to {output}[/green]")
        if fmt == "jsonl":
            console.print(f"[dim]sha256: {apparatus_hash(entries)}[/dim]")
    else:
        click.echo(content, nl=False)


@cli.command()
@click.option("--host", default=None, help="Bind host")
@click.option("--port", default=None, type=int, help="Bind port")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None):
    """Start the API server."""
    import uvicorn

    from prism.api.main import create_app

    settings: Settings = ctx.obj["settings"]
    host = host or settings.api_host
    port = port or settings.api_port
    console.print(f"[bold blue]Starting Prism API at http://{host}:{port}[/bold blue]")
    uvicorn.run(create_app(settings), host=host, port=port)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
