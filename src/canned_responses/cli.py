"""CLI for managing a canned response library."""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import Settings
from .library import ResponseLibrary
from .models import Diagnostic
from .render import render_html, render_markdown, render_response
from .storage import JsonFileStore, LibraryStore

app = typer.Typer(
    name="canned-responses",
    help="Manage the canned response library used for bug triage replies.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    table = "table"
    json = "json"


@dataclass
class CliState:
    settings: Settings
    store_path: Path


def _print_diagnostic(diagnostic: Diagnostic) -> None:
    if diagnostic.level == "warning":
        err_console.print(f"[yellow]Warning:[/yellow] {diagnostic.message}", highlight=False)


def open_library(store_path: Path) -> ResponseLibrary:
    """Open the library persisted at store_path, restoring any saved snapshot."""
    store = LibraryStore(JsonFileStore(store_path))
    library = ResponseLibrary(store, on_diagnostic=_print_diagnostic)
    library.load()
    return library


def _library(ctx: typer.Context) -> ResponseLibrary:
    state: CliState = ctx.obj
    return open_library(state.store_path)


def _read_document(path: Path) -> str:
    if not path.exists():
        console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(1)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error:[/red] Cannot read {path}: {e}")
        raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    store: Optional[Path] = typer.Option(None, "--store", "-s", help="Path to the JSON library store"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = CliState(settings=settings, store_path=store or settings.store_path)


@app.command("import")
def import_markdown(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Markdown file with canned responses"),
    replace: bool = typer.Option(False, "--replace/--merge", help="Replace the library instead of merging by id"),
) -> None:
    """Import canned responses from a Markdown file."""
    document = _read_document(file)
    library = _library(ctx)

    responses = library.import_markdown(document, replace=replace)

    mode = "replace" if replace else "merge"
    console.print(f"[green]✓[/green] Imported {file.name} ({mode})")
    console.print(f"[dim]Library now holds {len(responses)} responses[/dim]")


@app.command("load-defaults")
def load_defaults(
    ctx: typer.Context,
    file: Optional[Path] = typer.Argument(None, help="Defaults document (defaults to configured path)"),
) -> None:
    """Add default responses that are not in the library yet."""
    state: CliState = ctx.obj
    path = file or state.settings.defaults_path
    document = _read_document(path)
    library = _library(ctx)

    before = len(library)
    parsed = library.merge_defaults(document)
    added = len(library) - before

    console.print(f"[green]✓[/green] Added {added} of {len(parsed)} default responses")


@app.command("list")
def list_responses(
    ctx: typer.Context,
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Filter by category"),
    format: OutputFormat = typer.Option(OutputFormat.table, "--format", "-f", help="Output format"),
) -> None:
    """List canned responses."""
    library = _library(ctx)
    responses = library.get_by_category(category) if category else library.get_all()

    if format == OutputFormat.json:
        typer.echo(json.dumps([r.to_dict() for r in responses], indent=2))
        return

    if not responses:
        console.print("[dim]No canned responses found[/dim]")
        return

    table = Table(title="Canned responses" + (f" (category: {category})" if category else ""))
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Categories", style="green")

    for response in responses:
        table.add_row(
            response.id,
            response.title,
            ", ".join(response.categories) or "-",
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(responses)} responses[/dim]")


@app.command("show")
def show_response(
    ctx: typer.Context,
    response_id: str = typer.Argument(..., help="Response ID"),
    html: bool = typer.Option(False, "--html", help="Render the body as HTML"),
) -> None:
    """Show a single canned response."""
    response = _library(ctx).get_by_id(response_id)
    if response is None:
        console.print(f"[red]Error:[/red] Response '{response_id}' not found")
        raise typer.Exit(1)

    typer.echo(render_html(response) if html else render_response(response))


@app.command("categories")
def list_categories(ctx: typer.Context) -> None:
    """List all categories used in the library."""
    categories = _library(ctx).categories()
    if not categories:
        console.print("[dim]No categories found[/dim]")
        return
    for category in categories:
        typer.echo(category)


@app.command("delete")
def delete_response(
    ctx: typer.Context,
    response_id: str = typer.Argument(..., help="Response ID"),
) -> None:
    """Delete a canned response."""
    if not _library(ctx).delete_response(response_id):
        console.print(f"[red]Error:[/red] Response '{response_id}' not found")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Deleted {response_id}")


@app.command("export")
def export_markdown(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
) -> None:
    """Export the library as a Markdown document."""
    document = render_markdown(_library(ctx).get_all(), on_diagnostic=_print_diagnostic)

    if output is None:
        typer.echo(document, nl=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document)
    console.print(f"[green]✓[/green] Exported to {output}")


if __name__ == "__main__":
    app()
