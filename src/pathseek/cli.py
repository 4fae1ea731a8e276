"""Typer-based CLI for pathseek."""

import asyncio
import json
import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import load_search_config, resolve_initial_root
from .errors import InvalidRoot, ToolUnavailable
from .search import Backend, RootRegistry, SearchSession, get_backend
from .search.models import SearchConfig

app = typer.Typer(
    name="pathseek",
    help="pathseek - fuzzy file-path search backed by fd or ripgrep",
    add_completion=False,
)

console = Console()


def _print_invalid_root(e: InvalidRoot) -> None:
    console.print(f"[red]Error: {escape(e.reason)}:[/red] {escape(e.path)}")
    if e.hint:
        console.print(f"[yellow]{escape(e.hint)}[/yellow]")


@app.command()
def search(
    query: str = typer.Argument("", help="Filename filter (empty lists every file)"),
    root: Optional[str] = typer.Option(
        None,
        "--root",
        "-r",
        help="Search root (default: search.root in .pathseek/config.toml, PATHSEEK_ROOT or cwd)",
    ),
    relative_to: Optional[str] = typer.Option(
        None,
        "--relative-to",
        help="Directory that displayed paths are relative to (default: root)",
    ),
    backend: Optional[str] = typer.Option(
        None,
        "--backend",
        "-b",
        help="Enumeration tool: fd or ripgrep",
    ),
    max_results: Optional[int] = typer.Option(
        None,
        "--max-results",
        "-n",
        help="Maximum number of candidates",
    ),
    hidden: Optional[bool] = typer.Option(
        None,
        "--hidden/--no-hidden",
        help="Include hidden files",
    ),
    no_ignore: Optional[bool] = typer.Option(
        None,
        "--no-ignore/--respect-ignore",
        help="Ignore .gitignore rules",
    ),
    ext: Optional[List[str]] = typer.Option(
        None,
        "--ext",
        "-e",
        help="Only files with this extension (repeatable)",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print one JSON object per candidate",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging",
    ),
):
    """Search for file paths under the search root."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_search_config(
            cli_backend=backend,
            cli_max_results=max_results,
            cli_hidden=hidden,
            cli_no_ignore=no_ignore,
            cli_extensions=ext,
        )
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    try:
        session = SearchSession(config, root=resolve_initial_root(root))
    except InvalidRoot as e:
        _print_invalid_root(e)
        raise typer.Exit(code=1)

    async def _run():
        async with session:
            return await session.search(query, reference=relative_to)

    try:
        candidates = asyncio.run(_run())
    except ToolUnavailable as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        console.print("[yellow]Install the tool or try --backend with the other one[/yellow]")
        raise typer.Exit(code=1)

    candidates = candidates or []

    if as_json:
        for c in candidates:
            typer.echo(
                json.dumps(
                    {
                        "absolute_path": str(c.absolute_path),
                        "display_path": c.display_path,
                        "is_directory": c.is_directory,
                    },
                    ensure_ascii=False,
                )
            )
        return

    if not candidates:
        console.print(f"[dim]No matches under {escape(str(session.get_root()))}[/dim]")
        return

    table = Table(title=f"{len(candidates)} match(es) under {escape(str(session.get_root()))}")
    table.add_column("Path", style="cyan")
    table.add_column("Type", style="dim")
    for c in candidates:
        table.add_row(escape(c.display_path), "dir" if c.is_directory else "file")
    console.print(table)


@app.command()
def root(
    path: Optional[str] = typer.Argument(None, help="Directory to validate (default: cwd)"),
):
    """Validate a search root and print its canonical form."""
    registry = RootRegistry()
    try:
        resolved = registry.set(path)
    except InvalidRoot as e:
        _print_invalid_root(e)
        raise typer.Exit(code=1)
    typer.echo(str(resolved))


@app.command()
def backends():
    """Show enumeration backends and where their executables were found."""
    table = Table(title="Backends")
    table.add_column("Backend", style="cyan")
    table.add_column("Executable")
    for choice in Backend:
        found = get_backend(choice).resolve_executable(SearchConfig(backend=choice))
        table.add_row(choice.value, found or "[red]missing[/red]")
    console.print(table)


@app.command()
def version():
    """Show pathseek version."""
    from . import __version__
    console.print(f"pathseek v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
