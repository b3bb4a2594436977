"""CLI entry point for codechat -- ask an LLM about a project's code."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown

from .errors import CodechatError
from .models import FileReference
from .projects import ProjectCatalog

app = typer.Typer(
    name="codechat",
    help="Ask questions about a codebase using Gemini or OpenRouter.",
    add_completion=False,
)

console = Console()


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _load_dotenv(start_dir: Path) -> None:
    """Load a .env file from *start_dir* (or parents) into os.environ.

    Only sets vars that are not already present in the environment.
    Handles KEY=VALUE lines, ignores comments and blank lines.
    """
    search = start_dir.resolve()
    for d in [search, *search.parents]:
        candidate = d / ".env"
        if candidate.is_file():
            try:
                for line in candidate.read_text(encoding="utf-8").splitlines():
                    line = line.strip()
                    if not line or line.startswith("#") or "=" not in line:
                        continue
                    key, _, value = line.partition("=")
                    key = key.strip()
                    value = value.strip().strip("\"'")
                    if key and key not in os.environ:
                        os.environ[key] = value
            except OSError as exc:
                logging.getLogger(__name__).warning("Could not read %s: %s", candidate, exc)
            return  # stop after the first .env found


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _fail(exc: CodechatError) -> NoReturn:
    console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    _setup_logging(verbose)
    _load_dotenv(Path.cwd())


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to ask. Mention files with @path."),
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project root directory."),
    files: Optional[list[str]] = typer.Option(None, "--file", "-f", help="File to include (repeatable)."),
) -> None:
    """Ask a question about the project at --path."""
    from .prompts import parse_file_mentions
    from .scanner import scan_repo
    from .service import answer_question

    root = path.resolve()
    if not root.is_dir():
        console.print(f"[red]Error:[/red] {root} is not a directory.")
        raise typer.Exit(code=1)

    refs = parse_file_mentions(question)
    known = {r.path for r in refs}
    refs.extend(FileReference(path=f) for f in files or [] if f not in known)

    overview = scan_repo(root).overview()
    catalog = ProjectCatalog({root.name: root})

    try:
        with console.status("Thinking..."):
            answer = asyncio.run(
                answer_question(
                    question,
                    overview,
                    refs,
                    project_name=root.name,
                    project_lookup=catalog,
                )
            )
    except CodechatError as exc:
        _fail(exc)

    console.print(Markdown(answer.response))
    console.print(f"[dim]{answer.provider} / {answer.model}[/dim]")


@app.command()
def overview(
    path: Path = typer.Argument(Path("."), help="Project root directory."),
    max_files: int = typer.Option(500, "--max-files", help="Maximum number of paths to send."),
) -> None:
    """Generate an overview of the project at PATH from its file layout."""
    from .scanner import scan_repo
    from .service import summarize_project

    root = path.resolve()
    scan = scan_repo(root, max_files=max_files)
    refs = [FileReference(path=f) for f in scan.files]

    try:
        with console.status(f"Summarizing {len(refs)} files..."):
            result = asyncio.run(summarize_project(root.name, refs))
    except CodechatError as exc:
        _fail(exc)

    console.print(Markdown(result.overview))


@app.command()
def config() -> None:
    """Show which AI provider and model are configured."""
    from .service import get_config_status

    status = get_config_status()
    if status.configured:
        console.print(f"[green]Configured:[/green] {status.provider} ({status.model})")
    else:
        console.print(f"[yellow]Not configured:[/yellow] {status.error}")
        raise typer.Exit(code=1)


@app.command()
def serve(
    projects_dir: Path = typer.Option(
        Path("."), "--projects-dir", help="Directory whose subdirectories are projects."
    ),
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address."),
    port: int = typer.Option(3001, "--port", help="Port number."),
) -> None:
    """Serve the chat API for every project under --projects-dir."""
    from .server import start_server

    catalog = ProjectCatalog.from_directory(projects_dir)
    count = len(catalog.list_projects())
    console.print(f"[bold green]Serving[/bold green] {count} project(s) at http://{host}:{port}")
    start_server(catalog, host=host, port=port)
