import asyncio
import subprocess
import sys
import webbrowser
from typing import Optional

import typer

from school_library.config import configure_logging, settings
from school_library.errors import LibraryError
from school_library.library import Library
from school_library.services.http_client import cleanup_http_client
from school_library.utils.ui_helpers import (
    print_book_list,
    print_draft,
    print_loan_list,
    print_stats_result,
    set_output_mode,
)


class LibraryManager:
    """Lazily created Library shared by the CLI commands of one process."""
    _instance: Optional[Library] = None

    @classmethod
    def get_instance(cls) -> Library:
        if cls._instance is None:
            cls._instance = Library(seed=True)
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


app = typer.Typer(help="School library CLI")


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
):
    """Global options (output mode, logging)."""
    configure_logging(log_level)
    if output:
        set_output_mode(output)


@app.command("list")
def cli_list(
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Match title, author or ISBN"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Filter by category"),
):
    """List catalog books."""
    lib = LibraryManager.get_instance()
    print_book_list(lib.catalog.list(query=query, category=category))


@app.command("search")
def cli_search(query: str = typer.Argument(..., help="Search query")):
    """Search the catalog by title, author or ISBN."""
    lib = LibraryManager.get_instance()
    print_book_list(lib.catalog.list(query=query))


@app.command("loans")
def cli_loans(nis: str = typer.Argument(..., help="Student NIS")):
    """Show the active loans of a student."""
    lib = LibraryManager.get_instance()
    print_loan_list(lib.loans.find_active_by_borrower(nis), empty_message=f"No active loans for NIS {nis}.")


async def _lookup(lib: Library, query: str):
    try:
        return await lib.lookup(query)
    finally:
        await cleanup_http_client()


@app.command("lookup")
def cli_lookup(query: str = typer.Argument(..., help="ISBN or title")):
    """Look a book up on Google Books."""
    lib = LibraryManager.get_instance()
    try:
        draft = asyncio.run(_lookup(lib, query))
    except LibraryError as e:
        print(f"Lookup failed: {e}")
        raise typer.Exit(code=1)
    print_draft(draft)


@app.command("stats")
def cli_stats():
    """Show library statistics."""
    print_stats_result(LibraryManager.get_instance().get_statistics())


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Port"),
    open_browser: bool = typer.Option(False, "--open", help="Open the API docs in a browser"),
):
    """Start the HTTP API with uvicorn."""
    host = host or settings.api_host
    port = port or int(settings.api_port)
    url = f"http://{host}:{port}/docs"
    print(f"Starting API on {url}")
    if open_browser:
        webbrowser.open(url)
    args = [
        sys.executable,
        "-m", "uvicorn",
        "school_library.api:app",
        "--host", host,
        "--port", str(port),
    ]
    if settings.debug:
        args.append("--reload")
    subprocess.run(args)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
