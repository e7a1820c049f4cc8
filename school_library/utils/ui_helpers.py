import json
import os
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Environment variable controlling CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def print_book_list(books: List[Any]) -> None:
    """Print books in the current output mode.
    - plain: 'ID - Title by Author [status, stock]' lines, or 'No books found.'
    - json: JSON array of book dicts
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books found.")
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Category", style="cyan")
        table.add_column("Stock", justify="right")
        for b in books:
            stock_style = "green" if b.is_available else "red"
            table.add_row(b.id, b.title, b.author, b.category, f"[{stock_style}]{b.stock}[/]")
        _console.print(table)
    else:
        for b in books:
            print(f"{b.id} - {b.title} by {b.author} [{b.status}, stock {b.stock}]")


def print_loan_list(loans: List[Any], empty_message: str = "No active loans.") -> None:
    mode = get_output_mode()

    if not loans:
        print(empty_message)
        return

    if mode == "json":
        print(json.dumps([v.to_dict() for v in loans], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📖 Loans", header_style="bold cyan")
        table.add_column("Loan", style="magenta", no_wrap=True)
        table.add_column("Book")
        table.add_column("Student")
        table.add_column("Class")
        table.add_column("Borrowed")
        table.add_column("Status")
        for v in loans:
            title = v.book.title if v.book else "(deleted book)"
            table.add_row(v.id, title, v.student_name, v.student_class, v.borrow_date, v.status)
        _console.print(table)
    else:
        for v in loans:
            title = v.book.title if v.book else "(deleted book)"
            print(f"{v.id} - {title} | {v.student_name} ({v.student_class}) since {v.borrow_date}")


def print_draft(draft: Optional[Any]) -> None:
    mode = get_output_mode()

    if draft is None:
        print("No result from Google Books.")
        return

    data = draft.to_dict()
    if mode == "json":
        print(json.dumps(data, ensure_ascii=False))
    elif mode == "rich":
        lines = "\n".join(f"[bold]{k}:[/] {v}" for k, v in data.items() if k != "stock")
        _console.print(Panel.fit(lines, title="🔎 Google Books", border_style="blue"))
    else:
        for key in ("title", "author", "publisher", "year", "category", "isbn", "cover_url"):
            print(f"{key.capitalize()}: {data[key]}")


def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print library statistics in the current output mode."""
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Total Books:[/] {stats['total_books']}\n"
            f"[bold]Copies In Stock:[/] {stats['total_stock']}\n"
            f"[bold]Active Loans:[/] {stats['active_loans']}\n"
            f"[bold]Returned Loans:[/] {stats['returned_loans']}"
        )
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        print(f"Total Books: {stats['total_books']}")
        print(f"Copies In Stock: {stats['total_stock']}")
        print(f"Available Books: {stats['available_books']}")
        print(f"Active Loans: {stats['active_loans']}")
        print(f"Returned Loans: {stats['returned_loans']}")
