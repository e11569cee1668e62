import json
import os
from typing import Any, List

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "BOOKS_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _as_dict(book: Any) -> dict:
    return {
        "id": getattr(book, "id", ""),
        "title": getattr(book, "title", ""),
        "author": getattr(book, "author", ""),
    }


def print_list_result(books: List[Any]) -> None:
    """Print a list of books in the current output mode.
    - plain: 'ID - Title by Author' lines, or 'No books in collection.'
    - json: JSON array of {id, title, author}
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books in collection.")
        return

    if mode == "json":
        print(json.dumps([_as_dict(b) for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        for b in books:
            row = _as_dict(b)
            table.add_row(escape(row["id"]), escape(row["title"]), escape(row["author"]))
        _console.print(table)
    else:
        for b in books:
            row = _as_dict(b)
            print(f"{row['id']} - {row['title']} by {row['author']}")


def print_book_result(book: Any, heading: str = "Book") -> None:
    """Print a single book in the current output mode."""
    mode = get_output_mode()
    row = _as_dict(book)

    if mode == "json":
        print(json.dumps(row, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{label}:[/] {escape(row[key])}" for key, label in (("id", "ID"), ("title", "Title"), ("author", "Author")))
        _console.print(Panel.fit(content, title=f"📖 {heading}", border_style="blue"))
    else:
        print(f"{heading}: {row['id']} - {row['title']} by {row['author']}")


def print_removed_result(book_id: str) -> None:
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps({"id": book_id, "removed": True}, ensure_ascii=False))
    elif mode == "rich":
        _console.print(f"[green]🗑️  Removed book {escape(book_id)}.[/]")
    else:
        print(f"Removed book {book_id}.")


def print_error(message: str) -> None:
    if get_output_mode() == "rich":
        _console.print(f"[bold red]Error:[/] {escape(message)}")
    else:
        print(f"Error: {message}")
