import os
import sys
from dataclasses import replace
from typing import Optional

import httpx
import typer
from rich.console import Console

from config import settings
from http_client import APIError, BookClient
from utils.ui_helpers import (
    print_book_result,
    print_error,
    print_list_result,
    print_removed_result,
    set_output_mode,
)

APP_NAME = "Book Collection CLI"

console = Console()

app = typer.Typer(help=APP_NAME)

_state = {"base_url": None}


def _make_client() -> BookClient:
    return BookClient(base_url=_state["base_url"])


def _run(action):
    """Call the API, turning client-side failures into a message and exit code 1."""
    try:
        with _make_client() as client:
            return action(client)
    except APIError as e:
        print_error(e.message)
        raise typer.Exit(code=1)
    except httpx.RequestError as e:
        print_error(f"Could not reach the book service ({e}). Start it with `python main.py serve`.")
        raise typer.Exit(code=1)


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        help=f"Book service URL (default: {settings.base_url})",
    ),
):
    """Global CLI options (output mode, service URL)."""
    if output:
        set_output_mode(output)
    _state["base_url"] = base_url


@app.command("list")
def cli_list():
    """List all books."""
    books = _run(lambda client: client.list_books())
    print_list_result(books)


@app.command("get")
def cli_get(book_id: str = typer.Argument(..., help="Book ID")):
    """Show a single book by ID."""
    book = _run(lambda client: client.get_book(book_id))
    print_book_result(book)


@app.command("add")
def cli_add(
    title: str = typer.Argument(..., help="Book title"),
    author: str = typer.Argument(..., help="Book author"),
):
    """Add a new book."""
    book = _run(lambda client: client.add_book(title, author))
    print_book_result(book, heading="Added")


@app.command("update")
def cli_update(
    book_id: str = typer.Argument(..., help="Book ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="New author"),
):
    """Update the title and/or author of a book."""
    book = _run(lambda client: client.update_book(book_id, title=title, author=author))
    print_book_result(book, heading="Updated")


@app.command("remove")
def cli_remove(book_id: str = typer.Argument(..., help="Book ID")):
    """Delete a book by ID."""
    _run(lambda client: client.remove_book(book_id))
    print_removed_result(book_id)


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Listening port"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Start the HTTP API with uvicorn."""
    import uvicorn

    serve_settings = replace(settings, api_host=host or settings.api_host, api_port=int(port or settings.api_port))
    console.print(f"[green]Starting book service on {serve_settings.base_url}[/]")

    if reload:
        # The reloader re-imports api:app in a fresh process, which reads these back through config
        os.environ["API_HOST"] = serve_settings.api_host
        os.environ["API_PORT"] = str(serve_settings.api_port)
        target = "api:app"
    else:
        from api import create_app

        target = create_app(settings=serve_settings)

    uvicorn.run(
        target,
        host=serve_settings.api_host,
        port=serve_settings.api_port,
        reload=reload,
        log_level=serve_settings.log_level.lower(),
    )


if __name__ == "__main__":
    if len(sys.argv) == 1:
        sys.argv.append("--help")
    app()
