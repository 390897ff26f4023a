import logging
import subprocess
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from config import settings
from errors import PersistenceError
from library import Library

APP_NAME = "Book Tracker"

console = Console()
app = typer.Typer(help=f"{APP_NAME} CLI")


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind (default: API_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", help="Port to listen on (default: PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Start the HTTP API with uvicorn."""
    host = host or settings.api_host
    port = int(port or settings.api_port)
    url = f"http://{host}:{port}"
    console.print(f"📚 {settings.app_name} running at [link={url}]{url}[/link]")

    args = [
        sys.executable,
        "-m", "uvicorn",
        "api:app",
        "--host", host,
        "--port", str(port),
        "--log-level", settings.log_level.lower(),
    ]
    if reload:
        args.append("--reload")
    try:
        subprocess.run(args)
    except FileNotFoundError:
        console.print("[bold red]Error:[/] `uvicorn` could not be started. Make sure it is installed.")
        raise typer.Exit(code=1)


@app.command("list")
def cli_list(books_file: Optional[str] = typer.Option(None, "--file", help="Catalog file (default: BOOKS_FILE)")):
    """Print the catalog as a table."""
    configure_logging("WARNING")
    try:
        library = Library(books_file or settings.books_file)
    except PersistenceError as e:
        console.print(f"[bold red]Error:[/] {escape(e.message)}")
        raise typer.Exit(code=1)

    books = library.all()
    if not books:
        console.print("No books in catalog.")
        return

    table = Table(title="📚 Catalog", show_lines=True, header_style="bold cyan")
    table.add_column("ID", style="magenta", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Author", style="white")
    table.add_column("Year", justify="right")
    table.add_column("Type")
    table.add_column("Added On", style="dim")
    for book in books:
        table.add_row(
            escape(book.id),
            escape(book.title),
            escape(book.author),
            str(book.year),
            escape(book.type),
            escape(book.added_on),
        )

    console.print(table)
    console.print(f"[dim]{len(books)} books[/]")


if __name__ == "__main__":
    configure_logging()
    app()
