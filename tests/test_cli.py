from unittest.mock import patch

from typer.testing import CliRunner

from main import app
from validators import BookDraft

runner = CliRunner()


def test_list_no_books(books_file):
    result = runner.invoke(app, ["list", "--file", books_file])
    assert result.exit_code == 0
    assert "No books in catalog." in result.stdout


def test_list_books(lib, books_file):
    book = lib.create_book(BookDraft(title="Dune", author="Herbert", year=1965, type="novel"))

    result = runner.invoke(app, ["list", "--file", books_file])
    assert result.exit_code == 0
    assert "Dune" in result.stdout
    assert "Herbert" in result.stdout
    assert book.id in result.stdout
    assert "1 books" in result.stdout


def test_list_unreadable_catalog(tmp_path):
    result = runner.invoke(app, ["list", "--file", str(tmp_path)])
    assert result.exit_code == 1
    assert "Error" in result.stdout


@patch("main.subprocess.run")
def test_serve_command(mock_run):
    result = runner.invoke(app, ["serve", "--host", "0.0.0.0", "--port", "4000"])
    assert result.exit_code == 0
    assert "running at" in result.stdout
    mock_run.assert_called_once()
    args = mock_run.call_args[0][0]
    assert "uvicorn" in args
    assert "api:app" in args
    assert args[args.index("--host") + 1] == "0.0.0.0"
    assert args[args.index("--port") + 1] == "4000"
    assert "--reload" not in args


@patch("main.subprocess.run")
def test_serve_command_reload(mock_run):
    result = runner.invoke(app, ["serve", "--reload"])
    assert result.exit_code == 0
    assert "--reload" in mock_run.call_args[0][0]


def test_list_shows_bracketed_text_literally(lib, books_file):
    lib.create_book(BookDraft(title="[b]x[/]", author="[red]A", year=2001, type="essay"))

    result = runner.invoke(app, ["list", "--file", books_file])
    assert result.exit_code == 0
    assert "[b]x[/]" in result.stdout
    assert "[red]A" in result.stdout
