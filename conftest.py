import pytest

from library import Library


@pytest.fixture
def books_file(tmp_path):
    # Each test gets its own catalog file
    return str(tmp_path / "books.json")


@pytest.fixture
def lib(books_file):
    return Library(books_file)
