from __future__ import annotations

import re
from datetime import datetime, timezone

FIELDS = ("id", "title", "author", "year", "type", "addedOn")

# Anything outside the XML 1.0 Char production
_XML_ILLEGAL = re.compile("[^\u0009\u000A\u000D\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def has_illegal_xml_chars(text: str) -> bool:
    return _XML_ILLEGAL.search(text) is not None


def _text_field(data: dict, name: str) -> str:
    value = data[name]
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string")
    if has_illegal_xml_chars(value):
        raise ValueError(f"{name} contains characters not allowed in XML")
    return value


def _year_field(data: dict) -> int:
    value = data["year"]
    if isinstance(value, bool):
        raise TypeError("year must be an integer")
    if isinstance(value, float):
        # also rejects inf and nan
        if not value.is_integer():
            raise ValueError(f"year must be an integer, got {value}")
        return int(value)
    return int(value)


class Book:
    """Represents a single book record in the catalog."""

    def __init__(self, id: str, title: str, author: str, year: int, type: str, added_on: str) -> None:
        self.id = str(id)
        self.title = title
        self.author = author
        self.year = int(year)
        self.type = type
        self.added_on = added_on

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.year}, id: {self.id})"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Book({self.to_dict()!r})"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "year": self.year,
            "type": self.type,
            "addedOn": self.added_on,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        """Build a Book from stored or decoded data.

        Raises KeyError, TypeError or ValueError when a field is missing or
        unusable, so callers can skip the record.
        """
        book_id = data["id"]
        if isinstance(book_id, bool) or not isinstance(book_id, (str, int)):
            raise TypeError("id must be a string")
        if has_illegal_xml_chars(str(book_id)):
            raise ValueError("id contains characters not allowed in XML")
        return Book(
            id=book_id,
            title=_text_field(data, "title"),
            author=_text_field(data, "author"),
            year=_year_field(data),
            type=_text_field(data, "type"),
            added_on=_text_field(data, "addedOn"),
        )
