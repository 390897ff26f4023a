import json
import logging
import os
import time
from threading import RLock
from typing import List, Optional

from book import Book, utc_now_iso
from errors import PersistenceError
from validators import BookDraft

logger = logging.getLogger(__name__)


class IdGenerator:
    """Millisecond-timestamp ids that never repeat and never go backwards.

    When the clock has not advanced since the last id (or sits behind an id
    already in the catalog) the next id is ``last + 1``.
    """

    def __init__(self, last: int = 0, clock=time.time) -> None:
        self._last = last
        self._clock = clock

    def seed(self, ids) -> None:
        numeric = [int(i) for i in ids if str(i).isdecimal()]
        if numeric:
            self._last = max(self._last, max(numeric))

    def next_id(self) -> str:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return str(candidate)


class Library:
    """Manages the book catalog and its file-backed persistence.

    The whole catalog is held in memory and the backing JSON file is
    rewritten in full after every successful mutation. All access goes
    through a single re-entrant lock so concurrent requests cannot
    interleave their read-modify-persist steps.
    """

    def __init__(self, books_file: str, id_generator: Optional[IdGenerator] = None) -> None:
        self.books_file = books_file
        self.books: List[Book] = []
        self._lock = RLock()
        self._ids = id_generator or IdGenerator()
        self.load()

    # ------------------------- Persistence ------------------------- #
    def load(self) -> None:
        """Read the catalog from disk, creating an empty store if none exists."""
        with self._lock:
            if not os.path.exists(self.books_file):
                self.books = []
                if not self.persist():
                    raise PersistenceError(f"Could not create storage file {self.books_file}")
                logger.info("Created new books storage file")
                return

            try:
                # Bytes, so an undecodable file counts as malformed in _parse_stored
                with open(self.books_file, "rb") as f:
                    raw = f.read()
            except OSError as e:
                raise PersistenceError(f"Could not read storage file {self.books_file}") from e

            self.books = self._parse_stored(raw)
            self._ids.seed(b.id for b in self.books)
            logger.info(f"Loaded {len(self.books)} books from storage")

    def _parse_stored(self, raw: bytes) -> List[Book]:
        try:
            data = json.loads(raw.decode("utf-8"))
        except ValueError as e:  # includes UnicodeDecodeError
            logger.error(f"Error loading books from {self.books_file}: {e}")
            return []
        if not isinstance(data, list):
            logger.error(f"Error loading books from {self.books_file}: expected a JSON array")
            return []

        books = []
        for index, item in enumerate(data):
            try:
                books.append(Book.from_dict(item))
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning(f"Skipping unreadable book record #{index}: {e}")
        return books

    def persist(self) -> bool:
        """Overwrite the storage file with the full catalog. Returns False on failure."""
        with self._lock:
            try:
                with open(self.books_file, "w", encoding="utf-8") as f:
                    json.dump([b.to_dict() for b in self.books], f, indent=2, ensure_ascii=False)
                return True
            except (OSError, TypeError, ValueError) as e:
                logger.error(f"Error saving books: {e}")
                return False

    # ------------------------- Core operations ------------------------- #
    def append(self, book: Book) -> bool:
        """Add a book to the end of the catalog and persist. Returns whether the write succeeded."""
        with self._lock:
            self.books.append(book)
            return self.persist()

    def create_book(self, draft: BookDraft) -> Book:
        """Assign an id and timestamp to a validated draft and append it."""
        with self._lock:
            book = Book(
                id=self._ids.next_id(),
                title=draft.title,
                author=draft.author,
                year=draft.year,
                type=draft.type,
                added_on=utc_now_iso(),
            )
            if not self.append(book):
                raise PersistenceError("Failed to save book")
        logger.info(f"Added book {book.id}: {book.title}")
        return book

    def remove_by_id(self, book_id: str) -> int:
        """Remove every book with the given id. Returns how many were removed."""
        with self._lock:
            remaining = [b for b in self.books if b.id != book_id]
            removed = len(self.books) - len(remaining)
            if removed == 0:
                return 0
            self.books = remaining
            if not self.persist():
                raise PersistenceError("Failed to save changes")
        logger.info(f"Removed book {book_id}")
        return removed

    def all(self) -> List[Book]:
        with self._lock:
            return list(self.books)

    def find_book(self, book_id: str) -> Optional[Book]:
        with self._lock:
            for book in self.books:
                if book.id == book_id:
                    return book
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self.books)
