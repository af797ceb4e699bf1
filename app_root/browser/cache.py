import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from app.models import Book, BookMetadata


@dataclass(frozen=True)
class SavedBook:
    """Entry of the saved-books listing: the id and metadata, without content."""
    book_id: int
    metadata: BookMetadata


class BookCache(ABC):
    """
    Key-value store of books keyed by catalog id, plus the derived listing.
    The controller only talks to this interface.
    """

    @abstractmethod
    def list(self) -> List[SavedBook]:
        ...

    @abstractmethod
    def get(self, book_id: int) -> Optional[Book]:
        ...

    @abstractmethod
    def put(self, book_id: int, book: Book) -> None:
        """Store book under book_id unless the id is already stored (first write wins)."""
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class InMemoryCache(BookCache):

    def __init__(self):
        self._books: Dict[int, Book] = {}

    def list(self) -> List[SavedBook]:
        return [SavedBook(book_id, book.metadata) for book_id, book in self._books.items()]

    def get(self, book_id: int) -> Optional[Book]:
        return self._books.get(book_id)

    def put(self, book_id: int, book: Book) -> None:
        if book_id not in self._books:
            self._books[book_id] = book

    def clear(self) -> None:
        self._books.clear()


class JsonFileCache(BookCache):
    """
    Books persisted in one JSON object: keys are the decimal book id,
    values the serialized Book. The file is the source of truth for get/put;
    the listing is built from it once and then kept in step with put/clear.
    """

    def __init__(self, path):
        self._path = Path(path)
        self._index: List[SavedBook] = []
        for key, raw in self._load().items():
            book = self._decode(key, raw)
            if book is not None:
                self._index.append(SavedBook(int(key), book.metadata))

    def list(self) -> List[SavedBook]:
        return list(self._index)

    def get(self, book_id: int) -> Optional[Book]:
        key = str(book_id)
        raw = self._load().get(key)
        return self._decode(key, raw) if raw is not None else None

    def put(self, book_id: int, book: Book) -> None:
        stored = self._load()
        key = str(book_id)
        if key in stored and self._decode(key, stored[key]) is not None:
            return
        stored[key] = book.model_dump(mode="json")
        self._save(stored)
        self._index.append(SavedBook(book_id, book.metadata))

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
        self._index = []

    def _load(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Ignoring unreadable {}: {}", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring {}: expected a JSON object", self._path)
            return {}
        return data

    def _save(self, data: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)

    def _decode(self, key: str, raw) -> Optional[Book]:
        if not (key.isascii() and key.isdigit()) or str(int(key)) != key:
            logger.warning("Skipping saved entry with invalid key {!r}", key)
            return None
        try:
            return Book.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping unreadable saved book {}: {}", key, e)
            return None
