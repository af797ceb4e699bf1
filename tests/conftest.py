import pytest

from app.models import Book, BookMetadata


def _make_book(title: str = "Alice", author: str = "Bob", content: str = "Once upon a time...") -> Book:
    return Book(content=content, metadata=BookMetadata(title=title, author=author))


@pytest.fixture
def make_book():
    return _make_book


@pytest.fixture
def sample_book():
    return _make_book()
