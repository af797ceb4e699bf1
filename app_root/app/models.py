from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ErrorKind(str, Enum):
    INPUT = "input"
    UPSTREAM_FETCH = "upstream_fetch"
    UPSTREAM_GENERATION = "upstream_generation"


class ErrorDetail(BaseModel):
    kind: ErrorKind
    message: str


class BookMetadata(BaseModel):
    """Metadata as scraped from the book's Project Gutenberg page."""
    model_config = ConfigDict(frozen=True)

    title: str = ""
    author: str = ""


class Book(BaseModel):
    """A Project Gutenberg book: the full text plus its metadata.

    The catalog id is not part of the record; callers keep it alongside.
    """
    model_config = ConfigDict(frozen=True)

    content: str
    metadata: BookMetadata


class BookSuccess(BaseModel):
    kind: Literal["Success"] = "Success"
    book: Book


class BookError(BaseModel):
    kind: Literal["Error"] = "Error"
    message: str
    error_kind: ErrorKind


BookResponse = Annotated[Union[BookSuccess, BookError], Field(discriminator="kind")]


class AnalysisResponse(BaseModel):
    analysis: str
    error: Optional[ErrorDetail] = None


class InvalidBookId(ValueError):
    """Raised when free-form input is not a catalog id."""


def parse_book_id(raw) -> int:
    """Turn user or URL input into a catalog id.

    Accepts a decimal integer >= 0, optionally surrounded by whitespace.
    """
    if not isinstance(raw, str):
        raise InvalidBookId("Error: Invalid URL format.")
    text = raw.strip()
    if not text.isascii() or not text.isdigit():
        raise InvalidBookId("Error: URL query is not a number.")
    return int(text)
