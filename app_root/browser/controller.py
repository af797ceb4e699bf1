from dataclasses import dataclass
from typing import List, Optional, Union

from loguru import logger

from app.models import Book, BookError, ErrorKind, InvalidBookId, parse_book_id
from browser.cache import BookCache, SavedBook
from browser.clients import BookFetchClient, SummaryClient


@dataclass(frozen=True)
class NoneSelected:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Loaded:
    book: Book
    summary: Optional[str] = None


@dataclass(frozen=True)
class Error:
    message: str
    kind: ErrorKind


PageState = Union[NoneSelected, Loading, Loaded, Error]


class BookBrowser:
    """
    Page controller: owns the page state and the Book ID input field.

    Every state change bumps a generation counter. An awaited request that
    completes after its generation was superseded is dropped.
    """

    def __init__(self, cache: BookCache, fetch_client: BookFetchClient, summary_client: SummaryClient):
        self._cache = cache
        self._fetch_client = fetch_client
        self._summary_client = summary_client
        self._state: PageState = NoneSelected()
        self._input = ""
        self._generation = 0

    @property
    def state(self) -> PageState:
        return self._state

    @property
    def input_text(self) -> str:
        return self._input

    def set_input(self, text: str) -> None:
        self._input = text

    def saved_books(self) -> List[SavedBook]:
        return self._cache.list()

    def clear_saved_books(self) -> None:
        self._cache.clear()

    async def search(self) -> None:
        generation = self._transition(Loading())

        try:
            book_id = parse_book_id(self._input)
        except InvalidBookId as e:
            self._transition(Error(str(e), ErrorKind.INPUT))
            return

        saved = self._cache.get(book_id)
        if saved is not None:
            self._transition(Loaded(saved))
            return

        result = await self._fetch_client.fetch(book_id)
        if generation != self._generation:
            logger.debug("Dropping stale fetch result for book {}", book_id)
            return

        if isinstance(result, BookError):
            self._transition(Error(result.message, result.error_kind))
        else:
            self._transition(Loaded(result.book))
            self._cache.put(book_id, result.book)

    async def request_summary(self) -> None:
        state = self._state
        if not isinstance(state, Loaded) or state.summary:
            return

        generation = self._generation
        response = await self._summary_client.summarize(state.book.content)
        if generation != self._generation:
            logger.debug("Dropping stale summary result")
            return

        if response.error is not None:
            self._transition(Error(response.error.message, response.error.kind))
        else:
            self._transition(Loaded(state.book, response.analysis))

    def back_to_content(self) -> None:
        state = self._state
        if isinstance(state, Loaded) and state.summary:
            self._transition(Loaded(state.book))

    def exit_book(self) -> None:
        if isinstance(self._state, Loaded):
            self._transition(NoneSelected())
            self._input = ""

    def _transition(self, state: PageState) -> int:
        logger.debug("{} -> {}", type(self._state).__name__, type(state).__name__)
        self._state = state
        self._generation += 1
        return self._generation
