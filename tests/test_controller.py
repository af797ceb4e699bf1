import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.models import AnalysisResponse, BookError, BookSuccess, ErrorDetail, ErrorKind
from browser.cache import InMemoryCache
from browser.controller import BookBrowser, Error, Loaded, Loading, NoneSelected


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
def fetch_client():
    client = MagicMock()
    client.fetch = AsyncMock()
    return client


@pytest.fixture
def summary_client():
    client = MagicMock()
    client.summarize = AsyncMock()
    return client


@pytest.fixture
def browser(cache, fetch_client, summary_client):
    return BookBrowser(cache, fetch_client, summary_client)


def search(browser, text):
    browser.set_input(text)
    asyncio.run(browser.search())


@pytest.fixture
def loaded(browser, fetch_client, sample_book):
    fetch_client.fetch.return_value = BookSuccess(book=sample_book)
    search(browser, "1234")
    fetch_client.fetch.reset_mock()
    return browser


# ------------------------------------------------------------------
# Search
# ------------------------------------------------------------------

class TestSearch:

    def test_initial_state(self, browser):
        assert browser.state == NoneSelected()
        assert browser.input_text == ""

    def test_fetch_success_loads_and_caches(self, browser, cache, fetch_client, make_book):
        book = make_book(title="Alice", author="Bob")
        fetch_client.fetch.return_value = BookSuccess(book=book)

        search(browser, "1234")

        assert browser.state == Loaded(book)
        assert browser.state.summary is None
        assert cache.get(1234) == book
        fetch_client.fetch.assert_awaited_once_with(1234)

    def test_cache_hit_skips_network(self, loaded, fetch_client, sample_book):
        loaded.exit_book()

        search(loaded, "1234")

        assert loaded.state == Loaded(sample_book)
        fetch_client.fetch.assert_not_called()

    def test_fetch_error(self, browser, cache, fetch_client):
        fetch_client.fetch.return_value = BookError(message="timeout", error_kind=ErrorKind.UPSTREAM_FETCH)

        search(browser, "1234")

        assert browser.state == Error("timeout", ErrorKind.UPSTREAM_FETCH)
        assert cache.list() == []

    @pytest.mark.parametrize("text", ["abc", "", "12.5", "-1"])
    def test_invalid_input_is_an_input_error(self, browser, cache, fetch_client, text):
        search(browser, text)

        assert isinstance(browser.state, Error)
        assert browser.state.kind == ErrorKind.INPUT
        fetch_client.fetch.assert_not_called()
        assert cache.list() == []

    def test_whitespace_around_id_is_accepted(self, browser, fetch_client, sample_book):
        fetch_client.fetch.return_value = BookSuccess(book=sample_book)
        search(browser, " 1234 ")
        fetch_client.fetch.assert_awaited_once_with(1234)

    def test_search_recovers_from_error(self, browser, fetch_client, sample_book):
        search(browser, "abc")
        fetch_client.fetch.return_value = BookSuccess(book=sample_book)

        search(browser, "1234")

        assert browser.state == Loaded(sample_book)

    def test_loading_while_fetch_in_flight(self, browser, fetch_client, sample_book):
        observed = []

        async def fetch(book_id):
            observed.append(browser.state)
            return BookSuccess(book=sample_book)

        fetch_client.fetch.side_effect = fetch
        search(browser, "1234")

        assert observed == [Loading()]

    def test_stale_fetch_result_is_dropped(self, browser, cache, fetch_client, make_book):
        slow_book = make_book(title="Slow")
        fast_book = make_book(title="Fast")

        async def scenario():
            release = asyncio.Event()

            async def fetch(book_id):
                if book_id == 1:
                    await release.wait()
                    return BookSuccess(book=slow_book)
                return BookSuccess(book=fast_book)

            fetch_client.fetch.side_effect = fetch
            browser.set_input("1")
            first = asyncio.create_task(browser.search())
            await asyncio.sleep(0)
            browser.set_input("2")
            await browser.search()
            release.set()
            await first

        asyncio.run(scenario())

        assert browser.state == Loaded(fast_book)
        assert cache.get(1) is None
        assert cache.get(2) == fast_book


# ------------------------------------------------------------------
# Summary
# ------------------------------------------------------------------

class TestSummary:

    def test_summary_success(self, loaded, summary_client, sample_book):
        summary_client.summarize.return_value = AnalysisResponse(analysis="Summary X")

        asyncio.run(loaded.request_summary())

        assert loaded.state == Loaded(sample_book, "Summary X")
        summary_client.summarize.assert_awaited_once_with(sample_book.content)

    def test_back_to_content_discards_summary(self, loaded, summary_client, sample_book):
        summary_client.summarize.return_value = AnalysisResponse(analysis="Summary X")
        asyncio.run(loaded.request_summary())

        loaded.back_to_content()

        assert loaded.state == Loaded(sample_book)
        assert loaded.state.book == sample_book

    def test_summary_not_requested_twice(self, loaded, summary_client):
        summary_client.summarize.return_value = AnalysisResponse(analysis="Summary X")
        asyncio.run(loaded.request_summary())
        asyncio.run(loaded.request_summary())

        summary_client.summarize.assert_awaited_once()

    def test_summary_failure(self, loaded, summary_client):
        summary_client.summarize.return_value = AnalysisResponse(
            analysis="Error. ",
            error=ErrorDetail(kind=ErrorKind.UPSTREAM_GENERATION, message="rate limited"),
        )

        asyncio.run(loaded.request_summary())

        assert loaded.state == Error("rate limited", ErrorKind.UPSTREAM_GENERATION)

    def test_summary_ignored_when_nothing_loaded(self, browser, summary_client):
        asyncio.run(browser.request_summary())

        assert browser.state == NoneSelected()
        summary_client.summarize.assert_not_called()

    def test_summary_after_exit_is_dropped(self, loaded, summary_client):
        async def summarize(text):
            loaded.exit_book()
            return AnalysisResponse(analysis="Summary X")

        summary_client.summarize.side_effect = summarize
        asyncio.run(loaded.request_summary())

        assert loaded.state == NoneSelected()

    def test_back_to_content_without_summary_is_noop(self, loaded, sample_book):
        loaded.back_to_content()
        assert loaded.state == Loaded(sample_book)


# ------------------------------------------------------------------
# Exit and saved books
# ------------------------------------------------------------------

class TestExitAndSavedBooks:

    def test_exit_clears_state_and_input(self, loaded):
        loaded.exit_book()

        assert loaded.state == NoneSelected()
        assert loaded.input_text == ""

    def test_exit_ignored_unless_loaded(self, browser):
        search(browser, "abc")
        browser.exit_book()

        assert isinstance(browser.state, Error)
        assert browser.input_text == "abc"

    def test_saved_books_lists_cache(self, loaded, sample_book):
        saved = loaded.saved_books()
        assert [(s.book_id, s.metadata) for s in saved] == [(1234, sample_book.metadata)]

    def test_clear_saved_books(self, loaded, fetch_client, sample_book):
        loaded.clear_saved_books()
        assert loaded.saved_books() == []

        fetch_client.fetch.return_value = BookSuccess(book=sample_book)
        search(loaded, "1234")
        fetch_client.fetch.assert_awaited_once_with(1234)
