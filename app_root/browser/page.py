# Run with: streamlit run app_root/browser/page.py
import asyncio

import streamlit as st

from app import settings
from app.log import configure_logging
from browser.cache import JsonFileCache
from browser.clients import BookFetchClient, SummaryClient
from browser.controller import BookBrowser, Error, Loaded, Loading

INPUT_KEY = "book_id_input"

st.set_page_config(page_title="Project Gutenberg Browser", page_icon="📚")


def get_browser() -> BookBrowser:
    """One controller per browser session, kept across Streamlit reruns."""
    if "browser" not in st.session_state:
        configure_logging()
        st.session_state["browser"] = BookBrowser(
            cache=JsonFileCache(settings.BROWSER_CACHE_PATH),
            fetch_client=BookFetchClient(),
            summary_client=SummaryClient(),
        )
    return st.session_state["browser"]


browser = get_browser()


# Callbacks run before the rerun, so they may reset the input widget.
def _on_search():
    browser.set_input(st.session_state[INPUT_KEY])
    asyncio.run(browser.search())


def _on_generate_analysis():
    asyncio.run(browser.request_summary())


def _on_exit_book():
    browser.exit_book()
    st.session_state[INPUT_KEY] = browser.input_text


def render_search_bar():
    col_input, col_button = st.columns([4, 1])
    with col_input:
        st.text_input("Book ID:", key=INPUT_KEY)
    with col_button:
        st.button("Search", on_click=_on_search)


def render_saved_books():
    st.subheader("Saved Books:")
    saved = browser.saved_books()
    if not saved:
        st.write("No Saved Books yet!")
        return
    st.button("Clear Saved Books", on_click=browser.clear_saved_books)
    st.table([
        {"Book Id": s.book_id, "Title": s.metadata.title, "Author": s.metadata.author}
        for s in saved
    ])


def render_book():
    state = browser.state
    if isinstance(state, Loaded):
        st.header(state.book.metadata.title)
        st.subheader(state.book.metadata.author)
        col_left, col_right = st.columns(2)
        if state.summary:
            col_left.button("Back to Book Content", on_click=browser.back_to_content)
            col_right.button("Exit Book", on_click=_on_exit_book)
            st.markdown("**LLM Analysis:**")
            st.text(state.summary)
        else:
            col_left.button("Generate LLM Analysis", on_click=_on_generate_analysis)
            col_right.button("Exit Book", on_click=_on_exit_book)
            st.text(state.book.content)
    elif isinstance(state, Loading):
        st.write("(LOADING BOOK ... )")
    elif isinstance(state, Error):
        st.error(f"ERROR: {state.message}")


st.title("Project Gutenberg Browser")
render_search_bar()
render_saved_books()
render_book()
