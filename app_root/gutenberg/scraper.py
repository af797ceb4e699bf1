from typing import Optional

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from app import settings
from app.models import Book, BookMetadata


def content_url(book_id: int, base_url: str = None) -> str:
    base = (base_url or settings.GUTENBERG_BASE_URL).rstrip("/")
    return f"{base}/files/{book_id}/{book_id}-0.txt"


def metadata_url(book_id: int, base_url: str = None) -> str:
    base = (base_url or settings.GUTENBERG_BASE_URL).rstrip("/")
    return f"{base}/ebooks/{book_id}"


async def fetch_book(book_id: int, transport: Optional[httpx.AsyncBaseTransport] = None) -> Book:
    """Download the text and the metadata page of a book and build a Book from them.

    Raises httpx.HTTPError on network failures and non-2xx responses.
    """
    async with httpx.AsyncClient(transport=transport, follow_redirects=True) as client:
        content_response = await client.get(content_url(book_id))
        content_response.raise_for_status()

        metadata_response = await client.get(metadata_url(book_id))
        metadata_response.raise_for_status()

    metadata = parse_metadata(metadata_response.text)
    logger.debug("Book {}: title={!r} author={!r}", book_id, metadata.title, metadata.author)
    return Book(content=content_response.text, metadata=metadata)


def parse_metadata(html: str) -> BookMetadata:
    """Read Title and Author out of the bibliographic record table (#bibrec)."""
    soup = BeautifulSoup(html, "html.parser")
    return BookMetadata(
        title=_bibrec_field(soup, "Title"),
        author=_bibrec_field(soup, "Author"),
    )


def _bibrec_field(soup: BeautifulSoup, label: str) -> str:
    table = soup.select_one("#bibrec")
    if table is None:
        return ""
    for th in table.find_all("th"):
        if label in th.get_text():
            td = th.find_next_sibling("td")
            return td.get_text().strip() if td else ""
    return ""
