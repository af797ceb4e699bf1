from typing import Optional, Union

import httpx
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from app import settings
from app.models import (
    AnalysisResponse,
    BookError,
    BookResponse,
    BookSuccess,
    ErrorDetail,
    ErrorKind,
)

_book_response = TypeAdapter(BookResponse)


class _ApiClient:

    def __init__(self, base_url: str = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = base_url or settings.BROWSER_API_URL
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        # A fresh client per call: the page runs each action in its own event loop.
        return httpx.AsyncClient(base_url=self._base_url, transport=self._transport)


class BookFetchClient(_ApiClient):

    async def fetch(self, book_id: int) -> Union[BookSuccess, BookError]:
        """GET /api/fetchbook/{book_id}. Never raises; failures come back as BookError."""
        try:
            async with self._client() as client:
                response = await client.get(f"/api/fetchbook/{book_id}")
                response.raise_for_status()
            return _book_response.validate_json(response.content)
        except httpx.HTTPError as e:
            logger.warning("Fetch of book {} failed: {}", book_id, e)
            return BookError(message=str(e) or type(e).__name__, error_kind=ErrorKind.UPSTREAM_FETCH)
        except ValidationError as e:
            logger.warning("Unexpected fetch response for book {}: {}", book_id, e)
            return BookError(message=f"Malformed response from server: {e}", error_kind=ErrorKind.UPSTREAM_FETCH)


class SummaryClient(_ApiClient):

    async def summarize(self, text: str) -> AnalysisResponse:
        """POST /api/generateanalysis. Never raises; failures are reported in AnalysisResponse.error."""
        try:
            async with self._client() as client:
                response = await client.post("/api/generateanalysis", json={"text": text})
                response.raise_for_status()
            return AnalysisResponse.model_validate_json(response.content)
        except httpx.HTTPError as e:
            logger.warning("Summary request failed: {}", e)
            message = str(e) or type(e).__name__
        except ValidationError as e:
            logger.warning("Unexpected summary response: {}", e)
            message = f"Malformed response from server: {e}"
        return AnalysisResponse(
            analysis="",
            error=ErrorDetail(kind=ErrorKind.UPSTREAM_GENERATION, message=message),
        )
