import json
from typing import Union

import httpx
import openai
from fastapi import FastAPI, Request
from loguru import logger

from app.log import configure_logging
from app.models import (
    AnalysisResponse,
    BookError,
    BookSuccess,
    ErrorDetail,
    ErrorKind,
    InvalidBookId,
    parse_book_id,
)
from analysis.summaries import generate_analysis
from gutenberg.scraper import fetch_book

configure_logging()

app = FastAPI(title="Project Gutenberg Browser")

ANALYSIS_ERROR_MARKER = "Error. "


@app.get("/health")
def health():
    return {"ok": True}


# Every outcome is a 200; clients branch on "kind".
@app.get("/api/fetchbook", response_model=Union[BookSuccess, BookError])
async def fetchbook_missing_id():
    return BookError(message="Error: Invalid URL format.", error_kind=ErrorKind.INPUT)


@app.get("/api/fetchbook/{book_id}", response_model=Union[BookSuccess, BookError])
async def fetchbook(book_id: str):
    try:
        book_id_num = parse_book_id(book_id)
    except InvalidBookId as e:
        logger.info("Rejected book id {!r}: {}", book_id, e)
        return BookError(message=str(e), error_kind=ErrorKind.INPUT)

    logger.info("Fetching book {}", book_id_num)
    try:
        book = await fetch_book(book_id_num)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.exception("Fetching book {} failed", book_id_num)
        return BookError(message=str(e) or type(e).__name__, error_kind=ErrorKind.UPSTREAM_FETCH)

    return BookSuccess(book=book)


@app.post("/api/generateanalysis", response_model=AnalysisResponse)
async def generateanalysis(request: Request):
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    text = body.get("text") if isinstance(body, dict) else None
    if not isinstance(text, str):
        return AnalysisResponse(
            analysis=ANALYSIS_ERROR_MARKER,
            error=ErrorDetail(kind=ErrorKind.INPUT, message="Request body must contain a string 'text' field."),
        )

    logger.info("Generating analysis for {} characters of text", len(text))
    try:
        analysis = await generate_analysis(text)
    except (openai.OpenAIError, RuntimeError) as e:
        logger.exception("Analysis generation failed")
        return AnalysisResponse(
            analysis=ANALYSIS_ERROR_MARKER,
            error=ErrorDetail(kind=ErrorKind.UPSTREAM_GENERATION, message=str(e)),
        )

    return AnalysisResponse(analysis=analysis)
