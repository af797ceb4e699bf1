from functools import lru_cache

from openai import AsyncOpenAI

from app import settings

PROMPT_PREFIX = "Please summarize the the following text: \n\n"
NO_ANALYSIS = "(No analysis.)"


@lru_cache(maxsize=1)
def _client() -> AsyncOpenAI:
    """Build the OpenAI client only once (cached)."""
    return AsyncOpenAI(api_key=settings.require_openai_api_key(), base_url=settings.OPENAI_BASE_URL)


def build_prompt(text: str, limit: int = None) -> str:
    """Prompt for the summary, with the source text cut to the character budget."""
    if limit is None:
        limit = settings.SOURCE_TEXT_SIZE_LIMIT_CHARS
    return PROMPT_PREFIX + text[:limit]


async def generate_analysis(text: str) -> str:
    """Ask the generation backend for a summary of text.

    Backend failures (openai.OpenAIError) and a missing API key (RuntimeError)
    propagate to the caller.
    """
    chat = await _client().chat.completions.create(
        model=settings.OPENAI_MODEL,
        messages=[{"role": "user", "content": build_prompt(text)}],
    )
    return chat.choices[0].message.content or NO_ANALYSIS
