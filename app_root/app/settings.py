import os
from dotenv import load_dotenv

load_dotenv()

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL_NAME", "gpt-4o-mini")
# Any OpenAI-compatible endpoint works here (Groq, a local server, ...)
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None
SOURCE_TEXT_SIZE_LIMIT_CHARS = int(os.getenv("SOURCE_TEXT_SIZE_LIMIT_CHARS", "5000"))

GUTENBERG_BASE_URL = os.getenv("GUTENBERG_BASE_URL", "https://www.gutenberg.org")

BROWSER_API_URL = os.getenv("BROWSER_API_URL", "http://localhost:8000")
BROWSER_CACHE_PATH = os.getenv("BROWSER_CACHE_PATH", "./saved_books.json")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def require_openai_api_key() -> str:
    if not OPENAI_API_KEY:
        raise RuntimeError("OPENAI_API_KEY is missing. Please check your .env file.")
    return OPENAI_API_KEY
