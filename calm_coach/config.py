import os
from dotenv import load_dotenv, find_dotenv

# Load environment variables
load_dotenv(find_dotenv())

COACH_MODEL = os.getenv("COACH_MODEL", "gpt-5-nano")
# gpt-5-nano only accepts temperature 1
COACH_TEMPERATURE = float(os.getenv("COACH_TEMPERATURE", "1"))

# 120ms per word = 500 words per minute
STREAM_WORD_DELAY_S = float(os.getenv("STREAM_WORD_DELAY_S", "0.12"))


def _clean(value):
    # Strip any quotes that might be included
    return value.strip().strip('"').strip("'") if value else value


def get_openai_api_key() -> str:
    api_key = _clean(os.getenv("OPENAI_API_KEY"))
    if not api_key:
        raise ValueError("Missing OPENAI_API_KEY. Put it in your .env file")
    return api_key


def get_supabase_credentials() -> tuple[str, str]:
    url = _clean(os.getenv("SUPABASE_URL"))
    key = _clean(os.getenv("SUPABASE_ANON_KEY"))
    if not url or not key:
        raise ValueError("Missing SUPABASE_URL or SUPABASE_ANON_KEY in .env")
    return url, key
