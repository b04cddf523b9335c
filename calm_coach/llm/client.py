from openai import OpenAI
from calm_coach.config import get_openai_api_key

_client = None


def get_client() -> OpenAI:
    """
    Returns the shared OpenAI client, creating it on first use.
    Raises ValueError when OPENAI_API_KEY is not configured.
    """
    global _client
    if _client is None:
        _client = OpenAI(api_key=get_openai_api_key())
    return _client
