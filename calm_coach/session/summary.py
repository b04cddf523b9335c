import re
from typing import Optional

DEFAULT_BANNER = "Continue your previous conversation."
TOPIC_MAX_CHARS = 60


def banner_text(summary) -> Optional[str]:
    """Turns whatever the summary collaborator returned into one line for the resume banner."""
    if not summary:
        return None
    if isinstance(summary, str):
        return summary
    if isinstance(summary, dict):
        themes = summary.get("key_themes") or summary.get("keyThemes") or []
        return themes[0] if themes else DEFAULT_BANNER
    return DEFAULT_BANNER


def fallback_summary(messages: list) -> Optional[str]:
    """
    Local stand-in when summary generation fails: the first sentence of the
    last user message. None when the user never spoke.
    """
    user_messages = [m.get("content", "") for m in messages if m.get("role") == "user"]
    if not user_messages:
        return None

    topic = re.split(r"[.!?]", user_messages[-1])[0].strip()[:TOPIC_MAX_CHARS]
    if not topic:
        return None
    return f'Last time you were discussing: "{topic}"'
