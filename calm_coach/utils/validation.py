def validate_session_summary(summary: dict) -> tuple[bool, str]:
    """
    Validates the structured end-of-session summary returned by the model.
    Returns (is_valid: bool, error_message: str).
    """
    if not isinstance(summary, dict):
        return False, "Summary is not a dictionary"

    required_keys = ["key_themes", "observation", "next_session_prompt"]

    for key in required_keys:
        if key not in summary:
            return False, f"Missing required key: {key}"

    themes = summary["key_themes"]
    if not isinstance(themes, list) or not all(isinstance(t, str) for t in themes):
        return False, "key_themes is not a list of strings"

    if not themes:
        return False, "key_themes is empty"

    for key in ("observation", "next_session_prompt"):
        if not isinstance(summary[key], str):
            return False, f"{key} is not a string"

    return True, ""


def validate_message(message: dict) -> tuple[bool, str]:
    """Checks one conversation entry: {"role": "user"|"assistant", "content": str}."""
    if not isinstance(message, dict):
        return False, "Message is not a dictionary"
    if message.get("role") not in ("user", "assistant"):
        return False, f"Invalid role: {message.get('role')}"
    if not isinstance(message.get("content"), str):
        return False, "Message content is not a string"
    return True, ""
