from calm_coach.config import COACH_MODEL, COACH_TEMPERATURE
from calm_coach.llm.client import get_client
from calm_coach.llm.prompts import RESUME_SUMMARY_PROMPT, SESSION_SUMMARY_PROMPT
from calm_coach.llm.transcript import build_conversation_text
from calm_coach.utils.logging import log
from calm_coach.utils.validation import validate_session_summary
import json

# Below this many messages there is nothing worth summarising
MIN_MESSAGES_FOR_SUMMARY = 4

TOO_SHORT_SUMMARY = "This session just started. Continue the conversation to build context."
UNAVAILABLE_SUMMARY = "Unable to generate summary. Continue your conversation to pick up where you left off."


def generate_resume_summary(messages: list) -> str:
    """
    Short "Last time we discussed..." text shown when a paused session is resumed.
    Uses the last 15 messages.
    """
    if len(messages) < MIN_MESSAGES_FOR_SUMMARY:
        return TOO_SHORT_SUMMARY

    conversation_text = build_conversation_text(messages, max_turns=15)

    response = get_client().chat.completions.create(
        model=COACH_MODEL,
        messages=[
            {"role": "system", "content": RESUME_SUMMARY_PROMPT},
            {"role": "user", "content": f"Generate a brief summary of this coaching session:\n\n{conversation_text}"}
        ],
        temperature=COACH_TEMPERATURE
    )
    content = response.choices[0].message.content
    return content if isinstance(content, str) and content else UNAVAILABLE_SUMMARY


def summarize_session(conversation_text: str):
    messages = [
        {"role": "system", "content": SESSION_SUMMARY_PROMPT},
        {"role": "user", "content": f"CONVERSATION:\n{conversation_text}"}
    ]

    response = get_client().chat.completions.create(
        model=COACH_MODEL,
        messages=messages,
        temperature=COACH_TEMPERATURE,
        response_format={"type": "json_object"}
    )

    try:
        return json.loads(response.choices[0].message.content)
    except (json.JSONDecodeError, TypeError):
        log("Summary", "Error decoding JSON from session summarizer", "WARNING")
        return None


def safe_summarize_session(messages: list) -> tuple[dict, bool, str]:
    """
    Structured end-of-session summary with a one-retry policy on validation failure.
    Returns (summary, success: bool, message: str). Never raises.
    """
    conversation_text = build_conversation_text(messages, max_turns=40)
    if not conversation_text:
        return None, False, "No conversation to summarise"

    log("Summary", "Summarising session (attempt 1/2)...")
    try:
        summary = summarize_session(conversation_text)
    except Exception as e:
        log("Summary", f"First attempt failed with error: {e}", "WARNING")
        summary = None

    is_valid, error_msg = validate_session_summary(summary)
    if is_valid:
        log("Summary", "Summary validated on first attempt.", "SUCCESS")
        return summary, True, "Success"

    log("Summary", f"First attempt failed validation: {error_msg}", "WARNING")
    log("Summary", "Retrying with stricter instructions (attempt 2/2)...")

    strict_messages = [
        {"role": "system", "content": SESSION_SUMMARY_PROMPT},
        {"role": "user", "content": "IMPORTANT: Return ONLY valid JSON matching the required schema exactly. No extra text, no markdown, no explanations."},
        {"role": "assistant", "content": "Understood. I will return only valid JSON matching the exact schema."},
        {"role": "user", "content": f"CONVERSATION:\n{conversation_text}"}
    ]

    try:
        response = get_client().chat.completions.create(
            model=COACH_MODEL,
            messages=strict_messages,
            temperature=COACH_TEMPERATURE,
            response_format={"type": "json_object"}
        )
        retry_summary = json.loads(response.choices[0].message.content)

        is_valid, error_msg = validate_session_summary(retry_summary)
        if is_valid:
            log("Summary", "Summary validated on retry.", "SUCCESS")
            return retry_summary, True, "Success on retry"

        log("Summary", f"Retry also failed validation: {error_msg}", "ERROR")
        return None, False, f"Validation failed after retry: {error_msg}"

    except json.JSONDecodeError as e:
        log("Summary", f"Retry failed with JSON decode error: {e}", "ERROR")
        return None, False, f"JSON decode error on retry: {e}"
    except Exception as e:
        log("Summary", f"Retry failed with error: {e}", "ERROR")
        return None, False, f"Error on retry: {e}"
