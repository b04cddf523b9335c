from typing import Optional

from calm_coach.config import COACH_MODEL, COACH_TEMPERATURE
from calm_coach.llm.client import get_client
from calm_coach.llm.personalities import get_coach_prompt
from calm_coach.llm.prompts import COACHEE_CONTEXT, QUICK_COACHING_ADDENDUM

EMPTY_REPLY_FALLBACK = "I'm here to help. Could you tell me more about your situation?"


def build_system_prompt(coach_id: str, mode: str = "full", user_name: Optional[str] = None) -> str:
    """
    Coach prompt for this turn. Quick mode appends the tactical addendum;
    a known user name adds a short who-you're-coaching block.
    """
    prompt = get_coach_prompt(coach_id)

    if user_name:
        prompt += "\n\n" + COACHEE_CONTEXT.format(user_name=user_name)

    if mode == "quick":
        prompt += "\n\n" + QUICK_COACHING_ADDENDUM.format(user_name=user_name or "The user")

    return prompt


def build_chat_messages(system_prompt: str, history: list, message: str) -> list[dict]:
    messages = [{"role": "system", "content": system_prompt}]
    messages.extend(
        {"role": m["role"], "content": m["content"]}
        for m in history
        if m.get("role") in ("user", "assistant")
    )
    messages.append({"role": "user", "content": message})
    return messages


def get_message_completion(messages, model=COACH_MODEL, temperature=COACH_TEMPERATURE):
    response = get_client().chat.completions.create(
        model=model,
        messages=messages,
        temperature=temperature
    )
    return response.choices[0].message.content or EMPTY_REPLY_FALLBACK
