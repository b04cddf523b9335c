# Durable client-state keys. Per-entity keys carry the entity in the name
# so two guest passes on one device never share state.

GUEST_PASS_CODE = "aiCoachGuestPassCode"
PAUSED_SESSION_ID = "pausedSessionId"
PAUSED_SESSION_TIMESTAMP = "pausedSessionTimestamp"
SUBSCRIPTION_TRACKED = "aiCoachSubscriptionTracked"
WELCOME_SHOWN = "aiCoachWelcomeShown"
TEMPLATE_PROMPT = "coaching_template_prompt"
TEMPLATE_AUTO_START = "coaching_auto_start"


def onboarding_progress(feature: str = "ai_coach") -> str:
    return f"onboarding_progress_{feature}"


def guest_welcome_shown(code: str) -> str:
    return f"aiCoachWelcomeShown_{code}"


def guest_history(code: str) -> str:
    return f"aiCoachGuestHistory_{code}"
