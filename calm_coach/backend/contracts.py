"""
Request/response contracts the session layer relies on.

Any object with these methods can back a CoachSessionController; CoachingService
is the Supabase + OpenAI implementation, tests use mocks.
"""
from typing import Optional, Protocol


class CoachingBackend(Protocol):
    def validate_guest_pass(self, code: str) -> dict:
        """{"valid": bool, "reason": str | None, "pass_id": int | None}"""

    def start_session(self, session_type: str = "general") -> dict:
        """{"insert_id": int}"""

    def send_message(self, session_id: int, message: str, session_type: str = "full",
                     coach_id: Optional[str] = None) -> dict:
        """{"message": str}"""

    def guest_pass_chat(self, guest_pass_code: str, message: str, fingerprint: str,
                        coach_id: Optional[str] = None) -> dict:
        """{"message": str, "message_count": int}"""

    def get_session(self, session_id: int) -> Optional[dict]:
        """{"messages": [{"role", "content"}, ...]} or None"""

    def generate_session_summary(self, session_id: int) -> dict:
        """{"summary": str | dict}"""

    def end_session(self, session_id: int, send_email: bool = True) -> dict:
        """{"summary": dict | None}"""

    def get_subscription(self) -> Optional[dict]:
        """{"status", "current_period_end", "stripe_customer_id", "stripe_subscription_id"}"""

    def get_profile(self) -> Optional[dict]:
        """{"has_completed_onboarding": bool, "preferred_name", "role", "selected_coach"} or None"""

    def complete_onboarding(self, selected_coach: str, initial_goals: list) -> Optional[dict]:
        """Marks onboarding done and stores the goals; returns the updated profile."""
