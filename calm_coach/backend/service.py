"""
Coaching backend: the Supabase + OpenAI implementation of CoachingBackend.

One instance serves one user. The coach id travels with every chat turn and is
turned into the model instruction by the personality registry.
"""
from typing import Optional
import json

from calm_coach.db import account_repo, guest_pass_repo, session_repo
from calm_coach.llm.personalities import get_coach
from calm_coach.llm.responder import build_chat_messages, build_system_prompt, get_message_completion
from calm_coach.llm.summarizer import MIN_MESSAGES_FOR_SUMMARY, generate_resume_summary, safe_summarize_session
from calm_coach.utils.logging import log


class CoachingService:
    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id

    def _require_user(self):
        if not self.user_id:
            raise PermissionError("Authentication required")

    def _load_owned_session(self, session_id: int) -> dict:
        self._require_user()
        session = session_repo.load_session(session_id, user_id=self.user_id)
        if not session:
            raise ValueError(f"Session not found: {session_id}")
        return session

    def _user_name(self) -> Optional[str]:
        profile = account_repo.get_profile(self.user_id) if self.user_id else None
        if not profile:
            return None
        return profile.get("preferred_name") or profile.get("name")

    # ── guest pass ─────────────────────────────────────────────────

    def validate_guest_pass(self, code: str) -> dict:
        return guest_pass_repo.validate_guest_pass(code)

    def guest_pass_chat(self, guest_pass_code: str, message: str, fingerprint: str,
                        coach_id: Optional[str] = None) -> dict:
        validation = guest_pass_repo.validate_guest_pass(guest_pass_code)
        if not validation.get("valid") or not validation.get("pass_id"):
            raise ValueError(validation.get("reason") or "Invalid guest pass")

        guest_session = guest_pass_repo.get_or_create_guest_session(validation["pass_id"], fingerprint)
        history = list(guest_session.get("messages") or [])

        system_prompt = build_system_prompt(coach_id, mode="full")
        reply = get_message_completion(build_chat_messages(system_prompt, history, message))

        history.append({"role": "user", "content": message})
        history.append({"role": "assistant", "content": reply})
        guest_pass_repo.update_guest_session(guest_session["id"], history)
        guest_pass_repo.increment_guest_pass_usage(validation["pass_id"])

        return {"message": reply, "message_count": len(history)}

    # ── subscriber sessions ────────────────────────────────────────

    def start_session(self, session_type: str = "general") -> dict:
        self._require_user()
        insert_id = session_repo.create_session(self.user_id, session_type)
        log("Backend", f"Created session {insert_id} for {self.user_id}", "SUCCESS")
        return {"insert_id": insert_id}

    def send_message(self, session_id: int, message: str, session_type: str = "full",
                     coach_id: Optional[str] = None) -> dict:
        session = self._load_owned_session(session_id)
        history = list(session.get("messages") or [])

        system_prompt = build_system_prompt(coach_id, mode=session_type, user_name=self._user_name())
        reply = get_message_completion(build_chat_messages(system_prompt, history, message))

        history.append({"role": "user", "content": message})
        history.append({"role": "assistant", "content": reply})
        session_repo.save_messages(session_id, history)

        return {"message": reply}

    def get_session(self, session_id: int) -> Optional[dict]:
        self._require_user()
        session = session_repo.load_session(session_id, user_id=self.user_id)
        if not session:
            return None
        return {"messages": session.get("messages") or []}

    def generate_session_summary(self, session_id: int) -> dict:
        session = self._load_owned_session(session_id)
        messages = session.get("messages") or []

        summary = generate_resume_summary(messages)
        if len(messages) >= MIN_MESSAGES_FOR_SUMMARY:
            session_repo.save_summary(session_id, summary)
        return {"summary": summary}

    def end_session(self, session_id: int, send_email: bool = True) -> dict:
        session = self._load_owned_session(session_id)
        messages = session.get("messages") or []

        summary, success, message = safe_summarize_session(messages)
        if not success:
            log("Backend", f"No summary for session {session_id}: {message}", "WARNING")
            summary = None

        try:
            session_repo.save_summary(session_id, summary, status="ended", email_requested=send_email)
        except Exception as e:
            log("Backend", f"Session {session_id} ended but could not be updated: {e}", "ERROR")

        return {"summary": summary}

    # ── account ────────────────────────────────────────────────────

    def get_subscription(self) -> Optional[dict]:
        if not self.user_id:
            return None
        return account_repo.get_subscription(self.user_id)

    def get_profile(self) -> Optional[dict]:
        if not self.user_id:
            return None
        profile = account_repo.get_profile(self.user_id)
        if not profile:
            return None
        return {
            "has_completed_onboarding": bool(profile.get("has_completed_onboarding")),
            "preferred_name": profile.get("preferred_name") or profile.get("name"),
            "role": profile.get("role"),
            "selected_coach": _selected_coach(profile.get("coaching_preferences")),
        }

    def complete_onboarding(self, selected_coach: str, initial_goals: list) -> Optional[dict]:
        self._require_user()
        if get_coach(selected_coach) is None:
            raise ValueError(f"Unknown coach: {selected_coach}")

        goals = [g for g in initial_goals if (g.get("title") or "").strip()]
        account_repo.complete_onboarding(self.user_id, selected_coach, goals)
        log("Backend", f"Onboarding complete for {self.user_id} with {len(goals)} goals", "SUCCESS")
        return self.get_profile()


def _selected_coach(preferences) -> Optional[str]:
    """coaching_preferences is stored as a JSON string (or already decoded)."""
    if isinstance(preferences, str):
        try:
            preferences = json.loads(preferences)
        except json.JSONDecodeError:
            return None
    if isinstance(preferences, dict) and get_coach(preferences.get("selectedCoach")):
        return preferences["selectedCoach"]
    return None
