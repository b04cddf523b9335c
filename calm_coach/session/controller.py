r"""
Coach session state machine.

    not_started --start--> active --pause--> paused --resume--> active
                              \                 /
                               `----end--------'--> ended

CoachSession holds the data and enforces legal transitions; the controller
drives it against the coaching backend and the durable store. Every backend
call is a suspension point: a second call of the same operation is refused
while one is in flight, and results that come back after the session was
paused, ended or replaced are dropped.
"""
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import threading
import time
import uuid

from calm_coach.backend.contracts import CoachingBackend
from calm_coach.guest.history import GuestHistory
from calm_coach.llm.personalities import DEFAULT_COACH_ID, get_coach
from calm_coach.llm.transcript import export_transcript
from calm_coach.session.access import SESSION_MODES, AccessMode
from calm_coach.session.streaming import StreamingReveal
from calm_coach.session.summary import banner_text, fallback_summary
from calm_coach.storage import keys
from calm_coach.storage.store import DurableStore
from calm_coach.utils.logging import log
from calm_coach.utils.validation import validate_message

# Guest conversations have no server-side session record
GUEST_SESSION_ID = -1

GREETING_BODY = "What's on your mind? Don't give me the polished version. I want the thing you're actually wrestling with."
APOLOGY_MESSAGE = "I apologize, but I encountered an error. Please try again."


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


class CoachingMode(str, Enum):
    FULL = "full"
    QUICK = "quick"


ALLOWED_TRANSITIONS = {
    SessionStatus.NOT_STARTED: {SessionStatus.ACTIVE},
    SessionStatus.ACTIVE: {SessionStatus.PAUSED, SessionStatus.ENDED},
    SessionStatus.PAUSED: {SessionStatus.ACTIVE, SessionStatus.ENDED},
    SessionStatus.ENDED: set(),
}


@dataclass
class CoachSession:
    access_mode: AccessMode = AccessMode.UNAUTHENTICATED
    coach_id: str = DEFAULT_COACH_ID
    mode: CoachingMode = CoachingMode.FULL
    session_id: Optional[int] = None
    status: SessionStatus = SessionStatus.NOT_STARTED
    messages: list = field(default_factory=list)
    paused_at: Optional[float] = None

    @property
    def is_guest(self) -> bool:
        return self.session_id == GUEST_SESSION_ID

    def transition(self, new_status: SessionStatus):
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise ValueError(f"Illegal session transition: {self.status.value} -> {new_status.value}")
        self.status = new_status

    def append(self, role: str, content: str, message_id: Optional[str] = None) -> dict:
        if self.status != SessionStatus.ACTIVE:
            raise ValueError(f"Cannot append to a {self.status.value} session")
        message = {"role": role, "content": content}
        is_valid, error = validate_message(message)
        if not is_valid:
            raise ValueError(error)
        if message_id is not None:
            message["id"] = message_id
        self.messages.append(message)
        return message


class CoachSessionController:
    def __init__(
        self,
        backend: CoachingBackend,
        store: DurableStore,
        access_mode: AccessMode = AccessMode.UNAUTHENTICATED,
        guest_pass_code: Optional[str] = None,
        user_name: Optional[str] = None,
        fingerprint: Optional[str] = None,
        clock=time.time,
        summary_executor=None,
    ):
        self.backend = backend
        self.store = store
        self.access_mode = access_mode
        self.guest_pass_code = guest_pass_code
        self.user_name = user_name
        self._clock = clock
        self.fingerprint = fingerprint or f"dashboard-{int(clock() * 1000)}"
        self._summary_executor = summary_executor

        self.session: Optional[CoachSession] = None
        self.selected_coach = DEFAULT_COACH_ID
        self.selected_mode = CoachingMode.FULL
        self.streaming_message_id: Optional[str] = None
        self.reveal: Optional[StreamingReveal] = None
        self.resume_banner: Optional[str] = None
        self.summary_future: Optional[Future] = None
        self.end_summary = None

        self._epoch = 0
        self._in_flight = set()
        self._lock = threading.Lock()

    # ── helpers ────────────────────────────────────────────────────

    @contextmanager
    def _exclusive(self, operation: str):
        with self._lock:
            acquired = operation not in self._in_flight
            if acquired:
                self._in_flight.add(operation)
        try:
            yield acquired
        finally:
            if acquired:
                with self._lock:
                    self._in_flight.discard(operation)

    def is_busy(self, operation: str) -> bool:
        return operation in self._in_flight

    @property
    def status(self) -> SessionStatus:
        return self.session.status if self.session else SessionStatus.NOT_STARTED

    @property
    def messages(self) -> list:
        return self.session.messages if self.session else []

    @property
    def is_guest_mode(self) -> bool:
        return self.access_mode == AccessMode.GUEST

    def _guest_history(self) -> Optional[GuestHistory]:
        if self.is_guest_mode and self.guest_pass_code:
            return GuestHistory(self.store, self.guest_pass_code)
        return None

    def _persist_guest_history(self, session: CoachSession):
        history = self._guest_history()
        if history is None or not session.is_guest:
            return
        try:
            history.save(session.messages)
        except Exception as e:
            log("Session", f"Could not save guest history: {e}", "WARNING")

    def _is_current(self, session: CoachSession, epoch: int) -> bool:
        return self.session is session and self._epoch == epoch and session.status == SessionStatus.ACTIVE

    def _clear_pause_markers(self):
        self.store.remove(keys.PAUSED_SESSION_ID)
        self.store.remove(keys.PAUSED_SESSION_TIMESTAMP)

    def _stop_reveal(self):
        self.streaming_message_id = None
        if self.reveal is not None:
            self.reveal.skip()
            self.reveal = None

    def reveal_reply(self, word_delay_s: Optional[float] = None) -> Optional[StreamingReveal]:
        """Paced reveal of the newest reply, or None when nothing is eligible."""
        messages = self.messages
        if not self.streaming_message_id or not messages or messages[-1].get("id") != self.streaming_message_id:
            return None
        kwargs = {} if word_delay_s is None else {"word_delay_s": word_delay_s}
        self.reveal = StreamingReveal(messages[-1]["content"], **kwargs)
        return self.reveal

    def skip_reveal(self):
        if self.reveal is not None:
            self.reveal.skip()

    def greeting(self) -> str:
        if self.is_guest_mode:
            return f"Hey. {GREETING_BODY}"
        return f"{self.user_name or 'Hey'}. {GREETING_BODY}"

    def should_show_welcome(self) -> bool:
        """First visit only. Guests are tracked per pass code."""
        history = self._guest_history()
        if history is not None:
            return not history.welcome_shown()
        return self.store.get(keys.WELCOME_SHOWN) != "true"

    def mark_welcome_shown(self):
        history = self._guest_history()
        if history is not None:
            history.mark_welcome_shown()
        else:
            self.store.set(keys.WELCOME_SHOWN, "true")

    # ── selections ─────────────────────────────────────────────────

    def select_mode(self, mode) -> tuple[bool, str]:
        mode = CoachingMode(mode)
        if self.status in (SessionStatus.ACTIVE, SessionStatus.PAUSED):
            return False, "⚠ Coaching mode can't change mid-session."
        self.selected_mode = mode
        return True, ""

    def set_coach(self, coach_id: str) -> tuple[bool, str]:
        """Switches coach without touching messages, status or mode."""
        self.selected_coach = coach_id
        if self.session and self.session.status == SessionStatus.ACTIVE:
            self.session.coach_id = coach_id
            coach = get_coach(coach_id)
            name = coach.display_name if coach else coach_id
            return True, f"✓ Switched to {name}. Your conversation continues with your new coach."
        return True, ""

    # ── transitions ────────────────────────────────────────────────

    def start_session(self) -> tuple[bool, str]:
        with self._exclusive("start") as acquired:
            if not acquired:
                return False, "⚠ A session is already starting."
            if self.status == SessionStatus.ACTIVE:
                return False, "⚠ A session is already active."
            if self.access_mode not in SESSION_MODES:
                return False, "⚠ Coaching isn't available with your current access."

            session = CoachSession(
                access_mode=self.access_mode,
                coach_id=self.selected_coach,
                mode=self.selected_mode,
            )

            if self.is_guest_mode:
                session.session_id = GUEST_SESSION_ID
            else:
                try:
                    result = self.backend.start_session(session_type="general")
                    session.session_id = int(result["insert_id"])
                except Exception as e:
                    log("Session", f"Failed to start session: {e}", "ERROR")
                    return False, "⚠ Could not start a session. Please try again."

            session.transition(SessionStatus.ACTIVE)

            history = self._guest_history()
            restored = history.load() if history else []
            if restored:
                session.messages.extend(restored)
            else:
                session.append("assistant", self.greeting())
                self._persist_guest_history(session)

            self.session = session
            self._epoch += 1
            self._stop_reveal()
            self.resume_banner = None
            self.end_summary = None
            log("Session", f"Started session {session.session_id} ({session.access_mode.value}, {session.mode.value})", "SUCCESS")
            return True, "✓ Session started."

    def send_message(self, text: str) -> tuple[bool, str]:
        message = (text or "").strip()
        session = self.session
        if not message or session is None or session.status != SessionStatus.ACTIVE:
            return False, ""
        if self.access_mode not in SESSION_MODES:
            return False, ""

        with self._exclusive("send") as acquired:
            if not acquired:
                return False, "⚠ Still waiting for the last reply."

            # Local apply first: the user's own turn shows immediately
            session.append("user", message)
            self._persist_guest_history(session)
            epoch = self._epoch

            failed = False
            try:
                if session.is_guest:
                    response = self.backend.guest_pass_chat(
                        guest_pass_code=self.guest_pass_code,
                        message=message,
                        fingerprint=self.fingerprint,
                        coach_id=session.coach_id,
                    )
                else:
                    response = self.backend.send_message(
                        session_id=session.session_id,
                        message=message,
                        session_type=session.mode.value,
                        coach_id=session.coach_id,
                    )
                reply = response["message"]
            except Exception as e:
                log("Session", f"Reply failed for session {session.session_id}: {e}", "ERROR")
                reply = APOLOGY_MESSAGE
                failed = True

            # Reconcile: drop the reply if the session moved on meanwhile
            if not self._is_current(session, epoch):
                log("Session", f"Discarding stale reply for session {session.session_id}", "WARNING")
                return False, ""

            if failed:
                session.append("assistant", reply)
                self._persist_guest_history(session)
                return False, "⚠ The coach couldn't reply. Please try again."

            message_id = uuid.uuid4().hex
            session.append("assistant", reply, message_id=message_id)
            self.streaming_message_id = message_id
            self._persist_guest_history(session)
            return True, ""

    def pause(self) -> tuple[bool, str]:
        session = self.session
        if session is None or session.status != SessionStatus.ACTIVE:
            return False, ""
        if session.is_guest:
            return False, "⚠ Guest conversations are saved automatically and can't be paused."

        paused_at = self._clock()
        self.store.set(keys.PAUSED_SESSION_ID, str(session.session_id))
        self.store.set(keys.PAUSED_SESSION_TIMESTAMP, str(int(paused_at * 1000)))

        session.transition(SessionStatus.PAUSED)
        session.paused_at = paused_at
        session.messages = []
        self._epoch += 1
        self._stop_reveal()
        log("Session", f"Paused session {session.session_id}")
        return True, "✓ Session paused. You can resume later."

    def pending_resume(self) -> Optional[dict]:
        """The persisted paused session, if any, while nothing is active."""
        if self.status == SessionStatus.ACTIVE:
            return None
        raw_id = self.store.get(keys.PAUSED_SESSION_ID)
        if raw_id is None:
            return None
        try:
            session_id = int(raw_id)
        except ValueError:
            log("Session", f"Dropping unreadable pause marker: {raw_id!r}", "WARNING")
            self._clear_pause_markers()
            return None

        raw_ts = self.store.get(keys.PAUSED_SESSION_TIMESTAMP)
        paused_at = int(raw_ts) / 1000 if raw_ts and raw_ts.isdigit() else None
        return {"session_id": session_id, "paused_at": paused_at}

    def discard_paused(self) -> tuple[bool, str]:
        """The "start new session" answer to the resume prompt."""
        self._clear_pause_markers()
        if self.session and self.session.status == SessionStatus.PAUSED:
            self.session = None
            self._epoch += 1
        return True, "Starting a new session"

    def resume(self) -> tuple[bool, str]:
        with self._exclusive("resume") as acquired:
            if not acquired:
                return False, "⚠ Already resuming."
            if self.status == SessionStatus.ACTIVE:
                return False, "⚠ A session is already active."
            if self.access_mode not in SESSION_MODES:
                return False, "⚠ Coaching isn't available with your current access."

            pending = self.pending_resume()
            if pending is None:
                return False, "⚠ No paused session to resume."
            session_id = pending["session_id"]

            try:
                fetched = self.backend.get_session(session_id=session_id)
            except Exception as e:
                log("Session", f"Failed to load session {session_id}: {e}", "ERROR")
                return False, "⚠ Failed to load session messages"
            if not fetched:
                log("Session", f"Session {session_id} came back empty", "ERROR")
                return False, "⚠ Failed to load session data"

            # A new session may have started while the fetch was in flight
            if self.status == SessionStatus.ACTIVE:
                log("Session", f"Dropping resume of {session_id}: another session is active", "WARNING")
                return False, "⚠ A session is already active."

            session = self.session
            if session is None or session.status != SessionStatus.PAUSED or session.session_id != session_id:
                session = CoachSession(
                    access_mode=self.access_mode,
                    coach_id=self.selected_coach,
                    mode=self.selected_mode,
                    session_id=session_id,
                    status=SessionStatus.PAUSED,
                    paused_at=pending["paused_at"],
                )

            raw_messages = fetched.get("messages") if isinstance(fetched, dict) else None
            messages = [
                {"role": m["role"], "content": m["content"]}
                for m in (raw_messages if isinstance(raw_messages, list) else [])
                if validate_message(m)[0]
            ]

            session.transition(SessionStatus.ACTIVE)
            session.messages = messages
            session.paused_at = None
            self.session = session
            self._epoch += 1
            self._stop_reveal()
            self.resume_banner = None
            self._clear_pause_markers()

            if messages:
                self.summary_future = self._request_resume_summary(session, self._epoch, list(messages))
                log("Session", f"Resumed session {session_id} with {len(messages)} messages", "SUCCESS")
                return True, "✓ Session resumed!"

            log("Session", f"Resumed empty session {session_id}", "SUCCESS")
            return True, "✓ Session resumed. Start the conversation by typing a message below."

    def _request_resume_summary(self, session: CoachSession, epoch: int, messages: list) -> Future:
        if self._summary_executor is None:
            self._summary_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="resume-summary")
        return self._summary_executor.submit(self._load_resume_banner, session, epoch, messages)

    def _load_resume_banner(self, session: CoachSession, epoch: int, messages: list) -> Optional[str]:
        try:
            result = self.backend.generate_session_summary(session_id=session.session_id)
            text = banner_text(result.get("summary") if result else None)
        except Exception as e:
            log("Session", f"Summary generation failed, using local extraction: {e}", "WARNING")
            text = fallback_summary(messages)

        if self.session is not session or self._epoch != epoch:
            return None
        self.resume_banner = text
        return text

    def dismiss_banner(self):
        self.resume_banner = None

    def end_session(self) -> tuple[bool, str]:
        session = self.session
        if session is None or session.status not in (SessionStatus.ACTIVE, SessionStatus.PAUSED):
            return False, ""

        with self._exclusive("end") as acquired:
            if not acquired:
                return False, "⚠ Already ending the session."

            summary = None
            if session.is_guest:
                # The next start opens a fresh conversation
                history = self._guest_history()
                if history is not None:
                    history.clear()
            else:
                try:
                    result = self.backend.end_session(session_id=session.session_id, send_email=True)
                    summary = (result or {}).get("summary")
                except Exception as e:
                    log("Session", f"Failed to end session {session.session_id}: {e}", "ERROR")
                    return False, "⚠ Failed to end session"

            self._clear_pause_markers()
            session.transition(SessionStatus.ENDED)
            self._epoch += 1
            self._stop_reveal()
            self.resume_banner = None
            self.end_summary = summary
            log("Session", f"Ended session {session.session_id}", "SUCCESS")
            if summary:
                return True, "✓ Session complete!"
            return True, "✓ Session complete! Summary saved."

    def clear_conversation(self) -> tuple[bool, str]:
        """Guest-only reset: the stored history shrinks to a fresh greeting."""
        session = self.session
        history = self._guest_history()
        if history is None or session is None or not session.is_guest or session.status != SessionStatus.ACTIVE:
            return False, ""
        if self.is_busy("send"):
            return False, "⚠ Still waiting for the last reply."

        session.messages = []
        session.append("assistant", self.greeting())
        history.clear(dict(session.messages[0]))
        self._epoch += 1
        self._stop_reveal()
        log("Session", f"Cleared guest conversation for {self.guest_pass_code}")
        return True, "✓ Conversation cleared."

    def discard(self):
        """Navigating away without pausing: forget the in-memory session."""
        self.session = None
        self._epoch += 1
        self._stop_reveal()
        self.resume_banner = None

    def logout(self):
        self.discard()
        self.store.remove(keys.GUEST_PASS_CODE)
        self.guest_pass_code = None
        self.access_mode = AccessMode.UNAUTHENTICATED

    # ── template hand-off & export ─────────────────────────────────

    def consume_template_prompt(self) -> tuple[Optional[str], bool]:
        prompt = self.store.get(keys.TEMPLATE_PROMPT)
        auto_start = self.store.get(keys.TEMPLATE_AUTO_START) == "true"
        if prompt is None:
            return None, False
        self.store.remove(keys.TEMPLATE_PROMPT)
        self.store.remove(keys.TEMPLATE_AUTO_START)
        return prompt, auto_start

    def start_from_template(self) -> tuple[Optional[str], str]:
        """
        Picks up a template chosen on the templates page. With auto-start the
        session is started and the prompt sent; otherwise the prompt is handed
        back to prefill the input. Returns (prompt_to_prefill, status).
        """
        prompt, auto_start = self.consume_template_prompt()
        if not prompt or not auto_start:
            return prompt, ""

        started, status = self.start_session()
        if not started:
            return prompt, status
        _, status = self.send_message(prompt)
        return None, status

    def export_markdown(self) -> str:
        coach = get_coach(self.session.coach_id) if self.session else None
        return export_transcript(self.messages, coach.display_name if coach else "Coach")
