import unittest
from unittest.mock import MagicMock
from calm_coach.guest.validation import check_guest_pass
from calm_coach.session.access import AccessGate, AccessInputs, AccessMode
from calm_coach.session.controller import (
    APOLOGY_MESSAGE, GUEST_SESSION_ID, CoachSession, CoachSessionController, SessionStatus
)
from calm_coach.storage import keys
from calm_coach.storage.store import MemoryStore, load_json


def make_controller(access_mode=AccessMode.SUBSCRIBER, store=None, **kwargs):
    backend = MagicMock()
    backend.start_session.return_value = {"insert_id": 42}
    backend.send_message.return_value = {"message": "What would you decide if you weren't afraid?"}
    backend.guest_pass_chat.return_value = {"message": "Tell me more.", "message_count": 2}
    controller = CoachSessionController(
        backend, store if store is not None else MemoryStore(),
        access_mode=access_mode, clock=lambda: 1000.0, **kwargs
    )
    return controller, backend


class TestCoachSession(unittest.TestCase):
    def test_illegal_transitions(self):
        session = CoachSession()
        with self.assertRaises(ValueError):
            session.transition(SessionStatus.PAUSED)
        session.transition(SessionStatus.ACTIVE)
        session.transition(SessionStatus.ENDED)
        with self.assertRaises(ValueError):
            session.transition(SessionStatus.ACTIVE)

    def test_append_requires_active(self):
        session = CoachSession()
        with self.assertRaises(ValueError):
            session.append("user", "hello")
        session.transition(SessionStatus.ACTIVE)
        with self.assertRaises(ValueError):
            session.append("system", "hello")


class TestStartSession(unittest.TestCase):
    def test_guest_start_skips_backend(self):
        controller, backend = make_controller(AccessMode.GUEST, guest_pass_code="GUEST-1")
        success, _ = controller.start_session()

        self.assertTrue(success)
        backend.start_session.assert_not_called()
        self.assertEqual(controller.session.session_id, GUEST_SESSION_ID)
        self.assertEqual(controller.status, SessionStatus.ACTIVE)
        self.assertTrue(controller.messages[0]["content"].startswith("Hey. "))

    def test_subscriber_start_stores_returned_id(self):
        controller, backend = make_controller(user_name="Dana")
        success, _ = controller.start_session()

        self.assertTrue(success)
        backend.start_session.assert_called_once_with(session_type="general")
        self.assertEqual(controller.session.session_id, 42)
        self.assertEqual(len(controller.messages), 1)
        self.assertEqual(controller.messages[0]["role"], "assistant")
        self.assertTrue(controller.messages[0]["content"].startswith("Dana. "))

    def test_second_start_is_refused_while_active(self):
        controller, backend = make_controller()
        controller.start_session()
        success, message = controller.start_session()

        self.assertFalse(success)
        self.assertEqual(message, "⚠ A session is already active.")
        backend.start_session.assert_called_once()

    def test_denied_cannot_start(self):
        for mode in (AccessMode.DENIED, AccessMode.PENDING, AccessMode.UNAUTHENTICATED):
            controller, backend = make_controller(mode)
            success, _ = controller.start_session()
            self.assertFalse(success)
            self.assertEqual(controller.status, SessionStatus.NOT_STARTED)
            backend.start_session.assert_not_called()

    def test_backend_failure_leaves_not_started(self):
        controller, backend = make_controller()
        backend.start_session.side_effect = Exception("boom")
        success, _ = controller.start_session()
        self.assertFalse(success)
        self.assertEqual(controller.status, SessionStatus.NOT_STARTED)

    def test_guest_history_restored(self):
        saved = [{"role": "assistant", "content": "Hey."}, {"role": "user", "content": "Hi"}]
        store = MemoryStore()
        store.set(keys.guest_history("GUEST-1"), '[{"role": "assistant", "content": "Hey."}, {"role": "user", "content": "Hi"}]')
        controller, _ = make_controller(AccessMode.GUEST, store=store, guest_pass_code="GUEST-1")
        controller.start_session()
        self.assertEqual(controller.messages, saved)


class TestSendMessage(unittest.TestCase):
    def test_reply_appends_user_then_assistant(self):
        controller, backend = make_controller()
        controller.selected_coach = "sarah-mitchell"
        controller.start_session()
        before = len(controller.messages)

        success, _ = controller.send_message("What's the decision?")

        self.assertTrue(success)
        self.assertEqual(len(controller.messages), before + 2)
        user_msg, reply = controller.messages[-2:]
        self.assertEqual(user_msg, {"role": "user", "content": "What's the decision?"})
        self.assertEqual(reply["role"], "assistant")
        self.assertEqual(reply["content"], "What would you decide if you weren't afraid?")
        self.assertEqual(reply["id"], controller.streaming_message_id)
        backend.send_message.assert_called_once_with(
            session_id=42, message="What's the decision?", session_type="full", coach_id="sarah-mitchell"
        )

    def test_blank_message_is_ignored(self):
        controller, backend = make_controller()
        controller.start_session()
        before = list(controller.messages)

        for text in ("", "   ", "\n\t"):
            self.assertEqual(controller.send_message(text), (False, ""))
        self.assertEqual(controller.messages, before)
        backend.send_message.assert_not_called()

    def test_guest_send_uses_guest_chat(self):
        controller, backend = make_controller(AccessMode.GUEST, guest_pass_code="GUEST-1", fingerprint="fp-1")
        controller.start_session()
        controller.send_message("Hello")

        backend.send_message.assert_not_called()
        backend.guest_pass_chat.assert_called_once_with(
            guest_pass_code="GUEST-1", message="Hello", fingerprint="fp-1", coach_id="sarah-mitchell"
        )
        saved = load_json(controller.store, keys.guest_history("GUEST-1"))
        self.assertEqual(saved[-1], {"role": "assistant", "content": "Tell me more."})

    def test_failed_reply_appends_apology(self):
        controller, backend = make_controller()
        controller.start_session()
        backend.send_message.side_effect = Exception("timeout")

        success, message = controller.send_message("Hello")

        self.assertFalse(success)
        self.assertTrue(message.startswith("⚠"))
        self.assertEqual(controller.messages[-2]["content"], "Hello")
        self.assertEqual(controller.messages[-1], {"role": "assistant", "content": APOLOGY_MESSAGE})
        self.assertIsNone(controller.streaming_message_id)

    def test_reply_after_pause_is_dropped(self):
        controller, backend = make_controller()
        controller.start_session()

        def pause_mid_flight(**kwargs):
            controller.pause()
            return {"message": "late reply"}
        backend.send_message.side_effect = pause_mid_flight

        success, _ = controller.send_message("Hello")

        self.assertFalse(success)
        self.assertEqual(controller.status, SessionStatus.PAUSED)
        self.assertEqual(controller.messages, [])
        self.assertIsNone(controller.streaming_message_id)

    def test_concurrent_send_is_refused(self):
        controller, backend = make_controller()
        controller.start_session()
        nested = []

        def send_again(**kwargs):
            nested.append(controller.send_message("second"))
            return {"message": "reply"}
        backend.send_message.side_effect = send_again

        controller.send_message("first")

        self.assertEqual(nested, [(False, "⚠ Still waiting for the last reply.")])
        self.assertEqual(backend.send_message.call_count, 1)
        self.assertFalse(controller.is_busy("send"))

    def test_coach_switch_keeps_conversation(self):
        controller, backend = make_controller()
        controller.start_session()
        controller.send_message("Hello")
        before = list(controller.messages)

        success, message = controller.set_coach("david-kim")

        self.assertTrue(success)
        self.assertIn("David Kim", message)
        self.assertEqual(controller.messages, before)
        self.assertEqual(controller.status, SessionStatus.ACTIVE)

        controller.send_message("Next")
        self.assertEqual(backend.send_message.call_args.kwargs["coach_id"], "david-kim")

    def test_mode_locked_mid_session(self):
        controller, backend = make_controller()
        self.assertTrue(controller.select_mode("quick")[0])
        controller.start_session()
        self.assertFalse(controller.select_mode("full")[0])

        controller.send_message("Quick one")
        self.assertEqual(backend.send_message.call_args.kwargs["session_type"], "quick")


class TestPauseResume(unittest.TestCase):
    def setUp(self):
        self.controller, self.backend = make_controller()
        self.controller.start_session()
        self.controller.send_message("I keep avoiding the conversation. It's awkward.")

    def test_pause_persists_marker(self):
        success, _ = self.controller.pause()

        self.assertTrue(success)
        self.assertEqual(self.controller.status, SessionStatus.PAUSED)
        self.assertEqual(self.controller.messages, [])
        self.assertEqual(self.controller.store.get(keys.PAUSED_SESSION_ID), "42")
        self.assertEqual(self.controller.store.get(keys.PAUSED_SESSION_TIMESTAMP), "1000000")
        self.assertEqual(self.controller.pending_resume(), {"session_id": 42, "paused_at": 1000.0})

    def test_resume_restores_fetched_messages(self):
        fetched = [
            {"role": "assistant", "content": "Hey."},
            {"role": "user", "content": "I keep avoiding the conversation. It's awkward."},
            {"role": "assistant", "content": "What are you protecting?"},
        ]
        self.backend.get_session.return_value = {"messages": fetched}
        self.backend.generate_session_summary.return_value = {"summary": "Avoiding a hard conversation"}
        self.controller.pause()

        success, _ = self.controller.resume()

        self.assertTrue(success)
        self.assertEqual(self.controller.status, SessionStatus.ACTIVE)
        self.assertEqual(self.controller.messages, fetched)
        self.backend.get_session.assert_called_once_with(session_id=42)
        self.assertIsNone(self.controller.store.get(keys.PAUSED_SESSION_ID))
        self.assertIsNone(self.controller.store.get(keys.PAUSED_SESSION_TIMESTAMP))

        self.assertEqual(self.controller.summary_future.result(timeout=5), "Avoiding a hard conversation")
        self.assertEqual(self.controller.resume_banner, "Avoiding a hard conversation")

    def test_resume_fetch_failure_keeps_marker(self):
        self.backend.get_session.side_effect = Exception("network")
        self.controller.pause()

        success, message = self.controller.resume()

        self.assertFalse(success)
        self.assertEqual(message, "⚠ Failed to load session messages")
        self.assertEqual(self.controller.status, SessionStatus.PAUSED)
        self.assertEqual(self.controller.store.get(keys.PAUSED_SESSION_ID), "42")

    def test_resume_empty_response_keeps_marker(self):
        self.backend.get_session.return_value = None
        self.controller.pause()

        success, message = self.controller.resume()

        self.assertFalse(success)
        self.assertEqual(message, "⚠ Failed to load session data")
        self.assertEqual(self.controller.store.get(keys.PAUSED_SESSION_ID), "42")

    def test_banner_falls_back_to_last_user_message(self):
        self.backend.get_session.return_value = {"messages": [
            {"role": "user", "content": "I keep avoiding the conversation. It's awkward."},
        ]}
        self.backend.generate_session_summary.side_effect = Exception("model down")
        self.controller.pause()
        self.controller.resume()

        banner = self.controller.summary_future.result(timeout=5)
        self.assertEqual(banner, 'Last time you were discussing: "I keep avoiding the conversation"')

    def test_resume_after_reload(self):
        self.controller.pause()
        fresh, backend = make_controller(store=self.controller.store)
        backend.get_session.return_value = {"messages": []}

        success, message = fresh.resume()

        self.assertTrue(success)
        self.assertEqual(fresh.session.session_id, 42)
        self.assertIsNone(fresh.summary_future)
        self.assertIn("Start the conversation", message)

    def test_corrupt_marker_is_dropped(self):
        self.controller.pause()
        self.controller.store.set(keys.PAUSED_SESSION_ID, "not-a-number")
        self.assertIsNone(self.controller.pending_resume())
        self.assertIsNone(self.controller.store.get(keys.PAUSED_SESSION_ID))
        self.assertIsNone(self.controller.store.get(keys.PAUSED_SESSION_TIMESTAMP))

    def test_discard_paused(self):
        self.controller.pause()
        self.controller.discard_paused()
        self.assertIsNone(self.controller.pending_resume())
        self.assertEqual(self.controller.status, SessionStatus.NOT_STARTED)

    def test_guest_cannot_pause(self):
        controller, _ = make_controller(AccessMode.GUEST, guest_pass_code="GUEST-1")
        controller.start_session()
        success, _ = controller.pause()
        self.assertFalse(success)
        self.assertEqual(controller.status, SessionStatus.ACTIVE)
        self.assertIsNone(controller.store.get(keys.PAUSED_SESSION_ID))


class TestEndSession(unittest.TestCase):
    def test_end_clears_pause_markers_with_summary(self):
        controller, backend = make_controller()
        backend.end_session.return_value = {"summary": {"key_themes": ["Delegation"]}}
        controller.start_session()
        controller.store.set(keys.PAUSED_SESSION_ID, "42")
        controller.store.set(keys.PAUSED_SESSION_TIMESTAMP, "1000000")

        success, _ = controller.end_session()

        self.assertTrue(success)
        self.assertEqual(controller.status, SessionStatus.ENDED)
        self.assertEqual(controller.end_summary, {"key_themes": ["Delegation"]})
        self.assertIsNone(controller.store.get(keys.PAUSED_SESSION_ID))
        self.assertIsNone(controller.store.get(keys.PAUSED_SESSION_TIMESTAMP))
        backend.end_session.assert_called_once_with(session_id=42, send_email=True)

    def test_end_paused_session_without_summary(self):
        controller, backend = make_controller()
        backend.end_session.return_value = {"summary": None}
        controller.start_session()
        controller.pause()

        success, _ = controller.end_session()

        self.assertTrue(success)
        self.assertIsNone(controller.end_summary)
        self.assertIsNone(controller.store.get(keys.PAUSED_SESSION_ID))
        self.assertIsNone(controller.store.get(keys.PAUSED_SESSION_TIMESTAMP))

    def test_end_failure_keeps_session(self):
        controller, backend = make_controller()
        backend.end_session.side_effect = Exception("boom")
        controller.start_session()

        success, message = controller.end_session()

        self.assertFalse(success)
        self.assertEqual(message, "⚠ Failed to end session")
        self.assertEqual(controller.status, SessionStatus.ACTIVE)

    def test_guest_end_skips_backend(self):
        controller, backend = make_controller(AccessMode.GUEST, guest_pass_code="GUEST-1")
        controller.start_session()
        success, _ = controller.end_session()
        self.assertTrue(success)
        backend.end_session.assert_not_called()

    def test_guest_restart_after_end_is_fresh(self):
        controller, _ = make_controller(AccessMode.GUEST, guest_pass_code="GUEST-1")
        controller.start_session()
        controller.send_message("secret old topic")
        ended = controller.session

        controller.end_session()
        controller.start_session()

        self.assertIsNot(controller.session, ended)
        self.assertEqual(len(controller.messages), 1)
        self.assertEqual(controller.messages[0]["content"], controller.greeting())
        self.assertEqual(ended.status, SessionStatus.ENDED)
        self.assertEqual(len(ended.messages), 3)


class TestClearConversation(unittest.TestCase):
    def test_guest_clear_keeps_only_greeting(self):
        controller, _ = make_controller(AccessMode.GUEST, guest_pass_code="GUEST-1")
        controller.start_session()
        controller.send_message("Hello")

        success, _ = controller.clear_conversation()

        self.assertTrue(success)
        self.assertEqual(controller.messages, [{"role": "assistant", "content": controller.greeting()}])
        self.assertEqual(
            load_json(controller.store, keys.guest_history("GUEST-1")),
            [{"role": "assistant", "content": controller.greeting()}]
        )
        self.assertIsNone(controller.streaming_message_id)

    def test_subscriber_cannot_clear(self):
        controller, _ = make_controller()
        controller.start_session()
        controller.send_message("Hello")
        self.assertEqual(controller.clear_conversation(), (False, ""))
        self.assertEqual(len(controller.messages), 3)


class TestResumeRace(unittest.TestCase):
    def test_start_during_resume_fetch_wins(self):
        controller, backend = make_controller()
        controller.start_session()
        controller.pause()
        backend.start_session.return_value = {"insert_id": 43}

        def start_mid_fetch(**kwargs):
            controller.start_session()
            return {"messages": [{"role": "user", "content": "old"}]}
        backend.get_session.side_effect = start_mid_fetch

        success, message = controller.resume()

        self.assertFalse(success)
        self.assertEqual(message, "⚠ A session is already active.")
        self.assertEqual(controller.session.session_id, 43)
        self.assertEqual(controller.status, SessionStatus.ACTIVE)
        self.assertEqual(controller.store.get(keys.PAUSED_SESSION_ID), "42")


class TestReveal(unittest.TestCase):
    def test_reveal_only_for_latest_reply(self):
        controller, backend = make_controller()
        controller.start_session()
        self.assertIsNone(controller.reveal_reply())

        controller.send_message("Hello")
        reveal = controller.reveal_reply(word_delay_s=0)
        self.assertEqual(list(reveal)[-1], "What would you decide if you weren't afraid?")

        backend.send_message.side_effect = Exception("down")
        controller.send_message("Again")
        self.assertIsNone(controller.reveal_reply())

    def test_pause_skips_running_reveal(self):
        controller, _ = make_controller()
        controller.start_session()
        controller.send_message("Hello")
        reveal = controller.reveal_reply(word_delay_s=0)

        frames = iter(reveal)
        self.assertEqual(next(frames), "What")
        controller.pause()

        self.assertEqual(list(frames), ["What would you decide if you weren't afraid?"])
        self.assertIsNone(controller.reveal)


class TestGuestPassScenario(unittest.TestCase):
    def test_expired_pass_never_reaches_active(self):
        store = MemoryStore()
        backend = MagicMock()
        backend.validate_guest_pass.return_value = {"valid": False, "reason": "Code has expired"}

        validation, error = check_guest_pass(backend, store, "GUEST-OLD")
        decision = AccessGate(store).evaluate(AccessInputs(
            has_guest_pass_code=True, guest_pass_validation=validation
        ))
        controller = CoachSessionController(backend, store, access_mode=decision.mode)
        success, _ = controller.start_session()

        self.assertEqual(error, "Code has expired")
        self.assertEqual(decision.mode, AccessMode.DENIED)
        self.assertFalse(success)
        self.assertEqual(controller.status, SessionStatus.NOT_STARTED)
        self.assertEqual(controller.send_message("hello"), (False, ""))


class TestTemplatesAndExport(unittest.TestCase):
    def test_auto_start_template(self):
        store = MemoryStore({keys.TEMPLATE_PROMPT: "Help me prep for a board meeting", keys.TEMPLATE_AUTO_START: "true"})
        controller, backend = make_controller(store=store)

        prefill, _ = controller.start_from_template()

        self.assertIsNone(prefill)
        self.assertEqual(controller.status, SessionStatus.ACTIVE)
        self.assertEqual(backend.send_message.call_args.kwargs["message"], "Help me prep for a board meeting")
        self.assertIsNone(store.get(keys.TEMPLATE_PROMPT))
        self.assertIsNone(store.get(keys.TEMPLATE_AUTO_START))

    def test_template_without_auto_start_prefills(self):
        store = MemoryStore({keys.TEMPLATE_PROMPT: "Help me prep"})
        controller, backend = make_controller(store=store)

        prefill, _ = controller.start_from_template()

        self.assertEqual(prefill, "Help me prep")
        self.assertEqual(controller.status, SessionStatus.NOT_STARTED)
        backend.start_session.assert_not_called()

    def test_export_markdown(self):
        controller, _ = make_controller()
        controller.start_session()
        controller.send_message("Hello")
        export = controller.export_markdown()
        self.assertIn("**You:** Hello", export)
        self.assertIn("**Sarah Mitchell:** What would you decide", export)

    def test_welcome_shown_once(self):
        store = MemoryStore()
        guest, _ = make_controller(AccessMode.GUEST, store=store, guest_pass_code="GUEST-1")
        subscriber, _ = make_controller(store=store)

        self.assertTrue(guest.should_show_welcome())
        guest.mark_welcome_shown()
        self.assertFalse(guest.should_show_welcome())
        self.assertEqual(store.get(keys.guest_welcome_shown("GUEST-1")), "true")

        # Guest flags never count for the signed-in welcome
        self.assertTrue(subscriber.should_show_welcome())
        subscriber.mark_welcome_shown()
        self.assertFalse(subscriber.should_show_welcome())

    def test_logout_forgets_guest_pass(self):
        controller, _ = make_controller(AccessMode.GUEST, guest_pass_code="GUEST-1")
        controller.store.set(keys.GUEST_PASS_CODE, "GUEST-1")
        controller.start_session()
        controller.logout()
        self.assertIsNone(controller.session)
        self.assertIsNone(controller.store.get(keys.GUEST_PASS_CODE))
        self.assertEqual(controller.access_mode, AccessMode.UNAUTHENTICATED)


if __name__ == '__main__':
    unittest.main()
