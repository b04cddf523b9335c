import gradio as gr

from calm_coach.backend.service import CoachingService
from calm_coach.guest.validation import check_guest_pass
from calm_coach.llm.personalities import DEFAULT_COACH_ID, list_coaches
from calm_coach.onboarding.progress import GENDER_FILTERS, MAX_GOALS, OnboardingFlow
from calm_coach.session.access import (
    ONBOARDING_ROUTE, AccessGate, AccessInputs, AccessMode, discover_guest_pass_code
)
from calm_coach.session.controller import CoachSessionController
from calm_coach.storage.store import SupabaseStore
from calm_coach.utils.logging import log

# Check version
major_version = int(gr.__version__.split('.')[0])
log("UI", f"Gradio Version: {gr.__version__}")

COACH_CHOICES = [(c.display_name, c.id) for c in list_coaches()]
BANNER_TIMEOUT_S = 30

ONBOARDING_STEPS = {
    1: "### Step 1 of 4: Welcome\nYour AI executive coach is here for the decisions you're actually wrestling with.",
    2: "### Step 2 of 4: Choose your coach\nFilter by voice, then pick the coach you want to work with.",
    3: "### Step 3 of 4: Set your goals\nAdd up to three things you want coaching on. At least one needs a title.",
    4: "### Step 4 of 4: Quick tour\nStart a session to talk, Pause to pick it up later, End to get a summary.",
}


def to_chat(messages):
    """Gradio messages format, without our internal ids."""
    return [{"role": m["role"], "content": m["content"]} for m in messages]


# ── onboarding ─────────────────────────────────────────────────────

def render_onboarding(flow):
    """Returns: (step_markdown, coach_dropdown, *goal_titles, *goal_descriptions)"""
    if flow is None:
        return tuple(gr.update() for _ in range(2 + 2 * MAX_GOALS))

    goals = flow.progress.goals
    choices = [(c.display_name, c.id) for c in flow.filtered_coaches()]
    selected = flow.progress.selected_coach
    coach_update = gr.update(choices=choices, value=selected if selected in [c[1] for c in choices] else None)
    titles = [
        gr.update(visible=i < len(goals), value=goals[i]["title"] if i < len(goals) else "")
        for i in range(MAX_GOALS)
    ]
    descriptions = [
        gr.update(visible=i < len(goals), value=goals[i]["description"] if i < len(goals) else "")
        for i in range(MAX_GOALS)
    ]
    return (ONBOARDING_STEPS[flow.step], coach_update, *titles, *descriptions)


def sync_goals(flow, values):
    """values holds MAX_GOALS titles followed by MAX_GOALS descriptions."""
    titles, descriptions = values[:MAX_GOALS], values[MAX_GOALS:]
    for i in range(len(flow.progress.goals)):
        flow.update_goal(i, title=titles[i] or "", description=descriptions[i] or "")


def change_gender(gender, flow):
    if flow is not None:
        flow.set_gender_filter(gender)
    return render_onboarding(flow)


def pick_onboarding_coach(coach_id, flow):
    if flow is not None and coach_id:
        flow.select_coach(coach_id)


def add_goal(flow, *values):
    if flow is not None:
        sync_goals(flow, values)
        flow.add_goal()
    return render_onboarding(flow)


def remove_goal(flow, *values):
    if flow is not None:
        sync_goals(flow, values)
        flow.remove_goal(len(flow.progress.goals) - 1)
    return render_onboarding(flow)


def onboarding_back(flow, *values):
    if flow is not None:
        sync_goals(flow, values)
        flow.back()
    return render_onboarding(flow)


def onboarding_next(flow, controller, *values):
    """
    Advances the flow; on the last step saves the result and hands the chosen
    coach to the session controller.
    Returns: (onboarding_visible, status, coach_input, *render_onboarding)
    """
    if flow is None or controller is None:
        return (gr.update(visible=False), "", gr.update(), *render_onboarding(None))

    sync_goals(flow, values)
    if not flow.can_proceed():
        status = "⚠ Pick a coach to continue." if flow.step == 2 else "⚠ Give at least one goal a title."
        return (gr.update(), status, gr.update(), *render_onboarding(flow))

    result = flow.next()
    if result is None:
        return (gr.update(), "", gr.update(), *render_onboarding(flow))

    try:
        controller.backend.complete_onboarding(**result)
    except Exception as e:
        log("UI", f"Could not save onboarding: {e}", "ERROR")
        return (gr.update(visible=False), "⚠ Onboarding finished, but it could not be saved.",
                gr.update(), *render_onboarding(None))

    controller.set_coach(result["selected_coach"])
    return (gr.update(visible=False), "✓ You're all set. Press Start Session when you're ready.",
            gr.update(value=result["selected_coach"]), *render_onboarding(None))


def skip_onboarding(flow):
    if flow is not None:
        flow.skip()
    return gr.update(visible=False), "Onboarding skipped."


# ── access ─────────────────────────────────────────────────────────

def _access_result(controller, chat, status, flow=None):
    return (controller, chat, status, "", flow, gr.update(visible=flow is not None), *render_onboarding(flow))


def load_access(user_id, guest_code, coach_id, mode):
    """
    Resolves who is on the page and builds their session controller.
    Returns: (controller, chatbot_history, status, banner, onboarding_flow,
              onboarding_visible, *render_onboarding)
    """
    user_id = (user_id or "").strip() or None
    device_id = user_id or f"guest:{(guest_code or '').strip()}"
    if device_id == "guest:":
        return _access_result(None, [], "Please enter a User ID or a guest pass code to start.")

    store = SupabaseStore(device_id=device_id)
    backend = CoachingService(user_id)

    code = discover_guest_pass_code(store, guest_code)
    validation, error = (None, "")
    if code:
        validation, error = check_guest_pass(backend, store, code)

    profile = backend.get_profile() if user_id else None
    subscription = backend.get_subscription() if user_id else None

    inputs = AccessInputs(
        is_authenticated=user_id is not None,
        user_role=(profile or {}).get("role"),
        has_guest_pass_code=code is not None,
        guest_pass_validation=validation,
        subscription_status=(subscription or {}).get("status"),
    )
    onboarded = bool(profile and profile["has_completed_onboarding"]) if user_id else None
    decision = AccessGate(store).evaluate(inputs, has_profile=onboarded)

    controller = CoachSessionController(
        backend,
        store,
        access_mode=decision.mode,
        guest_pass_code=code if decision.mode == AccessMode.GUEST else None,
        user_name=(profile or {}).get("preferred_name"),
    )
    controller.set_coach((profile or {}).get("selected_coach") or coach_id or DEFAULT_COACH_ID)
    controller.select_mode(mode or "full")

    if decision.mode == AccessMode.PENDING:
        return _access_result(controller, [], f"⚠ {error or 'Checking your guest pass'}. Press Continue to try again.")
    if error:
        return _access_result(controller, [], f"⚠ {error}")
    if decision.redirect_to == ONBOARDING_ROUTE:
        return _access_result(controller, [], "Let's set up your coaching first.", OnboardingFlow(store))
    if decision.redirect_to:
        return _access_result(controller, [], f"⚠ Coaching isn't available yet. Continue at {decision.redirect_to}")

    status = f"✓ Access: {decision.mode.value}."
    if controller.should_show_welcome():
        status = f"Welcome! Pick a coach and press Start Session. {status}"
        controller.mark_welcome_shown()
    if controller.pending_resume():
        status += " You have a paused coaching session. Resume it or start fresh."

    prompt, template_status = controller.start_from_template()
    if template_status:
        status = template_status
    if prompt:
        status += f" Template ready: {prompt}"

    return _access_result(controller, to_chat(controller.messages), status)


# ── session ────────────────────────────────────────────────────────

def start_session(controller):
    if controller is None:
        return [], "⚠ Please load your access first."
    success, message = controller.start_session()
    return to_chat(controller.messages), message


def process_message(user_message, controller):
    """
    Sends one message and reveals the reply word by word.
    Stops revealing as soon as the reply is no longer current (paused, ended, cleared).
    Yields: (chatbot_history, msg_input_clear, status)
    """
    if controller is None:
        yield [], user_message, "⚠ Please load your access first."
        return

    text = (user_message or "").strip()
    if not text or controller.is_busy("send"):
        yield to_chat(controller.messages), user_message, ""
        return

    # Show the user's turn before the reply arrives
    yield to_chat(controller.messages) + [{"role": "user", "content": text}], "", "…"

    success, status = controller.send_message(text)
    message_id = controller.streaming_message_id
    reveal = controller.reveal_reply() if success else None
    if reveal is None:
        yield to_chat(controller.messages), "", status
        return

    history = to_chat(controller.messages)
    for frame in reveal:
        if controller.streaming_message_id != message_id:
            yield to_chat(controller.messages), "", status
            return
        history[-1] = {"role": "assistant", "content": frame}
        yield history, "", status


def skip_reveal(controller):
    if controller is not None:
        controller.skip_reveal()


def pause_session(controller):
    if controller is None:
        return [], ""
    success, message = controller.pause()
    return to_chat(controller.messages), message


def resume_session(controller):
    if controller is None:
        return [], "⚠ Please load your access first."
    success, message = controller.resume()
    return to_chat(controller.messages), message


def wait_for_banner(controller):
    """Runs after resume so the chat is usable before the summary lands."""
    if controller is None or controller.summary_future is None:
        return ""
    try:
        controller.summary_future.result(timeout=BANNER_TIMEOUT_S)
    except Exception as e:
        log("UI", f"Resume summary not available: {e}", "WARNING")
    return f"**Session Context:** {controller.resume_banner}" if controller.resume_banner else ""


def dismiss_banner(controller):
    if controller is not None:
        controller.dismiss_banner()
    return ""


def export_transcript(controller):
    if controller is None or not controller.messages:
        return ""
    return controller.export_markdown()


def clear_conversation(controller):
    if controller is None:
        return [], ""
    success, message = controller.clear_conversation()
    if not success and not message:
        message = "⚠ Only guest conversations can be cleared."
    return to_chat(controller.messages), message


def start_new(controller):
    if controller is None:
        return ""
    success, message = controller.discard_paused()
    return message


def end_session(controller):
    """Returns: (chatbot_history, status, summary_markdown)"""
    if controller is None:
        return [], "", ""
    success, message = controller.end_session()
    summary = controller.end_summary if success else None
    if not summary:
        return to_chat(controller.messages), message, ""

    themes = "\n".join(f"- {t}" for t in summary.get("key_themes", []))
    summary_md = (
        f"### Session summary\n\n**Key themes**\n{themes}\n\n"
        f"**Observation:** {summary.get('observation', '')}\n\n"
        f"**Before next time:** {summary.get('next_session_prompt', '')}"
    )
    return to_chat(controller.messages), message, summary_md


def change_coach(coach_id, controller):
    if controller is None:
        return ""
    success, message = controller.set_coach(coach_id)
    return message


def change_mode(mode, controller):
    if controller is None:
        return ""
    success, message = controller.select_mode(mode)
    return message


def logout(controller):
    if controller is not None:
        controller.logout()
    return None, [], "Signed out.", ""


def create_demo():
    chatbot_kwargs = {"label": "Conversation", "height": 450}
    if major_version < 6:
        chatbot_kwargs["type"] = "messages"

    with gr.Blocks(title="AI Executive Coach") as demo:
        gr.Markdown("# AI Executive Coach")
        gr.Markdown("Sign in with your User ID, or enter a guest pass code.")

        controller_state = gr.State(value=None)
        flow_state = gr.State(value=None)

        with gr.Row():
            user_id_input = gr.Textbox(label="User ID", placeholder="Your user id...")
            guest_code_input = gr.Textbox(label="Guest pass", placeholder="GUEST-2026-...")
            load_btn = gr.Button("Continue", variant="primary")

        with gr.Group(visible=False) as onboarding_group:
            onboarding_step = gr.Markdown()
            gender_input = gr.Radio(choices=list(GENDER_FILTERS), value="all", label="Coach voice")
            onboarding_coach = gr.Dropdown(choices=COACH_CHOICES, label="Your coach")
            goal_titles = [gr.Textbox(label=f"Goal {i + 1}") for i in range(MAX_GOALS)]
            goal_descriptions = [gr.Textbox(label=f"Goal {i + 1} details") for i in range(MAX_GOALS)]
            with gr.Row():
                add_goal_btn = gr.Button("Add goal", size="sm")
                remove_goal_btn = gr.Button("Remove last goal", size="sm")
            with gr.Row():
                back_btn = gr.Button("Back")
                next_btn = gr.Button("Next", variant="primary")
                skip_onboarding_btn = gr.Button("Skip", variant="secondary")

        with gr.Row():
            coach_input = gr.Dropdown(choices=COACH_CHOICES, value=DEFAULT_COACH_ID, label="Coach")
            mode_input = gr.Radio(choices=["full", "quick"], value="full", label="Coaching depth")
        status_text = gr.Textbox(label="Status", interactive=False)
        with gr.Row():
            banner = gr.Markdown()
            dismiss_btn = gr.Button("Dismiss", size="sm")

        chatbot = gr.Chatbot(**chatbot_kwargs)
        msg_input = gr.Textbox(label="Your message", placeholder="What's on your mind?")

        with gr.Row():
            start_btn = gr.Button("Start Session", variant="primary")
            send_btn = gr.Button("Send", variant="primary")
            skip_btn = gr.Button("Skip animation", size="sm")
            pause_btn = gr.Button("Pause")
            end_btn = gr.Button("End Session")
        with gr.Row():
            resume_btn = gr.Button("Resume Last Session")
            new_btn = gr.Button("Start New Session")
            clear_btn = gr.Button("Clear Conversation")
            export_btn = gr.Button("Export Transcript")
            logout_btn = gr.Button("Sign out", variant="secondary")
        summary_md = gr.Markdown()
        transcript = gr.Textbox(label="Transcript (Markdown)", lines=8, interactive=False)

        onboarding_outputs = [onboarding_step, onboarding_coach, *goal_titles, *goal_descriptions]
        goal_inputs = [*goal_titles, *goal_descriptions]

        load_btn.click(
            fn=load_access,
            inputs=[user_id_input, guest_code_input, coach_input, mode_input],
            outputs=[controller_state, chatbot, status_text, banner, flow_state, onboarding_group, *onboarding_outputs]
        )

        gender_input.change(fn=change_gender, inputs=[gender_input, flow_state], outputs=onboarding_outputs)
        onboarding_coach.change(fn=pick_onboarding_coach, inputs=[onboarding_coach, flow_state], outputs=[])
        add_goal_btn.click(fn=add_goal, inputs=[flow_state, *goal_inputs], outputs=onboarding_outputs)
        remove_goal_btn.click(fn=remove_goal, inputs=[flow_state, *goal_inputs], outputs=onboarding_outputs)
        back_btn.click(fn=onboarding_back, inputs=[flow_state, *goal_inputs], outputs=onboarding_outputs)
        next_btn.click(
            fn=onboarding_next,
            inputs=[flow_state, controller_state, *goal_inputs],
            outputs=[onboarding_group, status_text, coach_input, *onboarding_outputs]
        )
        skip_onboarding_btn.click(fn=skip_onboarding, inputs=[flow_state], outputs=[onboarding_group, status_text])

        start_btn.click(fn=start_session, inputs=[controller_state], outputs=[chatbot, status_text])
        send_btn.click(
            fn=process_message,
            inputs=[msg_input, controller_state],
            outputs=[chatbot, msg_input, status_text]
        )
        msg_input.submit(
            fn=process_message,
            inputs=[msg_input, controller_state],
            outputs=[chatbot, msg_input, status_text]
        )
        skip_btn.click(fn=skip_reveal, inputs=[controller_state], outputs=[])
        pause_btn.click(fn=pause_session, inputs=[controller_state], outputs=[chatbot, status_text])
        resume_btn.click(
            fn=resume_session, inputs=[controller_state], outputs=[chatbot, status_text]
        ).then(fn=wait_for_banner, inputs=[controller_state], outputs=[banner])
        dismiss_btn.click(fn=dismiss_banner, inputs=[controller_state], outputs=[banner])
        export_btn.click(fn=export_transcript, inputs=[controller_state], outputs=[transcript])
        clear_btn.click(fn=clear_conversation, inputs=[controller_state], outputs=[chatbot, status_text])
        new_btn.click(fn=start_new, inputs=[controller_state], outputs=[status_text])
        end_btn.click(fn=end_session, inputs=[controller_state], outputs=[chatbot, status_text, summary_md])
        coach_input.change(fn=change_coach, inputs=[coach_input, controller_state], outputs=[status_text])
        mode_input.change(fn=change_mode, inputs=[mode_input, controller_state], outputs=[status_text])
        logout_btn.click(
            fn=logout, inputs=[controller_state], outputs=[controller_state, chatbot, status_text, banner]
        )
    return demo
