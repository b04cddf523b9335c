from calm_coach.db.supabase_client import get_supabase
from calm_coach.utils.logging import log


def create_session(user_id: str, session_type: str = "general") -> int:
    """
    Insert a new coaching_sessions row and return its id.
    Raises on failure.
    """
    try:
        response = get_supabase().table("coaching_sessions").insert({
            "user_id": user_id,
            "session_type": session_type,
            "messages": [],
            "status": "active"
        }).execute()

        if not response.data:
            raise Exception(f"Failed to create coaching session for user_id: {user_id}")
        return response.data[0]["id"]
    except Exception as e:
        log("SessionRepo", f"Error in create_session: {e}", "ERROR")
        raise


def load_session(session_id: int, user_id: str = None):
    """
    Fetch one session row, optionally checking it belongs to user_id.
    Returns None when missing or unreadable.
    """
    try:
        query = get_supabase().table("coaching_sessions")\
            .select("id, user_id, session_type, messages, summary, status")\
            .eq("id", session_id)
        if user_id is not None:
            query = query.eq("user_id", user_id)
        response = query.limit(1).execute()

        return response.data[0] if response.data else None
    except Exception as e:
        log("SessionRepo", f"Error in load_session: {e}", "WARNING")
        return None


def save_messages(session_id: int, messages: list) -> None:
    try:
        get_supabase().table("coaching_sessions")\
            .update({"messages": messages})\
            .eq("id", session_id)\
            .execute()
    except Exception as e:
        log("SessionRepo", f"Error in save_messages: {e}", "ERROR")
        raise  # Fail loudly on write errors


def save_summary(session_id: int, summary, status: str = None, email_requested: bool = None) -> None:
    """Store a summary (text or structured) on the session, optionally closing it."""
    update = {"summary": summary}
    if status is not None:
        update["status"] = status
    if email_requested is not None:
        update["summary_email_requested"] = email_requested

    try:
        get_supabase().table("coaching_sessions")\
            .update(update)\
            .eq("id", session_id)\
            .execute()
    except Exception as e:
        log("SessionRepo", f"Error in save_summary: {e}", "ERROR")
        raise
