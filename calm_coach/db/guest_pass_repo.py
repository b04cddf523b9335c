from datetime import datetime, timezone

from calm_coach.db.supabase_client import get_supabase
from calm_coach.utils.logging import log


def find_guest_pass(code: str):
    try:
        response = get_supabase().table("guest_passes")\
            .select("id, code, is_active, expires_at, usage_count")\
            .eq("code", code)\
            .limit(1)\
            .execute()
        return response.data[0] if response.data else None
    except Exception as e:
        log("GuestPassRepo", f"Error in find_guest_pass: {e}", "WARNING")
        return None


def _parse_timestamp(value):
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def validate_guest_pass(code: str, now: datetime = None) -> dict:
    """
    Returns {"valid": True, "pass_id": id} or {"valid": False, "reason": ...}.
    A null expires_at never expires.
    """
    guest_pass = find_guest_pass(code)
    if not guest_pass:
        return {"valid": False, "reason": "Invalid code"}

    if not guest_pass.get("is_active", False):
        return {"valid": False, "reason": "Code has been revoked"}

    expires_at = _parse_timestamp(guest_pass.get("expires_at"))
    now = now or datetime.now(timezone.utc)
    if expires_at is not None and expires_at <= now:
        return {"valid": False, "reason": "Code has expired"}

    return {"valid": True, "pass_id": guest_pass["id"]}


def get_or_create_guest_session(pass_id: int, fingerprint: str) -> dict:
    """
    One conversation row per (guest pass, browser fingerprint).
    Raises on failure.
    """
    try:
        response = get_supabase().table("guest_pass_sessions")\
            .select("id, messages")\
            .eq("guest_pass_id", pass_id)\
            .eq("fingerprint", fingerprint)\
            .limit(1)\
            .execute()

        if response.data:
            return response.data[0]

        insert_response = get_supabase().table("guest_pass_sessions").insert({
            "guest_pass_id": pass_id,
            "fingerprint": fingerprint,
            "messages": []
        }).execute()

        if not insert_response.data:
            raise Exception(f"Failed to create guest session for pass {pass_id}")
        return insert_response.data[0]
    except Exception as e:
        log("GuestPassRepo", f"Error in get_or_create_guest_session: {e}", "ERROR")
        raise


def update_guest_session(guest_session_id: int, messages: list) -> None:
    try:
        get_supabase().table("guest_pass_sessions")\
            .update({"messages": messages})\
            .eq("id", guest_session_id)\
            .execute()
    except Exception as e:
        log("GuestPassRepo", f"Error in update_guest_session: {e}", "ERROR")
        raise


def increment_guest_pass_usage(pass_id: int) -> None:
    """Usage is informational only; failures are logged and ignored."""
    try:
        response = get_supabase().table("guest_passes")\
            .select("usage_count")\
            .eq("id", pass_id)\
            .execute()
        current = response.data[0]["usage_count"] if response.data else 0

        get_supabase().table("guest_passes").update({
            "usage_count": (current or 0) + 1,
            "last_used_at": datetime.now(timezone.utc).isoformat()
        }).eq("id", pass_id).execute()
    except Exception as e:
        log("GuestPassRepo", f"Error in increment_guest_pass_usage: {e}", "WARNING")
