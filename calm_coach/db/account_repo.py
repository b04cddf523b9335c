import json

from calm_coach.db.supabase_client import get_supabase
from calm_coach.utils.logging import log


def get_profile(user_id: str):
    """
    Coaching profile for user_id, or None when the user has not onboarded.
    Read failures also return None.
    """
    try:
        response = get_supabase().table("coaching_profiles")\
            .select("user_id, name, preferred_name, role, has_completed_onboarding, coaching_preferences")\
            .eq("user_id", user_id)\
            .execute()
        return response.data[0] if response.data else None
    except Exception as e:
        log("AccountRepo", f"Error in get_profile: {e}", "WARNING")
        return None


def get_subscription(user_id: str):
    try:
        response = get_supabase().table("subscriptions")\
            .select("status, current_period_end, stripe_customer_id, stripe_subscription_id")\
            .eq("user_id", user_id)\
            .execute()
        return response.data[0] if response.data else None
    except Exception as e:
        log("AccountRepo", f"Error in get_subscription: {e}", "WARNING")
        return None


def complete_onboarding(user_id: str, selected_coach: str, goals: list) -> None:
    """
    Flags the profile as onboarded with the chosen coach and stores the initial goals.
    Creates the profile row when the user has none yet. Raises on failure.
    """
    try:
        get_supabase().table("coaching_profiles").upsert({
            "user_id": user_id,
            "has_completed_onboarding": True,
            "coaching_preferences": json.dumps({"selectedCoach": selected_coach})
        }, on_conflict="user_id").execute()

        if goals:
            get_supabase().table("coaching_goals").insert([
                {
                    "user_id": user_id,
                    "title": goal["title"],
                    "description": goal.get("description") or "",
                    "category": "personal_growth"
                }
                for goal in goals
            ]).execute()
    except Exception as e:
        log("AccountRepo", f"Error in complete_onboarding: {e}", "ERROR")
        raise
