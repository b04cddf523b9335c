from supabase import create_client, Client
from calm_coach.config import get_supabase_credentials

_supabase = None


def get_supabase() -> Client:
    """
    Returns the shared Supabase client, creating it on first use.
    Raises ValueError when SUPABASE_URL / SUPABASE_ANON_KEY are missing.
    """
    global _supabase
    if _supabase is None:
        url, key = get_supabase_credentials()
        _supabase = create_client(url, key)
    return _supabase
