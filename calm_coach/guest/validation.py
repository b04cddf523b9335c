from typing import Optional

from calm_coach.guest.history import GuestHistory
from calm_coach.storage import keys
from calm_coach.storage.store import DurableStore
from calm_coach.utils.logging import log

VALIDATION_FAILED = "Failed to validate code"


def check_guest_pass(backend, store: DurableStore, code: str) -> tuple[Optional[dict], str]:
    """
    Validates a guest pass and applies the local consequences.
    Returns (validation, error_text); error_text is "" for a valid pass and
    validation is None when the call itself failed (still unknown, so pending).

    A definitive "invalid" purges the pass's local history; a failed call does not,
    since the pass may well be valid.
    """
    code = (code or "").strip()
    if not code:
        return {"valid": False, "reason": "Invalid code"}, "Invalid code"

    try:
        validation = backend.validate_guest_pass(code)
    except Exception as e:
        log("GuestPass", f"Validation call failed for {code}: {e}", "ERROR")
        return None, VALIDATION_FAILED

    if validation.get("valid"):
        store.set(keys.GUEST_PASS_CODE, code)
        return validation, ""

    reason = validation.get("reason") or "Invalid code"
    log("GuestPass", f"Pass {code} rejected: {reason}", "WARNING")
    GuestHistory(store, code).purge()
    return validation, reason
