"""
Access mode resolution for the coaching surface.

resolve_access_mode() is a pure function of the facts supplied by the auth,
subscription and guest-pass collaborators; AccessGate adds the redirect
decision and the one-time bookkeeping that sits around it.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from calm_coach.storage import keys
from calm_coach.storage.store import DurableStore
from calm_coach.utils.logging import log

ACTIVE_SUBSCRIPTION_STATUSES = ("active", "trialing")

UPSELL_ROUTE = "/ai-coach"
ONBOARDING_ROUTE = "/ai-coach/onboarding"


class AccessMode(str, Enum):
    ADMIN = "admin"
    GUEST = "guest"
    SUBSCRIBER = "subscriber"
    PENDING = "pending"
    DENIED = "denied"
    UNAUTHENTICATED = "unauthenticated"  # a session object before any evaluation


SESSION_MODES = (AccessMode.ADMIN, AccessMode.GUEST, AccessMode.SUBSCRIBER)


@dataclass(frozen=True)
class AccessInputs:
    is_authenticated: bool = False
    user_role: Optional[str] = None             # 'user', 'admin' or None
    has_guest_pass_code: bool = False
    guest_pass_validation: Optional[dict] = None  # None while validation is in flight
    subscription_status: Optional[str] = None


@dataclass(frozen=True)
class AccessDecision:
    mode: AccessMode
    redirect_to: Optional[str] = None

    @property
    def can_send(self) -> bool:
        return self.mode in SESSION_MODES


def resolve_access_mode(inputs: AccessInputs) -> AccessMode:
    """First match wins: admin, pending guest, valid guest, subscriber, denied."""
    if inputs.user_role == "admin":
        return AccessMode.ADMIN

    if inputs.has_guest_pass_code and inputs.guest_pass_validation is None:
        # Still validating; redirecting now would bounce a valid guest
        return AccessMode.PENDING

    if inputs.has_guest_pass_code and inputs.guest_pass_validation.get("valid") is True:
        return AccessMode.GUEST

    if inputs.is_authenticated and inputs.subscription_status in ACTIVE_SUBSCRIPTION_STATUSES:
        return AccessMode.SUBSCRIBER

    return AccessMode.DENIED


def discover_guest_pass_code(store: DurableStore, code_from_url: Optional[str] = None) -> Optional[str]:
    """A code in the URL wins and is remembered; otherwise fall back to the stored one."""
    if code_from_url:
        code = code_from_url.strip()
        if code:
            store.set(keys.GUEST_PASS_CODE, code)
            return code
    return store.get(keys.GUEST_PASS_CODE)


class AccessGate:
    def __init__(self, store: DurableStore):
        self.store = store

    def evaluate(self, inputs: AccessInputs, has_profile: Optional[bool] = None) -> AccessDecision:
        """
        Resolves the mode and where (if anywhere) the caller must send the user.
        has_profile=None means the profile is still loading; False means the user
        has no onboarded profile yet.
        """
        mode = resolve_access_mode(inputs)

        if mode == AccessMode.PENDING:
            return AccessDecision(mode)

        if mode == AccessMode.DENIED:
            return AccessDecision(mode, redirect_to=UPSELL_ROUTE)

        if mode == AccessMode.SUBSCRIBER:
            if not inputs.has_guest_pass_code:
                self._track_subscription_started()
            if has_profile is False:
                return AccessDecision(mode, redirect_to=ONBOARDING_ROUTE)

        return AccessDecision(mode)

    def _track_subscription_started(self):
        if self.store.get(keys.SUBSCRIPTION_TRACKED):
            return
        log("Access", "Subscription started (dashboard)", "SUCCESS")
        self.store.set(keys.SUBSCRIPTION_TRACKED, "true")

    def logout(self):
        """Forget the guest pass so a different pass (or a login) can be used."""
        self.store.remove(keys.GUEST_PASS_CODE)
