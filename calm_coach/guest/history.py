from typing import Optional

from calm_coach.storage import keys
from calm_coach.storage.store import DurableStore, load_json, save_json
from calm_coach.utils.validation import validate_message


class GuestHistory:
    """
    Local conversation history and welcome flag for one guest pass.
    Everything is keyed by the pass code so passes sharing a device stay apart.
    """

    def __init__(self, store: DurableStore, code: str):
        if not code:
            raise ValueError("GuestHistory needs a guest pass code")
        self.store = store
        self.code = code

    def load(self) -> list[dict]:
        saved = load_json(self.store, keys.guest_history(self.code), default=[])
        if not isinstance(saved, list):
            return []
        return [m for m in saved if validate_message(m)[0]]

    def save(self, messages: list) -> None:
        history = [{"role": m["role"], "content": m["content"]} for m in messages]
        save_json(self.store, keys.guest_history(self.code), history)

    def clear(self, welcome_message: Optional[dict] = None) -> list[dict]:
        """Resets the history, keeping only the welcome message if one is given."""
        messages = [welcome_message] if welcome_message else []
        self.save(messages)
        return messages

    def purge(self) -> None:
        """Drops everything stored for this pass (used once the pass is no longer valid)."""
        self.store.remove(keys.guest_history(self.code))
        self.store.remove(keys.guest_welcome_shown(self.code))
        if self.store.get(keys.GUEST_PASS_CODE) == self.code:
            self.store.remove(keys.GUEST_PASS_CODE)

    def welcome_shown(self) -> bool:
        return self.store.get(keys.guest_welcome_shown(self.code)) == "true"

    def mark_welcome_shown(self) -> None:
        self.store.set(keys.guest_welcome_shown(self.code), "true")
