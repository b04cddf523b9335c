"""
Durable client-side key/value storage.

Everything the coaching surface must remember between visits (pause markers,
onboarding progress, guest history, welcome flags) goes through a DurableStore,
injected into the components that need it. Writes are last-write-wins.
"""
from typing import Optional, Protocol
import json

from calm_coach.db.supabase_client import get_supabase
from calm_coach.utils.logging import log


class DurableStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store for tests and single-process use."""

    def __init__(self, initial: Optional[dict] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class SupabaseStore:
    """
    Store backed by the `client_state` table, one row per (device_id, key).
    Reads degrade to None on failure; writes re-raise.
    """

    TABLE = "client_state"

    def __init__(self, device_id: str, client=None):
        if not device_id:
            raise ValueError("SupabaseStore needs a device_id")
        self.device_id = device_id
        self._client = client

    @property
    def client(self):
        return self._client or get_supabase()

    def get(self, key: str) -> Optional[str]:
        try:
            response = self.client.table(self.TABLE)\
                .select("value")\
                .eq("device_id", self.device_id)\
                .eq("key", key)\
                .execute()
            if response.data:
                return response.data[0]["value"]
            return None
        except Exception as e:
            log("Store", f"Read failed for {key}: {e}", "WARNING")
            return None

    def set(self, key: str, value: str) -> None:
        try:
            self.client.table(self.TABLE).upsert(
                {"device_id": self.device_id, "key": key, "value": str(value)},
                on_conflict="device_id,key"
            ).execute()
        except Exception as e:
            log("Store", f"Write failed for {key}: {e}", "ERROR")
            raise

    def remove(self, key: str) -> None:
        try:
            self.client.table(self.TABLE)\
                .delete()\
                .eq("device_id", self.device_id)\
                .eq("key", key)\
                .execute()
        except Exception as e:
            log("Store", f"Delete failed for {key}: {e}", "ERROR")
            raise


def load_json(store: DurableStore, key: str, default=None):
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        log("Store", f"Ignoring corrupt JSON under {key}", "WARNING")
        return default


def save_json(store: DurableStore, key: str, value) -> None:
    store.set(key, json.dumps(value))
