"""Supabase key-value store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutrition_filter.services.cache import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Stores text blobs in a Supabase table keyed by namespace."""

    client: Client
    table: str = "kv_store"

    def get(self, namespace: str) -> str | None:
        """Return the stored value for a namespace."""
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("namespace", namespace)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    def set(self, namespace: str, value: str) -> None:
        """Insert or replace the value for a namespace."""
        self.client.table(self.table).upsert(
            {
                "namespace": namespace,
                "value": value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="namespace",
        ).execute()

    def remove(self, namespace: str) -> None:
        """Delete the namespace row."""
        self.client.table(self.table).delete().eq("namespace", namespace).execute()
