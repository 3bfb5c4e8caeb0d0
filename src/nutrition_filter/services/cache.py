"""Expiring nutrition cache backed by a durable key-value store."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from nutrition_filter.domain.nutrition import CacheEntry, NutritionRecord

CACHE_EXPIRY_MS = 604_800_000

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Durable storage for text blobs keyed by namespace."""

    def get(self, namespace: str) -> str | None:
        """Return the stored text for a namespace, if any."""

    def set(self, namespace: str, value: str) -> None:
        """Store text under a namespace, replacing any previous value."""

    def remove(self, namespace: str) -> None:
        """Delete the namespace entirely."""


def _now_ms() -> int:
    return int(datetime.now(tz=UTC).timestamp() * 1000)


@dataclass
class ExpiringRecordCache:
    """Nutrition records keyed by source identifier.

    Entries older than the expiry horizon are dropped when the persisted map is
    loaded; reads never check expiry. The in-memory map is authoritative for the
    lifetime of the instance and every write is mirrored to the store.
    """

    store: KeyValueStore
    namespace: str
    expiry_ms: int = CACHE_EXPIRY_MS
    clock: Callable[[], int] = _now_ms
    _entries: dict[str, CacheEntry] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self._entries = self.load()

    def load(self) -> dict[str, CacheEntry]:
        """Read the persisted map, dropping expired entries."""
        try:
            raw = self.store.get(self.namespace)
            if not raw:
                return {}
            entries = _decode(raw)
        except Exception as exc:
            _logger.warning("Discarding unreadable nutrition cache: %s", exc)
            return {}

        now = self.clock()
        return {
            key: entry
            for key, entry in entries.items()
            if now - entry.written_at_ms <= self.expiry_ms
        }

    def get(self, key: str) -> CacheEntry | None:
        """Return the cached entry for a source identifier."""
        return self._entries.get(key)

    def put(self, key: str, record: NutritionRecord) -> None:
        """Store a record stamped with the current time and persist the map."""
        self._entries[key] = CacheEntry(record=record, written_at_ms=self.clock())
        try:
            self.store.set(self.namespace, _encode(self._entries))
        except Exception:
            _logger.exception("Failed to persist nutrition cache")

    def clear(self) -> None:
        """Drop every entry and remove the persisted map."""
        self._entries = {}
        try:
            self.store.remove(self.namespace)
        except Exception:
            _logger.exception("Failed to remove persisted nutrition cache")

    def __len__(self) -> int:
        return len(self._entries)


def _encode(entries: dict[str, CacheEntry]) -> str:
    payload = {
        key: {
            "protein": entry.record.protein,
            "fat": entry.record.fat,
            "carbs": entry.record.carbs,
            "calories": entry.record.calories,
            "writtenAt": entry.written_at_ms,
        }
        for key, entry in entries.items()
    }
    return json.dumps(payload, ensure_ascii=False)


def _decode(raw: str) -> dict[str, CacheEntry]:
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("cache payload is not an object")
    return {
        str(key): CacheEntry(
            record=NutritionRecord(
                protein=float(item["protein"]),
                fat=float(item["fat"]),
                carbs=float(item["carbs"]),
                calories=float(item.get("calories") or 0.0),
            ),
            written_at_ms=int(item["writtenAt"]),
        )
        for key, item in payload.items()
    }
