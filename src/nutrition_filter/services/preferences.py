"""Persisted filter preferences."""

import json
import logging
from dataclasses import asdict, dataclass, field

from nutrition_filter.domain.filters import FieldFilter, FilterConfig
from nutrition_filter.services.cache import KeyValueStore

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterPreferences:
    """User-chosen filters and visibility switches."""

    protein: FieldFilter = field(default_factory=lambda: FieldFilter(">=", 10.0))
    fat: FieldFilter = field(default_factory=lambda: FieldFilter("<=", 10.0))
    carbs: FieldFilter = field(default_factory=lambda: FieldFilter("<=", 20.0))
    calories: FieldFilter = field(default_factory=lambda: FieldFilter("<=", 200.0))
    hide_without_nutrition: bool = False
    hide_non_matching: bool = False
    only_protein_dominant: bool = False

    def to_filter_config(self) -> FilterConfig:
        """Return the filter configuration for a batch run."""
        return FilterConfig(
            protein=self.protein,
            fat=self.fat,
            carbs=self.carbs,
            calories=self.calories,
            protein_dominant_only=self.only_protein_dominant,
        )


@dataclass
class PreferencesService:
    """Loads and saves preferences through the key-value store."""

    store: KeyValueStore
    namespace: str

    def load(self) -> FilterPreferences:
        """Return stored preferences, falling back to defaults."""
        try:
            raw = self.store.get(self.namespace)
            if not raw:
                return FilterPreferences()
            return _decode(json.loads(raw))
        except Exception as exc:
            _logger.warning("Ignoring unreadable filter preferences: %s", exc)
            return FilterPreferences()

    def save(self, preferences: FilterPreferences) -> None:
        """Persist preferences; failures are logged."""
        try:
            self.store.set(self.namespace, json.dumps(asdict(preferences)))
        except Exception:
            _logger.exception("Failed to save filter preferences")


def _decode(payload: dict[str, object]) -> FilterPreferences:
    defaults = FilterPreferences()

    def field_filter(name: str) -> FieldFilter:
        default: FieldFilter = getattr(defaults, name)
        item = payload.get(name) or {}
        return FieldFilter(
            op=str(item.get("op") or default.op),
            threshold=float(item.get("threshold", default.threshold)),
        )

    return FilterPreferences(
        protein=field_filter("protein"),
        fat=field_filter("fat"),
        carbs=field_filter("carbs"),
        calories=field_filter("calories"),
        hide_without_nutrition=bool(payload.get("hide_without_nutrition", False)),
        hide_non_matching=bool(payload.get("hide_non_matching", False)),
        only_protein_dominant=bool(payload.get("only_protein_dominant", False)),
    )
