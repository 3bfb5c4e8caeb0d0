"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutritionRecord:
    """Nutrition facts per 100 g of a product.

    A calories value of 0 means the page did not state it.
    """

    protein: float
    fat: float
    carbs: float
    calories: float = 0.0


@dataclass(frozen=True)
class CacheEntry:
    """Cached nutrition record with its write time in epoch milliseconds."""

    record: NutritionRecord
    written_at_ms: int
