"""Nutrition filter predicate."""

import operator
from collections.abc import Callable

from nutrition_filter.domain.filters import (
    FilterBreakdown,
    FilterConfig,
    FilterEvaluation,
)
from nutrition_filter.domain.nutrition import NutritionRecord

EQUALITY_TOLERANCE = 0.1

_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    "=": lambda actual, target: abs(actual - target) < EQUALITY_TOLERANCE,
    ">=": operator.ge,
    ">": operator.gt,
}


def compare(actual: float, op: str, threshold: float) -> bool:
    """Compare a value against a threshold; unknown operators always pass."""
    comparator = _COMPARATORS.get(op)
    if comparator is None:
        return True
    return comparator(actual, threshold)


def evaluate(record: NutritionRecord, config: FilterConfig) -> FilterEvaluation:
    """Evaluate a nutrition record against a filter configuration."""
    protein_dominant = record.protein > record.fat
    breakdown = FilterBreakdown(
        protein=compare(record.protein, config.protein.op, config.protein.threshold),
        fat=compare(record.fat, config.fat.op, config.fat.threshold),
        carbs=compare(record.carbs, config.carbs.op, config.carbs.threshold),
        calories=(
            compare(record.calories, config.calories.op, config.calories.threshold)
            if record.calories > 0
            else True
        ),
        protein_dominant=protein_dominant,
    )
    matched = (
        breakdown.protein
        and breakdown.fat
        and breakdown.carbs
        and breakdown.calories
        and (protein_dominant or not config.protein_dominant_only)
    )
    return FilterEvaluation(matched=matched, breakdown=breakdown)
