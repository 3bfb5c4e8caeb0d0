"""Visibility decision for evaluated items."""

from nutrition_filter.domain.batch import EvaluationOutcome, OutcomeStatus
from nutrition_filter.services.preferences import FilterPreferences


def should_hide(outcome: EvaluationOutcome, preferences: FilterPreferences) -> bool:
    """Return True when the item should be hidden from the listing."""
    if outcome.status is OutcomeStatus.UNAVAILABLE:
        return preferences.hide_without_nutrition
    if outcome.status is OutcomeStatus.MATCHED:
        return False
    protein_dominant = (
        outcome.breakdown is not None and outcome.breakdown.protein_dominant
    )
    return preferences.hide_non_matching or (
        preferences.only_protein_dominant and not protein_dominant
    )
