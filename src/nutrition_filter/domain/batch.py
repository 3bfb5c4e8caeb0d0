"""Batch evaluation models."""

from dataclasses import dataclass
from enum import Enum

from nutrition_filter.domain.filters import FilterBreakdown
from nutrition_filter.domain.nutrition import NutritionRecord


class OutcomeStatus(str, Enum):
    """Result of evaluating a single item."""

    MATCHED = "matched"
    NOT_MATCHED = "not_matched"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class EvaluationOutcome:
    """Per-item outcome handed to the presentation layer."""

    source_id: str
    status: OutcomeStatus
    record: NutritionRecord | None = None
    breakdown: FilterBreakdown | None = None
    from_cache: bool = False


@dataclass
class BatchResult:
    """Running tally for a batch run."""

    processed: int = 0
    matched: int = 0
    unmatched: int = 0
    unavailable: int = 0
    cancelled: bool = False

    def count(self, outcome: EvaluationOutcome) -> None:
        """Count a finished item."""
        self.processed += 1
        if outcome.status is OutcomeStatus.MATCHED:
            self.matched += 1
        elif outcome.status is OutcomeStatus.NOT_MATCHED:
            self.unmatched += 1
        else:
            self.unavailable += 1
