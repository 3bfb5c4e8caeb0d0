"""Filter configuration models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldFilter:
    """Comparison operator and threshold for one nutrition field."""

    op: str
    threshold: float


@dataclass(frozen=True)
class FilterConfig:
    """Per-field filters plus the protein-dominance switch."""

    protein: FieldFilter
    fat: FieldFilter
    carbs: FieldFilter
    calories: FieldFilter
    protein_dominant_only: bool = False


@dataclass(frozen=True)
class FilterBreakdown:
    """Per-field comparison results for one record."""

    protein: bool
    fat: bool
    carbs: bool
    calories: bool
    protein_dominant: bool


@dataclass(frozen=True)
class FilterEvaluation:
    """Match decision with its supporting breakdown."""

    matched: bool
    breakdown: FilterBreakdown
