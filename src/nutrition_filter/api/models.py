"""Pydantic models for the HTTP API."""

from uuid import uuid4

from pydantic import BaseModel, Field

from nutrition_filter.domain.filters import FieldFilter, FilterConfig
from nutrition_filter.services.preferences import FilterPreferences


class FieldFilterModel(BaseModel):
    """Operator and threshold for one field."""

    op: str
    threshold: float = Field(ge=0)

    def to_domain(self) -> FieldFilter:
        return FieldFilter(op=self.op, threshold=self.threshold)

    @classmethod
    def from_domain(cls, value: FieldFilter) -> "FieldFilterModel":
        return cls(op=value.op, threshold=value.threshold)


class FilterConfigModel(BaseModel):
    """Filter configuration payload."""

    protein: FieldFilterModel
    fat: FieldFilterModel
    carbs: FieldFilterModel
    calories: FieldFilterModel
    protein_dominant_only: bool = False

    def to_domain(self) -> FilterConfig:
        return FilterConfig(
            protein=self.protein.to_domain(),
            fat=self.fat.to_domain(),
            carbs=self.carbs.to_domain(),
            calories=self.calories.to_domain(),
            protein_dominant_only=self.protein_dominant_only,
        )


class RunRequest(BaseModel):
    """Batch run request; either a listing page or explicit item links."""

    listing_url: str | None = None
    source_ids: list[str] | None = None
    config: FilterConfigModel | None = None
    run_id: str = Field(default_factory=lambda: uuid4().hex, min_length=1)


class PreferencesModel(BaseModel):
    """Stored filter preferences payload."""

    protein: FieldFilterModel
    fat: FieldFilterModel
    carbs: FieldFilterModel
    calories: FieldFilterModel
    hide_without_nutrition: bool = False
    hide_non_matching: bool = False
    only_protein_dominant: bool = False

    def to_domain(self) -> FilterPreferences:
        return FilterPreferences(
            protein=self.protein.to_domain(),
            fat=self.fat.to_domain(),
            carbs=self.carbs.to_domain(),
            calories=self.calories.to_domain(),
            hide_without_nutrition=self.hide_without_nutrition,
            hide_non_matching=self.hide_non_matching,
            only_protein_dominant=self.only_protein_dominant,
        )

    @classmethod
    def from_domain(cls, value: FilterPreferences) -> "PreferencesModel":
        return cls(
            protein=FieldFilterModel.from_domain(value.protein),
            fat=FieldFilterModel.from_domain(value.fat),
            carbs=FieldFilterModel.from_domain(value.carbs),
            calories=FieldFilterModel.from_domain(value.calories),
            hide_without_nutrition=value.hide_without_nutrition,
            hide_non_matching=value.hide_non_matching,
            only_protein_dominant=value.only_protein_dominant,
        )
