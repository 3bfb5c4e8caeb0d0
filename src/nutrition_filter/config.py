"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_filter.services.extraction import FieldLabels

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    kv_table: str = "kv_store"
    cache_namespace: str = "nutrition_cache_v7"
    preferences_namespace: str = "nutrition_filter_preferences"
    cache_expiry_ms: int = 604_800_000
    pacing_interval_seconds: float = 0.1
    fetch_timeout_seconds: float = 15.0
    item_path_marker: str = "/product/"
    section_header: str = "харчова цінність"
    protein_label: str = "Білки"
    fat_label: str = "Жири"
    carbs_label: str = "Вуглеводи"
    gram_unit: str = "г"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def field_labels(self) -> FieldLabels:
        """Return the vocabulary used by the nutrition extractor."""
        return FieldLabels(
            section_header=self.section_header,
            protein=self.protein_label,
            fat=self.fat_label,
            carbs=self.carbs_label,
            gram_unit=self.gram_unit,
        )
