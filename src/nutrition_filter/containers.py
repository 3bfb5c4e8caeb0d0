"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_filter.adapters.page_client import HttpxPageClient, PageClient
from nutrition_filter.adapters.supabase_kv_store import SupabaseKeyValueStore
from nutrition_filter.config import Settings
from nutrition_filter.services.batch import BatchEvaluationPipeline
from nutrition_filter.services.cache import ExpiringRecordCache
from nutrition_filter.services.extraction import NutritionExtractor
from nutrition_filter.services.listing import ListingService
from nutrition_filter.services.preferences import PreferencesService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    page_client: PageClient
    cache: ExpiringRecordCache
    pipeline: BatchEvaluationPipeline
    listing_service: ListingService
    preferences_service: PreferencesService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    store = SupabaseKeyValueStore(supabase_client, table=resolved_settings.kv_table)
    page_client = HttpxPageClient.create(
        timeout_seconds=resolved_settings.fetch_timeout_seconds
    )
    cache = ExpiringRecordCache(
        store=store,
        namespace=resolved_settings.cache_namespace,
        expiry_ms=resolved_settings.cache_expiry_ms,
    )
    pipeline = BatchEvaluationPipeline(
        page_client=page_client,
        extractor=NutritionExtractor(resolved_settings.field_labels()),
        cache=cache,
        pacing_interval_seconds=resolved_settings.pacing_interval_seconds,
        item_path_marker=resolved_settings.item_path_marker,
    )
    preferences_service = PreferencesService(
        store=store, namespace=resolved_settings.preferences_namespace
    )

    async def close_resources() -> None:
        await page_client.close()

    return AppContainer(
        settings=resolved_settings,
        page_client=page_client,
        cache=cache,
        pipeline=pipeline,
        listing_service=ListingService(page_client),
        preferences_service=preferences_service,
        close_resources=close_resources,
    )
