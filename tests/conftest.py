"""Shared test fixtures."""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

import pytest

from nutrition_filter.adapters.page_client import PageClient
from nutrition_filter.config import Settings
from nutrition_filter.containers import AppContainer
from nutrition_filter.services.batch import BatchEvaluationPipeline
from nutrition_filter.services.cache import ExpiringRecordCache, KeyValueStore
from nutrition_filter.services.extraction import NutritionExtractor
from nutrition_filter.services.listing import ListingService
from nutrition_filter.services.preferences import PreferencesService

NOW_MS = 1_700_000_000_000


def product_page(
    protein: str = "12,5",
    fat: str = "3",
    carbs: str = "4,2",
    energy: str = "95/397",
) -> str:
    """Build a product page with a nutrition facts block."""
    return f"""
    <html>
      <body>
        <header><a href="/">Головна</a> <span>Ціна 89,90 грн</span></header>
        <section class="nutrition">
          <h2>Харчова цінність на 100 г</h2>
          <dl>
            <dt>Білки (г)</dt><dd>{protein}</dd>
            <dt>Жири (г)</dt><dd>{fat}</dd>
            <dt>Вуглеводи (г)</dt><dd>{carbs}</dd>
            <dt>Енергетична цінність (ккал/кДж)</dt><dd>{energy}</dd>
          </dl>
        </section>
      </body>
    </html>
    """


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value store for tests."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, namespace: str) -> str | None:
        return self.values.get(namespace)

    def set(self, namespace: str, value: str) -> None:
        self.values[namespace] = value

    def remove(self, namespace: str) -> None:
        self.values.pop(namespace, None)


@dataclass
class FailingKeyValueStore(KeyValueStore):
    """Store whose writes are rejected, as when storage quota is exhausted."""

    stored: str | None = None

    def get(self, namespace: str) -> str | None:
        return self.stored

    def set(self, namespace: str, value: str) -> None:
        raise OSError("quota exceeded")

    def remove(self, namespace: str) -> None:
        raise OSError("storage unavailable")


@dataclass
class FakePageClient(PageClient):
    """Fake page client serving markup from a dict."""

    pages: dict[str, str] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def fetch_markup(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise ConnectionError(f"no route to {url}")
        return self.pages[url]


@dataclass
class FakeSupabaseResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeSupabaseTable:
    """Chainable stand-in for a Supabase table query builder."""

    name: str
    rows: dict[str, dict[str, object]] = field(default_factory=dict)
    _action: str = "select"
    _filters: dict[str, object] = field(default_factory=dict)
    _payload: dict[str, object] | None = None
    upserts: list[tuple[dict[str, object], str | None]] = field(default_factory=list)

    def select(self, *_columns: str) -> "FakeSupabaseTable":
        self._action = "select"
        self._filters = {}
        return self

    def upsert(
        self, payload: dict[str, object], on_conflict: str | None = None
    ) -> "FakeSupabaseTable":
        self._action = "upsert"
        self._payload = payload
        self.upserts.append((payload, on_conflict))
        return self

    def delete(self) -> "FakeSupabaseTable":
        self._action = "delete"
        self._filters = {}
        return self

    def eq(self, column: str, value: object) -> "FakeSupabaseTable":
        self._filters[column] = value
        return self

    def limit(self, _count: int) -> "FakeSupabaseTable":
        return self

    def execute(self) -> FakeSupabaseResponse:
        if self._action == "upsert" and self._payload is not None:
            self.rows[str(self._payload["namespace"])] = dict(self._payload)
            return FakeSupabaseResponse(data=[self._payload])
        namespace = self._filters.get("namespace")
        if self._action == "delete":
            removed = self.rows.pop(str(namespace), None)
            return FakeSupabaseResponse(data=[removed] if removed else [])
        row = self.rows.get(str(namespace))
        return FakeSupabaseResponse(data=[row] if row else [])


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeSupabaseTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeSupabaseTable:
        if name not in self.tables:
            self.tables[name] = FakeSupabaseTable(name=name)
        return self.tables[name]


@pytest.fixture(autouse=True)
def _propagate_app_logs() -> Iterator[None]:
    logger = logging.getLogger("nutrition_filter")
    logger.propagate = True
    yield
    logger.handlers.clear()
    logger.propagate = True


@pytest.fixture
def make_product_page() -> Callable[..., str]:
    return product_page


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        pacing_interval_seconds=0,
    )


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def failing_store() -> FailingKeyValueStore:
    return FailingKeyValueStore()


@pytest.fixture
def supabase_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def page_client() -> FakePageClient:
    return FakePageClient()


@pytest.fixture
def cache(store: InMemoryKeyValueStore) -> ExpiringRecordCache:
    return ExpiringRecordCache(store=store, namespace="cache", clock=lambda: NOW_MS)


@pytest.fixture
def pipeline(
    page_client: FakePageClient, cache: ExpiringRecordCache
) -> BatchEvaluationPipeline:
    return BatchEvaluationPipeline(
        page_client=page_client,
        extractor=NutritionExtractor(),
        cache=cache,
        pacing_interval_seconds=0,
    )


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryKeyValueStore,
    page_client: FakePageClient,
    cache: ExpiringRecordCache,
    pipeline: BatchEvaluationPipeline,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        page_client=page_client,
        cache=cache,
        pipeline=pipeline,
        listing_service=ListingService(page_client),
        preferences_service=PreferencesService(
            store=store, namespace=settings.preferences_namespace
        ),
        close_resources=close_resources,
    )
