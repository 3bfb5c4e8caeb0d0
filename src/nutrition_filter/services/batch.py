"""Sequential fetch, extract and evaluate pipeline."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from nutrition_filter.adapters.page_client import PageClient
from nutrition_filter.domain.batch import BatchResult, EvaluationOutcome, OutcomeStatus
from nutrition_filter.domain.filters import FilterConfig
from nutrition_filter.domain.nutrition import NutritionRecord
from nutrition_filter.services.cache import ExpiringRecordCache
from nutrition_filter.services.extraction import NutritionExtractor
from nutrition_filter.services.filtering import evaluate

ITEM_PATH_MARKER = "/product/"

ReportCallback = Callable[[EvaluationOutcome, BatchResult], None]

_logger = logging.getLogger(__name__)


@dataclass
class CancellationToken:
    """Cooperative cancellation flag for one pipeline run."""

    cancelled: bool = False

    def cancel(self) -> None:
        """Request that the run stop before its next item."""
        self.cancelled = True


def is_item_detail(source_id: str, marker: str = ITEM_PATH_MARKER) -> bool:
    """Return True when the identifier points at an item detail page."""
    return bool(source_id) and marker in source_id


@dataclass
class BatchEvaluationPipeline:
    """Evaluates items one at a time with pacing between them."""

    page_client: PageClient
    extractor: NutritionExtractor
    cache: ExpiringRecordCache
    pacing_interval_seconds: float = 0.1
    item_path_marker: str = ITEM_PATH_MARKER

    async def run(
        self,
        source_ids: Iterable[str],
        config: FilterConfig,
        cancellation: CancellationToken | None = None,
        on_item: ReportCallback | None = None,
    ) -> BatchResult:
        """Process identifiers in order and return the final tally.

        Cancellation is checked before each item; an in-flight fetch is never
        interrupted. A failure on one item marks it unavailable and the run
        continues.
        """
        token = cancellation or CancellationToken()
        result = BatchResult()
        _logger.info("Batch run started")
        for source_id in source_ids:
            if token.cancelled:
                result.cancelled = True
                break
            if not is_item_detail(source_id, self.item_path_marker):
                continue

            outcome = await self.evaluate_item(source_id, config)
            result.count(outcome)
            _report(on_item, outcome, result)
            await asyncio.sleep(self.pacing_interval_seconds)

        _logger.info(
            "Batch run %s: processed=%s matched=%s unmatched=%s unavailable=%s",
            "cancelled" if result.cancelled else "finished",
            result.processed,
            result.matched,
            result.unmatched,
            result.unavailable,
        )
        return result

    async def evaluate_item(
        self, source_id: str, config: FilterConfig
    ) -> EvaluationOutcome:
        """Resolve nutrition for one item and evaluate it."""
        record, from_cache = await self._resolve(source_id)
        if record is None:
            return EvaluationOutcome(
                source_id=source_id, status=OutcomeStatus.UNAVAILABLE
            )
        evaluation = evaluate(record, config)
        return EvaluationOutcome(
            source_id=source_id,
            status=(
                OutcomeStatus.MATCHED
                if evaluation.matched
                else OutcomeStatus.NOT_MATCHED
            ),
            record=record,
            breakdown=evaluation.breakdown,
            from_cache=from_cache,
        )

    async def _resolve(self, source_id: str) -> tuple[NutritionRecord | None, bool]:
        cached = self.cache.get(source_id)
        if cached is not None:
            return cached.record, True

        try:
            markup = await self.page_client.fetch_markup(source_id)
            record = self.extractor.extract(markup)
        except Exception as exc:
            _logger.warning("Nutrition lookup failed for %s: %s", source_id, exc)
            return None, False

        if record is not None:
            self.cache.put(source_id, record)
        return record, False


def _report(
    on_item: ReportCallback | None,
    outcome: EvaluationOutcome,
    result: BatchResult,
) -> None:
    if on_item is None:
        return
    try:
        on_item(outcome, result)
    except Exception:
        _logger.exception("Item report callback failed for %s", outcome.source_id)
