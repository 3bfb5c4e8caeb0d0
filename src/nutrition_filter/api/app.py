"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict, replace

from fastapi import FastAPI, HTTPException, Request, status

from nutrition_filter.api.models import PreferencesModel, RunRequest
from nutrition_filter.app_logging import configure_logging
from nutrition_filter.containers import AppContainer
from nutrition_filter.domain.batch import BatchResult, EvaluationOutcome
from nutrition_filter.services.batch import CancellationToken
from nutrition_filter.services.preferences import FilterPreferences
from nutrition_filter.services.visibility import should_hide


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.state.active_runs = {}

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/runs")
    async def start_run(payload: RunRequest, request: Request) -> dict[str, object]:
        """Evaluate every item on a listing page or in an explicit list."""
        state_container: AppContainer = request.app.state.container
        if payload.source_ids is not None:
            source_ids = payload.source_ids
        elif payload.listing_url:
            try:
                source_ids = await state_container.listing_service.list_source_ids(
                    payload.listing_url
                )
            except Exception as exc:
                logger.warning(
                    "Failed to load listing %s: %s", payload.listing_url, exc
                )
                raise HTTPException(
                    status_code=status.HTTP_502_BAD_GATEWAY,
                    detail="Listing page could not be fetched.",
                ) from exc
        else:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Provide listing_url or source_ids.",
            )

        preferences = state_container.preferences_service.load()
        config = (
            payload.config.to_domain()
            if payload.config is not None
            else preferences.to_filter_config()
        )
        preferences = replace(
            preferences, only_protein_dominant=config.protein_dominant_only
        )
        active_runs: dict[str, CancellationToken] = request.app.state.active_runs
        if payload.run_id in active_runs:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A run with this id is already active.",
            )
        outcomes: list[EvaluationOutcome] = []
        token = CancellationToken()
        active_runs[payload.run_id] = token
        try:
            result = await state_container.pipeline.run(
                source_ids,
                config,
                cancellation=token,
                on_item=lambda outcome, _tally: outcomes.append(outcome),
            )
        finally:
            del active_runs[payload.run_id]
        return _format_run(payload.run_id, result, outcomes, preferences)

    @app.post("/runs/cancel")
    async def cancel_runs(request: Request) -> dict[str, int]:
        """Ask every active run to stop before its next item."""
        active_runs: dict[str, CancellationToken] = request.app.state.active_runs
        for token in active_runs.values():
            token.cancel()
        return {"cancelled": len(active_runs)}

    @app.post("/runs/{run_id}/cancel")
    async def cancel_run(run_id: str, request: Request) -> dict[str, str]:
        """Ask one active run to stop before its next item."""
        active_runs: dict[str, CancellationToken] = request.app.state.active_runs
        token = active_runs.get(run_id)
        if token is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No active run with this id.",
            )
        token.cancel()
        logger.info("Cancellation requested for run %s", run_id)
        return {"run_id": run_id, "status": "cancelling"}

    @app.delete("/cache")
    async def clear_cache(request: Request) -> dict[str, str]:
        """Drop all cached nutrition records."""
        state_container: AppContainer = request.app.state.container
        state_container.cache.clear()
        return {"status": "cleared"}

    @app.get("/preferences")
    async def get_preferences(request: Request) -> PreferencesModel:
        """Return the stored filter preferences."""
        state_container: AppContainer = request.app.state.container
        return PreferencesModel.from_domain(state_container.preferences_service.load())

    @app.put("/preferences")
    async def put_preferences(
        payload: PreferencesModel, request: Request
    ) -> PreferencesModel:
        """Replace the stored filter preferences."""
        state_container: AppContainer = request.app.state.container
        state_container.preferences_service.save(payload.to_domain())
        return payload

    return app


def _format_run(
    run_id: str,
    result: BatchResult,
    outcomes: list[EvaluationOutcome],
    preferences: FilterPreferences,
) -> dict[str, object]:
    return {
        "run_id": run_id,
        "result": asdict(result),
        "items": [
            {
                "source_id": outcome.source_id,
                "status": outcome.status.value,
                "nutrition": asdict(outcome.record) if outcome.record else None,
                "breakdown": asdict(outcome.breakdown) if outcome.breakdown else None,
                "from_cache": outcome.from_cache,
                "hidden": should_hide(outcome, preferences),
            }
            for outcome in outcomes
        ],
    }
