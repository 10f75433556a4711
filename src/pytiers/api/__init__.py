"""REST API for the tier solver."""

from __future__ import annotations

import logging
from typing import Sequence

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from pytiers.api.schemas import (
    RatingupdateRequest,
    TierBatchResponse,
    TierRequest,
    TierResultResponse,
)
from pytiers.config import SolverConfigError, SolverSettings, get_settings
from pytiers.ingest import DEFAULT_URL, IngestError, load_ratingupdate_tables
from pytiers.models import MatchupTable, SolveResult
from pytiers.report import ReportError, export_tierlist_csv, rank_entities
from pytiers.solver import solve_all


logger = logging.getLogger(__name__)


def _settings_for(request: TierRequest | RatingupdateRequest) -> SolverSettings:
    settings = get_settings().with_overrides(
        max_iters=request.max_iters,
        settle_threshold=request.settle_threshold,
        activation_cap=request.activation_cap,
        parallel_jobs=request.parallel_jobs,
    )
    try:
        return settings.validate()
    except SolverConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _solve_tables(tables: Sequence[MatchupTable], settings: SolverSettings) -> list[SolveResult]:
    return solve_all(
        tables,
        settings.max_iters,
        settings.settle_threshold,
        settings.activation_cap,
        parallel_jobs=settings.parallel_jobs,
    )


def _result_to_response(result: SolveResult) -> TierResultResponse:
    return TierResultResponse(
        name=result.name,
        iterations=result.iterations,
        grand_multiplier=result.grand_multiplier,
        status=result.status,
        scores=dict(result.scores),
        ranking=result.ranking(),
    )


def _batch_response(results: Sequence[SolveResult], sort_by: int) -> TierBatchResponse:
    try:
        ranking = rank_entities(results, sort_by)
    except ReportError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    collapsed = [result.name or f"table_{index}" for index, result in enumerate(results) if result.failed]
    message = f"Collapsed tables: {', '.join(collapsed)}" if collapsed else None
    return TierBatchResponse(
        sort_by=sort_by,
        ranking=ranking,
        results=[_result_to_response(result) for result in results],
        message=message,
    )


def create_app() -> FastAPI:
    app = FastAPI(title="pytiers solver")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/tiers", response_model=TierBatchResponse)
    async def tiers(request: TierRequest) -> TierBatchResponse:
        settings = _settings_for(request)
        results = _solve_tables(request.tables, settings)
        return _batch_response(results, request.sort_by)

    @app.post("/tiers/export.csv")
    async def export_tiers(request: TierRequest) -> Response:
        settings = _settings_for(request)
        results = _solve_tables(request.tables, settings)
        try:
            content = export_tierlist_csv(results, request.sort_by)
        except ReportError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return Response(
            content=content,
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="tiers.csv"'},
        )

    @app.post("/tiers/ratingupdate", response_model=TierBatchResponse)
    async def ratingupdate(request: RatingupdateRequest) -> TierBatchResponse:
        settings = _settings_for(request)
        url = request.url or DEFAULT_URL
        try:
            tables = load_ratingupdate_tables(url)
        except IngestError as exc:
            logger.warning("Failed to load matchup tables from %s: %s", url, exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        if not tables:
            raise HTTPException(status_code=502, detail=f"No matchup tables found at {url}")
        results = _solve_tables(tables, settings)
        return _batch_response(results, request.sort_by)

    return app
