from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field

from pytiers.models import MatchupTable, SolveStatus


class TierRequest(BaseModel):
    tables: List[MatchupTable] = Field(..., min_length=1)
    max_iters: int | None = None
    settle_threshold: float | None = None
    activation_cap: float | None = None
    sort_by: int = 0
    parallel_jobs: int | None = None


class RatingupdateRequest(BaseModel):
    url: str | None = None
    max_iters: int | None = None
    settle_threshold: float | None = None
    activation_cap: float | None = None
    sort_by: int = 0
    parallel_jobs: int | None = None


class TierResultResponse(BaseModel):
    name: str | None
    iterations: int
    grand_multiplier: float
    status: SolveStatus
    scores: Dict[str, float]
    ranking: List[str]


class TierBatchResponse(BaseModel):
    sort_by: int
    ranking: List[str]
    results: List[TierResultResponse]
    message: str | None = None
