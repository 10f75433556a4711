"""Pydantic models for API I/O."""

from .tiers import RatingupdateRequest, TierBatchResponse, TierRequest, TierResultResponse

__all__ = [
    "RatingupdateRequest",
    "TierBatchResponse",
    "TierRequest",
    "TierResultResponse",
]
