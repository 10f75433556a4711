"""Exceptions raised while acquiring matchup tables."""

from __future__ import annotations


class IngestError(RuntimeError):
    """Raised when matchup tables cannot be loaded from a source."""


class MatchupFetchError(IngestError):
    """Raised when the matchup page cannot be downloaded."""


class MatchupParseError(IngestError):
    """Raised when a matchup page or document does not have the expected structure."""
