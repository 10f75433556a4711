"""Data models for matchup tables and solve results."""

from .matchup import MatchupTable, SolveResult, SolveStatus

__all__ = ["MatchupTable", "SolveResult", "SolveStatus"]
