"""Tier solver: iterative scoring of matchup tables."""

from pytiers.config import SolverConfigError

from .service import make_activation, solve, solve_all

__all__ = ["SolverConfigError", "make_activation", "solve", "solve_all"]
