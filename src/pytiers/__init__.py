"""Tier lists from pairwise matchup win-rates."""

__version__ = "0.1.0"
