"""Presentation helpers for solved tier lists."""

from .tierlist import ReportError, export_tierlist_csv, format_tierlist, rank_entities

__all__ = [
    "ReportError",
    "export_tierlist_csv",
    "format_tierlist",
    "rank_entities",
]
