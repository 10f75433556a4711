"""Input adapters that produce matchup tables."""

from .errors import IngestError, MatchupFetchError, MatchupParseError
from .files import load_table_from_csv, load_tables, load_tables_from_json
from .ratingupdate import (
    DEFAULT_URL,
    fetch_matchup_page,
    load_ratingupdate_tables,
    parse_matchup_tables,
)

__all__ = [
    "DEFAULT_URL",
    "IngestError",
    "MatchupFetchError",
    "MatchupParseError",
    "fetch_matchup_page",
    "load_ratingupdate_tables",
    "load_table_from_csv",
    "load_tables",
    "load_tables_from_json",
    "parse_matchup_tables",
]
