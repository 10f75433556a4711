"""Load matchup tables from local JSON or CSV files."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from pytiers.models import MatchupTable

from .errors import IngestError, MatchupParseError


logger = logging.getLogger(__name__)


def _normalize_winrate(raw: str, *, entity: str, opponent: str) -> Optional[float]:
    text = raw.strip()
    percent = text.endswith("%")
    text = text.rstrip("%").strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        raise MatchupParseError(f"win-rate for {entity!r} vs {opponent!r} is not numeric: {raw!r}") from None
    # Bare numbers above 1 can only be percentages.
    if percent or value > 1.0:
        return value / 100.0
    return value


def _table_from_payload(payload: Any, index: int) -> MatchupTable:
    if not isinstance(payload, dict):
        raise MatchupParseError(f"table {index} must be a JSON object")
    if "matchups" not in payload:
        # A bare entity -> opponent -> win-rate mapping.
        payload = {"name": None, "matchups": payload}
    try:
        return MatchupTable.model_validate(payload)
    except ValidationError as exc:
        raise MatchupParseError(f"table {index} is malformed: {exc}") from exc


def load_tables_from_json(path: Path) -> List[MatchupTable]:
    """Read a list of ``{"name", "matchups"}`` objects, a single such object, or a bare matchups mapping."""

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise MatchupParseError(f"{path} is not valid JSON: {exc}") from exc

    payloads = data if isinstance(data, list) else [data]
    return [_table_from_payload(payload, index) for index, payload in enumerate(payloads)]


def load_table_from_csv(path: Path, *, name: Optional[str] = None) -> MatchupTable:
    """Read a square grid: header row of opponents, then one row per entity.

    The first header cell is ignored. Blank cells are missing pairs and values
    above 1 are read as percentages.
    """

    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        try:
            header = next(reader)
        except StopIteration:
            raise MatchupParseError(f"{path} is empty") from None
        opponents = [cell.strip() for cell in header[1:]]

        entities: List[str] = []
        rows: List[List[Optional[float]]] = []
        for line in reader:
            if not line or not any(cell.strip() for cell in line):
                continue
            entity = line[0].strip()
            diagonal = len(entities)
            entities.append(entity)
            rows.append([
                None if j == diagonal else _normalize_winrate(
                    cell, entity=entity, opponent=opponents[j] if j < len(opponents) else str(j)
                )
                for j, cell in enumerate(line[1:])
            ])

    if entities != opponents:
        raise MatchupParseError(f"{path}: row entities {entities} do not match header {opponents}")

    try:
        return MatchupTable.from_grid(entities, rows, name=name or path.stem)
    except ValueError as exc:
        raise MatchupParseError(f"{path} is malformed: {exc}") from exc


def load_tables(path: Path) -> List[MatchupTable]:
    """Load tables from ``path`` based on its suffix."""

    suffix = path.suffix.lower()
    if suffix == ".json":
        tables = load_tables_from_json(path)
    elif suffix == ".csv":
        tables = [load_table_from_csv(path)]
    else:
        raise IngestError(f"Unsupported matchup file type {path.suffix!r} (expected .json or .csv)")
    logger.info("Loaded %s matchup tables from %s", len(tables), path)
    return tables
