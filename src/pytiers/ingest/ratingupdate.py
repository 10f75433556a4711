"""Fetch and parse the matchup tables published on ratingupdate.info."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup, Tag

from pytiers.models import MatchupTable

from .errors import MatchupFetchError, MatchupParseError


logger = logging.getLogger(__name__)

DEFAULT_URL = "http://ratingupdate.info/matchups"

_TABLE_CONTAINER_CLASS = "table-container"
_LABEL_TAG = "h3"
_CELL_PATTERN = re.compile(r"\d+(?:\.\d*)?")


def fetch_matchup_page(
    url: str = DEFAULT_URL,
    *,
    client: Optional[httpx.Client] = None,
    timeout: float = 30.0,
) -> str:
    """Download the matchup page, raising MatchupFetchError on transport or HTTP failures."""

    try:
        if client is None:
            with httpx.Client(timeout=timeout, follow_redirects=True) as owned_client:
                response = owned_client.get(url)
        else:
            response = client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise MatchupFetchError(f"Failed to fetch {url}: {exc}") from exc
    return response.text


def _is_label_or_table(tag: Tag) -> bool:
    if not isinstance(tag, Tag):
        return False
    if tag.name == _LABEL_TAG:
        return True
    return _TABLE_CONTAINER_CLASS in (tag.get("class") or [])


def _table_label(container: Tag) -> Optional[str]:
    # Only a heading that directly precedes this container (with no other
    # table in between) labels it.
    previous = container.find_previous_sibling(_is_label_or_table)
    if previous is None or previous.name != _LABEL_TAG:
        return None
    label = previous.get_text(strip=True)
    return label or None


def _parse_cell(text: str) -> Optional[float]:
    match = _CELL_PATTERN.search(text)
    if match is None:
        return None
    return float(match.group(0)) / 100.0


def _cell_text(cell: Tag) -> str:
    if cell.name == "td":
        span = cell.find("span")
        return span.get_text(strip=True) if span is not None else ""
    return cell.get_text(strip=True)


def _parse_container(container: Tag, index: int) -> MatchupTable:
    body = container.select_one("table tbody")
    if body is None:
        raise MatchupParseError(f"table {index} has no table body")

    entities: List[str] = []
    rows: List[List[Optional[float]]] = []
    for row in body.find_all("tr")[1:]:
        cells = row.find_all(["th", "td"], recursive=False)
        if not cells:
            continue
        entity = cells[0].get_text(strip=True)
        if not entity:
            raise MatchupParseError(f"table {index} has a row without an entity name")
        values: List[Optional[float]] = []
        for column, cell in enumerate(cells[1:]):
            # Column position follows the cell, whatever it holds.
            text = _cell_text(cell)
            value = _parse_cell(text)
            if value is None and column != len(entities):
                raise MatchupParseError(
                    f"table {index}: cell {column} for {entity!r} is not a win-rate: {text!r}"
                )
            values.append(value)
        entities.append(entity)
        rows.append(values)

    try:
        return MatchupTable.from_grid(entities, rows, name=_table_label(container))
    except ValueError as exc:
        raise MatchupParseError(f"table {index} is malformed: {exc}") from exc


def parse_matchup_tables(html: str) -> List[MatchupTable]:
    """Turn every ``div.table-container`` on the page into a MatchupTable, in page order."""

    soup = BeautifulSoup(html, "html.parser")
    containers = soup.select(f"div.{_TABLE_CONTAINER_CLASS}")
    tables = [_parse_container(container, index) for index, container in enumerate(containers)]
    logger.info(
        "Parsed %s matchup tables (%s)",
        len(tables),
        ", ".join(f"{table.name or '<unnamed>'}:{len(table.matchups)}" for table in tables) or "-",
    )
    return tables


def load_ratingupdate_tables(
    url: str = DEFAULT_URL,
    *,
    client: Optional[httpx.Client] = None,
) -> List[MatchupTable]:
    logger.info("Fetching matchup tables from %s", url)
    return parse_matchup_tables(fetch_matchup_page(url, client=client))
