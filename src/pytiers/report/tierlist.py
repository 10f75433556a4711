"""Text and CSV renderings of a batch of solve results."""

from __future__ import annotations

import csv
from io import StringIO
from typing import List, Optional, Sequence

from pytiers.models import SolveResult


class ReportError(RuntimeError):
    """Raised when results cannot be arranged into a report."""


def _table_label(result: SolveResult, index: int) -> str:
    return result.name or f"table_{index}"


def rank_entities(results: Sequence[SolveResult], sort_by: int = 0) -> List[str]:
    """Order entities by their score in ``results[sort_by]``, strongest first.

    Entities that only appear in other tables follow in name order.
    """

    if not 0 <= sort_by < len(results):
        raise ReportError(f"sort_by={sort_by} is out of range for {len(results)} tables")

    ranked = results[sort_by].ranking()
    seen = set(ranked)
    extras = sorted({entity for result in results for entity in result.scores} - seen)
    return ranked + extras


def _score_cell(result: SolveResult, entity: str, precision: int) -> str:
    score: Optional[float] = result.scores.get(entity)
    if score is None:
        return "-"
    return f"{score:.{precision}f}"


def format_tierlist(results: Sequence[SolveResult], sort_by: int = 0, *, precision: int = 4) -> str:
    """Render the fixed-width report: table names, diagnostics, then one line per entity."""

    entities = rank_entities(results, sort_by)
    width = max((len(entity) for entity in entities), default=0) + 2

    def columns(cells: Sequence[str]) -> str:
        return "".join(f"{cell:>{width}}" for cell in cells)

    lines = [
        "",
        f"{'':<{width}}{columns([result.name or '' for result in results])}",
        "",
        f"{'Iters:':<{width}}{columns([str(result.iterations) for result in results])}",
        "",
        f"{'Grand mults:':<{width}}{columns([f'{result.grand_multiplier:.{precision}f}' for result in results])}",
        "",
    ]
    failed = [_table_label(result, index) for index, result in enumerate(results) if result.failed]
    if failed:
        lines.append(f"Collapsed: {', '.join(failed)}")
        lines.append("")
    lines.append("Rankings:")
    for entity in entities:
        lines.append(f"{entity:<{width}}{columns([_score_cell(result, entity, precision) for result in results])}")
    return "\n".join(lines) + "\n"


def export_tierlist_csv(results: Sequence[SolveResult], sort_by: int = 0) -> str:
    """CSV with an ``entity`` column plus one score column per table."""

    entities = rank_entities(results, sort_by)
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["entity", *(_table_label(result, index) for index, result in enumerate(results))])
    for entity in entities:
        row = [entity]
        for result in results:
            score = result.scores.get(entity)
            row.append("" if score is None else repr(score))
        writer.writerow(row)
    return buffer.getvalue()


__all__ = [
    "ReportError",
    "export_tierlist_csv",
    "format_tierlist",
    "rank_entities",
]
