"""Iterative tier solver and the batch runner built on top of it."""

from __future__ import annotations

import logging
import math
import multiprocessing as mp
import sys
import time
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from pytiers.config import (
    DEFAULT_ACTIVATION_CAP,
    DEFAULT_MAX_ITERS,
    DEFAULT_SETTLE_THRESHOLD,
    validate_parameters,
)
from pytiers.models import MatchupTable, SolveResult, SolveStatus


logger = logging.getLogger(__name__)

# 2.0 ** x overflows a double from here on.
_POW2_OVERFLOW = float(sys.float_info.max_exp)


def make_activation(activation_cap: float) -> Callable[[float], float]:
    """Return ``x -> C / (1 + 2 ** (log2(C) - x))`` for the cap ``C``.

    The curve tends to 0 as ``x`` falls and to ``C`` as it grows, and passes
    through ``C / 2`` at ``x = log2(C)``.
    """

    log2_cap = math.log2(activation_cap)

    def activation(x: float) -> float:
        exponent = log2_cap - x
        if exponent >= _POW2_OVERFLOW:
            return 0.0
        return activation_cap / (1.0 + 2.0 ** exponent)

    return activation


def _margin_rows(table: MatchupTable) -> List[Tuple[str, Tuple[Tuple[str, float], ...]]]:
    """Per entity, its known opponents paired with ``2 * winrate - 1``, both in sorted order."""

    entities = set(table.matchups)
    rows = []
    for entity in table.entities():
        row = table.matchups[entity]
        margins = tuple(
            (opponent, 2.0 * row[opponent] - 1.0)
            for opponent in sorted(row)
            if opponent in entities
        )
        rows.append((entity, margins))
    return rows


def _next_scores(
    margin_rows: Sequence[Tuple[str, Tuple[Tuple[str, float], ...]]],
    scores: Mapping[str, float],
    grand_multiplier: float,
    activation: Callable[[float], float],
) -> Dict[str, float]:
    return {
        entity: sum(margin * activation(scores[opponent]) * grand_multiplier for opponent, margin in margins)
        for entity, margins in margin_rows
    }


def _multiplier_for(scores: Mapping[str, float]) -> float:
    total = sum(abs(value) for value in scores.values())
    if total == 0.0:
        return math.inf
    return 1.0 / total


def solve(
    table: MatchupTable,
    max_iters: int = DEFAULT_MAX_ITERS,
    settle_threshold: float = DEFAULT_SETTLE_THRESHOLD,
    activation_cap: float = DEFAULT_ACTIVATION_CAP,
) -> SolveResult:
    """Compute a self-consistent strength score for every entity in ``table``.

    Each round rebuilds the whole score vector from the previous one and then
    renormalizes with ``1 / sum(|score|)``. The loop stops once that
    multiplier moves by less than ``settle_threshold``, after ``max_iters``
    rounds, or when the multiplier stops being finite (every score hit zero).
    In the last case the previous round's state is returned with a
    ``collapsed`` status.
    """

    validate_parameters(max_iters, settle_threshold, activation_cap)

    activation = make_activation(activation_cap)
    margin_rows = _margin_rows(table)
    scores: Dict[str, float] = {entity: 0.0 for entity, _ in margin_rows}
    grand_multiplier = 1.0
    iterations = 0
    status: Optional[SolveStatus] = None
    start = time.perf_counter()

    while status is None:
        new_scores = _next_scores(margin_rows, scores, grand_multiplier, activation)
        new_multiplier = _multiplier_for(new_scores)
        iterations += 1

        if abs(grand_multiplier - new_multiplier) < settle_threshold:
            status = SolveStatus.CONVERGED
        elif iterations >= max_iters:
            status = SolveStatus.EXHAUSTED
        elif not math.isfinite(new_multiplier):
            logger.warning(
                "Table %s collapsed after %s rounds (grand multiplier %s); keeping last finite state",
                table.name or "<unnamed>",
                iterations,
                new_multiplier,
            )
            return SolveResult(
                name=table.name,
                iterations=iterations,
                grand_multiplier=grand_multiplier,
                scores=scores,
                status=SolveStatus.COLLAPSED,
            )
        scores = new_scores
        grand_multiplier = new_multiplier

    logger.info(
        "Solved table %s – %s after %s rounds, grand multiplier %.6f (%.2fs, %s entities)",
        table.name or "<unnamed>",
        status.value,
        iterations,
        grand_multiplier,
        time.perf_counter() - start,
        len(scores),
    )
    return SolveResult(
        name=table.name,
        iterations=iterations,
        grand_multiplier=grand_multiplier,
        scores=scores,
        status=status,
    )


class TableJobConfig:
    def __init__(self, job_id: int, table: MatchupTable, max_iters: int, settle_threshold: float, activation_cap: float):
        self.job_id = job_id
        self.table = table
        self.max_iters = max_iters
        self.settle_threshold = settle_threshold
        self.activation_cap = activation_cap


class TableJobResult:
    def __init__(self, job_id: int, result: SolveResult):
        self.job_id = job_id
        self.result = result


def _run_table_job(config: TableJobConfig) -> TableJobResult:
    result = solve(
        config.table,
        max_iters=config.max_iters,
        settle_threshold=config.settle_threshold,
        activation_cap=config.activation_cap,
    )
    return TableJobResult(config.job_id, result)


def _table_worker(config: TableJobConfig, queue: mp.Queue) -> None:
    try:
        queue.put(_run_table_job(config))
    except Exception as exc:  # pragma: no cover - worker errors bubble to parent
        queue.put(exc)


def _solve_all_parallel(configs: Sequence[TableJobConfig], workers: int) -> List[SolveResult]:
    ctx = mp.get_context("spawn")
    queue: mp.Queue = ctx.Queue()
    processes: dict[int, mp.Process] = {}
    collected: dict[int, SolveResult] = {}
    pending = list(configs)

    def start_job() -> None:
        config = pending.pop(0)
        logger.info("Dispatching table %s (%s)", config.job_id, config.table.name or "<unnamed>")
        proc = ctx.Process(target=_table_worker, args=(config, queue))
        proc.start()
        processes[config.job_id] = proc

    try:
        while len(processes) < workers and pending:
            start_job()

        while processes:
            outcome = queue.get()
            if isinstance(outcome, Exception):
                raise outcome

            proc = processes.pop(outcome.job_id, None)
            if proc is not None:
                proc.join()
            collected[outcome.job_id] = outcome.result

            while len(processes) < workers and pending:
                start_job()
    finally:
        for proc in processes.values():
            if proc.is_alive():
                proc.terminate()
            proc.join()

    return [collected[config.job_id] for config in configs]


def solve_all(
    tables: Sequence[MatchupTable],
    max_iters: int = DEFAULT_MAX_ITERS,
    settle_threshold: float = DEFAULT_SETTLE_THRESHOLD,
    activation_cap: float = DEFAULT_ACTIVATION_CAP,
    *,
    parallel_jobs: Optional[int] = 1,
) -> List[SolveResult]:
    """Solve every table independently, returning results in input order.

    A collapsed table is reported in its own result and never stops the rest
    of the batch. With ``parallel_jobs > 1`` tables are spread across worker
    processes.
    """

    validate_parameters(max_iters, settle_threshold, activation_cap)

    tables = list(tables)
    workers = max(1, parallel_jobs or 1)
    run_start = time.perf_counter()
    logger.info("Starting tier computation – tables=%s, workers=%s", len(tables), workers)

    configs = [
        TableJobConfig(job_id, table, max_iters, settle_threshold, activation_cap)
        for job_id, table in enumerate(tables)
    ]
    if workers == 1 or len(configs) <= 1:
        results = [_run_table_job(config).result for config in configs]
    else:
        results = _solve_all_parallel(configs, min(workers, len(configs)))

    failed = sum(1 for result in results if result.failed)
    if failed:
        logger.warning("%s of %s tables collapsed", failed, len(results))
    logger.info("Completed %s tables in %.2fs", len(results), time.perf_counter() - run_start)
    return results
