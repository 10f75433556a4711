"""Solver parameters and their environment overrides."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, replace
from typing import Optional


logger = logging.getLogger(__name__)

_MAX_ITERS_ENV = "PYTIERS_MAX_ITERS"
_SETTLE_THRESHOLD_ENV = "PYTIERS_SETTLE_THRESHOLD"
_ACTIVATION_CAP_ENV = "PYTIERS_ACTIVATION_CAP"
_PARALLEL_JOBS_ENV = "PYTIERS_PARALLEL_JOBS"

DEFAULT_MAX_ITERS = 5000
DEFAULT_SETTLE_THRESHOLD = 1e-6
DEFAULT_ACTIVATION_CAP = 30.0
DEFAULT_PARALLEL_JOBS = 1


class SolverConfigError(ValueError):
    """Raised when solver parameters cannot produce a meaningful run."""


@dataclass(frozen=True)
class SolverSettings:
    max_iters: int = DEFAULT_MAX_ITERS
    settle_threshold: float = DEFAULT_SETTLE_THRESHOLD
    activation_cap: float = DEFAULT_ACTIVATION_CAP
    parallel_jobs: int = DEFAULT_PARALLEL_JOBS

    def validate(self) -> "SolverSettings":
        validate_parameters(self.max_iters, self.settle_threshold, self.activation_cap)
        if self.parallel_jobs < 1:
            raise SolverConfigError(f"parallel_jobs must be at least 1, got {self.parallel_jobs}")
        return self

    def with_overrides(
        self,
        *,
        max_iters: Optional[int] = None,
        settle_threshold: Optional[float] = None,
        activation_cap: Optional[float] = None,
        parallel_jobs: Optional[int] = None,
    ) -> "SolverSettings":
        """Return a copy with every non-None argument applied."""

        changes = {
            key: value
            for key, value in {
                "max_iters": max_iters,
                "settle_threshold": settle_threshold,
                "activation_cap": activation_cap,
                "parallel_jobs": parallel_jobs,
            }.items()
            if value is not None
        }
        return replace(self, **changes)


def validate_parameters(max_iters: int, settle_threshold: float, activation_cap: float) -> None:
    if isinstance(max_iters, bool) or not isinstance(max_iters, int) or max_iters < 1:
        raise SolverConfigError(f"max_iters must be a positive integer, got {max_iters!r}")
    if not math.isfinite(settle_threshold) or settle_threshold <= 0:
        raise SolverConfigError(f"settle_threshold must be a positive finite number, got {settle_threshold!r}")
    if not math.isfinite(activation_cap) or activation_cap <= 0:
        raise SolverConfigError(f"activation_cap must be a positive finite number, got {activation_cap!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %g", name, raw, default)
        return default


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def get_settings() -> SolverSettings:
    """Defaults merged with any ``PYTIERS_*`` environment overrides."""

    return SolverSettings(
        max_iters=_env_int(_MAX_ITERS_ENV, DEFAULT_MAX_ITERS, min_value=1),
        settle_threshold=_env_float(_SETTLE_THRESHOLD_ENV, DEFAULT_SETTLE_THRESHOLD),
        activation_cap=_env_float(_ACTIVATION_CAP_ENV, DEFAULT_ACTIVATION_CAP),
        parallel_jobs=_env_int(_PARALLEL_JOBS_ENV, DEFAULT_PARALLEL_JOBS, min_value=1),
    )
