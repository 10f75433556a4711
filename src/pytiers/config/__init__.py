"""Configuration helpers for solver parameters."""

from .solver import (
    DEFAULT_ACTIVATION_CAP,
    DEFAULT_MAX_ITERS,
    DEFAULT_SETTLE_THRESHOLD,
    SolverConfigError,
    SolverSettings,
    get_settings,
    validate_parameters,
)

__all__ = [
    "DEFAULT_ACTIVATION_CAP",
    "DEFAULT_MAX_ITERS",
    "DEFAULT_SETTLE_THRESHOLD",
    "SolverConfigError",
    "SolverSettings",
    "get_settings",
    "validate_parameters",
]
