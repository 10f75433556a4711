"""Persist and load CLI solve profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from pytiers.config import SolverConfigError, SolverSettings


def _read_number(data: Mapping[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise SolverConfigError(f"profile value {key} must be a number, got {value!r}")
    try:
        converted = kind(value)
    except (TypeError, ValueError):
        raise SolverConfigError(f"profile value {key} must be a number, got {value!r}") from None
    if kind is int and isinstance(value, float) and value != converted:
        raise SolverConfigError(f"profile value {key} must be an integer, got {value!r}")
    return converted


@dataclass
class SolverProfile:
    max_iters: Optional[int] = None
    settle_threshold: Optional[float] = None
    activation_cap: Optional[float] = None
    sort_by: Optional[int] = None

    @classmethod
    def load(cls, path: Path) -> "SolverProfile":
        """Read a profile; numeric strings are accepted, anything else raises SolverConfigError."""

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SolverConfigError(f"{path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise SolverConfigError(f"{path} must hold a JSON object")
        return cls(
            max_iters=_read_number(data, "max_iters", int),
            settle_threshold=_read_number(data, "settle_threshold", float),
            activation_cap=_read_number(data, "activation_cap", float),
            sort_by=_read_number(data, "sort_by", int),
        )

    def save(self, path: Path) -> None:
        payload = {
            "max_iters": self.max_iters,
            "settle_threshold": self.settle_threshold,
            "activation_cap": self.activation_cap,
            "sort_by": self.sort_by,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def apply(self, settings: SolverSettings) -> SolverSettings:
        return settings.with_overrides(
            max_iters=self.max_iters,
            settle_threshold=self.settle_threshold,
            activation_cap=self.activation_cap,
        )
