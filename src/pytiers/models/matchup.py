"""Canonical matchup and result models shared across ingestion, solver and report layers."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict


class MatchupTable(BaseModel):
    """Pairwise win-rates among a fixed group of entities.

    ``matchups[entity][opponent]`` is the probability that ``entity`` beats
    ``opponent``. Missing pairs are allowed and simply contribute nothing
    when the table is solved.
    """

    name: Optional[str] = None
    matchups: Dict[str, Dict[str, float]] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _reject_self_matchups(self) -> "MatchupTable":
        for entity, row in self.matchups.items():
            if entity in row:
                raise ValueError(f"entity {entity!r} has a matchup against itself")
        return self

    def entities(self) -> Tuple[str, ...]:
        return tuple(sorted(self.matchups))

    def opponents(self, entity: str) -> Mapping[str, float]:
        """Return ``entity``'s row, raising KeyError if it is not in the table."""

        if entity not in self.matchups:
            raise KeyError(f"Unknown entity {entity!r}")
        return self.matchups[entity]

    @classmethod
    def from_grid(
        cls,
        entities: Sequence[str],
        rows: Sequence[Sequence[Optional[float]]],
        *,
        name: Optional[str] = None,
    ) -> "MatchupTable":
        """Build a table from a square grid; the diagonal is ignored and ``None`` cells are skipped."""

        if len(rows) != len(entities):
            raise ValueError(f"expected {len(entities)} rows, got {len(rows)}")
        if len(set(entities)) != len(entities):
            raise ValueError("entity names must be unique")

        matchups: Dict[str, Dict[str, float]] = {}
        for i, entity in enumerate(entities):
            row = rows[i]
            if len(row) > len(entities):
                raise ValueError(
                    f"row for {entity!r} has {len(row)} cells but only {len(entities)} entities"
                )
            matchups[entity] = {
                entities[j]: float(value)
                for j, value in enumerate(row)
                if i != j and value is not None
            }
        return cls(name=name, matchups=matchups)


class SolveStatus(str, Enum):
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"
    COLLAPSED = "collapsed"


class SolveResult(BaseModel):
    """Scores for one table plus the diagnostics of the run that produced them."""

    name: Optional[str] = None
    iterations: int = Field(..., ge=0)
    grand_multiplier: float
    scores: Dict[str, float] = Field(default_factory=dict)
    status: SolveStatus = SolveStatus.CONVERGED

    model_config = ConfigDict(frozen=True)

    @property
    def failed(self) -> bool:
        return self.status is SolveStatus.COLLAPSED

    def ranking(self) -> list[str]:
        """Entity names ordered strongest first; ties fall back to name order."""

        return [entity for entity, _ in sorted(self.scores.items(), key=lambda item: (-item[1], item[0]))]
