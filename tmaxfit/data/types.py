"""Shared Data Types for the tmaxfit Data Layer
==============================================

Observation and Dataset containers produced by the parser and consumed by
every later stage.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True)
class Observation:
    """One (x, y) point; x is an ordinal such as fractional years."""

    x: float
    y: float


@dataclass(frozen=True)
class Dataset:
    """Validated, x-sorted observations.

    Attributes:
        observations: Observations with strictly increasing x
        columns: Column names from the header, or ("x", "y")
        skipped_lines: Malformed data lines dropped while parsing
        duplicates_dropped: Later observations dropped for repeating an x value
    """

    observations: tuple[Observation, ...]
    columns: tuple[str, str] = ("x", "y")
    skipped_lines: int = 0
    duplicates_dropped: int = 0
    _x: np.ndarray = field(init=False, repr=False, compare=False)
    _y: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "observations", tuple(self.observations))
        x = np.array([obs.x for obs in self.observations], dtype=np.float64)
        y = np.array([obs.y for obs in self.observations], dtype=np.float64)
        x.setflags(write=False)
        y.setflags(write=False)
        object.__setattr__(self, "_x", x)
        object.__setattr__(self, "_y", y)

    def __len__(self) -> int:
        return len(self.observations)

    def __iter__(self):
        return iter(self.observations)

    @property
    def x(self) -> np.ndarray:
        return self._x

    @property
    def y(self) -> np.ndarray:
        return self._y

    @property
    def x_range(self) -> tuple[float, float] | None:
        if not self.observations:
            return None
        return float(self._x[0]), float(self._x[-1])

    def to_csv(self) -> str:
        """Render as header + ``x,y`` lines, the normalized form shown to users."""
        lines = [",".join(self.columns)]
        lines.extend(f"{obs.x!r},{obs.y!r}" for obs in self.observations)
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class PreparedInput:
    """Result of ``prepare``: the dataset plus its normalized text form."""

    dataset: Dataset
    text: str
    source_format: str  # "ghcn" or "delimited"
    rows_skipped: int = 0

    @property
    def n_observations(self) -> int:
        return len(self.dataset)


__all__ = ["Observation", "Dataset", "PreparedInput"]
