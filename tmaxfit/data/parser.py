"""Dataset Parser
==============

Turns free-form delimited text into a validated :class:`Dataset`.

Rules:
- one record per line, comma- or whitespace-separated
- blank lines and ``#`` comments are ignored
- the first record is a header when its first field is not numeric
- a data line must hold exactly two finite numbers, otherwise it is
  skipped and counted
- observations are stably sorted by x; a repeated x keeps the first
  occurrence in input order
"""

from __future__ import annotations

import math

from tmaxfit.data.types import Dataset, Observation
from tmaxfit.exceptions import ParseError
from tmaxfit.utils.logging import get_logger

logger = get_logger(__name__)

MIN_OBSERVATIONS = 2


def split_fields(line: str) -> list[str]:
    """Split one record on commas when present, else on whitespace."""
    if "," in line:
        return [part.strip() for part in line.split(",")]
    return line.split()


def parse_float(text: str) -> float | None:
    """Return ``float(text)`` if it is a finite number, else None."""
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _is_header(fields: list[str]) -> bool:
    return bool(fields) and parse_float(fields[0]) is None


def parse(raw: str, min_observations: int = MIN_OBSERVATIONS) -> Dataset:
    """Parse delimited ``x, y`` text into a Dataset.

    Args:
        raw: Input text; never modified.
        min_observations: Smallest dataset accepted (a line needs two points).

    Returns:
        Dataset sorted by x with duplicate x values removed.

    Raises:
        ParseError: If no usable rows remain or fewer than ``min_observations``.
    """
    if raw is None or not raw.strip():
        raise ParseError("Input is empty")

    columns: tuple[str, str] = ("x", "y")
    header_checked = False
    skipped = 0
    rows: list[Observation] = []

    for line_number, line in enumerate(raw.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        fields = split_fields(stripped)

        if not header_checked:
            header_checked = True
            if _is_header(fields):
                if len(fields) >= 2:
                    columns = (fields[0], fields[1])
                logger.debug(f"Header detected on line {line_number}: {fields}")
                continue

        if len(fields) != 2:
            skipped += 1
            logger.debug(f"Line {line_number}: expected 2 fields, got {len(fields)}")
            continue

        x, y = parse_float(fields[0]), parse_float(fields[1])
        if x is None or y is None:
            skipped += 1
            logger.debug(f"Line {line_number}: non-numeric or non-finite value")
            continue

        rows.append(Observation(x, y))

    if not rows:
        raise ParseError(
            "No usable data rows found",
            {"skipped_lines": skipped},
        )

    # sorted() is stable, so equal x keep their input order
    ordered = sorted(rows, key=lambda obs: obs.x)
    unique: list[Observation] = []
    for obs in ordered:
        if unique and unique[-1].x == obs.x:
            continue
        unique.append(obs)
    duplicates = len(ordered) - len(unique)

    if len(unique) < min_observations:
        raise ParseError(
            f"At least {min_observations} observations are required to fit a line, "
            f"got {len(unique)}",
            {"skipped_lines": skipped, "duplicates_dropped": duplicates},
        )

    if skipped:
        logger.warning(f"Skipped {skipped} malformed line(s)")
    if duplicates:
        logger.warning(f"Dropped {duplicates} observation(s) with a repeated x value")

    logger.info(f"Parsed {len(unique)} observations ({columns[0]}, {columns[1]})")
    return Dataset(
        observations=tuple(unique),
        columns=columns,
        skipped_lines=skipped,
        duplicates_dropped=duplicates,
    )


__all__ = ["parse", "split_fields", "parse_float", "MIN_OBSERVATIONS"]
