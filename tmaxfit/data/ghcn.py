"""NOAA GHCN-Daily conversion.

Raw GHCN-Daily station exports list every element (TMAX, TMIN, PRCP, ...)
per day. Only quality-checked TMAX rows are kept and rewritten as
``DATE,TMAX`` where DATE is fractional years since 0000-01-01 and TMAX is
in degrees Celsius (the raw value is in tenths of a degree).
"""

from __future__ import annotations

from datetime import date

from tmaxfit.exceptions import ParseError
from tmaxfit.utils.logging import get_logger

logger = get_logger(__name__)

GHCN_HEADER = "ID,DATE,ELEMENT,DATA_VALUE,M_FLAG,Q_FLAG,S_FLAG,OBS_TIME"
OUTPUT_HEADER = "DATE,TMAX"

DAYS_PER_YEAR = 365.25
# date.toordinal() counts from 0001-01-01 = 1; year 0 is a leap year
_DAYS_BEFORE_YEAR_ONE = 366

_DATE = 1
_ELEMENT = 2
_DATA_VALUE = 3
_Q_FLAG = 5


def is_ghcn(raw: str) -> bool:
    """True if the first non-blank line is the GHCN-Daily header."""
    for line in raw.splitlines():
        if line.strip():
            return line.strip() == GHCN_HEADER
    return False


def date_to_years(text: str) -> float:
    """Convert ``YYYYMMDD`` to years elapsed since 0000-01-01.

    Raises:
        ParseError: If the text is not a valid calendar date.
    """
    text = text.strip()
    try:
        if len(text) != 8 or not text.isdigit():
            raise ValueError(text)
        day = date(int(text[0:4]), int(text[4:6]), int(text[6:8]))
    except ValueError:
        raise ParseError(
            "Invalid date format - expected YYYYMMDD", {"date": text}
        ) from None

    days = day.toordinal() - 1 + _DAYS_BEFORE_YEAR_ONE
    return days / DAYS_PER_YEAR


def convert_ghcn(raw: str) -> tuple[str, int]:
    """Rewrite raw GHCN-Daily CSV as ``DATE,TMAX`` text.

    Returns:
        The converted text and the number of malformed rows skipped.

    Raises:
        ParseError: If the header is not the GHCN-Daily header or a date is invalid.
    """
    lines = raw.strip().splitlines()
    if not lines or lines[0].strip() != GHCN_HEADER:
        raise ParseError("Unexpected raw data header")

    output = [OUTPUT_HEADER]
    skipped = 0
    for line in lines[1:]:
        line = line.strip()
        if not line:
            continue
        fields = [part.strip() for part in line.split(",")]
        if len(fields) <= _Q_FLAG:
            skipped += 1
            continue
        if fields[_ELEMENT] != "TMAX" or fields[_Q_FLAG]:
            continue
        try:
            tenths = int(fields[_DATA_VALUE])
        except ValueError:
            skipped += 1
            continue
        years = date_to_years(fields[_DATE])
        output.append(f"{years!r},{tenths / 10.0!r}")

    if skipped:
        logger.warning(f"Skipped {skipped} malformed GHCN row(s)")
    logger.info(f"Converted {len(output) - 1} GHCN TMAX rows")
    return "\n".join(output) + "\n", skipped


__all__ = ["GHCN_HEADER", "OUTPUT_HEADER", "is_ghcn", "date_to_years", "convert_ghcn"]
