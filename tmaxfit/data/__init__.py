"""Data ingestion: parsing, validation and GHCN-Daily conversion."""

from tmaxfit.data.ghcn import GHCN_HEADER, convert_ghcn, date_to_years, is_ghcn
from tmaxfit.data.parser import MIN_OBSERVATIONS, parse
from tmaxfit.data.preparation import prepare, resolve_dataset
from tmaxfit.data.types import Dataset, Observation, PreparedInput

__all__ = [
    "Dataset",
    "Observation",
    "PreparedInput",
    "parse",
    "prepare",
    "resolve_dataset",
    "MIN_OBSERVATIONS",
    "GHCN_HEADER",
    "convert_ghcn",
    "date_to_years",
    "is_ghcn",
]
