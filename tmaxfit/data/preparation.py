"""Input preparation: raw text to a dataset plus its normalized text."""

from __future__ import annotations

from tmaxfit.data.ghcn import convert_ghcn, is_ghcn
from tmaxfit.data.parser import MIN_OBSERVATIONS, parse
from tmaxfit.data.types import Dataset, PreparedInput
from tmaxfit.utils.logging import get_logger

logger = get_logger(__name__)


def prepare(raw_text: str, min_observations: int = MIN_OBSERVATIONS) -> PreparedInput:
    """Parse raw input, converting GHCN-Daily exports first.

    Raw GHCN-Daily CSV is reduced to ``DATE,TMAX`` rows; anything else is
    read as two-column delimited text. The returned text is the normalized
    ``header + x,y`` form a UI can show back to the user.

    Raises:
        ParseError: On an unusable input (see :func:`tmaxfit.data.parser.parse`).
    """
    if raw_text is not None and is_ghcn(raw_text):
        converted, ghcn_skipped = convert_ghcn(raw_text)
        dataset = parse(converted, min_observations=min_observations)
        return PreparedInput(
            dataset=dataset,
            text=dataset.to_csv(),
            source_format="ghcn",
            rows_skipped=ghcn_skipped + dataset.skipped_lines,
        )

    dataset = parse(raw_text, min_observations=min_observations)
    return PreparedInput(
        dataset=dataset,
        text=dataset.to_csv(),
        source_format="delimited",
        rows_skipped=dataset.skipped_lines,
    )


def resolve_dataset(
    input_data: str | PreparedInput | Dataset,
    min_observations: int = MIN_OBSERVATIONS,
) -> Dataset:
    """Accept raw text, prepared text, a PreparedInput or a Dataset."""
    if isinstance(input_data, Dataset):
        return input_data
    if isinstance(input_data, PreparedInput):
        return input_data.dataset
    return prepare(input_data, min_observations=min_observations).dataset


__all__ = ["prepare", "resolve_dataset"]
