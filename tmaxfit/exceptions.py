"""Exception hierarchy for tmaxfit.

Every error raised by the pipeline derives from :class:`TmaxFitError`, so a
host can catch the whole family in one place while still reacting to the
stage that failed.

Exception Hierarchy:
    TmaxFitError (base)
    ├── ConfigurationError (invalid run or file configuration)
    ├── ParseError (malformed or insufficient input text)
    ├── ModelError (degenerate dataset)
    ├── SamplerError (external sampler failure, tagged with chain index)
    ├── SummaryError (nothing to summarize)
    ├── RenderError (invalid surface handle or drawing failure)
    ├── RunCancelledError (user- or host-triggered abort)
    └── StateTransitionError (session driven out of order)

Examples
--------
>>> try:
...     dataset = parse(raw_text)
... except ParseError as e:
...     print(f"Cannot use input: {e}")
"""

from __future__ import annotations


class TmaxFitError(Exception):
    """Base exception for all tmaxfit errors.

    Attributes
    ----------
    message : str
        Human-readable error message
    error_context : dict
        Additional context about the error (line numbers, chain index, ...)
    """

    def __init__(self, message: str, error_context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.error_context = error_context or {}

    def __str__(self) -> str:
        """Return formatted error message with context."""
        base_msg = super().__str__()
        if self.error_context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.error_context.items())
            return f"{base_msg} (context: {context_str})"
        return base_msg


class ConfigurationError(TmaxFitError, ValueError):
    """Raised when a run or file configuration holds invalid values."""


class ParseError(TmaxFitError):
    """Raised when input text cannot be turned into a usable dataset.

    Common Causes
    -------------
    - Empty input or input containing only a header
    - Every data line malformed (wrong field count, non-numeric values)
    - Fewer usable observations than required to fit a line
    - Unexpected header for raw GHCN-Daily data
    """


class ModelError(TmaxFitError):
    """Raised when a dataset cannot define a regression model.

    The typical cause is zero variance in x (all observations share one x
    value), which leaves the slope undefined.
    """


class SamplerError(TmaxFitError):
    """Raised when the external sampler fails for one chain.

    Attributes
    ----------
    chain_index : int or None
        Index of the chain whose sampler invocation failed
    """

    def __init__(
        self,
        message: str,
        chain_index: int | None = None,
        error_context: dict | None = None,
    ):
        context = dict(error_context or {})
        if chain_index is not None:
            context.setdefault("chain_index", chain_index)
        super().__init__(message, context)
        self.chain_index = chain_index


class SummaryError(TmaxFitError):
    """Raised when posterior draws cannot be summarized (e.g. no sampling draws)."""


class RenderError(TmaxFitError):
    """Raised for an unknown drawing surface or a failed render."""


class RunCancelledError(TmaxFitError):
    """Raised when a run is cancelled between chains.

    Attributes
    ----------
    completed_chains : int
        Number of chains that finished before cancellation was observed.
        Their draws are discarded.
    """

    def __init__(self, message: str = "Run cancelled", completed_chains: int = 0):
        super().__init__(message, {"completed_chains": completed_chains})
        self.completed_chains = completed_chains


class StateTransitionError(TmaxFitError):
    """Raised when a session is asked to move along an undefined transition."""


__all__ = [
    "TmaxFitError",
    "ConfigurationError",
    "ParseError",
    "ModelError",
    "SamplerError",
    "SummaryError",
    "RenderError",
    "RunCancelledError",
    "StateTransitionError",
]
