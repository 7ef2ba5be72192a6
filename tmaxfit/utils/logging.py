"""
Logging for tmaxfit.

Module loggers are children of ``tmaxfit`` so the CLI (or a UI host) sets
verbosity once through :func:`configure_logging`. Sampling, summarizing and
rendering report their wall time through :func:`log_performance` and
:func:`log_operation`.
"""

import functools
import inspect
import logging
import time
from contextlib import contextmanager
from typing import Optional

ROOT_LOGGER_NAME = "tmaxfit"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Backend discovery chatter on CPU-only hosts
_NOISY_JAX_LOGGERS = ("jax._src.xla_bridge", "jax._src.compiler")


def _quiet_jax() -> None:
    for name in _NOISY_JAX_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)


class MinimalLogger:
    """Process-wide owner of the ``tmaxfit`` logger tree."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._configured = False
        return cls._instance

    @property
    def root(self) -> logging.Logger:
        return logging.getLogger(ROOT_LOGGER_NAME)

    def configure(self, level: str = "INFO", force: bool = False) -> None:
        if self._configured and not force:
            return

        self.root.setLevel(getattr(logging, level.upper(), logging.INFO))
        if not self.root.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            self.root.addHandler(handler)
        _quiet_jax()
        self._configured = True

    @staticmethod
    def qualify(name: str) -> str:
        """Place ``name`` under the package root (``__main__`` becomes ``main``)."""
        if name.startswith(ROOT_LOGGER_NAME):
            return name
        if name == "__main__":
            name = "main"
        return f"{ROOT_LOGGER_NAME}.{name}"

    def get_logger(self, name: str) -> logging.Logger:
        self.configure()
        return logging.getLogger(self.qualify(name))


_logger_manager = MinimalLogger()


def configure_logging(level: str = "INFO") -> None:
    """Set the package log level (the CLI passes DEBUG for ``--verbose``)."""
    _logger_manager.configure(level=level, force=True)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for ``name``, or for the calling module when omitted."""
    if name is None:
        frame = inspect.currentframe()
        try:
            caller = frame.f_back if frame is not None else None
            name = caller.f_globals.get("__name__") if caller is not None else None
        finally:
            del frame
    return _logger_manager.get_logger(name or "unknown")


def log_performance(
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
    threshold: float = 0.1,
):
    """Decorator timing a pipeline stage.

    Durations under ``threshold`` seconds are not logged; failures are
    always logged at ERROR and re-raised.
    """

    def decorator(func):
        stage_logger = logger or get_logger(func.__module__)
        stage = f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = time.perf_counter() - start
                stage_logger.error(f"Performance: {stage} failed after {elapsed:.3f}s: {e}")
                raise
            elapsed = time.perf_counter() - start
            if elapsed >= threshold:
                stage_logger.log(level, f"Performance: {stage} completed in {elapsed:.3f}s")
            return result

        return wrapper

    return decorator


@contextmanager
def log_operation(
    operation_name: str,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
):
    """Log start, completion time and failure of a block such as rendering."""
    if logger is None:
        logger = get_logger()

    logger.log(level, f"Starting operation: {operation_name}")
    start = time.perf_counter()
    try:
        yield logger
    except Exception as e:
        elapsed = time.perf_counter() - start
        logger.error(f"Failed operation: {operation_name} after {elapsed:.3f}s: {e}")
        raise
    elapsed = time.perf_counter() - start
    logger.log(level, f"Completed operation: {operation_name} in {elapsed:.3f}s")


_logger_manager.configure()
