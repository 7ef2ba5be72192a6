"""Drawing surfaces.

A surface is a matplotlib :class:`~matplotlib.figure.Figure`. Hosts register
their figures under string ids and hand those ids to the pipeline, so the
renderer never looks anything up in global state.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional, Union

from matplotlib.figure import Figure

from tmaxfit.exceptions import RenderError
from tmaxfit.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_FIGSIZE = (10.0, 6.0)
DEFAULT_DPI = 100


class SurfaceRegistry:
    """Maps surface ids to figures."""

    def __init__(self):
        self._surfaces: dict[str, Figure] = {}

    def __contains__(self, surface_id: str) -> bool:
        return surface_id in self._surfaces

    def __iter__(self) -> Iterator[str]:
        return iter(self._surfaces)

    def register(self, surface_id: str, figure: Figure) -> Figure:
        if not isinstance(figure, Figure):
            raise RenderError(
                "Surfaces must be matplotlib figures",
                {"surface_id": surface_id, "type": type(figure).__name__},
            )
        self._surfaces[surface_id] = figure
        return figure

    def create(
        self,
        surface_id: str,
        figsize: tuple[float, float] = DEFAULT_FIGSIZE,
        dpi: int = DEFAULT_DPI,
    ) -> Figure:
        """Create and register a figure not attached to any pyplot window."""
        return self.register(surface_id, Figure(figsize=tuple(figsize), dpi=dpi))

    def get(self, surface_id: str) -> Figure:
        try:
            return self._surfaces[surface_id]
        except KeyError:
            raise RenderError(
                f"Unknown drawing surface: '{surface_id}'",
                {"known": sorted(self._surfaces)},
            ) from None

    def clear(self, surface_id: str) -> None:
        self.get(surface_id).clear()

    def save(
        self,
        surface_id: str,
        path: Union[str, Path],
        dpi: Optional[int] = None,
    ) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.get(surface_id).savefig(path, dpi=dpi, bbox_inches="tight")
        logger.info(f"Surface '{surface_id}' saved to {path}")
        return path


__all__ = ["SurfaceRegistry", "DEFAULT_FIGSIZE", "DEFAULT_DPI"]
