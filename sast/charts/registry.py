"""
Chart/visualization lifecycle.

The registry owns every live chart instance, keyed by a stable id. ``ensure``
builds a chart at most once; ``rebuild`` destroys and reconstructs it. Both
are no-ops when the id has no mount point, since visualization is optional
for the correctness of the data layer.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Set

from .config import ChartConfig
from .figures import build_figure

logger = logging.getLogger("sast.charts.registry")


# =============================================================================
# Backend seam
# =============================================================================

class ChartBackend(Protocol):
    """The rendering toolkit, treated as a black box."""

    def mount(self, *chart_ids: str) -> None: ...

    def has_mount(self, chart_id: str) -> bool: ...

    def construct(self, chart_id: str, config: ChartConfig) -> Any: ...

    def destroy(self, chart_id: str, instance: Any) -> None: ...


@dataclass
class ChartHandle:
    id: str
    live_instance: Any = None
    config: Optional[ChartConfig] = None
    builds: int = 0

    @property
    def is_live(self) -> bool:
        return self.live_instance is not None


class ChartRegistry:
    """At most one live instance per chart id."""

    def __init__(self, backend: ChartBackend):
        self.backend = backend
        self._handles: Dict[str, ChartHandle] = {}

    def _construct(self, handle: ChartHandle, config: ChartConfig) -> Any:
        handle.live_instance = self.backend.construct(handle.id, config)
        handle.config = config
        handle.builds += 1
        return handle.live_instance

    def ensure(self, chart_id: str, config: ChartConfig) -> Optional[Any]:
        """
        Build ``chart_id`` from ``config`` unless it is already live.

        An existing instance is returned untouched; its data is not updated.
        """
        handle = self._handles.get(chart_id)
        if handle is not None and handle.is_live:
            return handle.live_instance

        if not self.backend.has_mount(chart_id):
            logger.debug(f"No mount point for chart '{chart_id}'; skipping build")
            return None

        handle = self._handles.setdefault(chart_id, ChartHandle(chart_id))
        logger.debug(f"Building chart '{chart_id}' ({config.kind})")
        return self._construct(handle, config)

    def rebuild(self, chart_id: str, config: ChartConfig) -> Optional[Any]:
        """Destroy any live instance for ``chart_id`` and construct a fresh one."""
        if not self.backend.has_mount(chart_id):
            logger.debug(f"No mount point for chart '{chart_id}'; skipping rebuild")
            return None

        handle = self._handles.setdefault(chart_id, ChartHandle(chart_id))
        self._destroy(handle)
        logger.debug(f"Rebuilding chart '{chart_id}'")
        return self._construct(handle, config)

    def _destroy(self, handle: ChartHandle) -> None:
        if handle.is_live:
            self.backend.destroy(handle.id, handle.live_instance)
            handle.live_instance = None

    def invalidate(self, chart_id: str) -> None:
        """Destroy the live instance so the next ``ensure`` builds again."""
        handle = self._handles.get(chart_id)
        if handle is not None:
            self._destroy(handle)

    def get(self, chart_id: str) -> Optional[Any]:
        handle = self._handles.get(chart_id)
        return handle.live_instance if handle is not None else None

    def handle(self, chart_id: str) -> Optional[ChartHandle]:
        return self._handles.get(chart_id)

    def live_ids(self) -> List[str]:
        return [h.id for h in self._handles.values() if h.is_live]

    def teardown(self) -> None:
        for handle in self._handles.values():
            self._destroy(handle)
        self._handles.clear()


class PlotlyBackend:
    """
    Builds Plotly figures.

    Mount points are chart ids declared by a rendered section; once a
    section has been shown its mounts persist for the page lifetime.
    """

    def __init__(self):
        self._mounts: Set[str] = set()

    def mount(self, *chart_ids: str) -> None:
        self._mounts.update(chart_ids)

    def has_mount(self, chart_id: str) -> bool:
        return chart_id in self._mounts

    def construct(self, chart_id: str, config: ChartConfig):
        return build_figure(config)

    def destroy(self, chart_id: str, instance) -> None:
        logger.debug(f"Destroyed chart '{chart_id}'")
