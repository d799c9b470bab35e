"""Chart configuration, Plotly construction and lifecycle."""

from .catalog import CHART_CATALOG, ChartSpec, charts_for, detection_flags, latency_band, spec_for
from .config import ChartConfig, Dataset
from .figures import build_figure
from .registry import ChartBackend, ChartHandle, ChartRegistry, PlotlyBackend

__all__ = [
    "CHART_CATALOG",
    "ChartSpec",
    "charts_for",
    "detection_flags",
    "latency_band",
    "spec_for",
    "ChartConfig",
    "Dataset",
    "build_figure",
    "ChartBackend",
    "ChartHandle",
    "ChartRegistry",
    "PlotlyBackend",
]
