"""
Plotly figure construction from a ChartConfig.
"""
from __future__ import annotations

from typing import List

import plotly.graph_objects as go

from ..theme import get_plotly_layout
from .config import ChartConfig, Dataset


def hex_to_rgba(color: str, alpha: float) -> str:
    """'#RRGGBB' -> 'rgba(r,g,b,alpha)'. Non-hex colours are returned unchanged."""
    if not color.startswith("#") or len(color) != 7:
        return color
    r, g, b = (int(color[i:i + 2], 16) for i in (1, 3, 5))
    return f"rgba({r},{g},{b},{alpha})"


def _pie(config: ChartConfig) -> List:
    ds = config.datasets[0]
    colors = list(ds.color) if isinstance(ds.color, tuple) else [ds.color]
    return [go.Pie(
        labels=list(config.labels),
        values=list(ds.data),
        hole=config.hole,
        sort=False,
        marker=dict(colors=colors, line=dict(width=0)),
        textinfo="percent",
        hovertemplate=f"%{{label}}: %{{value}}{config.value_suffix}<extra></extra>",
    )]


def _bar(config: ChartConfig, ds: Dataset) -> go.Bar:
    color = list(ds.color) if isinstance(ds.color, tuple) else ds.color
    if config.kind == "hbar":
        return go.Bar(y=list(config.labels), x=list(ds.data), orientation="h", name=ds.label, marker_color=color)
    return go.Bar(x=list(config.labels), y=list(ds.data), name=ds.label, marker_color=color)


def _line(config: ChartConfig, ds: Dataset) -> go.Scatter:
    trace = go.Scatter(
        x=list(config.labels),
        y=list(ds.data),
        name=ds.label,
        mode="lines+markers" if config.markers else "lines",
        line=dict(color=ds.color, width=ds.width, dash=ds.dash, shape="spline", smoothing=0.6),
    )
    if ds.fill:
        trace.update(fill="tozeroy", fillcolor=hex_to_rgba(ds.color, 0.12))
    return trace


def build_figure(config: ChartConfig) -> go.Figure:
    """Construct a Plotly figure with the config's theme tokens baked in."""
    if config.kind in ("pie", "doughnut"):
        traces = _pie(config)
    elif config.kind in ("bar", "hbar"):
        traces = [_bar(config, ds) for ds in config.datasets]
    elif config.kind == "line":
        traces = [_line(config, ds) for ds in config.datasets]
    else:
        raise ValueError(f"Unsupported chart kind: {config.kind}")

    fig = go.Figure(traces)
    fig.update_layout(**get_plotly_layout(config.tokens))
    fig.update_layout(
        showlegend=config.legend,
        legend={"font": {"color": config.tokens.text_color, "size": 10}, "orientation": "h", "y": -0.15},
    )
    if config.kind in ("pie", "doughnut"):
        fig.update_layout(hovermode="closest")
    elif config.kind == "hbar":
        fig.update_layout(hovermode="closest", yaxis={"autorange": "reversed"})
        fig.update_xaxes(ticksuffix=config.value_suffix)
    else:
        fig.update_yaxes(ticksuffix=config.value_suffix)

    if config.value_range is not None:
        fig.update_yaxes(range=list(config.value_range))
    return fig
