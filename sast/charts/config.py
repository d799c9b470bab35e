"""Toolkit-agnostic chart configuration."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..theme import ThemeToken


@dataclass(frozen=True)
class Dataset:
    label: str
    data: Tuple
    color: Union[str, Tuple[str, ...]]
    fill: bool = False
    dash: Optional[str] = None
    width: float = 2.0


@dataclass(frozen=True)
class ChartConfig:
    """Everything needed to construct one chart, theme tokens included."""
    kind: str  # line | bar | hbar | doughnut | pie
    labels: Tuple
    datasets: Tuple[Dataset, ...]
    tokens: ThemeToken
    legend: bool = False
    hole: float = 0.0
    value_suffix: str = ""
    value_range: Optional[Tuple[float, float]] = None
    markers: bool = False
