"""
Series specifications for the synthetic generators.

A GeneratorSpec fixes the *shape* of a series (baseline curve, spike
windows, noise band). Re-running a spec yields different values but the
same magnitude bands and spike timing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class SpikeWindow:
    """Inclusive index range held at a fixed baseline level."""
    start: int
    end: int
    level: float
    noise: Optional[Tuple[float, float]] = None  # overrides the spec band inside the window

    def covers(self, index: int) -> bool:
        return self.start <= index <= self.end


@dataclass(frozen=True)
class GeneratorSpec:
    samples: int
    baseline: Callable[[int], float]
    noise: Tuple[float, float] = (0.0, 0.0)
    spikes: Tuple[SpikeWindow, ...] = ()
    integer: bool = False
    floor: Optional[float] = 0.0

    def in_spike(self, index: int) -> bool:
        return any(w.covers(index) for w in self.spikes)


def baseline_series(spec: GeneratorSpec) -> np.ndarray:
    """Unperturbed baseline for every sample, spike windows applied."""
    base = np.array([spec.baseline(i) for i in range(spec.samples)], dtype=float)
    for window in spec.spikes:
        base[window.start:window.end + 1] = window.level
    return base


def _noise_bands(spec: GeneratorSpec) -> Tuple[np.ndarray, np.ndarray]:
    low = np.full(spec.samples, spec.noise[0], dtype=float)
    high = np.full(spec.samples, spec.noise[1], dtype=float)
    for window in spec.spikes:
        if window.noise is not None:
            low[window.start:window.end + 1] = window.noise[0]
            high[window.start:window.end + 1] = window.noise[1]
    return low, high


def generate_series(spec: GeneratorSpec, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """
    Baseline plus bounded uniform noise.

    Integer specs draw whole-number noise from the closed band [low, high];
    float specs draw from [low, high). Values are clamped at ``spec.floor``
    when it is set, so rates never go negative.
    """
    rng = rng if rng is not None else np.random.default_rng()
    base = baseline_series(spec)
    low, high = _noise_bands(spec)

    if spec.integer:
        noise = rng.integers(low.astype(int), high.astype(int) + 1)
    else:
        noise = rng.uniform(low, high)

    values = base + noise
    if spec.floor is not None:
        values = np.maximum(values, spec.floor)
    if spec.integer:
        values = values.astype(int)
    return values
