"""
Synthetic data suite.

Used whenever the remote analytics endpoint cannot supply a section.
"""
from .spec import GeneratorSpec, SpikeWindow, baseline_series, generate_series
from .generators import (
    GENERATORS,
    generate,
    generate_overview,
    generate_traffic,
    generate_security,
    generate_connectivity,
    generate_bots,
    generate_tools,
    generate_anomaly,
    security_baselines,
)

__all__ = [
    "GeneratorSpec",
    "SpikeWindow",
    "baseline_series",
    "generate_series",
    "GENERATORS",
    "generate",
    "generate_overview",
    "generate_traffic",
    "generate_security",
    "generate_connectivity",
    "generate_bots",
    "generate_tools",
    "generate_anomaly",
    "security_baselines",
]
