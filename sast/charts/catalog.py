"""
Chart catalog.

Every chart on the dashboard has a stable id, belongs to one section, and
knows how to turn that section's payload plus the active theme tokens into a
ChartConfig. Rendering a section mounts its ids; toggling the theme rebuilds
them from the same payload.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from ..connector.models import (
    AnomalyPayload,
    ConnectivityPayload,
    OverviewPayload,
    SecurityPayload,
    TrafficPayload,
)
from ..sections import SectionId
from ..theme import ThemeToken
from .config import ChartConfig, Dataset

ACCENT = "#00e5a0"
VIOLET = "#7c6fff"
AMBER = "#f5a623"
RED = "#ff4d4d"
SKY = "#38bdf8"
MINT = "#34d399"
MUTED = "#7d8fa3"

# Detection thresholds used for the comparison chart
TRAFFIC_ATTACK_LEVEL = 400
SP_ALERT_LEVEL = 0.7
ML_ALERT_LEVEL = 0.5

# Latency banding (ms)
LATENCY_GOOD = 20
LATENCY_WARNING = 28
LATENCY_COLORS = {
    "good": "rgba(52,211,153,.45)",
    "warning": "rgba(245,166,35,.45)",
    "bad": "rgba(255,77,77,.45)",
}


def latency_band(value: float) -> str:
    if value < LATENCY_GOOD:
        return "good"
    if value < LATENCY_WARNING:
        return "warning"
    return "bad"


def detection_flags(payload: AnomalyPayload) -> Dict[str, Tuple[int, ...]]:
    """Binary ground-truth / SP / ML detection series derived from the realtime metrics."""
    rt = payload.realtime_metrics
    return {
        "ground_truth": tuple(int(v > TRAFFIC_ATTACK_LEVEL) for v in rt.traffic_rate.data),
        "sp_detection": tuple(int(v > SP_ALERT_LEVEL) for v in rt.sp_anomaly_score.data),
        "ml_detection": tuple(int(v > ML_ALERT_LEVEL) for v in rt.ml_attack_probability.data),
    }


@dataclass(frozen=True)
class ChartSpec:
    id: str
    section: SectionId
    build: Callable[[object, ThemeToken], ChartConfig]


def _line(labels, label, data, color, tokens, **kwargs) -> ChartConfig:
    fill = kwargs.pop("fill", True)
    return ChartConfig(
        kind="line",
        labels=tuple(labels),
        datasets=(Dataset(label, tuple(data), color, fill=fill),),
        tokens=tokens,
        **kwargs,
    )


def _categorical(kind, labels, data, colors, tokens, **kwargs) -> ChartConfig:
    return ChartConfig(
        kind=kind,
        labels=tuple(labels),
        datasets=(Dataset("", tuple(data), tuple(colors)),),
        tokens=tokens,
        **kwargs,
    )


# =============================================================================
# Overview
# =============================================================================

def _overview_rps(p: OverviewPayload, t: ThemeToken) -> ChartConfig:
    return _line(p.rps_timeline.labels, "RPS", p.rps_timeline.rps, ACCENT, t)


def _overview_methods(p: OverviewPayload, t: ThemeToken) -> ChartConfig:
    return _categorical(
        "doughnut", p.http_methods.keys(), p.http_methods.values(),
        (ACCENT, VIOLET, AMBER, RED, SKY), t, legend=True, hole=0.65,
    )


# =============================================================================
# Traffic
# =============================================================================

def _traffic_volume(p: TrafficPayload, t: ThemeToken) -> ChartConfig:
    return _categorical("bar", p.volume_7d.labels, p.volume_7d.data, (ACCENT,) * len(p.volume_7d.data), t)


def _traffic_devices(p: TrafficPayload, t: ThemeToken) -> ChartConfig:
    return _categorical("pie", p.devices.labels, p.devices.data, (VIOLET, ACCENT, SKY), t,
                        legend=True, value_suffix="%")


def _traffic_browsers(p: TrafficPayload, t: ThemeToken) -> ChartConfig:
    return _categorical("hbar", p.browsers.labels, p.browsers.data,
                        (ACCENT, VIOLET, AMBER, SKY, RED, MINT), t, value_suffix="%")


def _traffic_protocols(p: TrafficPayload, t: ThemeToken) -> ChartConfig:
    return _categorical("doughnut", p.protocols.labels, p.protocols.data, (RED, ACCENT, VIOLET, SKY), t,
                        legend=True, hole=0.6, value_suffix="%")


def _traffic_mobile_os(p: TrafficPayload, t: ThemeToken) -> ChartConfig:
    return _categorical("bar", p.mobile_os.labels, p.mobile_os.data, (SKY, MINT, AMBER, MUTED), t,
                        value_suffix="%")


# =============================================================================
# Security
# =============================================================================

def _security_app_line(p: SecurityPayload, t: ThemeToken) -> ChartConfig:
    tl = p.app_layer.timeline
    return _line(tl.labels, "Attacks", tl.data, RED, t)


def _security_app_types(p: SecurityPayload, t: ThemeToken) -> ChartConfig:
    types = p.app_layer.types
    return _categorical("bar", [a.type for a in types], [a.count for a in types],
                        (RED, AMBER, VIOLET, SKY, MINT), t)


def _security_net_line(p: SecurityPayload, t: ThemeToken) -> ChartConfig:
    tl = p.net_layer.timeline
    return _line(tl.labels, "Attacks", tl.data, VIOLET, t)


def _security_net_types(p: SecurityPayload, t: ThemeToken) -> ChartConfig:
    types = p.net_layer.types
    return _categorical("doughnut", [a.type for a in types], [a.count for a in types],
                        (VIOLET, SKY, AMBER, RED), t, legend=True, hole=0.6)


# =============================================================================
# Connectivity
# =============================================================================

def _connectivity_speed(p: ConnectivityPayload, t: ThemeToken) -> ChartConfig:
    tl = p.timeline
    return ChartConfig(
        kind="line",
        labels=tuple(tl.labels),
        datasets=(
            Dataset("Download", tl.download, ACCENT, fill=True, width=2.5),
            Dataset("Upload", tl.upload, VIOLET, fill=True),
        ),
        tokens=t,
        legend=True,
        value_suffix=" Mbps",
        markers=True,
    )


def _connectivity_iqi(p: ConnectivityPayload, t: ThemeToken) -> ChartConfig:
    return _line(p.timeline.labels, "IQI", p.timeline.iqi, AMBER, t, value_range=(50, 100), markers=True)


def _connectivity_latency(p: ConnectivityPayload, t: ThemeToken) -> ChartConfig:
    colors = [LATENCY_COLORS[latency_band(v)] for v in p.timeline.latency]
    return _categorical("bar", p.timeline.labels, p.timeline.latency, colors, t, value_suffix=" ms")


# =============================================================================
# Anomaly
# =============================================================================

ANOMALY_METRIC_CHARTS = (
    ("traffic_rate", "Requests/sec", "#3b82f6"),
    ("shannon_entropy", "Entropy", "#22c55e"),
    ("hurst_exponent", "Hurst", "#ec4899"),
    ("burst_intensity", "Burst", "#06b6d4"),
    ("periodicity", "Periodicity", "#f59e0b"),
    ("frequency_peak", "Frequency Peak", "#a855f7"),
    ("sp_anomaly_score", "Anomaly Score", "#ef4444"),
    ("ml_attack_probability", "Attack Probability", "#6366f1"),
)


def _anomaly_metric(name: str, label: str, color: str):
    def build(p: AnomalyPayload, t: ThemeToken) -> ChartConfig:
        series = getattr(p.realtime_metrics, name)
        return _line(series.labels, label, series.data, color, t)
    return build


def _anomaly_features(p: AnomalyPayload, t: ThemeToken) -> ChartConfig:
    fi = p.analysis.feature_importance
    return _categorical("hbar", [f.feature for f in fi], [f.importance for f in fi], ("#14b8a6",) * len(fi), t)


def _anomaly_detection(p: AnomalyPayload, t: ThemeToken) -> ChartConfig:
    flags = detection_flags(p)
    return ChartConfig(
        kind="line",
        labels=tuple(p.realtime_metrics.traffic_rate.labels),
        datasets=(
            Dataset("Ground Truth", flags["ground_truth"], "#84cc16", dash="dash"),
            Dataset("SP Detection", flags["sp_detection"], "#f97316"),
            Dataset("ML Detection", flags["ml_detection"], "#6366f1"),
        ),
        tokens=t,
        legend=True,
        value_range=(-0.1, 1.1),
    )


# =============================================================================
# Catalog
# =============================================================================

def _catalog() -> Dict[str, ChartSpec]:
    entries: List[ChartSpec] = [
        ChartSpec("overview.rps", SectionId.OVERVIEW, _overview_rps),
        ChartSpec("overview.methods", SectionId.OVERVIEW, _overview_methods),
        ChartSpec("traffic.volume", SectionId.TRAFFIC, _traffic_volume),
        ChartSpec("traffic.devices", SectionId.TRAFFIC, _traffic_devices),
        ChartSpec("traffic.browsers", SectionId.TRAFFIC, _traffic_browsers),
        ChartSpec("traffic.protocols", SectionId.TRAFFIC, _traffic_protocols),
        ChartSpec("traffic.mobile_os", SectionId.TRAFFIC, _traffic_mobile_os),
        ChartSpec("security.app_line", SectionId.SECURITY, _security_app_line),
        ChartSpec("security.app_types", SectionId.SECURITY, _security_app_types),
        ChartSpec("security.net_line", SectionId.SECURITY, _security_net_line),
        ChartSpec("security.net_types", SectionId.SECURITY, _security_net_types),
        ChartSpec("connectivity.speed", SectionId.CONNECTIVITY, _connectivity_speed),
        ChartSpec("connectivity.iqi", SectionId.CONNECTIVITY, _connectivity_iqi),
        ChartSpec("connectivity.latency", SectionId.CONNECTIVITY, _connectivity_latency),
    ]
    for name, label, color in ANOMALY_METRIC_CHARTS:
        entries.append(ChartSpec(f"anomaly.{name}", SectionId.ANOMALY, _anomaly_metric(name, label, color)))
    entries.append(ChartSpec("anomaly.feature_importance", SectionId.ANOMALY, _anomaly_features))
    entries.append(ChartSpec("anomaly.detection_comparison", SectionId.ANOMALY, _anomaly_detection))
    return {e.id: e for e in entries}


CHART_CATALOG: Dict[str, ChartSpec] = _catalog()


def spec_for(chart_id: str) -> ChartSpec:
    return CHART_CATALOG[chart_id]


def charts_for(section: SectionId) -> List[ChartSpec]:
    """Charts belonging to ``section``, in display order. Bots and tools have none."""
    return [c for c in CHART_CATALOG.values() if c.section == section]
