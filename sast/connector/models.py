"""
Section payload models.

One model per section variant, field names matching the remote analytics
endpoint. Models are frozen and use tuples so a loaded payload cannot be
partially updated; a reload replaces it wholesale.
"""
from __future__ import annotations

from typing import Dict, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import TransportFailure
from ..sections import SectionId


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class LabeledSeries(_Payload):
    labels: Tuple[str, ...]
    data: Tuple[Union[int, float], ...]


# =============================================================================
# Overview
# =============================================================================

class OverviewMetrics(_Payload):
    total_requests: int
    peak_rps: int
    avg_rps: float
    active_bots: int = 0
    duration_hours: int = 24
    success_rate: float = 0.0
    failures: int = 0


class RpsTimeline(_Payload):
    labels: Tuple[str, ...]
    rps: Tuple[int, ...]


class OverviewPayload(_Payload):
    metrics: OverviewMetrics
    http_methods: Dict[str, int]
    rps_timeline: RpsTimeline


# =============================================================================
# Traffic
# =============================================================================

class TrafficPayload(_Payload):
    volume_7d: LabeledSeries
    devices: LabeledSeries
    browsers: LabeledSeries
    protocols: LabeledSeries
    mobile_os: LabeledSeries


# =============================================================================
# Security
# =============================================================================

class AttackType(_Payload):
    type: str
    count: int


class AttackLayer(_Payload):
    change_pct: float
    total_24h: int
    timeline: LabeledSeries
    types: Tuple[AttackType, ...]


class SecurityPayload(_Payload):
    app_layer: AttackLayer
    net_layer: AttackLayer


# =============================================================================
# Connectivity
# =============================================================================

class ConnectivityCurrent(_Payload):
    iqi: float
    download: float
    upload: float
    latency: float


class ConnectivityTimeline(_Payload):
    labels: Tuple[str, ...]
    download: Tuple[float, ...]
    upload: Tuple[float, ...]
    latency: Tuple[float, ...]
    iqi: Tuple[float, ...]


class ConnectivityPayload(_Payload):
    current: ConnectivityCurrent
    timeline: ConnectivityTimeline


# =============================================================================
# Bots & Tools
# =============================================================================

class BotRecord(_Payload):
    name: str
    requests: int
    ai: bool = False


class BotsPayload(_Payload):
    bots: Tuple[BotRecord, ...]
    robots_txt_agents: Tuple[str, ...] = ()


class ExplorerRow(_Payload):
    id: int
    time: str
    method: str
    status: int
    protocol: str
    device: str
    region: str
    latency: str


class Report(_Payload):
    id: int
    title: str
    type: str
    date: str
    size: str


class ToolsPayload(_Payload):
    explorer: Tuple[ExplorerRow, ...]
    reports: Tuple[Report, ...] = ()


# =============================================================================
# Anomaly
# =============================================================================

class AnomalyStatus(_Payload):
    attack_detected: bool
    attack_start: int
    attack_end: int
    current_phase: str
    system_health: str = "operational"


class MetricSeries(_Payload):
    labels: Tuple[int, ...]
    data: Tuple[float, ...]


class RealtimeMetrics(_Payload):
    traffic_rate: MetricSeries
    shannon_entropy: MetricSeries
    hurst_exponent: MetricSeries
    burst_intensity: MetricSeries
    periodicity: MetricSeries
    frequency_peak: MetricSeries
    sp_anomaly_score: MetricSeries
    ml_attack_probability: MetricSeries


class FeatureWeight(_Payload):
    feature: str
    importance: float


class ConfusionMatrix(_Payload):
    tn: int
    fp: int
    fn: int
    tp: int


class DetectionPerformance(_Payload):
    sp_accuracy: float
    sp_precision: float = 0.0
    sp_recall: float = 0.0
    ml_accuracy: float
    ml_precision: float = 0.0
    ml_recall: float = 0.0
    detection_latency_ms: float
    false_positive_rate: float


class AnomalyAnalysis(_Payload):
    feature_importance: Tuple[FeatureWeight, ...]
    sp_confusion_matrix: ConfusionMatrix
    ml_confusion_matrix: ConfusionMatrix
    detection_performance: DetectionPerformance


class MitigationAction(_Payload):
    action: str
    status: str
    threshold: Optional[str] = None
    blocked_ips: Optional[int] = None
    trigger_threshold: Optional[str] = None

    @property
    def summary(self) -> str:
        if self.threshold:
            return self.threshold
        if self.blocked_ips:
            return f"{self.blocked_ips} IPs blocked"
        return "Standby"


class DetectionThresholds(_Payload):
    entropy_threshold: float
    hurst_threshold: float
    anomaly_threshold: float
    ml_decision_boundary: float


class AnomalyPayload(_Payload):
    status: AnomalyStatus
    realtime_metrics: RealtimeMetrics
    analysis: AnomalyAnalysis
    mitigation: Tuple[MitigationAction, ...] = Field(default=())
    thresholds: DetectionThresholds


SectionPayload = Union[
    OverviewPayload,
    TrafficPayload,
    SecurityPayload,
    ConnectivityPayload,
    BotsPayload,
    ToolsPayload,
    AnomalyPayload,
]

PAYLOAD_MODELS: Dict[SectionId, Type[_Payload]] = {
    SectionId.OVERVIEW: OverviewPayload,
    SectionId.TRAFFIC: TrafficPayload,
    SectionId.SECURITY: SecurityPayload,
    SectionId.CONNECTIVITY: ConnectivityPayload,
    SectionId.BOTS: BotsPayload,
    SectionId.TOOLS: ToolsPayload,
    SectionId.ANOMALY: AnomalyPayload,
}


def parse_payload(section: SectionId, body) -> SectionPayload:
    """Validate a raw body as the payload variant for ``section``."""
    model = PAYLOAD_MODELS[section]
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise TransportFailure(
            f"malformed {section.value} payload ({exc.error_count()} errors)"
        ) from exc
