"""
SAST Section Data Access Package.
"""
from .models import (
    SectionPayload, PAYLOAD_MODELS, parse_payload,
    OverviewPayload, TrafficPayload, SecurityPayload, ConnectivityPayload,
    BotsPayload, ToolsPayload, AnomalyPayload,
)
from .loader import SectionLoader, SectionResult, LIVE, SYNTHETIC

__all__ = [
    "SectionPayload",
    "PAYLOAD_MODELS",
    "parse_payload",
    "OverviewPayload",
    "TrafficPayload",
    "SecurityPayload",
    "ConnectivityPayload",
    "BotsPayload",
    "ToolsPayload",
    "AnomalyPayload",
    "SectionLoader",
    "SectionResult",
    "LIVE",
    "SYNTHETIC",
]
