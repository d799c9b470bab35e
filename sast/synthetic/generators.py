"""
Synthetic payload generators, one per dashboard section.

Each generator returns a JSON-shaped dict with exactly the field names the
remote analytics endpoint uses, so the data access layer validates both
sources through the same models.
"""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any, Callable, Dict, Optional

import numpy as np

from ..sections import SectionId
from .spec import GeneratorSpec, SpikeWindow, baseline_series, generate_series

# =============================================================================
# Overview
# =============================================================================

OVERVIEW_SAMPLES = 288          # 5-minute resolution over 24h
OVERVIEW_INTERVAL = 5

HTTP_METHOD_SHARES = {
    "GET": 0.72,
    "POST": 0.18,
    "PUT": 0.05,
    "DELETE": 0.03,
    "PATCH": 0.02,
}


def diurnal_rps(index: int) -> float:
    """Requests-per-second baseline for the ``index``-th 5-minute slot."""
    hour = index // 12
    minute = (index % 12) * 5
    if 8 <= hour <= 11:
        return 650 + (hour - 8) * 80
    if 12 <= hour <= 13:
        return 480
    if 14 <= hour <= 17:
        return 700 + (hour - 14) * 60
    if 18 <= hour <= 21:
        return 380 - (hour - 18) * 55
    return 70 + (minute % 30)


OVERVIEW_SPEC = GeneratorSpec(
    samples=OVERVIEW_SAMPLES,
    baseline=diurnal_rps,
    noise=(-25, 50),
    integer=True,
)


def _slot_labels(count: int) -> list:
    return [f"{i // 12:02d}:{(i % 12) * 5:02d}" for i in range(count)]


def generate_overview(rng: Optional[np.random.Generator] = None) -> Dict[str, Any]:
    rps = generate_series(OVERVIEW_SPEC, rng).tolist()
    total = sum(r * OVERVIEW_INTERVAL for r in rps)
    return {
        "metrics": {
            "total_requests": total,
            "peak_rps": max(rps),
            "avg_rps": round(sum(rps) / len(rps), 1),
            "active_bots": 14,
            "duration_hours": 24,
            "success_rate": 97.4,
            "failures": int(total * 0.026),
        },
        # Independent floor per method; the sum may fall short of the total by < 5
        "http_methods": {m: int(total * share) for m, share in HTTP_METHOD_SHARES.items()},
        "rps_timeline": {"labels": _slot_labels(OVERVIEW_SAMPLES), "rps": rps},
    }


# =============================================================================
# Traffic
# =============================================================================

TRAFFIC_BREAKDOWNS = {
    "devices": {"labels": ["Mobile", "Desktop", "Tablet"], "data": [42, 51, 7]},
    "browsers": {
        "labels": ["Chrome", "Safari", "Firefox", "Edge", "Opera", "Other"],
        "data": [52.1, 21.3, 12.0, 8.5, 3.2, 2.9],
    },
    "protocols": {"labels": ["HTTP", "HTTPS", "HTTP/2", "HTTP/3"], "data": [4.4, 56.2, 26.2, 13.1]},
    "mobile_os": {"labels": ["iOS", "Android", "Win Mobile", "Other"], "data": [38.1, 54.3, 4.2, 3.4]},
}

VOLUME_SPEC = GeneratorSpec(samples=7, baseline=lambda i: 180000, noise=(0, 140000), integer=True)


def generate_traffic(rng: Optional[np.random.Generator] = None, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    days = [(today - timedelta(days=d)).strftime("%b %d") for d in range(6, -1, -1)]
    payload = {"volume_7d": {"labels": days, "data": generate_series(VOLUME_SPEC, rng).tolist()}}
    for key, breakdown in TRAFFIC_BREAKDOWNS.items():
        payload[key] = {"labels": list(breakdown["labels"]), "data": list(breakdown["data"])}
    return payload


# =============================================================================
# Security
# =============================================================================

SPIKE_HOURS = (2, 9, 15)

APP_LAYER_SPEC = GeneratorSpec(
    samples=24,
    baseline=lambda hour: 40,
    noise=(-10, 25),
    spikes=(SpikeWindow(2, 2, 320), SpikeWindow(9, 9, 210), SpikeWindow(15, 15, 280)),
    integer=True,
)

NET_LAYER_SPEC = GeneratorSpec(
    samples=24,
    baseline=lambda hour: 25,
    noise=(-8, 20),
    spikes=(SpikeWindow(2, 2, 180), SpikeWindow(9, 9, 90), SpikeWindow(15, 15, 150)),
    integer=True,
)

APP_ATTACK_SHARES = (
    ("SQL Injection", 0.32),
    ("XSS", 0.24),
    ("CSRF", 0.18),
    ("Path Traversal", 0.14),
    ("Other", 0.12),
)

NET_ATTACK_SHARES = (
    ("DDoS (Volumetric)", 0.41),
    ("SYN Flood", 0.28),
    ("UDP Flood", 0.18),
    ("IP Spoofing", 0.13),
)


def _layer(spec: GeneratorSpec, shares, change_pct: float, labels, rng) -> Dict[str, Any]:
    data = generate_series(spec, rng).tolist()
    total = sum(data)
    return {
        "change_pct": change_pct,
        "total_24h": total,
        "timeline": {"labels": list(labels), "data": data},
        "types": [{"type": name, "count": int(total * share)} for name, share in shares],
    }


def generate_security(rng: Optional[np.random.Generator] = None) -> Dict[str, Any]:
    rng = rng if rng is not None else np.random.default_rng()
    labels = [f"{h:02d}:00" for h in range(24)]
    return {
        "app_layer": _layer(APP_LAYER_SPEC, APP_ATTACK_SHARES, -12.4, labels, rng),
        "net_layer": _layer(NET_LAYER_SPEC, NET_ATTACK_SHARES, 8.7, labels, rng),
    }


# =============================================================================
# Connectivity
# =============================================================================

def _bandwidth_step(index: int) -> float:
    if index < 4:
        return 130
    if index < 8:
        return 150
    return 120


BANDWIDTH_SPEC = GeneratorSpec(samples=12, baseline=_bandwidth_step, noise=(20, 80), integer=True)
LATENCY_SPEC = GeneratorSpec(samples=12, baseline=lambda i: 12, noise=(0, 20), integer=True)


def generate_connectivity(rng: Optional[np.random.Generator] = None) -> Dict[str, Any]:
    rng = rng if rng is not None else np.random.default_rng()
    bandwidth = generate_series(BANDWIDTH_SPEC, rng)
    latency = generate_series(LATENCY_SPEC, rng).tolist()
    upload_jitter = rng.integers(-5, 6, size=12)

    labels = [f"{6 + i:02d}:00" for i in range(12)]
    download = [round(float(d) + math.sin(i) * 15, 1) for i, d in enumerate(bandwidth)]
    upload = [round(float(d) * 0.34 + int(j), 1) for d, j in zip(bandwidth, upload_jitter)]
    iqi = [round(60 + float(d) / 2.2, 1) for d in bandwidth]

    return {
        "current": {"iqi": iqi[-1], "download": download[-1], "upload": upload[-1], "latency": latency[-1]},
        "timeline": {"labels": labels, "download": download, "upload": upload, "latency": latency, "iqi": iqi},
    }


# =============================================================================
# Bots
# =============================================================================

KNOWN_BOTS = (
    ("Googlebot", 18200, False),
    ("GPT-4o / OpenAI", 9400, True),
    ("ChatGPT-User", 7600, True),
    ("Bingbot", 5300, False),
    ("Claude / Anthropic", 4500, True),
    ("Perplexity AI", 3900, True),
    ("Gemini / Google", 3100, True),
    ("Yandex", 2200, False),
    ("Baidu", 1800, False),
    ("DuckDuckBot", 1600, False),
)


def generate_bots(rng: Optional[np.random.Generator] = None) -> Dict[str, Any]:
    return {
        "bots": [{"name": n, "requests": r, "ai": ai} for n, r, ai in KNOWN_BOTS],
        "robots_txt_agents": [n for n, _, ai in KNOWN_BOTS if ai],
    }


# =============================================================================
# Tools
# =============================================================================

EXPLORER_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH"]
EXPLORER_REGIONS = ["US-East", "US-West", "EU-West", "Asia-Pacific", "South America"]
EXPLORER_PROTOCOLS = ["HTTPS", "HTTP/2", "HTTP/3", "HTTP"]
EXPLORER_DEVICES = ["Desktop", "Mobile", "Tablet"]

REPORTS = (
    {"id": 1, "title": "January 2026 Monthly Report", "type": "monthly", "date": "2026-01-31", "size": "2.4 MB"},
    {"id": 2, "title": "December 2025 Monthly Report", "type": "monthly", "date": "2025-12-31", "size": "2.1 MB"},
    {"id": 3, "title": "Q4 2025 Quarterly Report", "type": "quarterly", "date": "2025-12-31", "size": "5.8 MB"},
    {"id": 4, "title": "2025 Annual Report", "type": "yearly", "date": "2025-12-31", "size": "12.3 MB"},
    {"id": 5, "title": "November 2025 Monthly Report", "type": "monthly", "date": "2025-11-30", "size": "1.9 MB"},
)


def _explorer_row(index: int, rng: np.random.Generator) -> Dict[str, Any]:
    h, m, s = int(rng.integers(0, 24)), int(rng.integers(0, 60)), int(rng.integers(0, 60))
    if rng.random() < 0.97:
        status = 200
    else:
        status = 404 if rng.random() < 0.5 else 500
    return {
        "id": index + 1,
        "time": f"2026-02-01 {h:02d}:{m:02d}:{s:02d}",
        "method": str(rng.choice(EXPLORER_METHODS)),
        "status": status,
        "protocol": str(rng.choice(EXPLORER_PROTOCOLS)),
        "device": str(rng.choice(EXPLORER_DEVICES)),
        "region": str(rng.choice(EXPLORER_REGIONS)),
        "latency": f"{int(rng.integers(8, 321))} ms",
    }


def generate_tools(rng: Optional[np.random.Generator] = None, rows: int = 50) -> Dict[str, Any]:
    rng = rng if rng is not None else np.random.default_rng()
    return {
        "explorer": [_explorer_row(i, rng) for i in range(rows)],
        "reports": [dict(r) for r in REPORTS],
    }


# =============================================================================
# Anomaly (Sentinel)
# =============================================================================

ANOMALY_SAMPLES = 500
ATTACK_START = 200
ATTACK_END = 400


def _attack_spec(quiet: float, quiet_jitter: float, attack: float, attack_jitter: float) -> GeneratorSpec:
    return GeneratorSpec(
        samples=ANOMALY_SAMPLES,
        baseline=lambda i: quiet,
        noise=(-quiet_jitter, quiet_jitter),
        spikes=(SpikeWindow(ATTACK_START, ATTACK_END, attack, noise=(-attack_jitter, attack_jitter)),),
    )


# signal -> (quiet level, quiet half-band, attack level, attack half-band)
ANOMALY_SIGNALS = {
    "traffic_rate": _attack_spec(50, 25, 800, 50),
    "shannon_entropy": _attack_spec(4.2, 0.35, 2.1, 0.25),
    "hurst_exponent": _attack_spec(0.42, 0.09, 0.72, 0.065),
    "burst_intensity": _attack_spec(0.15, 0.075, 0.85, 0.125),
    "periodicity": _attack_spec(0.22, 0.09, 0.78, 0.10),
    "frequency_peak": _attack_spec(0.28, 0.10, 0.92, 0.065),
    "sp_anomaly_score": _attack_spec(0.12, 0.065, 0.88, 0.10),
    "ml_attack_probability": _attack_spec(0.03, 0.035, 0.95, 0.05),
}

FEATURE_IMPORTANCE = (
    ("CurrentRate", 0.42),
    ("ShannonEntropy", 0.18),
    ("HurstExponent", 0.15),
    ("BurstIntensity", 0.12),
    ("Periodicity", 0.08),
    ("FrequencyPeak", 0.05),
)


def generate_anomaly(rng: Optional[np.random.Generator] = None) -> Dict[str, Any]:
    rng = rng if rng is not None else np.random.default_rng()
    labels = list(range(ANOMALY_SAMPLES))
    metrics = {
        name: {"labels": labels, "data": [round(float(v), 4) for v in generate_series(spec, rng)]}
        for name, spec in ANOMALY_SIGNALS.items()
    }
    return {
        "status": {
            "attack_detected": True,
            "attack_start": ATTACK_START,
            "attack_end": ATTACK_END,
            "current_phase": "mitigation",
            "system_health": "operational",
        },
        "realtime_metrics": metrics,
        "analysis": {
            "feature_importance": [{"feature": f, "importance": w} for f, w in FEATURE_IMPORTANCE],
            "sp_confusion_matrix": {"tn": 340, "fp": 10, "fn": 20, "tp": 130},
            "ml_confusion_matrix": {"tn": 350, "fp": 0, "fn": 0, "tp": 150},
            "detection_performance": {
                "sp_accuracy": 94.0,
                "sp_precision": 92.9,
                "sp_recall": 86.7,
                "ml_accuracy": 100.0,
                "ml_precision": 100.0,
                "ml_recall": 100.0,
                "detection_latency_ms": 45,
                "false_positive_rate": 0.0,
            },
        },
        "mitigation": [
            {"action": "Rate Limit", "status": "active", "threshold": "100 req/s"},
            {"action": "IP Block", "status": "active", "blocked_ips": 127},
            {"action": "CAPTCHA", "status": "standby", "trigger_threshold": "80%"},
        ],
        "thresholds": {
            "entropy_threshold": 3.0,
            "hurst_threshold": 0.5,
            "anomaly_threshold": 0.7,
            "ml_decision_boundary": 0.5,
        },
    }


# =============================================================================
# Registry
# =============================================================================

GENERATORS: Dict[SectionId, Callable[..., Dict[str, Any]]] = {
    SectionId.OVERVIEW: generate_overview,
    SectionId.TRAFFIC: generate_traffic,
    SectionId.SECURITY: generate_security,
    SectionId.CONNECTIVITY: generate_connectivity,
    SectionId.BOTS: generate_bots,
    SectionId.TOOLS: generate_tools,
    SectionId.ANOMALY: generate_anomaly,
}


def generate(section, rng: Optional[np.random.Generator] = None) -> Dict[str, Any]:
    """Synthetic payload for ``section``."""
    return GENERATORS[SectionId.parse(section)](rng)


def security_baselines() -> Dict[str, np.ndarray]:
    """Unperturbed hourly baselines for both security layers."""
    return {
        "app_layer": baseline_series(APP_LAYER_SPEC),
        "net_layer": baseline_series(NET_LAYER_SPEC),
    }
