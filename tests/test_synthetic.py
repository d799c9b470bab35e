import numpy as np
import pytest

from sast.connector import parse_payload
from sast.errors import UnknownSectionError
from sast.sections import ALL_SECTIONS, SectionId
from sast.synthetic import (
    GeneratorSpec,
    SpikeWindow,
    baseline_series,
    generate,
    generate_anomaly,
    generate_connectivity,
    generate_overview,
    generate_security,
    generate_tools,
    generate_series,
    generate_traffic,
    security_baselines,
)
from sast.synthetic.generators import (
    ANOMALY_SIGNALS,
    APP_LAYER_SPEC,
    ATTACK_END,
    ATTACK_START,
    SPIKE_HOURS,
)


class TestGenerateSeries:
    def test_spike_window_overrides_baseline(self):
        spec = GeneratorSpec(samples=10, baseline=lambda i: 5, spikes=(SpikeWindow(3, 4, 50),))
        base = baseline_series(spec)
        assert list(base[3:5]) == [50, 50]
        assert base[0] == 5 and base[9] == 5

    def test_integer_noise_stays_in_closed_band(self, rng):
        spec = GeneratorSpec(samples=500, baseline=lambda i: 100, noise=(-10, 25), integer=True)
        values = generate_series(spec, rng)
        assert values.dtype.kind == "i"
        assert values.min() >= 90
        assert values.max() <= 125

    def test_floor_clamps_negative_values(self, rng):
        spec = GeneratorSpec(samples=200, baseline=lambda i: 0.01, noise=(-1.0, 0.0))
        assert generate_series(spec, rng).min() >= 0.0


class TestOverview:
    def test_shape_and_aggregates(self, rng):
        p = generate_overview(rng)
        rps = p["rps_timeline"]["rps"]
        assert len(rps) == 288
        assert len(p["rps_timeline"]["labels"]) == 288
        assert all(r >= 0 for r in rps)
        assert p["metrics"]["total_requests"] == sum(r * 5 for r in rps)
        assert p["metrics"]["peak_rps"] == max(rps)

    def test_method_shares_sum_within_rounding(self, rng):
        p = generate_overview(rng)
        total = p["metrics"]["total_requests"]
        methods = p["http_methods"]
        assert list(methods) == ["GET", "POST", "PUT", "DELETE", "PATCH"]
        assert abs(sum(methods.values()) - total) <= 5

    def test_diurnal_bands(self, rng):
        rps = generate_overview(rng)["rps_timeline"]["rps"]
        night = rps[0:12 * 6]
        afternoon = rps[12 * 14:12 * 18]
        assert max(night) < 200
        assert min(afternoon) >= 675


class TestTraffic:
    def test_volume_range_and_breakdowns(self, rng):
        p = generate_traffic(rng)
        assert len(p["volume_7d"]["data"]) == 7
        assert len(p["volume_7d"]["labels"]) == 7
        assert all(180000 <= v <= 320000 for v in p["volume_7d"]["data"])
        assert p["devices"] == {"labels": ["Mobile", "Desktop", "Tablet"], "data": [42, 51, 7]}
        assert pytest.approx(sum(p["browsers"]["data"]), abs=0.1) == 100


class TestSecurity:
    def test_spike_baselines_exceed_quiet_hours(self):
        base = security_baselines()["app_layer"]
        quiet = [base[h] for h in range(24) if h not in SPIKE_HOURS]
        for hour in SPIKE_HOURS:
            assert base[hour] > max(quiet)

    def test_layers_and_type_counts(self, rng):
        p = generate_security(rng)
        for layer in ("app_layer", "net_layer"):
            data = p[layer]["timeline"]["data"]
            assert len(data) == 24
            assert p[layer]["total_24h"] == sum(data)
            counts = sum(t["count"] for t in p[layer]["types"])
            assert 0 <= p[layer]["total_24h"] - counts <= len(p[layer]["types"])

    def test_spike_hours_dominate_samples(self, rng):
        data = generate_security(rng)["app_layer"]["timeline"]["data"]
        quiet_max = max(d for h, d in enumerate(data) if h not in SPIKE_HOURS)
        assert all(data[h] > quiet_max for h in SPIKE_HOURS)

    def test_app_spec_declares_spike_hours(self):
        assert tuple(w.start for w in APP_LAYER_SPEC.spikes) == SPIKE_HOURS


class TestConnectivity:
    def test_timeline_and_current(self, rng):
        p = generate_connectivity(rng)
        tl = p["timeline"]
        assert tl["labels"][0] == "06:00" and tl["labels"][-1] == "17:00"
        for key in ("download", "upload", "latency", "iqi"):
            assert len(tl[key]) == 12
        assert p["current"]["iqi"] == tl["iqi"][-1]
        assert all(12 <= v <= 32 for v in tl["latency"])


class TestAnomaly:
    def test_attack_window_shifts_signals(self, rng):
        p = generate_anomaly(rng)
        rt = p["realtime_metrics"]
        assert set(rt) == set(ANOMALY_SIGNALS)

        def window_means(name):
            data = np.array(rt[name]["data"])
            inside = data[ATTACK_START:ATTACK_END + 1].mean()
            outside = np.concatenate([data[:ATTACK_START], data[ATTACK_END + 1:]]).mean()
            return inside, outside

        inside, outside = window_means("shannon_entropy")
        assert inside < outside
        for name in ("traffic_rate", "hurst_exponent", "periodicity", "ml_attack_probability"):
            inside, outside = window_means(name)
            assert inside > outside

    def test_every_series_has_500_non_negative_samples(self, rng):
        for series in generate_anomaly(rng)["realtime_metrics"].values():
            assert len(series["data"]) == 500
            assert min(series["data"]) >= 0

    def test_static_artifacts(self, rng):
        p = generate_anomaly(rng)
        assert p["status"]["attack_start"] == 200
        assert p["status"]["attack_end"] == 400
        assert p["analysis"]["feature_importance"][0]["feature"] == "CurrentRate"
        assert len(p["mitigation"]) == 3


class TestTools:
    def test_explorer_rows(self, rng):
        rows = generate_tools(rng)["explorer"]
        assert len(rows) == 50
        assert [r["id"] for r in rows] == list(range(1, 51))
        assert {r["status"] for r in rows} <= {200, 404, 500}
        assert all(r["latency"].endswith(" ms") for r in rows)


class TestRegistry:
    def test_every_section_validates(self, rng):
        for section in ALL_SECTIONS:
            payload = parse_payload(section, generate(section, rng))
            assert payload is not None

    def test_string_identifiers_accepted(self, rng):
        assert "metrics" in generate("Overview", rng)

    def test_unknown_section(self):
        with pytest.raises(UnknownSectionError):
            generate("weather")

    def test_section_parse(self):
        assert SectionId.parse(" ANOMALY ") is SectionId.ANOMALY
