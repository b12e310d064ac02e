import pytest

from starlight.telemetry import (
    INITIAL_INDICATORS,
    INITIALIZING_NARRATIVE,
    STABLE_NARRATIVE,
    PhysicsConfig,
    PhysicsMonitor,
    ServiceSample,
    TelemetrySnapshot,
    analyze,
)


def snap(*services, **extra):
    out = {
        "clusters": [{"name": "gcp-cluster-1", "location": "GCP", "status": "ONLINE"}],
        "services": [
            {"name": n, "status": "HEALTHY", "latency": lat, "errorRate": err}
            for n, lat, err in services
        ],
        "databases": [],
        "businessMetrics": {"transactionsPerSecond": 125},
    }
    out.update(extra)
    return out


def test_latency_jump_with_falling_errors():
    ind = analyze(snap(("X", 180, 0.5)), snap(("X", 100, 1.0)))
    assert ind.total_kinetic_energy == pytest.approx(3200.0)
    assert ind.instability_force == 0.0
    assert ind.risk_score == pytest.approx(0.64)
    assert ind.flagged == ("X",)
    assert ind.narrative == (
        "High-risk dynamics detected: X shows high velocity (latency change: 80ms) "
        "and/or force (error rate increase: -0.50%)."
    )


def test_narrative_rounds_halves_away_from_zero():
    ind = analyze(snap(("X", 126.5, 0.625)), snap(("X", 100.0, 0.0)))
    assert "latency change: 27ms" in ind.narrative
    assert "error rate increase: 0.63%" in ind.narrative
    ind = analyze(snap(("X", 100.0, 0.0)), snap(("X", 126.5, 0.625)))
    assert "latency change: -27ms" in ind.narrative
    assert "error rate increase: -0.63%" in ind.narrative


def test_narrative_zero_velocity_has_no_sign():
    ind = analyze(snap(("X", 0.0, 1.0)), snap(("X", 0.0, 0.0)))
    assert "latency change: 0ms" in ind.narrative
    assert "error rate increase: 1.00%" in ind.narrative


def test_missing_snapshot_is_neutral():
    assert analyze(snap(("X", 1, 0)), None) is INITIAL_INDICATORS
    assert analyze(None, snap(("X", 1, 0))) is INITIAL_INDICATORS
    assert INITIAL_INDICATORS.risk_score == 0.0
    assert INITIAL_INDICATORS.narrative == INITIALIZING_NARRATIVE


def test_stable_when_nothing_flagged():
    ind = analyze(snap(("a", 60, 0.2), ("b", 110, 0.25)), snap(("a", 55, 0.1), ("b", 110, 0.2)))
    assert ind.narrative == STABLE_NARRATIVE
    assert ind.total_kinetic_energy == pytest.approx(12.5)
    assert ind.instability_force == pytest.approx(0.15)
    assert ind.risk_score == pytest.approx(12.5 / 5000 + 0.15 / 5)


def test_rising_errors_add_force_and_flag():
    ind = analyze(snap(("ledger", 150, 2.0)), snap(("ledger", 150, 0.5)))
    assert ind.total_kinetic_energy == 0.0
    assert ind.instability_force == pytest.approx(1.5)
    assert ind.risk_score == pytest.approx(0.3)
    assert "ledger shows high velocity (latency change: 0ms)" in ind.narrative


def test_risk_is_clamped():
    ind = analyze(snap(("x", 10_000, 90.0)), snap(("x", 0, 0.0)))
    assert ind.risk_score == 1.0
    ind = analyze(snap(("x", 0, 0.0)), snap(("x", 10_000, 90.0)))
    assert ind.risk_score == 1.0  # energy is direction-agnostic
    assert ind.instability_force == 0.0


def test_services_missing_from_previous_are_skipped():
    ind = analyze(snap(("new", 900, 50.0), ("old", 100, 0.1)), snap(("old", 100, 0.1)))
    assert ind.total_kinetic_energy == 0.0
    assert ind.instability_force == 0.0
    assert ind.narrative == STABLE_NARRATIVE


def test_multiple_flagged_services_joined():
    ind = analyze(snap(("a", 200, 0.0), ("b", 0, 1.0)), snap(("a", 100, 0.0), ("b", 0, 0.0)))
    assert ind.flagged == ("a", "b")
    assert ind.narrative.count(" shows high velocity") == 2
    assert "a shows" in ind.narrative and ". b shows" in ind.narrative
    assert ind.narrative.endswith("%).")


def test_dataclass_and_mapping_inputs_agree():
    cur, prev = snap(("s", 120, 0.4)), snap(("s", 90, 0.1))
    a = analyze(cur, prev)
    b = analyze(TelemetrySnapshot.from_dict(cur), TelemetrySnapshot.from_dict(prev))
    assert a == b
    t = TelemetrySnapshot.from_dict(cur)
    assert t.service("s") == ServiceSample("s", 120.0, 0.4, status="HEALTHY")
    assert t.business_metrics == {"transactionsPerSecond": 125}


def test_custom_calibration():
    cfg = PhysicsConfig(energy_scale=100.0, force_scale=1.0, velocity_flag=1000.0, error_flag=10.0)
    ind = analyze(snap(("x", 10, 0.2)), snap(("x", 0, 0.0)), cfg)
    assert ind.risk_score == pytest.approx(50 / 100 + 0.2)
    assert ind.narrative == STABLE_NARRATIVE


def test_to_dict_wire_keys():
    d = analyze(snap(("X", 180, 0.5)), snap(("X", 100, 1.0))).to_dict()
    assert set(d) == {"totalKineticEnergy", "instabilityForce", "riskScore", "narrative"}


def test_malformed_service_rejected():
    with pytest.raises(ValueError):
        analyze({"services": [{"latency": 1}]}, snap(("x", 0, 0)))


def test_monitor_tracks_previous_snapshot():
    m = PhysicsMonitor()
    assert m.observe(snap(("X", 100, 1.0))) is INITIAL_INDICATORS
    ind = m.observe(snap(("X", 180, 0.5)))
    assert ind.risk_score == pytest.approx(0.64)
    assert m.last is ind
    ind = m.observe(snap(("X", 180, 0.5)))
    assert ind.risk_score == 0.0
    m.reset()
    assert m.last is INITIAL_INDICATORS
