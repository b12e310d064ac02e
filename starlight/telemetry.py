# Licensed under the Apache License, Version 2.0
# -*- coding: utf-8 -*-
"""
starlight.telemetry
===================

Telemetry physics: treats consecutive service telemetry snapshots as a toy
mechanical system.

- latency change   → velocity v,   kinetic energy ½·v² (unit mass)
- error-rate rise  → instability force (falling error rates contribute 0)
- risk             → clamp(KE / energy_scale + F / force_scale, 0, 1)

`analyze` is a pure function of the two snapshots. `PhysicsMonitor` is a thin
stateful wrapper that remembers the previous snapshot for streaming use.

Snapshots may be `TelemetrySnapshot` objects or raw mappings in the wire shape::

    {"clusters": [...],
     "services": [{"name": "frontend", "status": "HEALTHY", "latency": 55, "errorRate": 0.1}, ...],
     "databases": [...],
     "businessMetrics": {...}}

Only ``services[].name / latency / errorRate`` are read; everything else is
carried through untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

__all__ = [
    "ServiceSample",
    "TelemetrySnapshot",
    "PhysicsConfig",
    "PhysicsIndicators",
    "INITIAL_INDICATORS",
    "STABLE_NARRATIVE",
    "INITIALIZING_NARRATIVE",
    "analyze",
    "PhysicsMonitor",
]

INITIALIZING_NARRATIVE = "Initializing physics simulation core..."
STABLE_NARRATIVE = "System dynamics are stable; no significant energy or force variations detected."


# ---------------------------
# Snapshot types
# ---------------------------

@dataclass(frozen=True)
class ServiceSample:
    name: str
    latency: float = 0.0       # ms
    error_rate: float = 0.0    # percent
    status: Optional[str] = None
    cluster: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ServiceSample":
        if not isinstance(raw, Mapping) or "name" not in raw:
            raise ValueError("Service record must be a mapping with a 'name'.")
        return cls(
            name=str(raw["name"]),
            latency=float(raw.get("latency", 0.0) or 0.0),
            error_rate=float(raw.get("errorRate", raw.get("error_rate", 0.0)) or 0.0),
            status=raw.get("status"),
            cluster=raw.get("cluster"),
        )


@dataclass(frozen=True)
class TelemetrySnapshot:
    services: Tuple[ServiceSample, ...] = ()
    clusters: Tuple[Any, ...] = ()
    databases: Tuple[Any, ...] = ()
    business_metrics: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "TelemetrySnapshot":
        if not isinstance(raw, Mapping):
            raise ValueError("Telemetry snapshot must be a mapping.")
        return cls(
            services=tuple(ServiceSample.from_dict(s) for s in raw.get("services") or ()),
            clusters=tuple(raw.get("clusters") or ()),
            databases=tuple(raw.get("databases") or ()),
            business_metrics=dict(raw.get("businessMetrics") or {}),
        )

    def service(self, name: str) -> Optional[ServiceSample]:
        """First service with `name`, or None."""
        for s in self.services:
            if s.name == name:
                return s
        return None


SnapshotLike = Union[TelemetrySnapshot, Mapping[str, Any]]


def _as_snapshot(s: Optional[SnapshotLike]) -> Optional[TelemetrySnapshot]:
    if s is None or isinstance(s, TelemetrySnapshot):
        return s
    return TelemetrySnapshot.from_dict(s)


# ---------------------------
# Config & results
# ---------------------------

@dataclass(frozen=True)
class PhysicsConfig:
    """Calibration constants for the risk score and the per-service flags."""
    energy_scale: float = 5000.0
    force_scale: float = 5.0
    velocity_flag: float = 25.0
    error_flag: float = 0.5


@dataclass(frozen=True)
class PhysicsIndicators:
    total_kinetic_energy: float
    instability_force: float
    risk_score: float
    narrative: str
    flagged: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalKineticEnergy": float(self.total_kinetic_energy),
            "instabilityForce": float(self.instability_force),
            "riskScore": float(self.risk_score),
            "narrative": self.narrative,
        }


INITIAL_INDICATORS = PhysicsIndicators(0.0, 0.0, 0.0, INITIALIZING_NARRATIVE)


# ---------------------------
# Transform
# ---------------------------

def _fixed(x: float, digits: int) -> str:
    """
    Fixed-point text with halves rounded away from zero, applied to the exact
    binary value (so 0.625 → "0.63" but 1.005 → "1.00").
    """
    if x == 0:
        x = 0.0  # no "-0"
    exp = Decimal(1).scaleb(-digits)
    return str(Decimal(float(x)).quantize(exp, rounding=ROUND_HALF_UP))


def _fragment(name: str, velocity: float, error_delta: float) -> str:
    return (
        f"{name} shows high velocity (latency change: {_fixed(velocity, 0)}ms) "
        f"and/or force (error rate increase: {_fixed(error_delta, 2)}%)"
    )


def analyze(
    current: Optional[SnapshotLike],
    previous: Optional[SnapshotLike],
    config: Optional[PhysicsConfig] = None,
) -> PhysicsIndicators:
    """
    Physics indicators for the step `previous` → `current`.

    Services missing from `previous` are skipped. If either snapshot is None the
    neutral `INITIAL_INDICATORS` are returned.
    """
    cur = _as_snapshot(current)
    prev = _as_snapshot(previous)
    if cur is None or prev is None:
        return INITIAL_INDICATORS
    cfg = config or PhysicsConfig()

    # First occurrence wins on duplicate names
    prev_by_name: Dict[str, ServiceSample] = {}
    for s in prev.services:
        prev_by_name.setdefault(s.name, s)

    total_kinetic_energy = 0.0
    instability_force = 0.0
    details: List[str] = []
    flagged: List[str] = []

    for svc in cur.services:
        before = prev_by_name.get(svc.name)
        if before is None:
            continue

        velocity = svc.latency - before.latency
        total_kinetic_energy += 0.5 * (velocity ** 2)

        error_delta = svc.error_rate - before.error_rate
        if error_delta > 0:
            instability_force += error_delta

        if abs(velocity) > cfg.velocity_flag or error_delta > cfg.error_flag:
            details.append(_fragment(svc.name, velocity, error_delta))
            flagged.append(svc.name)

    energy_component = total_kinetic_energy / cfg.energy_scale
    force_component = instability_force / cfg.force_scale
    risk_score = min(1.0, max(0.0, energy_component + force_component))

    narrative = f"High-risk dynamics detected: {'. '.join(details)}." if details else STABLE_NARRATIVE

    return PhysicsIndicators(
        total_kinetic_energy=total_kinetic_energy,
        instability_force=instability_force,
        risk_score=risk_score,
        narrative=narrative,
        flagged=tuple(flagged),
    )


class PhysicsMonitor:
    """
    Streaming wrapper: feed snapshots in arrival order; each `observe` compares
    against the one before it.
    """

    def __init__(self, config: Optional[PhysicsConfig] = None):
        self.config = config or PhysicsConfig()
        self._previous: Optional[TelemetrySnapshot] = None
        self._last: PhysicsIndicators = INITIAL_INDICATORS

    def observe(self, snapshot: SnapshotLike) -> PhysicsIndicators:
        current = _as_snapshot(snapshot)
        self._last = analyze(current, self._previous, self.config)
        self._previous = current
        return self._last

    @property
    def last(self) -> PhysicsIndicators:
        return self._last

    def reset(self) -> None:
        self._previous = None
        self._last = INITIAL_INDICATORS
