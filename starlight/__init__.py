# Licensed under the Apache License, Version 2.0
# -*- coding: utf-8 -*-

"""
StarLight
=========
Closed-loop field engine: VectorEncoder + FieldDynamics + CognitiveSynthesizer
+ feedback, plus telemetry physics indicators.

Quick start:
    from starlight import make_simple_system
    system = make_simple_system(seed=7)
    info = system.run_query("ledger latency spike")

Telemetry one-liner:
    from starlight import analyze
    indicators = analyze(current_snapshot, previous_snapshot)
"""

__version__ = "0.3.0"
__author__ = "StarLight contributors"
__license__ = "Apache 2.0"

# Core kernel
from .dynamics import FieldDynamics, FieldParams, Patterns, PARAM_BOUNDS
from .cognition import (
    CognitiveSynthesizer,
    Concept,
    CONCEPT_IDS,
    NO_ACTION,
    DAMPEN_VARIANCE,
    DRIVE_SYNTROPY,
)
from .orchestrator import StarLightSystem, INIT_CONCEPT

# Satellites
from .perception import VectorEncoder, StimulusConfig, encode, string_hash
from .feedback import FEEDBACK_REGISTRY, apply_feedback, register_feedback
from .telemetry import (
    PhysicsConfig,
    PhysicsIndicators,
    PhysicsMonitor,
    ServiceSample,
    TelemetrySnapshot,
    analyze,
)

# Namespaces for power users
from . import dynamics as dynamics
from . import cognition as cognition
from . import feedback as feedback
from . import telemetry as telemetry

# Convenience factory
def make_simple_system(
    dimensions: int = 50,
    dt: float = 0.1,
    dx: float = 1.0,
    seed: int | None = None,
) -> StarLightSystem:
    return StarLightSystem(dimensions=dimensions, dt=dt, dx=dx, rng_seed=seed)

__all__ = [
    # Core
    "StarLightSystem",
    "FieldDynamics",
    "FieldParams",
    "Patterns",
    "PARAM_BOUNDS",
    "CognitiveSynthesizer",
    "Concept",
    "CONCEPT_IDS",
    "NO_ACTION",
    "DAMPEN_VARIANCE",
    "DRIVE_SYNTROPY",
    "INIT_CONCEPT",
    # Encoding
    "VectorEncoder",
    "StimulusConfig",
    "encode",
    "string_hash",
    # Feedback
    "FEEDBACK_REGISTRY",
    "apply_feedback",
    "register_feedback",
    # Telemetry
    "PhysicsConfig",
    "PhysicsIndicators",
    "PhysicsMonitor",
    "ServiceSample",
    "TelemetrySnapshot",
    "analyze",
    # Convenience
    "make_simple_system",
    # Namespaces
    "dynamics",
    "cognition",
    "feedback",
    "telemetry",
    # Meta
    "__version__",
    "__author__",
    "__license__",
]
