# Licensed under the Apache License, Version 2.0
# -*- coding: utf-8 -*-
"""
starlight.orchestrator
======================

StarLightSystem — runs the closed loop between the field kernel and the
cognitive synthesizer.

What it gives you
-----------------
- **One tick = one cycle**: integrate → auxiliary fields → patterns →
  creativity/logic/deduction → concept → bounded parameter feedback → t += dt.
- **Copy-out reads**: every accessor returns copies, so callers can never
  mutate engine state through a returned value.
- **Explainability**: per-cycle history rows and a structured event log.

Quick start
-----------
>>> from starlight.orchestrator import StarLightSystem
>>> system = StarLightSystem(dimensions=50, rng_seed=7)
>>> info = system.run_query("why is accountservice slow?")  # 5 cycles
>>> info["selected_concept"].id in ("no_action", "dampen_variance", "drive_syntropy")
True
>>> system.explain_last()  # doctest: +ELLIPSIS
'...'

Design notes
------------
- Each cycle's concept is a fresh classification; only its effect persists,
  through the drift of α, β and K.
- Not thread-safe: one writer at a time. Readers get copies and therefore never
  see a half-updated field.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union
import logging
import numpy as np

from .cognition import CONCEPT_IDS, DAMPEN_VARIANCE, DRIVE_SYNTROPY, CognitiveSynthesizer, Concept
from .dynamics import FieldDynamics, FieldParams, Patterns
from .feedback import apply_feedback as _apply_feedback_rule
from .perception import StimulusConfig, VectorEncoder

__all__ = ["StarLightSystem", "INIT_CONCEPT", "DEFAULT_CYCLES_PER_QUERY", "DEFAULT_MAX_EVENTS"]

LOG = logging.getLogger("starlight.orchestrator")

Vector = np.ndarray

# Reported as the last concept before the first cycle
INIT_CONCEPT = Concept("init", 0.0)
DEFAULT_CYCLES_PER_QUERY = 5
DEFAULT_MAX_EVENTS = 1000


# ---------------------------
# Utility helpers
# ---------------------------

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def _sanitize(v: Any) -> Any:
    """Make values JSON-friendly plain Python types."""
    if isinstance(v, (np.integer,)):
        return int(v)
    if isinstance(v, (np.floating,)):
        return float(v)
    if isinstance(v, np.ndarray):
        return v.tolist()
    if isinstance(v, (list, tuple)):
        return [_sanitize(x) for x in v]
    if isinstance(v, dict):
        return {k: _sanitize(x) for k, x in v.items()}
    if isinstance(v, (str, bool, int, float)) or v is None:
        return v
    try:
        return float(v)
    except (TypeError, ValueError):
        return str(v)


class StarLightSystem:
    """
    Orchestrates one `FieldDynamics` and one `CognitiveSynthesizer`.

    Parameters
    ----------
    dimensions : int
        Field length shared by both stages. Default 50.
    dt, dx : float
        Integration steps. Defaults 0.1 and 1.0.
    params : FieldParams, optional
        Initial control parameters.
    rng_seed : int, optional
        Seed for the initial field.
    initial_field : array-like, optional
        Explicit initial field (e.g. zeros for reproducible tests).
    stimulus : StimulusConfig, optional
        Shape of the text stimulus used by `run_query`.
    log_history : bool
        Keep per-cycle history rows. Default True.
    max_history : int, optional
        Cap on retained history rows (oldest dropped first).
    max_events : int, optional
        Cap on retained event-log entries (oldest dropped first). Default 1000;
        None keeps everything.
    """

    def __init__(
        self,
        dimensions: int = 50,
        dt: float = 0.1,
        dx: float = 1.0,
        params: Optional[FieldParams] = None,
        rng_seed: Optional[int] = None,
        initial_field: Optional[Union[Sequence[float], Vector]] = None,
        stimulus: Optional[StimulusConfig] = None,
        log_history: bool = True,
        max_history: Optional[int] = None,
        max_events: Optional[int] = DEFAULT_MAX_EVENTS,
    ):
        self.core_dynamics = FieldDynamics(
            dimensions=dimensions, dt=dt, dx=dx, params=params,
            rng_seed=rng_seed, initial_field=initial_field,
        )
        self.cognitive_system = CognitiveSynthesizer(dimensions)
        self.encoder = VectorEncoder(dimensions, stimulus)
        self.time: float = 0.0
        self._cycle: int = 0

        self._last_patterns: Patterns = self.core_dynamics.get_patterns()
        self._last_concept: Concept = INIT_CONCEPT

        # Runtime/logging
        self.history: List[Dict[str, Any]] = []
        self.event_log: List[Dict[str, Any]] = []
        self._log = bool(log_history)
        self._max_history: Optional[int] = int(max_history) if max_history is not None else None
        self._max_events: Optional[int] = int(max_events) if max_events is not None else None

        if rng_seed is not None:
            self._log_event("rng_seeded", {"seed": int(rng_seed)})

    # -----------------------
    # Core loop
    # -----------------------

    def run_cycle(self, external_input: Union[Sequence[float], Vector]) -> Concept:
        """
        One tick of the closed loop. Returns the concept synthesized this tick.

        Flow:
          1) integrate the stimulus, then evolve gradient / pattern traces
          2) extract patterns (kept as last patterns)
          3) creativity → logic → deduction → concept (kept as last concept)
          4) feed the concept back into α / β / K
          5) t += dt
        """
        fd = self.core_dynamics
        cs = self.cognitive_system

        # 1) Field step
        fd.integrate(external_input)
        fd.evolve_auxiliary_fields()
        chaos_gain = fd.control_gain

        # 2) Patterns
        patterns = fd.get_patterns()
        self._last_patterns = patterns

        # 3) Synthesis
        cs.generate_creative_concepts(patterns, fd.primary_field)
        cs.apply_logical_constraints(patterns)
        concept = cs.deductive_synthesis()
        self._last_concept = concept

        # 4) Feedback
        changes = _apply_feedback_rule(fd, concept)

        # 5) Advance time
        self.time += fd.dt
        self._cycle += 1

        # Per-cycle events carry this cycle's index and obey log_history
        if self._log:
            if fd.last_chaos_reduced:
                self._log_event("chaos_reduction", {"control_gain": chaos_gain})
            if changes:
                self._log_event("feedback_applied", {"concept": concept.id, **changes})

            entry = {
                "t": int(self._cycle),
                "time": float(self.time),
                "concept": concept.id,
                "magnitude": float(concept.magnitude),
                "variance": float(patterns.variance),
                "stability": float(patterns.stability),
                "dominant_freq_idx": int(patterns.dominant_freq_idx),
                "alpha": fd.alpha,
                "beta": fd.beta,
                "control_gain": fd.control_gain,
                "chaos_reduced": bool(fd.last_chaos_reduced),
            }
            self.history.append(entry)
            if self._max_history is not None and len(self.history) > self._max_history:
                self.history.pop(0)
            self._log_event("cycle", {"concept": concept.id, "magnitude": concept.magnitude, "changes": changes})

        LOG.debug(
            "cycle %d: concept=%s m=%.6f var=%.5f stab=%.4f",
            self._cycle, concept.id, concept.magnitude, patterns.variance, patterns.stability,
        )
        return concept

    def apply_feedback(self, concept: Concept) -> Dict[str, float]:
        """Apply the concept's bounded parameter rule; returns the changed values."""
        changes = _apply_feedback_rule(self.core_dynamics, concept)
        if changes:
            self._log_event("feedback_applied", {"concept": concept.id, **changes})
        return changes

    def run_query(self, text: str, cycles: int = DEFAULT_CYCLES_PER_QUERY) -> Dict[str, Any]:
        """Encode `text` and run `cycles` consecutive cycles on that stimulus."""
        if int(cycles) < 0:
            raise ValueError("cycles must be non-negative.")
        stimulus = self.encoder(text)
        for _ in range(int(cycles)):
            self.run_cycle(stimulus)
        return self.get_last_cycle_info()

    # -----------------------
    # Read accessors (copies)
    # -----------------------

    @property
    def last_patterns(self) -> Patterns:
        return self._last_patterns

    @property
    def last_concept(self) -> Concept:
        return self._last_concept

    @property
    def dimensions(self) -> int:
        return self.core_dynamics.dimensions

    def get_core_state(self) -> Dict[str, Any]:
        fd = self.core_dynamics
        return {
            "primary_field": fd.primary_field.copy(),
            "alpha": fd.alpha,
            "beta": fd.beta,
            "gamma": fd.gamma,
            "global_feedback_strength": fd.global_feedback_strength,
            "control_gain": fd.control_gain,
            "variance_threshold": fd.variance_threshold,
            "time": float(self.time),
        }

    def get_cognitive_state(self) -> Dict[str, Any]:
        state: Dict[str, Any] = self.cognitive_system.get_fields()
        state["patterns"] = self._last_patterns
        state["selected_concept"] = self._last_concept
        return state

    def get_last_cycle_info(self) -> Dict[str, Any]:
        return {"patterns": self._last_patterns, "selected_concept": self._last_concept}

    # -----------------------
    # Queries / tools
    # -----------------------

    def summary(self) -> Dict[str, Any]:
        return {
            "t": int(self._cycle),
            "time": float(self.time),
            "dimensions": self.dimensions,
            "params": self.core_dynamics.params.to_dict(),
            "last_concept": self._last_concept.to_dict(),
            "last_patterns": self._last_patterns.to_dict(),
        }

    def concept_counts(self) -> Dict[str, int]:
        counts = {cid: 0 for cid in CONCEPT_IDS}
        for row in self.history:
            counts[row["concept"]] = counts.get(row["concept"], 0) + 1
        return counts

    def explain_last(self) -> str:
        c, p = self._last_concept, self._last_patterns
        if c.id == INIT_CONCEPT.id:
            return "No cycles yet."
        if c.id == DAMPEN_VARIANCE:
            return (f"Dampening variance (m={c.magnitude:.4f}): variance {p.variance:.4f}, "
                    f"stability {p.stability:.3f}; β={self.core_dynamics.beta:.4f}, K={self.core_dynamics.control_gain:.4f}")
        if c.id == DRIVE_SYNTROPY:
            return (f"Driving syntropy (m={c.magnitude:.4f}): variance {p.variance:.4f}, "
                    f"stability {p.stability:.3f}; α={self.core_dynamics.alpha:.4f}")
        return f"No action: deduction field negligible; stability {p.stability:.3f}"

    def event_log_summary(self) -> List[Dict[str, Any]]:
        return [dict(e) for e in self.event_log]

    def reset(self) -> None:
        self.core_dynamics.reset()
        self.cognitive_system.reset()
        self.time = 0.0
        self._cycle = 0
        self._last_patterns = self.core_dynamics.get_patterns()
        self._last_concept = INIT_CONCEPT
        self.history.clear()
        self.event_log.clear()
        self._log_event("reset", {})

    # -----------------------
    # Internal helpers
    # -----------------------

    def _log_event(self, event_type: str, details: Optional[Dict[str, Any]] = None) -> None:
        sanitized = {}
        if details:
            for k, v in details.items():
                sanitized[k] = _sanitize(v)
        self.event_log.append({
            "event": event_type,
            "time": int(self._cycle),
            "timestamp": _now_iso(),
            "details": sanitized,
        })
        if self._max_events is not None and len(self.event_log) > self._max_events:
            del self.event_log[: len(self.event_log) - self._max_events]

    def __repr__(self) -> str:
        return f"StarLightSystem(dimensions={self.dimensions}, t={self._cycle}, last_concept={self._last_concept.id!r})"
