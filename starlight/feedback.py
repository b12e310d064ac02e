# Licensed under the Apache License, Version 2.0
# -*- coding: utf-8 -*-
"""
starlight.feedback
==================
Concept → parameter feedback rules for `FieldDynamics`.

Signature
---------
- Rule:  fn(dynamics, magnitude: float) -> {param_name: new_value}

Notes
-----
- Every rule only raises parameters, each by ``rate * magnitude``, capped at
  its `ParamBound.upper`. A rule never lowers a parameter.
- `no_action` is a rule too; it changes nothing and returns ``{}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Tuple
import logging

from .cognition import Concept, DAMPEN_VARIANCE, DRIVE_SYNTROPY, NO_ACTION
from .dynamics import FieldDynamics, PARAM_BOUNDS

LOG = logging.getLogger("starlight.feedback")

FeedbackRule = Callable[[FieldDynamics, float], Dict[str, float]]


@dataclass(frozen=True)
class ParamBound:
    """Per-unit-magnitude step for one parameter and its ceiling."""
    name: str
    rate: float
    upper: float

    def apply(self, dynamics: FieldDynamics, magnitude: float) -> float:
        return dynamics.adjust_param(self.name, self.rate * float(magnitude), self.upper)


def _apply_bounds(dynamics: FieldDynamics, magnitude: float, bounds: Tuple[ParamBound, ...]) -> Dict[str, float]:
    changes: Dict[str, float] = {}
    for b in bounds:
        changes[b.name] = b.apply(dynamics, magnitude)
    return changes


# ----------------------------------------------------------------------
# Rules
# ----------------------------------------------------------------------

DAMPEN_BOUNDS: Tuple[ParamBound, ...] = (
    ParamBound("beta", 0.01, PARAM_BOUNDS["beta"]),
    ParamBound("control_gain", 0.02, PARAM_BOUNDS["control_gain"]),
)

SYNTROPY_BOUNDS: Tuple[ParamBound, ...] = (
    ParamBound("alpha", 0.01, PARAM_BOUNDS["alpha"]),
)


def feedback_no_action(dynamics: FieldDynamics, magnitude: float) -> Dict[str, float]:
    """Monitoring only; parameters untouched."""
    return {}

def feedback_dampen_variance(dynamics: FieldDynamics, magnitude: float) -> Dict[str, float]:
    """Stiffen cubic saturation (β) and the chaos controller gain (K)."""
    return _apply_bounds(dynamics, magnitude, DAMPEN_BOUNDS)

def feedback_drive_syntropy(dynamics: FieldDynamics, magnitude: float) -> Dict[str, float]:
    """Raise linear growth (α)."""
    return _apply_bounds(dynamics, magnitude, SYNTROPY_BOUNDS)


FEEDBACK_REGISTRY: Dict[str, FeedbackRule] = {
    NO_ACTION: feedback_no_action,
    DAMPEN_VARIANCE: feedback_dampen_variance,
    DRIVE_SYNTROPY: feedback_drive_syntropy,
}


def register_feedback(concept_id: str, rule: FeedbackRule) -> None:
    """Install or replace the rule for `concept_id`."""
    if not isinstance(concept_id, str):
        raise TypeError("concept_id must be a string.")
    if not callable(rule):
        raise TypeError("Feedback rule must be callable.")
    FEEDBACK_REGISTRY[concept_id] = rule


def apply_feedback(dynamics: FieldDynamics, concept: Concept) -> Dict[str, float]:
    """
    Dispatch `concept` to its rule and return the updated parameter values.
    Raises KeyError for ids without a registered rule.
    """
    try:
        rule = FEEDBACK_REGISTRY[concept.id]
    except KeyError:
        raise KeyError(f"No feedback rule registered for concept '{concept.id}'") from None
    changes = rule(dynamics, float(concept.magnitude))
    if changes:
        LOG.debug("feedback %s (m=%.6f): %s", concept.id, concept.magnitude, changes)
    return changes


__all__ = [
    "ParamBound",
    "FeedbackRule",
    "DAMPEN_BOUNDS",
    "SYNTROPY_BOUNDS",
    "feedback_no_action",
    "feedback_dampen_variance",
    "feedback_drive_syntropy",
    "FEEDBACK_REGISTRY",
    "register_feedback",
    "apply_feedback",
]
