# Licensed under the Apache License, Version 2.0
# -*- coding: utf-8 -*-
"""
starlight.cognition
===================
Second-stage synthesis: turns one tick's `Patterns` and primary field into a
tri-state `Concept` via three intermediate fields.

Fields
------
- creativity: mean-reversion (turbulent), dominant-mode sinusoid (calm), and a
  constant pull toward zero.
- logic:      uniform weights, normalized to sum to 1.
- deduction:  creativity ⊙ logic, then smoothed by repeated grad(grad(·)).

Classification
--------------
- ``no_action``        deduction is all zero or max|d| < 1e-4
- ``dampen_variance``  std(d) > |mean(d)|
- ``drive_syntropy``   otherwise
Magnitude is mean(|d|).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Union
import math
import numpy as np

from .dynamics import Patterns, circular_gradient, mean, std

__all__ = [
    "Concept",
    "CognitiveSynthesizer",
    "NO_ACTION",
    "DAMPEN_VARIANCE",
    "DRIVE_SYNTROPY",
    "CONCEPT_IDS",
]

Vector = np.ndarray

NO_ACTION = "no_action"
DAMPEN_VARIANCE = "dampen_variance"
DRIVE_SYNTROPY = "drive_syntropy"
CONCEPT_IDS = (NO_ACTION, DAMPEN_VARIANCE, DRIVE_SYNTROPY)

# Deduction fields whose peak stays under this are treated as empty
MIN_DEDUCTION = 1e-4
SMOOTHING_RATE = 0.1


@dataclass(frozen=True)
class Concept:
    """Synthesized directive: a concept id and a non-negative magnitude."""
    id: str
    magnitude: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "magnitude": float(self.magnitude)}


class CognitiveSynthesizer:
    """
    Holds the creativity, logic and deduction fields for a fixed dimension.
    All three are recomputed each tick; only `deduction_field` is meant to be
    read between ticks.
    """

    def __init__(self, dimensions: int = 50):
        if int(dimensions) <= 0:
            raise ValueError("dimensions must be a positive integer.")
        self.dimensions = int(dimensions)
        self.creativity_field: Vector = np.zeros(self.dimensions, dtype=float)
        self.logic_field: Vector = np.zeros(self.dimensions, dtype=float)
        self.deduction_field: Vector = np.zeros(self.dimensions, dtype=float)

    def generate_creative_concepts(self, patterns: Patterns, primary_field: Union[Sequence[float], Vector]) -> None:
        phi = np.asarray(primary_field, dtype=float).reshape(-1)
        if phi.shape[0] != self.dimensions:
            raise ValueError(f"primary_field must have length {self.dimensions}, got {phi.shape[0]}.")

        field = np.zeros(self.dimensions, dtype=float)

        # Turbulent: pull every index toward the field mean
        if patterns.variance > 0.05:
            field = field + (mean(phi) - phi) * 0.5

        # Calm: reinforce the dominant mode, scaled by stability
        if patterns.stability > 0.6:
            freq_idx = patterns.dominant_freq_idx
            if freq_idx > 0:
                i = np.arange(self.dimensions, dtype=float)
                y = np.sin(2.0 * math.pi * freq_idx * i / self.dimensions)
                field = field + y * 0.5 * patterns.stability

        # Syntropy: gentle pull toward zero, always on
        field = field + (0.0 - phi) * 0.2

        self.creativity_field = field

    def apply_logical_constraints(self, patterns: Patterns) -> None:
        logic = np.full(self.dimensions, 0.1, dtype=float)

        utility_dampen = 1.0 - patterns.stability
        logic = logic + utility_dampen

        utility_enhance = patterns.stability
        logic = logic + utility_enhance

        total = float(logic.sum())
        if total > 0:
            logic = logic / total
        self.logic_field = logic

    def deductive_synthesis(self, iterations: int = 5) -> Concept:
        d = self.creativity_field * self.logic_field

        for _ in range(int(iterations)):
            smoothing = circular_gradient(circular_gradient(d))
            d = d + SMOOTHING_RATE * smoothing
        self.deduction_field = d

        if not np.any(d != 0.0):
            return Concept(NO_ACTION, 0.0)

        max_abs_val = float(np.max(np.abs(d)))
        if max_abs_val < MIN_DEDUCTION:
            return Concept(NO_ACTION, 0.0)

        mean_deduction = mean(d)
        concept_id = DAMPEN_VARIANCE if std(d) > abs(mean_deduction) else DRIVE_SYNTROPY
        return Concept(concept_id, mean(np.abs(d)))

    def get_fields(self) -> Dict[str, Vector]:
        """Copies of the three cognitive fields."""
        return {
            "creativity_field": self.creativity_field.copy(),
            "logic_field": self.logic_field.copy(),
            "deduction_field": self.deduction_field.copy(),
        }

    def reset(self) -> None:
        self.creativity_field = np.zeros(self.dimensions, dtype=float)
        self.logic_field = np.zeros(self.dimensions, dtype=float)
        self.deduction_field = np.zeros(self.dimensions, dtype=float)
