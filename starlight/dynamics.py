# Licensed under the Apache License, Version 2.0
# -*- coding: utf-8 -*-
"""
FieldDynamics — primary scalar field kernel
===========================================

Evolves a 1-D periodic scalar field φ under reaction-diffusion-like dynamics:

    dφ/dt = γ·∇²φ + α·φ − β·φ³ + g·⟨φ⟩

Symbols (with ASCII names used in code):
- φ   (primary_field):             evolving state, circular indexing
- ∇²φ (laplacian):                 (φ[i-1] − 2φ[i] + φ[i+1]) / dx²
- α, β, γ (alpha, beta, gamma):    growth, cubic saturation, diffusion
- g   (global_feedback_strength):  coupling to the spatial mean ⟨φ⟩
- K   (control_gain):              proportional pull toward φ = 0
- Θ   (variance_threshold):        variance above which the controller fires

Per tick
--------
1) φ += u·dt (external stimulus u)
2) explicit synchronous Euler step of the rate above (neighbors read pre-update)
3) if Var(φ) > Θ: φ += (−K·φ)·dt, once
4) auxiliary fields: centered gradient and an EMA "pattern" trace
5) descriptors: variance, mean, stability = 1/(1+10·Var), dominant DFT index

The control parameters only ever move upward, through `adjust_param`, and each
is capped (see `PARAM_BOUNDS`).
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict, Optional, Sequence, Union
import logging
import math
import warnings
import numpy as np

__all__ = [
    "FieldParams",
    "Patterns",
    "FieldDynamics",
    "PARAM_BOUNDS",
    "mean",
    "variance",
    "std",
    "circular_gradient",
    "circular_laplacian",
    "dft_magnitudes",
]

LOG = logging.getLogger("starlight.dynamics")

Vector = np.ndarray
ArrayLike = Union[Sequence[float], np.ndarray]

# EMA rate of the pattern trace
PATTERN_LEARNING_RATE = 0.05

# Upper bounds reachable through feedback; floors are the initial values.
PARAM_BOUNDS: Dict[str, float] = {
    "alpha": 0.2,
    "beta": 0.3,
    "control_gain": 1.0,
}


# ---------------------------
# Array helpers
# ---------------------------

def mean(arr: ArrayLike) -> float:
    a = np.asarray(arr, dtype=float)
    return float(a.sum() / a.size) if a.size > 0 else 0.0

def variance(arr: ArrayLike) -> float:
    """Population variance (divisor n); 0.0 for fewer than two samples."""
    a = np.asarray(arr, dtype=float)
    if a.size < 2:
        return 0.0
    m = mean(a)
    return float(((a - m) ** 2).sum() / a.size)

def std(arr: ArrayLike) -> float:
    return math.sqrt(variance(arr))

def circular_gradient(arr: ArrayLike, dx: float = 1.0) -> Vector:
    """Centered difference (next − prev) / (2·dx) with periodic neighbors."""
    a = np.asarray(arr, dtype=float)
    return (np.roll(a, -1) - np.roll(a, 1)) / (2.0 * dx)

def circular_laplacian(arr: ArrayLike, dx: float = 1.0) -> Vector:
    """Second difference (prev − 2·cur + next) / dx² with periodic neighbors."""
    a = np.asarray(arr, dtype=float)
    return (np.roll(a, 1) - 2.0 * a + np.roll(a, -1)) / (dx ** 2)

def dft_magnitudes(arr: ArrayLike, start: int = 0, stop: Optional[int] = None) -> Vector:
    """
    |X_k| for k in [start, stop) by direct summation:
        X_k = Σ_n x_n · (cos(2πkn/N) − i·sin(2πkn/N))
    O(N²), matching the ordering of a naive transform exactly.
    """
    x = np.asarray(arr, dtype=float)
    N = x.size
    stop = N if stop is None else int(stop)
    if N == 0 or stop <= start:
        return np.zeros(0, dtype=float)
    k = np.arange(start, stop, dtype=float)[:, None]
    n = np.arange(N, dtype=float)[None, :]
    angle = (2.0 * math.pi * k * n) / N
    re = (x[None, :] * np.cos(angle)).sum(axis=1)
    im = -(x[None, :] * np.sin(angle)).sum(axis=1)
    return np.sqrt(re ** 2 + im ** 2)


# ---------------------------
# Value types
# ---------------------------

@dataclass
class FieldParams:
    """Mutable control parameters of the field (mutated only by feedback)."""
    alpha: float = 0.1
    beta: float = 0.1
    gamma: float = 0.5
    global_feedback_strength: float = 0.01
    control_gain: float = 0.5
    variance_threshold: float = 0.08

    def to_dict(self) -> Dict[str, float]:
        return {k: float(v) for k, v in asdict(self).items()}


@dataclass(frozen=True)
class Patterns:
    """Per-tick descriptors of the primary field."""
    variance: float
    mean_value: float
    stability: float
    dominant_freq_idx: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variance": float(self.variance),
            "mean_value": float(self.mean_value),
            "stability": float(self.stability),
            "dominant_freq_idx": int(self.dominant_freq_idx),
        }


# ---------------------------
# FieldDynamics
# ---------------------------

class FieldDynamics:
    """
    Owns and integrates the primary field plus its gradient and pattern traces.

    Parameters
    ----------
    dimensions : int
        Field length (fixed). Default 50.
    dt, dx : float
        Time and space steps (fixed, positive). Defaults 0.1 and 1.0.
    params : FieldParams, optional
        Initial control parameters. Defaults to ``FieldParams()``.
    rng_seed : int, optional
        Seed for the uniform [-0.5, 0.5) initial field.
    initial_field : array-like, optional
        Explicit initial field; overrides the random draw.
    """

    def __init__(
        self,
        dimensions: int = 50,
        dt: float = 0.1,
        dx: float = 1.0,
        params: Optional[FieldParams] = None,
        rng_seed: Optional[int] = None,
        initial_field: Optional[ArrayLike] = None,
    ):
        if int(dimensions) <= 0:
            raise ValueError("dimensions must be a positive integer.")
        if not (float(dt) > 0.0 and float(dx) > 0.0):
            raise ValueError("dt and dx must be positive.")
        self._dimensions = int(dimensions)
        self._dt = float(dt)
        self._dx = float(dx)
        self._params = replace(params) if params is not None else FieldParams()
        self._initial_params = replace(self._params)

        # Local RNG (no global pollution)
        self._rng_seed = int(rng_seed) if rng_seed is not None else None
        self.rng: np.random.Generator = np.random.default_rng(self._rng_seed)
        self._initial_field = None if initial_field is None else self._check_shape(initial_field, "initial_field")

        self.primary_field: Vector = self._fresh_field()
        self.gradient_field: Vector = np.zeros(self._dimensions, dtype=float)
        self.pattern_field: Vector = np.zeros(self._dimensions, dtype=float)

        # Set by integrate(); True when the controller fired on the last tick
        self.last_chaos_reduced: bool = False

    # ---- read-only geometry ----

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def dt(self) -> float:
        return self._dt

    @property
    def dx(self) -> float:
        return self._dx

    @property
    def params(self) -> FieldParams:
        """Copy of the current control parameters."""
        return replace(self._params)

    # Read-only views; writes go through adjust_param()
    @property
    def alpha(self) -> float:
        return float(self._params.alpha)

    @property
    def beta(self) -> float:
        return float(self._params.beta)

    @property
    def gamma(self) -> float:
        return float(self._params.gamma)

    @property
    def global_feedback_strength(self) -> float:
        return float(self._params.global_feedback_strength)

    @property
    def control_gain(self) -> float:
        return float(self._params.control_gain)

    @property
    def variance_threshold(self) -> float:
        return float(self._params.variance_threshold)

    # ---- core loop ----

    def integrate(self, external_input: ArrayLike) -> None:
        """
        Advance the primary field one step under stimulus `external_input`.
        Runs the chaos-reduction controller at most once if variance exceeds Θ.
        """
        u = self._check_shape(external_input, "external_input")
        p = self._params

        phi = self.primary_field + u * self._dt
        spatial_average = mean(phi)
        global_feedback = p.global_feedback_strength * spatial_average

        laplacian = circular_laplacian(phi, self._dx)
        dphi_dt = p.gamma * laplacian + p.alpha * phi - p.beta * (phi ** 3) + global_feedback
        self.primary_field = phi + dphi_dt * self._dt

        current_variance = variance(self.primary_field)
        self.last_chaos_reduced = current_variance > p.variance_threshold
        if self.last_chaos_reduced:
            self.apply_chaos_reduction()

        if not np.all(np.isfinite(self.primary_field)):
            warnings.warn("FieldDynamics: primary field contains non-finite values.", RuntimeWarning)

    def apply_chaos_reduction(self) -> Vector:
        """Proportional pull toward the zero state; returns the control signal."""
        control_target_state = 0.0
        control_signal = -self._params.control_gain * (self.primary_field - control_target_state)
        self.primary_field = self.primary_field + control_signal * self._dt
        LOG.debug("chaos reduction applied (gain=%.4f)", self._params.control_gain)
        return control_signal.copy()

    def evolve_auxiliary_fields(self) -> None:
        self.gradient_field = circular_gradient(self.primary_field, self._dx)
        lr = PATTERN_LEARNING_RATE
        self.pattern_field = (1.0 - lr) * self.pattern_field + lr * self.primary_field

    def get_patterns(self) -> Patterns:
        var = variance(self.primary_field)
        mean_val = mean(self.primary_field)
        stability = 1.0 / (1.0 + 10.0 * var)

        # Skip the DC term; upper bound is floor(N/2), exclusive
        mags = dft_magnitudes(self.primary_field, 1, self._dimensions // 2)
        # argmax keeps the first maximum; an empty band reports index 1
        dominant = int(np.argmax(mags)) + 1 if mags.size > 0 else 1

        return Patterns(
            variance=var,
            mean_value=mean_val,
            stability=stability,
            dominant_freq_idx=dominant,
        )

    # ---- bounded parameter updates ----

    def adjust_param(self, name: str, delta: float, upper: Optional[float] = None) -> float:
        """
        Raise parameter `name` by `delta`, capped at `upper` (or PARAM_BOUNDS).
        Negative deltas are ignored: parameters never decrease. Returns the new value.
        """
        if name not in {f.name for f in fields(FieldParams)}:
            raise KeyError(f"Unknown field parameter '{name}'")
        cap = upper if upper is not None else PARAM_BOUNDS.get(name, math.inf)
        current = float(getattr(self._params, name))
        new = max(current, min(float(cap), current + max(0.0, float(delta))))
        setattr(self._params, name, new)
        return new

    # ---- queries / lifecycle ----

    def get_state(self) -> Dict[str, Any]:
        """Defensive copy of fields and parameters."""
        state: Dict[str, Any] = {
            "primary_field": self.primary_field.copy(),
            "gradient_field": self.gradient_field.copy(),
            "pattern_field": self.pattern_field.copy(),
        }
        state.update(self._params.to_dict())
        return state

    def reset(self) -> None:
        """Restore initial parameters and fields (re-seeded from the original seed)."""
        self._params = replace(self._initial_params)
        self.rng = np.random.default_rng(self._rng_seed)
        self.primary_field = self._fresh_field()
        self.gradient_field = np.zeros(self._dimensions, dtype=float)
        self.pattern_field = np.zeros(self._dimensions, dtype=float)
        self.last_chaos_reduced = False

    # ---- internals ----

    def _fresh_field(self) -> Vector:
        if self._initial_field is not None:
            return self._initial_field.copy()
        return self.rng.random(self._dimensions) - 0.5

    def _check_shape(self, arr: ArrayLike, label: str) -> Vector:
        a = np.array(arr, dtype=float)
        if a.ndim != 1:
            raise ValueError(f"{label} must be one-dimensional, got shape {a.shape}.")
        if a.shape[0] != self._dimensions:
            raise ValueError(f"{label} must have length {self._dimensions}, got {a.shape[0]}.")
        return a

    def __repr__(self) -> str:
        return (
            f"FieldDynamics(dimensions={self._dimensions}, dt={self._dt}, dx={self._dx}, "
            f"params={self._params!r})"
        )
